"""Validation for the PostgreSQL chart catalog.

The catalog is static, so validation is strict and fails fast: it runs at
import time and through the `check_charts` management command.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from agent.charts import Chart, ChartType, DimAlgo

PLACEHOLDER = "%s"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Result of validating a chart catalog."""

    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


def validate_chart_catalog(
    *,
    base_charts: Iterable[Chart],
    templates: Iterable[Chart],
    context_prefix: str,
) -> ValidationResult:
    """Validate server-wide charts and per-database templates together.

    Args:
        base_charts: Charts registered once per collector.
        templates: Per-database charts with a `%s` placeholder in every ID.
        context_prefix: Required first component of every chart context.

    Returns:
        ValidationResult containing errors and warnings.
    """

    errors: list[str] = []
    warnings: list[str] = []

    seen_ids: set[str] = set()
    seen_priorities: dict[int, str] = {}

    for templated, charts in ((False, base_charts), (True, templates)):
        for chart in charts:
            _validate_chart(chart, templated=templated, context_prefix=context_prefix, errors=errors, warnings=warnings)

            if chart.id in seen_ids:
                errors.append(f"Chart[{chart.id}] id is not unique.")
            seen_ids.add(chart.id)

            other = seen_priorities.get(chart.priority)
            if other is not None:
                errors.append(f"Chart[{chart.id}] priority={chart.priority} is already used by Chart[{other}].")
            else:
                seen_priorities[chart.priority] = chart.id

    return ValidationResult(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))


def _validate_chart(
    chart: Chart,
    *,
    templated: bool,
    context_prefix: str,
    errors: list[str],
    warnings: list[str],
) -> None:
    """Append errors/warnings for a single chart."""

    if not chart.id.strip():
        errors.append("Chart.id must be a non-empty string.")
    if any(char.isspace() for char in chart.id):
        errors.append(f"Chart[{chart.id}].id must not contain whitespace.")
    for attr in ("title", "units", "fam"):
        if not getattr(chart, attr).strip():
            errors.append(f"Chart[{chart.id}].{attr} must be a non-empty string.")

    if not chart.ctx.startswith(f"{context_prefix}."):
        errors.append(f"Chart[{chart.id}].ctx={chart.ctx!r} must start with {context_prefix + '.'!r}.")

    if chart.type not in set(ChartType):
        errors.append(f"Chart[{chart.id}].type is not a supported value: {chart.type!r}.")

    _validate_placeholder(chart.id, owner=f"Chart[{chart.id}].id", templated=templated, errors=errors)

    if not chart.dims:
        warnings.append(f"Chart[{chart.id}] has no dims.")

    seen_dims: set[str] = set()
    for idx, dim in enumerate(chart.dims):
        owner = f"Chart[{chart.id}].dims[{idx}]"
        if not dim.id.strip():
            errors.append(f"{owner}.id must be a non-empty string.")
        if any(char.isspace() for char in dim.id):
            errors.append(f"{owner}.id must not contain whitespace.")
        if dim.id in seen_dims:
            errors.append(f"{owner}.id={dim.id!r} is not unique within the chart.")
        seen_dims.add(dim.id)
        if dim.algo not in set(DimAlgo):
            errors.append(f"{owner}.algo is not a supported value: {dim.algo!r}.")
        _validate_placeholder(dim.id, owner=f"{owner}.id", templated=templated, errors=errors)


def _validate_placeholder(value: str, *, owner: str, templated: bool, errors: list[str]) -> None:
    """Require exactly one `%s` in templated IDs and no `%` at all otherwise."""

    if templated:
        if value.count(PLACEHOLDER) != 1 or "%" in value.replace(PLACEHOLDER, ""):
            errors.append(f"{owner}={value!r} must contain exactly one {PLACEHOLDER!r} placeholder.")
    elif "%" in value:
        errors.append(f"{owner}={value!r} must not contain '%'.")
