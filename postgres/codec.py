"""Encoding helpers for chart definitions."""

from __future__ import annotations

from typing import Any, Iterable

from agent.charts import Chart, Dim


def encode_chart(chart: Chart) -> dict[str, Any]:
    """Encode a chart into a JSON/YAML-serializable dictionary.

    Args:
        chart: Chart to encode.

    Returns:
        Dict payload with plain str/int/bool/list values only.
    """

    payload: dict[str, Any] = {
        "id": chart.id,
        "title": chart.title,
        "units": chart.units,
        "family": chart.fam,
        "context": chart.ctx,
        "priority": chart.priority,
        "type": str(chart.type),
        "dimensions": [_encode_dim(dim) for dim in chart.dims],
    }
    if chart.labels:
        payload["labels"] = {label.key: label.value for label in chart.labels}
    if chart.opts.obsolete:
        payload["obsolete"] = True
    return payload


def encode_charts(charts: Iterable[Chart]) -> list[dict[str, Any]]:
    """Encode charts in iteration order."""

    return [encode_chart(chart) for chart in charts]


def _encode_dim(dim: Dim) -> dict[str, Any]:
    return {
        "id": dim.id,
        "name": dim.name or dim.id,
        "algorithm": str(dim.algo),
    }
