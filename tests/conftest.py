"""Pytest fixtures shared across the test suite."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from agent.charts import Chart, Dim
from postgres.collector import Postgres


@pytest.fixture
def collector() -> Postgres:
    """Return a collector holding only the server-wide charts."""

    return Postgres()


@pytest.fixture
def make_chart():
    """Return a factory for minimal valid charts."""

    def _make(chart_id: str = "chart", *dim_ids: str) -> Chart:
        return Chart(
            id=chart_id,
            title="Title",
            units="units",
            fam="fam",
            ctx="postgres.test",
            dims=[Dim(id=dim_id) for dim_id in (dim_ids or ("dim",))],
        )

    return _make


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    - `unit`: pure, fast tests with no subprocesses or management commands.
    - `integration`: tests touching Django commands, subprocesses, or IO.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
