"""Per-database chart lifecycle for a PostgreSQL collector job.

The collector registers the server-wide charts up front. Databases come and go
between collection runs; their charts are instantiated from templates when a
database is first observed and marked for removal once it is gone.
"""

from __future__ import annotations

import logging
from typing import Iterable

from django.conf import settings

from agent.charts import ChartError, Charts

from .charts import DATABASE_LABEL, base_charts, database_chart_prefix, new_database_charts
from .selector import DatabaseSelector

logger = logging.getLogger(__name__)


class Postgres:
    """Chart state of one PostgreSQL collector job."""

    def __init__(
        self,
        *,
        charts: Charts | None = None,
        database_selector: DatabaseSelector | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            charts: Chart collection to register with; defaults to a fresh
                collection holding the server-wide charts.
            database_selector: Decides which observed databases get charts;
                defaults to selecting every database.
        """

        self._charts = base_charts() if charts is None else charts
        self._selector = database_selector if database_selector is not None else DatabaseSelector()
        self._databases: set[str] = set()

    @classmethod
    def from_settings(cls) -> Postgres:
        """Build a collector configured from Django settings."""

        return cls(database_selector=DatabaseSelector(settings.PGCHARTS_DATABASE_SELECTOR))

    @property
    def charts(self) -> Charts:
        """The chart collection this collector registers with."""

        return self._charts

    @property
    def databases(self) -> frozenset[str]:
        """Databases that currently have charts."""

        return frozenset(self._databases)

    def add_new_database_charts(self, dbname: str) -> bool:
        """Instantiate and register the charts of a newly observed database.

        Host errors (invalid or duplicate charts) are logged, not raised, so a
        single bad database name never stops collection. Charts of the batch
        that were registered before the error are taken back out.

        Returns:
            True when every chart of the database was registered.
        """

        charts = new_database_charts(dbname)
        try:
            self._charts.add(*charts)
        except ChartError as exc:
            logger.warning("Failed to add charts for database %r: %s", dbname, exc)
            for chart in charts:
                if self._charts.get(chart.id) is chart:
                    self._charts.remove(chart.id)
            return False
        return True

    def remove_database_charts(self, dbname: str) -> int:
        """Mark every chart of `dbname` for removal.

        A chart qualifies when its ID starts with the database's chart prefix.
        Charts labelled with a different database are skipped, so removing
        `foo` leaves the charts of `foo_bar` alone.

        Args:
            dbname: Database whose charts should be retired.

        Returns:
            Number of charts marked.
        """

        prefix = database_chart_prefix(dbname)
        marked = 0
        for chart in self._charts:
            if not chart.id.startswith(prefix):
                continue
            owner = chart.label(DATABASE_LABEL)
            if owner is not None and owner != dbname:
                continue
            chart.mark_remove()
            chart.mark_not_created()
            marked += 1
        return marked

    def update_database_charts(self, observed: Iterable[str]) -> None:
        """Reconcile per-database charts with the databases seen this run.

        Only databases whose charts were registered are remembered, so a
        failed add is retried on the next run.

        Args:
            observed: Database names reported by the server in this run.
        """

        selected = {dbname for dbname in observed if self._selector.matches(dbname)}

        for dbname in sorted(self._databases - selected):
            logger.info("Database %r is gone, removing its charts", dbname)
            self.remove_database_charts(dbname)
            self._databases.discard(dbname)
        for dbname in sorted(selected - self._databases):
            logger.info("New database %r, adding its charts", dbname)
            if self.add_new_database_charts(dbname):
                self._databases.add(dbname)
