"""Print the PostgreSQL chart catalog."""

from __future__ import annotations

import json

import yaml
from django.core.management.base import BaseCommand, CommandError

from agent.charts import Chart, Charts
from postgres.charts import DATABASE_CHART_TEMPLATES
from postgres.codec import encode_charts
from postgres.collector import Postgres


class Command(BaseCommand):
    """Describe server-wide charts and the charts of the given databases."""

    help = "Print the PostgreSQL chart catalog, instantiated for the given databases."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument(
            "--database",
            action="append",
            default=[],
            dest="databases",
            metavar="NAME",
            help="Instantiate per-database charts for NAME (repeatable). Subject to PGCHARTS_DATABASE_SELECTOR.",
        )
        parser.add_argument(
            "--templates",
            action="store_true",
            help="Print the raw per-database chart templates instead.",
        )
        parser.add_argument(
            "--format",
            choices=("text", "json", "yaml"),
            default="text",
            help="Output format.",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        databases: list[str] = options["databases"]
        templates: bool = options["templates"]
        output_format: str = options["format"]

        if templates and databases:
            raise CommandError("Use either --templates or --database, not both.")

        if templates:
            charts = Charts(chart.copy() for chart in DATABASE_CHART_TEMPLATES)
        else:
            collector = Postgres.from_settings()
            collector.update_database_charts(databases)
            skipped = sorted(set(databases) - collector.databases)
            if skipped:
                self.stderr.write(
                    "Databases without charts (not matched by the selector or rejected by the host): "
                    + ", ".join(skipped)
                )
            charts = collector.charts

        if output_format == "json":
            self.stdout.write(json.dumps(encode_charts(charts), indent=2))
        elif output_format == "yaml":
            self.stdout.write(yaml.safe_dump(encode_charts(charts), sort_keys=False), ending="")
        else:
            for chart in charts:
                self.stdout.write(_format_chart(chart))
        return None


def _format_chart(chart: Chart) -> str:
    """Render a chart as a short human-readable block."""

    lines = [
        f"{chart.id}: {chart.title} [{chart.units}] "
        f"ctx={chart.ctx} fam={chart.fam!r} type={chart.type} priority={chart.priority}"
    ]
    for label in chart.labels:
        lines.append(f"  label {label.key}={label.value}")
    for dim in chart.dims:
        lines.append(f"  {dim.id} -> {dim.name or dim.id} ({dim.algo})")
    return "\n".join(lines)
