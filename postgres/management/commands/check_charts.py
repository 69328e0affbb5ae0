"""Validate the PostgreSQL chart catalog."""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from postgres.charts import BASE_CHARTS, CONTEXT_PREFIX, DATABASE_CHART_TEMPLATES
from postgres.validator import validate_chart_catalog


class Command(BaseCommand):
    """Validate server-wide charts and per-database templates."""

    help = "Validate the PostgreSQL chart catalog; exits non-zero on errors."

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        result = validate_chart_catalog(
            base_charts=BASE_CHARTS,
            templates=DATABASE_CHART_TEMPLATES,
            context_prefix=CONTEXT_PREFIX,
        )
        for warning in result.warnings:
            self.stdout.write(self.style.WARNING(f"WARNING: {warning}"))
        if not result.is_valid:
            joined = "\n".join(f"- {error}" for error in result.errors)
            raise CommandError(f"Invalid chart catalog:\n{joined}")

        self.stdout.write(
            self.style.SUCCESS(
                f"OK: {len(BASE_CHARTS)} server charts, {len(DATABASE_CHART_TEMPLATES)} per-database templates."
            )
        )
        return None
