"""App configuration for the PostgreSQL chart catalog app."""

from __future__ import annotations

from django.apps import AppConfig


class PostgresConfig(AppConfig):
    """Configuration for the `postgres` app."""

    name = "postgres"
    verbose_name = "PostgreSQL charts"
