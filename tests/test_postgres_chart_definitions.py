"""Pin the full definition of every built-in PostgreSQL chart.

Dashboards and alerts key on chart IDs, contexts and dim IDs, so any change to
these rows should be a deliberate edit here as well.
"""

from __future__ import annotations

import pytest

from agent.charts import Chart
from postgres.charts import BASE_CHARTS, DATABASE_CHART_TEMPLATES

pytestmark = pytest.mark.unit

ABS = "absolute"
INC = "incremental"

_RELKIND_NAMES = (
    ("r", "ordinary_table"),
    ("i", "index"),
    ("S", "sequence"),
    ("t", "toast_table"),
    ("v", "view"),
    ("m", "materialized_view"),
    ("c", "composite_type"),
    ("f", "foreign_table"),
    ("p", "partitioned_table"),
    ("I", "partitioned_index"),
)

_LOCK_MODE_NAMES = (
    ("AccessShareLock", "access_share"),
    ("RowShareLock", "row_share"),
    ("RowExclusiveLock", "row_exclusive"),
    ("ShareUpdateExclusiveLock", "share_update"),
    ("ShareLock", "share"),
    ("ShareRowExclusiveLock", "share_row_exclusive"),
    ("ExclusiveLock", "exclusive"),
    ("AccessExclusiveLock", "access_exclusive"),
)

# (id, title, units, fam, ctx, type, [(dim id, dim name, dim algo), ...])
EXPECTED_BASE_CHARTS = [
    (
        "connections_utilization", "Connections utilization", "percentage", "connections",
        "postgres.connections_utilization", "line",
        [("server_connections_utilization", "used", ABS)],
    ),
    (
        "connections_usage", "Connections usage", "connections", "connections",
        "postgres.connections_usage", "stacked",
        [("server_connections_available", "available", ABS), ("server_connections_used", "used", ABS)],
    ),
    (
        "checkpoints", "Checkpoints", "checkpoints/s", "checkpointer",
        "postgres.checkpoints", "stacked",
        [("checkpoints_timed", "scheduled", INC), ("checkpoints_req", "requested", INC)],
    ),
    (
        "checkpoint_time", "Checkpoint time", "milliseconds", "checkpointer",
        "postgres.checkpoint_time", "line",
        [("checkpoint_write_time", "write", INC), ("checkpoint_sync_time", "sync", INC)],
    ),
    (
        "bgwriter_buffers_written", "Background writer buffers written", "B/s", "background writer",
        "postgres.bgwriter_buffers_written", "area",
        [
            ("buffers_checkpoint", "checkpoint", INC),
            ("buffers_backend", "backend", INC),
            ("buffers_clean", "clean", INC),
        ],
    ),
    (
        "bgwriter_buffers_alloc", "Background writer buffers allocated", "B/s", "background writer",
        "postgres.bgwriter_buffers_alloc", "line",
        [("buffers_alloc", "allocated", INC)],
    ),
    (
        "bgwriter_maxwritten_clean", "Background writer cleaning scan stops", "events/s", "background writer",
        "postgres.bgwriter_maxwritten_clean", "line",
        [("maxwritten_clean", "maxwritten", INC)],
    ),
    (
        "bgwriter_buffers_backend_fsync", "Backend fsync", "operations/s", "background writer",
        "postgres.bgwriter_buffers_backend_fsync", "line",
        [("buffers_backend_fsync", "fsync", INC)],
    ),
    (
        "wal_writes", "Write-Ahead Log", "B/s", "wal",
        "postgres.wal_writes", "line",
        [("wal_writes", "writes", INC)],
    ),
    (
        "wal_files", "Write-Ahead Log files", "files", "wal",
        "postgres.wal_files", "stacked",
        [("wal_written_files", "written", ABS), ("wal_recycled_files", "recycled", ABS)],
    ),
    (
        "wal_archive_files", "Write-Ahead Log archive files", "files/s", "wal archive",
        "postgres.wal_archive_files", "stacked",
        [("wal_archive_files_ready_count", "ready", INC), ("wal_archive_files_done_count", "done", INC)],
    ),
    (
        "autovacuum_workers", "Autovacuum workers", "workers", "autovacuum",
        "postgres.autovacuum_workers", "line",
        [
            ("autovacuum_analyze", "analyze", ABS),
            ("autovacuum_vacuum_analyze", "vacuum_analyze", ABS),
            ("autovacuum_vacuum", "vacuum", ABS),
            ("autovacuum_vacuum_freeze", "vacuum_freeze", ABS),
            ("autovacuum_brin_summarize", "brin_summarize", ABS),
        ],
    ),
    (
        "percent_towards_emergency_autovacuum", "Percent towards emergency autovacuum", "percentage", "autovacuum",
        "postgres.percent_towards_emergency_autovacuum", "line",
        [("percent_towards_emergency_autovacuum", "emergency_autovacuum", ABS)],
    ),
    (
        "percent_towards_txid_wraparound", "Percent towards transaction ID wraparound", "percentage",
        "txid wraparound", "postgres.percent_towards_txid_wraparound", "line",
        [("percent_towards_wraparound", "txid_wraparound", ABS)],
    ),
    (
        "oldest_transaction_xid", "Oldest transaction XID", "xid", "txid wraparound",
        "postgres.oldest_transaction_xid", "line",
        [("oldest_current_xid", "xid", ABS)],
    ),
    (
        "catalog_relation_count", "Relation count", "relations", "catalog",
        "postgres.catalog_relation_count", "stacked",
        [(f"catalog_relkind_{kind}_count", name, ABS) for kind, name in _RELKIND_NAMES],
    ),
    (
        "catalog_relation_size", "Relation size", "B", "catalog",
        "postgres.catalog_relation_size", "stacked",
        [(f"catalog_relkind_{kind}_size", name, ABS) for kind, name in _RELKIND_NAMES],
    ),
    (
        "server_uptime", "Uptime", "seconds", "uptime",
        "postgres.uptime", "line",
        [("server_uptime", "uptime", ABS)],
    ),
]

EXPECTED_DATABASE_TEMPLATES = [
    (
        "db_%s_transactions", "Database transactions", "transactions/s", "db transactions",
        "postgres.db_transactions", "line",
        [("db_%s_xact_commit", "committed", INC), ("db_%s_xact_rollback", "rollback", INC)],
    ),
    (
        "db_%s_connections_utilization", "Database connections utilization withing limits", "percentage",
        "db connections", "postgres.db_connections_utilization", "line",
        [("db_%s_numbackends_utilization", "used", ABS)],
    ),
    (
        "db_%s_connections", "Database connections", "connections", "db connections",
        "postgres.db_connections", "line",
        [("db_%s_numbackends", "connections", ABS)],
    ),
    (
        "db_%s_buffer_cache", "Database buffer cache", "blocks/s", "db buffer cache",
        "postgres.db_buffer_cache", "area",
        [("db_%s_blks_hit", "hit", INC), ("db_%s_blks_read", "miss", INC)],
    ),
    (
        "db_%s_read_operations", "Database read operations", "rows/s", "db operations",
        "postgres.db_read_operations", "line",
        [("db_%s_tup_returned", "returned", INC), ("db_%s_tup_fetched", "fetched", INC)],
    ),
    (
        "db_%s_write_operations", "Database write operations", "rows/s", "db operations",
        "postgres.db_write_operations", "line",
        [
            ("db_%s_tup_inserted", "inserted", INC),
            ("db_%s_tup_deleted", "deleted", INC),
            ("db_%s_tup_updated", "updated", INC),
        ],
    ),
    (
        "db_%s_conflicts", "Database canceled queries", "queries/s", "db operations",
        "postgres.db_conflicts", "line",
        [("db_%s_conflicts", "conflicts", INC)],
    ),
    (
        "db_%s_conflicts_stat", "Database canceled queries by reason", "queries/s", "db operations",
        "postgres.db_conflicts_stat", "line",
        [
            ("db_%s_confl_tablespace", "tablespace", INC),
            ("db_%s_confl_lock", "lock", INC),
            ("db_%s_confl_snapshot", "snapshot", INC),
            ("db_%s_confl_bufferpin", "bufferpin", INC),
            ("db_%s_confl_deadlock", "deadlock", INC),
        ],
    ),
    (
        "db_%s_deadlocks", "Database deadlocks", "deadlocks/s", "db deadlocks",
        "postgres.db_deadlocks", "line",
        [("db_%s_deadlocks", "deadlocks", INC)],
    ),
    (
        "db_%s_locks_held", "Database locks held", "locks", "db locks",
        "postgres.db_locks_held", "stacked",
        [(f"db_%s_lock_mode_{mode}_held", name, ABS) for mode, name in _LOCK_MODE_NAMES],
    ),
    (
        "db_%s_locks_awaited", "Database locks awaited", "locks", "db locks",
        "postgres.db_locks_awaited", "stacked",
        [(f"db_%s_lock_mode_{mode}_awaited", name, ABS) for mode, name in _LOCK_MODE_NAMES],
    ),
    (
        "db_%s_temp_files", "Database temporary files written to disk", "files/s", "db temp files",
        "postgres.db_temp_files", "line",
        [("db_%s_temp_files", "written", INC)],
    ),
    (
        "db_%s_temp_files_data", "Database temporary files data written to disk", "B/s", "db temp files",
        "postgres.db_temp_files_data", "line",
        [("db_%s_temp_bytes", "written", INC)],
    ),
    (
        "db_%s_size", "Database size", "B", "db size",
        "postgres.db_size", "line",
        [("db_%s_size", "size", ABS)],
    ),
]


def _describe(chart: Chart) -> tuple:
    return (
        chart.id,
        chart.title,
        chart.units,
        chart.fam,
        chart.ctx,
        str(chart.type),
        [(dim.id, dim.name, str(dim.algo)) for dim in chart.dims],
    )


@pytest.mark.parametrize(
    ("chart", "expected"),
    list(zip(BASE_CHARTS, EXPECTED_BASE_CHARTS, strict=True)),
    ids=[row[0] for row in EXPECTED_BASE_CHARTS],
)
def test_base_chart_definition(chart: Chart, expected: tuple) -> None:
    """Each server-wide chart matches its pinned definition."""

    assert _describe(chart) == expected


@pytest.mark.parametrize(
    ("chart", "expected"),
    list(zip(DATABASE_CHART_TEMPLATES, EXPECTED_DATABASE_TEMPLATES, strict=True)),
    ids=[row[0] for row in EXPECTED_DATABASE_TEMPLATES],
)
def test_database_template_definition(chart: Chart, expected: tuple) -> None:
    """Each per-database template matches its pinned definition."""

    assert _describe(chart) == expected


def test_every_chart_is_pinned() -> None:
    """No chart is added to or dropped from the catalog without updating the table."""

    assert len(BASE_CHARTS) == len(EXPECTED_BASE_CHARTS) == 18
    assert len(DATABASE_CHART_TEMPLATES) == len(EXPECTED_DATABASE_TEMPLATES) == 14
