"""Built-in PostgreSQL chart definitions.

Server-wide charts are registered once per collector. Per-database charts are
templates: `%s` in chart and dim IDs is replaced with the database name when a
database is discovered.
"""

from __future__ import annotations

from typing import Final

from agent.charts import PRIORITY, Chart, Charts, ChartType, Dim, DimAlgo, Label

from .validator import validate_chart_catalog

CONTEXT_PREFIX: Final[str] = "postgres"
DATABASE_LABEL: Final[str] = "database"

(
    PRIO_CONNECTIONS_UTILIZATION,
    PRIO_CONNECTIONS_USAGE,
    PRIO_CHECKPOINTS,
    PRIO_CHECKPOINT_TIME,
    PRIO_BGWRITER_BUFFERS_ALLOCATED,
    PRIO_BGWRITER_BUFFERS_WRITTEN,
    PRIO_BGWRITER_MAXWRITTEN_CLEAN,
    PRIO_BGWRITER_BACKEND_FSYNC,
    PRIO_WAL_WRITES,
    PRIO_WAL_FILES,
    PRIO_WAL_ARCHIVE,
    PRIO_AUTOVACUUM_WORKERS,
    PRIO_AUTOVACUUM_PERCENT_TOWARDS,
    PRIO_TXID_WRAPAROUND_PERCENT_TOWARDS,
    PRIO_TXID_WRAPAROUND_OLDEST_TXID,
    PRIO_CATALOG_RELATION_COUNT,
    PRIO_CATALOG_RELATION_SIZE,
    PRIO_UPTIME,
    PRIO_DB_TRANSACTIONS,
    PRIO_DB_CONNECTIONS_UTILIZATION,
    PRIO_DB_CONNECTIONS,
    PRIO_DB_BUFFER_CACHE,
    PRIO_DB_READ_OPERATIONS,
    PRIO_DB_WRITE_OPERATIONS,
    PRIO_DB_CONFLICTS,
    PRIO_DB_CONFLICTS_STAT,
    PRIO_DB_DEADLOCKS,
    PRIO_DB_LOCKS_HELD,
    PRIO_DB_LOCKS_AWAITED,
    PRIO_DB_TEMP_FILES,
    PRIO_DB_TEMP_FILES_DATA,
    PRIO_DB_SIZE,
) = range(PRIORITY, PRIORITY + 32)

# (pg_class.relkind, dimension name)
_RELKINDS: Final[tuple[tuple[str, str], ...]] = (
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

# (pg_locks.mode, dimension name)
_LOCK_MODES: Final[tuple[tuple[str, str], ...]] = (
    ("AccessShareLock", "access_share"),
    ("RowShareLock", "row_share"),
    ("RowExclusiveLock", "row_exclusive"),
    ("ShareUpdateExclusiveLock", "share_update"),
    ("ShareLock", "share"),
    ("ShareRowExclusiveLock", "share_row_exclusive"),
    ("ExclusiveLock", "exclusive"),
    ("AccessExclusiveLock", "access_exclusive"),
)

_INC = DimAlgo.incremental


BASE_CHARTS: Final[tuple[Chart, ...]] = (
    Chart(
        id="connections_utilization",
        title="Connections utilization",
        units="percentage",
        fam="connections",
        ctx="postgres.connections_utilization",
        priority=PRIO_CONNECTIONS_UTILIZATION,
        dims=[Dim(id="server_connections_utilization", name="used")],
    ),
    Chart(
        id="connections_usage",
        title="Connections usage",
        units="connections",
        fam="connections",
        ctx="postgres.connections_usage",
        priority=PRIO_CONNECTIONS_USAGE,
        type=ChartType.stacked,
        dims=[
            Dim(id="server_connections_available", name="available"),
            Dim(id="server_connections_used", name="used"),
        ],
    ),
    Chart(
        id="checkpoints",
        title="Checkpoints",
        units="checkpoints/s",
        fam="checkpointer",
        ctx="postgres.checkpoints",
        priority=PRIO_CHECKPOINTS,
        type=ChartType.stacked,
        dims=[
            Dim(id="checkpoints_timed", name="scheduled", algo=_INC),
            Dim(id="checkpoints_req", name="requested", algo=_INC),
        ],
    ),
    # TODO: report seconds instead of milliseconds once the collector divides write/sync time by 1000.
    Chart(
        id="checkpoint_time",
        title="Checkpoint time",
        units="milliseconds",
        fam="checkpointer",
        ctx="postgres.checkpoint_time",
        priority=PRIO_CHECKPOINT_TIME,
        dims=[
            Dim(id="checkpoint_write_time", name="write", algo=_INC),
            Dim(id="checkpoint_sync_time", name="sync", algo=_INC),
        ],
    ),
    Chart(
        id="bgwriter_buffers_written",
        title="Background writer buffers written",
        units="B/s",
        fam="background writer",
        ctx="postgres.bgwriter_buffers_written",
        priority=PRIO_BGWRITER_BUFFERS_WRITTEN,
        type=ChartType.area,
        dims=[
            Dim(id="buffers_checkpoint", name="checkpoint", algo=_INC),
            Dim(id="buffers_backend", name="backend", algo=_INC),
            Dim(id="buffers_clean", name="clean", algo=_INC),
        ],
    ),
    Chart(
        id="bgwriter_buffers_alloc",
        title="Background writer buffers allocated",
        units="B/s",
        fam="background writer",
        ctx="postgres.bgwriter_buffers_alloc",
        priority=PRIO_BGWRITER_BUFFERS_ALLOCATED,
        dims=[Dim(id="buffers_alloc", name="allocated", algo=_INC)],
    ),
    Chart(
        id="bgwriter_maxwritten_clean",
        title="Background writer cleaning scan stops",
        units="events/s",
        fam="background writer",
        ctx="postgres.bgwriter_maxwritten_clean",
        priority=PRIO_BGWRITER_MAXWRITTEN_CLEAN,
        dims=[Dim(id="maxwritten_clean", name="maxwritten", algo=_INC)],
    ),
    Chart(
        id="bgwriter_buffers_backend_fsync",
        title="Backend fsync",
        units="operations/s",
        fam="background writer",
        ctx="postgres.bgwriter_buffers_backend_fsync",
        priority=PRIO_BGWRITER_BACKEND_FSYNC,
        dims=[Dim(id="buffers_backend_fsync", name="fsync", algo=_INC)],
    ),
    Chart(
        id="wal_writes",
        title="Write-Ahead Log",
        units="B/s",
        fam="wal",
        ctx="postgres.wal_writes",
        priority=PRIO_WAL_WRITES,
        dims=[Dim(id="wal_writes", name="writes", algo=_INC)],
    ),
    Chart(
        id="wal_files",
        title="Write-Ahead Log files",
        units="files",
        fam="wal",
        ctx="postgres.wal_files",
        priority=PRIO_WAL_FILES,
        type=ChartType.stacked,
        dims=[
            Dim(id="wal_written_files", name="written"),
            Dim(id="wal_recycled_files", name="recycled"),
        ],
    ),
    Chart(
        id="wal_archive_files",
        title="Write-Ahead Log archive files",
        units="files/s",
        fam="wal archive",
        ctx="postgres.wal_archive_files",
        priority=PRIO_WAL_ARCHIVE,
        type=ChartType.stacked,
        dims=[
            Dim(id="wal_archive_files_ready_count", name="ready", algo=_INC),
            Dim(id="wal_archive_files_done_count", name="done", algo=_INC),
        ],
    ),
    Chart(
        id="autovacuum_workers",
        title="Autovacuum workers",
        units="workers",
        fam="autovacuum",
        ctx="postgres.autovacuum_workers",
        priority=PRIO_AUTOVACUUM_WORKERS,
        dims=[
            Dim(id="autovacuum_analyze", name="analyze"),
            Dim(id="autovacuum_vacuum_analyze", name="vacuum_analyze"),
            Dim(id="autovacuum_vacuum", name="vacuum"),
            Dim(id="autovacuum_vacuum_freeze", name="vacuum_freeze"),
            Dim(id="autovacuum_brin_summarize", name="brin_summarize"),
        ],
    ),
    Chart(
        id="percent_towards_emergency_autovacuum",
        title="Percent towards emergency autovacuum",
        units="percentage",
        fam="autovacuum",
        ctx="postgres.percent_towards_emergency_autovacuum",
        priority=PRIO_AUTOVACUUM_PERCENT_TOWARDS,
        dims=[Dim(id="percent_towards_emergency_autovacuum", name="emergency_autovacuum")],
    ),
    Chart(
        id="percent_towards_txid_wraparound",
        title="Percent towards transaction ID wraparound",
        units="percentage",
        fam="txid wraparound",
        ctx="postgres.percent_towards_txid_wraparound",
        priority=PRIO_TXID_WRAPAROUND_PERCENT_TOWARDS,
        dims=[Dim(id="percent_towards_wraparound", name="txid_wraparound")],
    ),
    Chart(
        id="oldest_transaction_xid",
        title="Oldest transaction XID",
        units="xid",
        fam="txid wraparound",
        ctx="postgres.oldest_transaction_xid",
        priority=PRIO_TXID_WRAPAROUND_OLDEST_TXID,
        dims=[Dim(id="oldest_current_xid", name="xid")],
    ),
    Chart(
        id="catalog_relation_count",
        title="Relation count",
        units="relations",
        fam="catalog",
        ctx="postgres.catalog_relation_count",
        priority=PRIO_CATALOG_RELATION_COUNT,
        type=ChartType.stacked,
        dims=[Dim(id=f"catalog_relkind_{kind}_count", name=name) for kind, name in _RELKINDS],
    ),
    Chart(
        id="catalog_relation_size",
        title="Relation size",
        units="B",
        fam="catalog",
        ctx="postgres.catalog_relation_size",
        priority=PRIO_CATALOG_RELATION_SIZE,
        type=ChartType.stacked,
        dims=[Dim(id=f"catalog_relkind_{kind}_size", name=name) for kind, name in _RELKINDS],
    ),
    Chart(
        id="server_uptime",
        title="Uptime",
        units="seconds",
        fam="uptime",
        ctx="postgres.uptime",
        priority=PRIO_UPTIME,
        dims=[Dim(id="server_uptime", name="uptime")],
    ),
)


DATABASE_CHART_TEMPLATES: Final[tuple[Chart, ...]] = (
    Chart(
        id="db_%s_transactions",
        title="Database transactions",
        units="transactions/s",
        fam="db transactions",
        ctx="postgres.db_transactions",
        priority=PRIO_DB_TRANSACTIONS,
        dims=[
            Dim(id="db_%s_xact_commit", name="committed", algo=_INC),
            Dim(id="db_%s_xact_rollback", name="rollback", algo=_INC),
        ],
    ),
    Chart(
        id="db_%s_connections_utilization",
        title="Database connections utilization withing limits",
        units="percentage",
        fam="db connections",
        ctx="postgres.db_connections_utilization",
        priority=PRIO_DB_CONNECTIONS_UTILIZATION,
        dims=[Dim(id="db_%s_numbackends_utilization", name="used")],
    ),
    Chart(
        id="db_%s_connections",
        title="Database connections",
        units="connections",
        fam="db connections",
        ctx="postgres.db_connections",
        priority=PRIO_DB_CONNECTIONS,
        dims=[Dim(id="db_%s_numbackends", name="connections")],
    ),
    Chart(
        id="db_%s_buffer_cache",
        title="Database buffer cache",
        units="blocks/s",
        fam="db buffer cache",
        ctx="postgres.db_buffer_cache",
        priority=PRIO_DB_BUFFER_CACHE,
        type=ChartType.area,
        dims=[
            Dim(id="db_%s_blks_hit", name="hit", algo=_INC),
            Dim(id="db_%s_blks_read", name="miss", algo=_INC),
        ],
    ),
    Chart(
        id="db_%s_read_operations",
        title="Database read operations",
        units="rows/s",
        fam="db operations",
        ctx="postgres.db_read_operations",
        priority=PRIO_DB_READ_OPERATIONS,
        dims=[
            Dim(id="db_%s_tup_returned", name="returned", algo=_INC),
            Dim(id="db_%s_tup_fetched", name="fetched", algo=_INC),
        ],
    ),
    Chart(
        id="db_%s_write_operations",
        title="Database write operations",
        units="rows/s",
        fam="db operations",
        ctx="postgres.db_write_operations",
        priority=PRIO_DB_WRITE_OPERATIONS,
        dims=[
            Dim(id="db_%s_tup_inserted", name="inserted", algo=_INC),
            Dim(id="db_%s_tup_deleted", name="deleted", algo=_INC),
            Dim(id="db_%s_tup_updated", name="updated", algo=_INC),
        ],
    ),
    Chart(
        id="db_%s_conflicts",
        title="Database canceled queries",
        units="queries/s",
        fam="db operations",
        ctx="postgres.db_conflicts",
        priority=PRIO_DB_CONFLICTS,
        dims=[Dim(id="db_%s_conflicts", name="conflicts", algo=_INC)],
    ),
    Chart(
        id="db_%s_conflicts_stat",
        title="Database canceled queries by reason",
        units="queries/s",
        fam="db operations",
        ctx="postgres.db_conflicts_stat",
        priority=PRIO_DB_CONFLICTS_STAT,
        dims=[
            Dim(id="db_%s_confl_tablespace", name="tablespace", algo=_INC),
            Dim(id="db_%s_confl_lock", name="lock", algo=_INC),
            Dim(id="db_%s_confl_snapshot", name="snapshot", algo=_INC),
            Dim(id="db_%s_confl_bufferpin", name="bufferpin", algo=_INC),
            Dim(id="db_%s_confl_deadlock", name="deadlock", algo=_INC),
        ],
    ),
    Chart(
        id="db_%s_deadlocks",
        title="Database deadlocks",
        units="deadlocks/s",
        fam="db deadlocks",
        ctx="postgres.db_deadlocks",
        priority=PRIO_DB_DEADLOCKS,
        dims=[Dim(id="db_%s_deadlocks", name="deadlocks", algo=_INC)],
    ),
    Chart(
        id="db_%s_locks_held",
        title="Database locks held",
        units="locks",
        fam="db locks",
        ctx="postgres.db_locks_held",
        priority=PRIO_DB_LOCKS_HELD,
        type=ChartType.stacked,
        dims=[Dim(id=f"db_%s_lock_mode_{mode}_held", name=name) for mode, name in _LOCK_MODES],
    ),
    Chart(
        id="db_%s_locks_awaited",
        title="Database locks awaited",
        units="locks",
        fam="db locks",
        ctx="postgres.db_locks_awaited",
        priority=PRIO_DB_LOCKS_AWAITED,
        type=ChartType.stacked,
        dims=[Dim(id=f"db_%s_lock_mode_{mode}_awaited", name=name) for mode, name in _LOCK_MODES],
    ),
    Chart(
        id="db_%s_temp_files",
        title="Database temporary files written to disk",
        units="files/s",
        fam="db temp files",
        ctx="postgres.db_temp_files",
        priority=PRIO_DB_TEMP_FILES,
        dims=[Dim(id="db_%s_temp_files", name="written", algo=_INC)],
    ),
    Chart(
        id="db_%s_temp_files_data",
        title="Database temporary files data written to disk",
        units="B/s",
        fam="db temp files",
        ctx="postgres.db_temp_files_data",
        priority=PRIO_DB_TEMP_FILES_DATA,
        dims=[Dim(id="db_%s_temp_bytes", name="written", algo=_INC)],
    ),
    Chart(
        id="db_%s_size",
        title="Database size",
        units="B",
        fam="db size",
        ctx="postgres.db_size",
        priority=PRIO_DB_SIZE,
        dims=[Dim(id="db_%s_size", name="size")],
    ),
)


_VALIDATION = validate_chart_catalog(
    base_charts=BASE_CHARTS,
    templates=DATABASE_CHART_TEMPLATES,
    context_prefix=CONTEXT_PREFIX,
)
if not _VALIDATION.is_valid:
    joined = "\n".join(_VALIDATION.errors)
    raise ValueError(f"Invalid PostgreSQL chart catalog:\n{joined}")


def base_charts() -> Charts:
    """Return a fresh copy of the server-wide charts in registration order."""

    return Charts(chart.copy() for chart in BASE_CHARTS)


def database_chart_prefix(dbname: str) -> str:
    """Return the chart ID prefix shared by every chart of `dbname`."""

    return f"db_{dbname}_"


def new_database_charts(dbname: str) -> Charts:
    """Instantiate the per-database chart templates for one database.

    Chart IDs and dim IDs get `dbname` substituted for their `%s` placeholder
    and every chart is labelled with the database name. Titles, contexts and
    dim names stay as they are so charts of all databases share a context.

    Args:
        dbname: Database name as reported by the server.

    Returns:
        A new Charts collection, independent of the templates.
    """

    charts = Charts(chart.copy() for chart in DATABASE_CHART_TEMPLATES)
    for chart in charts:
        chart.id = chart.id % dbname
        chart.labels = [Label(key=DATABASE_LABEL, value=dbname)]
        for dim in chart.dims:
            dim.id = dim.id % dbname
    return charts
