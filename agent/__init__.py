"""Host-side chart model for collector plugins.

This package describes charts, dimensions, and the chart collection that a
collector registers its charts with. It must not import Django or talk to any
monitored service.
"""

from .charts import (
    PRIORITY,
    Chart,
    ChartError,
    ChartNotFoundError,
    ChartOpts,
    Charts,
    ChartType,
    Dim,
    DimAlgo,
    DimNotFoundError,
    DimOpts,
    DuplicateChartError,
    DuplicateDimError,
    InvalidChartError,
    Label,
    LabelSource,
    check_chart,
)

__all__ = [
    "PRIORITY",
    "Chart",
    "ChartError",
    "ChartNotFoundError",
    "ChartOpts",
    "ChartType",
    "Charts",
    "Dim",
    "DimAlgo",
    "DimNotFoundError",
    "DimOpts",
    "DuplicateChartError",
    "DuplicateDimError",
    "InvalidChartError",
    "Label",
    "LabelSource",
    "check_chart",
]
