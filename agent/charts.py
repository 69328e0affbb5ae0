"""Chart, dimension, and chart collection types.

A collector owns a `Charts` collection. Charts are added when the collector
discovers something worth charting and are marked for removal (not deleted)
when it disappears, so the host can emit them one last time as obsolete.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import IntFlag, StrEnum
from typing import Final, Iterable, Iterator

PRIORITY: Final[int] = 70000


class ChartType(StrEnum):
    """Rendering hint for a chart."""

    line = "line"
    area = "area"
    stacked = "stacked"


class DimAlgo(StrEnum):
    """How the host turns collected values into plotted values."""

    absolute = "absolute"
    incremental = "incremental"
    percent_of_absolute = "percentage-of-absolute-row"
    percent_of_incremental = "percentage-of-incremental-row"


class LabelSource(IntFlag):
    """Origin of a chart label."""

    auto = 1
    conf = 2
    k8s = 4


class ChartError(ValueError):
    """Base class for chart collection errors."""


class InvalidChartError(ChartError):
    """Raised when a chart or one of its dims fails structural checks."""


class DuplicateChartError(ChartError):
    """Raised when adding a chart whose ID is already registered."""

    def __init__(self, chart_id: str) -> None:
        """Initialize the error.

        Args:
            chart_id: ID of the chart that is already present.
        """

        super().__init__(f"chart {chart_id!r} is already in charts")
        self.chart_id = chart_id


class DuplicateDimError(ChartError):
    """Raised when adding a dim whose ID is already present in a chart."""

    def __init__(self, dim_id: str, chart_id: str) -> None:
        """Initialize the error.

        Args:
            dim_id: ID of the dim that is already present.
            chart_id: ID of the chart holding the dim.
        """

        super().__init__(f"dim {dim_id!r} is already in chart {chart_id!r}")
        self.dim_id = dim_id
        self.chart_id = chart_id


class ChartNotFoundError(ChartError):
    """Raised when removing a chart that is not registered."""

    def __init__(self, chart_id: str) -> None:
        super().__init__(f"chart {chart_id!r} is not in charts")
        self.chart_id = chart_id


class DimNotFoundError(ChartError):
    """Raised when operating on a dim that is not present in a chart."""

    def __init__(self, dim_id: str, chart_id: str) -> None:
        super().__init__(f"dim {dim_id!r} is not in chart {chart_id!r}")
        self.dim_id = dim_id
        self.chart_id = chart_id


@dataclass(slots=True)
class Label:
    """A key/value label attached to a chart.

    Args:
        key: Label key, e.g. "database".
        value: Label value.
        source: Where the label came from.
    """

    key: str
    value: str
    source: LabelSource = LabelSource.auto


@dataclass(slots=True)
class ChartOpts:
    """Chart-level host options."""

    obsolete: bool = False
    detail: bool = False
    store_first: bool = False
    hidden: bool = False


@dataclass(slots=True)
class DimOpts:
    """Dim-level host options."""

    obsolete: bool = False
    hidden: bool = False
    no_reset: bool = False
    no_overflow: bool = False


@dataclass(slots=True)
class Dim:
    """A single dimension (plotted line) of a chart.

    Args:
        id: Collected metric key the dimension reads its value from.
        name: Display name; empty means the host shows the ID.
        algo: How collected values are turned into plotted values.
        mul: Multiplier applied by the host (0 means host default).
        div: Divisor applied by the host (0 means host default).
        opts: Host options for the dimension.
    """

    id: str
    name: str = ""
    algo: DimAlgo = DimAlgo.absolute
    mul: int = 0
    div: int = 0
    opts: DimOpts = field(default_factory=DimOpts)
    marked_for_removal: bool = field(default=False, compare=False)

    def copy(self) -> Dim:
        """Return a deep copy of the dim."""

        return copy.deepcopy(self)


@dataclass(slots=True)
class Chart:
    """A chart definition plus the host lifecycle flags that go with it.

    Args:
        id: Unique chart ID within a collection.
        title: Human-readable chart title.
        units: Display units.
        fam: Family (submenu) the chart is grouped under.
        ctx: Context shared by charts of the same kind across instances.
        priority: Sort order; lower sorts first.
        type: Rendering hint.
        opts: Host options for the chart.
        labels: Labels attached to the chart.
        dims: Ordered dimensions.
    """

    id: str
    title: str = ""
    units: str = ""
    fam: str = ""
    ctx: str = ""
    priority: int = 0
    type: ChartType = ChartType.line
    opts: ChartOpts = field(default_factory=ChartOpts)
    labels: list[Label] = field(default_factory=list)
    dims: list[Dim] = field(default_factory=list)
    created: bool = field(default=False, compare=False)
    updated: bool = field(default=False, compare=False)
    marked_for_removal: bool = field(default=False, compare=False)

    def copy(self) -> Chart:
        """Return a deep copy of the chart, including dims and labels."""

        return copy.deepcopy(self)

    def label(self, key: str) -> str | None:
        """Return the value of the first label with `key`, or None."""

        for label in self.labels:
            if label.key == key:
                return label.value
        return None

    def has_dim(self, dim_id: str) -> bool:
        """Return True when the chart contains a dim with `dim_id`."""

        return self._dim_index(dim_id) is not None

    def get_dim(self, dim_id: str) -> Dim | None:
        """Return the dim with `dim_id`, or None."""

        idx = self._dim_index(dim_id)
        return None if idx is None else self.dims[idx]

    def add_dim(self, dim: Dim) -> None:
        """Append a dim to the chart.

        Args:
            dim: Dim to add.

        Raises:
            InvalidChartError: When the dim fails structural checks.
            DuplicateDimError: When a dim with the same ID is already present.
        """

        _check_dim(dim, chart_id=self.id)
        if self.has_dim(dim.id):
            raise DuplicateDimError(dim.id, self.id)
        self.dims.append(dim)
        self.updated = False

    def remove_dim(self, dim_id: str) -> None:
        """Delete a dim from the chart.

        Raises:
            DimNotFoundError: When the chart has no such dim.
        """

        idx = self._dim_index(dim_id)
        if idx is None:
            raise DimNotFoundError(dim_id, self.id)
        del self.dims[idx]
        self.updated = False

    def mark_dim_remove(self, dim_id: str, *, hide: bool = False) -> None:
        """Flag a dim as obsolete so the host retires it on its next update.

        Args:
            dim_id: ID of the dim to retire.
            hide: Also hide the dim while it is being retired.

        Raises:
            DimNotFoundError: When the chart has no such dim.
        """

        dim = self.get_dim(dim_id)
        if dim is None:
            raise DimNotFoundError(dim_id, self.id)
        dim.marked_for_removal = True
        dim.opts.obsolete = True
        if hide:
            dim.opts.hidden = True
        self.updated = False

    def mark_remove(self) -> None:
        """Flag the chart as obsolete and pending removal."""

        self.opts.obsolete = True
        self.marked_for_removal = True

    def mark_not_created(self) -> None:
        """Make the host (re)emit the chart definition on its next update."""

        self.created = False

    def _dim_index(self, dim_id: str) -> int | None:
        for idx, dim in enumerate(self.dims):
            if dim.id == dim_id:
                return idx
        return None


def _unacceptable_symbol(value: str) -> str | None:
    """Return the first whitespace character in `value`, or None."""

    for char in value:
        if char.isspace():
            return char
    return None


def _check_dim(dim: Dim, *, chart_id: str) -> None:
    if not dim.id:
        raise InvalidChartError(f"chart {chart_id!r}: dim id is empty")
    symbol = _unacceptable_symbol(dim.id)
    if symbol is not None:
        raise InvalidChartError(f"chart {chart_id!r}: unacceptable symbol {symbol!r} in dim id {dim.id!r}")


def check_chart(chart: Chart) -> None:
    """Check that a chart is structurally acceptable to the host.

    Args:
        chart: Chart to check.

    Raises:
        InvalidChartError: When the ID, title or units are empty, the ID or a
            dim ID contains whitespace, a dim ID is empty, or dim IDs repeat.
    """

    if not chart.id:
        raise InvalidChartError("chart id is empty")
    if not chart.title:
        raise InvalidChartError(f"chart {chart.id!r}: title is empty")
    if not chart.units:
        raise InvalidChartError(f"chart {chart.id!r}: units are empty")
    symbol = _unacceptable_symbol(chart.id)
    if symbol is not None:
        raise InvalidChartError(f"chart {chart.id!r}: unacceptable symbol {symbol!r} in id")

    seen: set[str] = set()
    for dim in chart.dims:
        _check_dim(dim, chart_id=chart.id)
        if dim.id in seen:
            raise InvalidChartError(f"chart {chart.id!r}: duplicate dim {dim.id!r}")
        seen.add(dim.id)


class Charts:
    """Ordered chart collection a collector registers its charts with.

    Chart IDs are unique among charts not marked for removal. Adding a chart
    whose ID belongs to a chart pending removal replaces that chart in place.
    """

    __slots__ = ("_charts",)

    def __init__(self, charts: Iterable[Chart] = ()) -> None:
        """Initialize the collection.

        Args:
            charts: Initial charts, stored as given (not checked or copied).
        """

        self._charts: list[Chart] = list(charts)

    def __iter__(self) -> Iterator[Chart]:
        return iter(self._charts)

    def __len__(self) -> int:
        return len(self._charts)

    def __contains__(self, chart_id: object) -> bool:
        return isinstance(chart_id, str) and self.has(chart_id)

    def __repr__(self) -> str:
        return f"Charts({[chart.id for chart in self._charts]!r})"

    def add(self, *charts: Chart) -> None:
        """Register charts with the collection.

        Charts are added one by one; a failure leaves earlier charts from the
        same call registered.

        Args:
            *charts: Charts to add.

        Raises:
            InvalidChartError: When a chart fails structural checks.
            DuplicateChartError: When a chart ID is already registered and
                the registered chart is not pending removal.
        """

        for chart in charts:
            check_chart(chart)
            idx = self._index(chart.id)
            if idx is None:
                self._charts.append(chart)
                continue
            if not self._charts[idx].marked_for_removal:
                raise DuplicateChartError(chart.id)
            self._charts[idx] = chart

    def get(self, chart_id: str) -> Chart | None:
        """Return the chart with `chart_id`, or None."""

        idx = self._index(chart_id)
        return None if idx is None else self._charts[idx]

    def has(self, chart_id: str) -> bool:
        """Return True when a chart with `chart_id` is registered."""

        return self._index(chart_id) is not None

    def remove(self, chart_id: str) -> None:
        """Delete a chart from the collection outright.

        Collectors normally use `Chart.mark_remove` instead, which lets the
        host retire the chart.

        Raises:
            ChartNotFoundError: When no chart has `chart_id`.
        """

        idx = self._index(chart_id)
        if idx is None:
            raise ChartNotFoundError(chart_id)
        del self._charts[idx]

    def ids(self) -> list[str]:
        """Return chart IDs in registration order."""

        return [chart.id for chart in self._charts]

    def copy(self) -> Charts:
        """Return a deep copy of the collection."""

        return Charts(chart.copy() for chart in self._charts)

    def _index(self, chart_id: str) -> int | None:
        for idx, chart in enumerate(self._charts):
            if chart.id == chart_id:
                return idx
        return None
