"""Report page composition: resolve a statistic, query it, build its panels."""

import logging
from dataclasses import dataclass, field
from enum import Enum

from sitemetrics.core.config import settings
from sitemetrics.services.catalog import (
    NavigationSection,
    ReportCatalog,
    ReportDescriptor,
    detect_capabilities,
)
from sitemetrics.services.chart import ChartData, encode_chart
from sitemetrics.services.data_source import DataSource, QueryRunner
from sitemetrics.services.delta_table import TableRow, build_delta_table
from sitemetrics.services.features import FeatureRegistry
from sitemetrics.services.messages import NumberFormatter, format_number, msg
from sitemetrics.services.series import Granularity, build_series

logger = logging.getLogger(__name__)


class ReportState(str, Enum):
    """Stages of a single report request; it only moves forward."""

    IDLE = "idle"
    RESOLVING = "resolving"
    QUERYING_MONTH = "querying_month"
    QUERYING_DAY = "querying_day"
    RENDERING = "rendering"
    DONE = "done"


@dataclass(frozen=True)
class StatisticPanel:
    """Heading, chart and table for one statistic at one granularity."""

    granularity: Granularity
    heading: str
    chart: ChartData
    rows: list[TableRow]

    @property
    def chart_url(self) -> str:
        return self.chart.image_url()


@dataclass
class ReportResult:
    """Everything needed to display the metrics page for one request."""

    statistic: str
    descriptor: ReportDescriptor | None
    navigation: list[NavigationSection]
    panels: list[StatisticPanel] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.descriptor is not None

    @property
    def page_title(self) -> str:
        if self.descriptor is None:
            return msg("sitemetrics")
        return msg("sitemetrics-title", self.descriptor.title)


class ReportPage:
    """Builds the metrics page for one request.

    Both granularities are required: if either query fails the whole
    report fails, no partial panels are returned.
    """

    def __init__(
        self,
        data_source: DataSource,
        features: FeatureRegistry | None = None,
        number_format: NumberFormatter = format_number,
    ):
        self.data_source = data_source
        self.features = features or FeatureRegistry.from_settings()
        self.number_format = number_format
        self.runner = QueryRunner(data_source)
        self.state = ReportState.IDLE

    def _advance(self, state: ReportState) -> None:
        logger.debug(f"Report state {self.state.value} -> {state.value}")
        self.state = state

    async def build_catalog(self) -> ReportCatalog:
        capabilities = await detect_capabilities(
            self.data_source, self.features, table_prefix=settings.wiki_table_prefix
        )
        return ReportCatalog.build(
            capabilities,
            table_prefix=settings.wiki_table_prefix,
            month_limit=settings.month_limit,
            day_limit=settings.day_limit,
        )

    async def _panel(
        self, descriptor: ReportDescriptor, granularity: Granularity
    ) -> StatisticPanel:
        rows = await self.runner.run(descriptor.key, granularity.value, descriptor.query(granularity))
        series = build_series(rows, granularity)
        return StatisticPanel(
            granularity=granularity,
            heading=descriptor.panel_title(granularity),
            chart=encode_chart(series, self.number_format),
            rows=build_delta_table(series, self.number_format),
        )

    async def render(self, raw_key: str | None = None) -> ReportResult:
        """Run the report for a free-form statistic name.

        A missing or blank name selects the default statistic. A name that is
        not offered on this wiki yields a result with navigation and no panels.

        Raises:
            RuntimeError: If this page has already rendered; pages are single-use.
        """
        if self.state is not ReportState.IDLE:
            raise RuntimeError(f"Report page already used (state {self.state.value})")
        self._advance(ReportState.RESOLVING)
        statistic = raw_key if raw_key and raw_key.strip() else settings.default_statistic
        catalog = await self.build_catalog()
        descriptor = catalog.resolve(statistic)
        result = ReportResult(
            statistic=statistic,
            descriptor=descriptor,
            navigation=catalog.navigation(),
        )

        if descriptor is None:
            logger.info(f"Unknown or unavailable statistic requested: {statistic!r}")
            self._advance(ReportState.DONE)
            return result

        self._advance(ReportState.QUERYING_MONTH)
        month_panel = await self._panel(descriptor, Granularity.MONTH)
        self._advance(ReportState.QUERYING_DAY)
        day_panel = await self._panel(descriptor, Granularity.DAY)

        self._advance(ReportState.RENDERING)
        result.statistic = descriptor.key
        result.panels = [month_panel, day_panel]
        self._advance(ReportState.DONE)
        return result
