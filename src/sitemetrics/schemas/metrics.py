"""Site metrics report schemas."""

from pydantic import BaseModel

from sitemetrics.services.report_page import ReportResult, StatisticPanel
from sitemetrics.services.series import Granularity


class TableRowResponse(BaseModel):
    """A row of a statistic table."""

    label: str
    count: str
    difference: str


class ChartResponse(BaseModel):
    """Encoded chart data and the image URL built from it."""

    encoded: str
    first_label: str
    last_label: str
    max_label: str
    image_url: str


class StatisticPanelResponse(BaseModel):
    """One granularity of a statistic."""

    granularity: Granularity
    heading: str
    chart: ChartResponse
    rows: list[TableRowResponse]

    @classmethod
    def from_panel(cls, panel: StatisticPanel) -> "StatisticPanelResponse":
        return cls(
            granularity=panel.granularity,
            heading=panel.heading,
            chart=ChartResponse(
                encoded=panel.chart.encoded,
                first_label=panel.chart.first_label,
                last_label=panel.chart.last_label,
                max_label=panel.chart.max_label,
                image_url=panel.chart_url,
            ),
            rows=[
                TableRowResponse(label=row.label, count=row.formatted_count, difference=row.delta)
                for row in panel.rows
            ],
        )


class NavigationEntryResponse(BaseModel):
    """A link to one statistic."""

    key: str
    label: str


class NavigationSectionResponse(BaseModel):
    """A group of statistic links."""

    header: str
    entries: list[NavigationEntryResponse]


class StatisticListResponse(BaseModel):
    """Statistics offered on this wiki, grouped for navigation."""

    sections: list[NavigationSectionResponse]


class MetricsReportResponse(BaseModel):
    """Report for one statistic.

    ``statistic`` is null and ``panels`` empty when the requested statistic
    is not offered on this wiki.
    """

    requested: str
    statistic: str | None
    title: str
    navigation: list[NavigationSectionResponse]
    panels: list[StatisticPanelResponse]

    @classmethod
    def from_result(cls, requested: str, result: ReportResult) -> "MetricsReportResponse":
        return cls(
            requested=requested,
            statistic=result.descriptor.key if result.descriptor else None,
            title=result.page_title,
            navigation=navigation_response(result.navigation),
            panels=[StatisticPanelResponse.from_panel(panel) for panel in result.panels],
        )


def navigation_response(sections) -> list[NavigationSectionResponse]:
    return [
        NavigationSectionResponse(
            header=section.header,
            entries=[
                NavigationEntryResponse(key=entry.key, label=entry.label)
                for entry in section.entries
            ],
        )
        for section in sections
    ]
