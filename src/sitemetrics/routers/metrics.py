"""Site metrics report endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import HTMLResponse

from sitemetrics.core.config import settings
from sitemetrics.core.deps import Features, MetricsViewer, WikiDataSource
from sitemetrics.schemas.metrics import (
    MetricsReportResponse,
    StatisticListResponse,
    navigation_response,
)
from sitemetrics.services.data_source import DataSourceFailure
from sitemetrics.services.rendering import render_page
from sitemetrics.services.report_page import ReportPage, ReportResult
from sitemetrics.services.series import MalformedBucketKey

logger = logging.getLogger(__name__)

router = APIRouter(tags=["metrics"])

StatQuery = Query(None, description="Statistic name, e.g. 'Edits' or 'Wall_Messages'")


async def _run_report(
    data_source: WikiDataSource,
    features: Features,
    statistic: str | None,
) -> ReportResult:
    """Run the report, translating pipeline failures into HTTP errors."""
    page = ReportPage(data_source, features)
    try:
        return await page.render(statistic)
    except MalformedBucketKey as exc:
        logger.warning(f"Malformed data for statistic {statistic!r}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Statistic {statistic or settings.default_statistic!r} returned malformed data: {exc}",
        ) from exc
    except DataSourceFailure as exc:
        logger.error(f"Wiki database query failed for {statistic!r}: {exc}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Wiki database is unavailable",
        ) from exc


@router.get("/metrics", response_class=HTMLResponse)
async def metrics_page(
    user: MetricsViewer,
    data_source: WikiDataSource,
    features: Features,
    stat: str | None = StatQuery,
) -> HTMLResponse:
    """Metrics page: navigation plus the month and day panels of one statistic."""
    result = await _run_report(data_source, features, stat)
    return HTMLResponse(render_page(result))


@router.get("/metrics/{statistic}", response_class=HTMLResponse)
async def metrics_page_for(
    statistic: str,
    user: MetricsViewer,
    data_source: WikiDataSource,
    features: Features,
    stat: str | None = StatQuery,
) -> HTMLResponse:
    """Path form of the metrics page; an explicit ``stat`` query parameter wins."""
    result = await _run_report(data_source, features, stat or statistic)
    return HTMLResponse(render_page(result))


@router.get("/api/metrics", response_model=MetricsReportResponse)
async def get_metrics_report(
    user: MetricsViewer,
    data_source: WikiDataSource,
    features: Features,
    stat: str | None = StatQuery,
) -> MetricsReportResponse:
    """
    Get one statistic as JSON.

    Returns month and day panels with table rows and encoded chart data.
    A statistic that is not offered on this wiki returns navigation only.
    """
    result = await _run_report(data_source, features, stat)
    return MetricsReportResponse.from_result(stat or settings.default_statistic, result)


@router.get("/api/metrics/statistics", response_model=StatisticListResponse)
async def list_statistics(
    user: MetricsViewer,
    data_source: WikiDataSource,
    features: Features,
) -> StatisticListResponse:
    """List the statistics offered on this wiki, grouped into navigation sections."""
    try:
        catalog = await ReportPage(data_source, features).build_catalog()
    except DataSourceFailure as exc:
        logger.error(f"Could not detect wiki capabilities: {exc}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Wiki database is unavailable",
        ) from exc
    return StatisticListResponse(sections=navigation_response(catalog.navigation()))
