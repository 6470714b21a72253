"""HTML rendering of report results with Jinja2 templates."""

from functools import lru_cache
from pathlib import Path
from urllib.parse import urlencode

from jinja2 import Environment, FileSystemLoader, select_autoescape

from sitemetrics.services.catalog import NavigationSection
from sitemetrics.services.messages import msg
from sitemetrics.services.report_page import ReportResult

METRICS_PATH = "/metrics"


@lru_cache(maxsize=1)
def _template_env() -> Environment:
    templates_path = Path(__file__).resolve().parent.parent / "templates"
    env = Environment(
        loader=FileSystemLoader(str(templates_path)),
        autoescape=select_autoescape(enabled_extensions=("html", "xml")),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.globals["msg"] = msg
    env.globals["stat_link"] = stat_link
    return env


def stat_link(key: str, base_path: str = METRICS_PATH) -> str:
    """Link to the metrics page for one statistic."""
    return f"{base_path}?{urlencode({'stat': key})}"


def render_navigation(sections: list[NavigationSection]) -> str:
    return _template_env().get_template("metrics/navigation.html").render(sections=sections)


def render_content(result: ReportResult) -> str:
    """Heading, chart and table for each panel; empty when nothing was found."""
    if not result.panels:
        return ""
    return _template_env().get_template("metrics/content.html").render(panels=result.panels)


def render_page(result: ReportResult) -> str:
    return _template_env().get_template("metrics/page.html").render(
        title=result.page_title,
        navigation=render_navigation(result.navigation),
        content=render_content(result),
    )
