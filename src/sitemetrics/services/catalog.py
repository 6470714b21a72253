"""Capability-gated catalog of the statistics a site can report."""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from sitemetrics.services.data_source import DataSource, SqlDialect
from sitemetrics.services.features import FeatureRegistry
from sitemetrics.services.messages import msg
from sitemetrics.services.series import Granularity
from sitemetrics.services.statistics import SECTIONS, STATISTICS, StatisticDefinition

logger = logging.getLogger(__name__)

BUCKET_FORMATS = {
    (SqlDialect.MYSQL, Granularity.MONTH): "DATE_FORMAT({expr}, '%y %m')",
    (SqlDialect.MYSQL, Granularity.DAY): "DATE_FORMAT({expr}, '%y %m %d')",
    (SqlDialect.POSTGRES, Granularity.MONTH): "TO_CHAR({expr}, 'yy mm')",
    (SqlDialect.POSTGRES, Granularity.DAY): "TO_CHAR({expr}, 'yy mm dd')",
}

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Capabilities:
    """What the connected wiki offers: SQL dialect, optional tables and extensions."""

    dialect: SqlDialect
    tables: frozenset[str] = frozenset()
    features: FeatureRegistry = field(default_factory=FeatureRegistry)

    @property
    def registration_tracking(self) -> bool:
        return self.features.registration_tracking

    def has_feature(self, name: str) -> bool:
        return self.features.is_feature_installed(name)

    def supports(self, definition: StatisticDefinition) -> bool:
        """Whether a statistic can be queried on this wiki."""
        if definition.requires_register_track and not self.registration_tracking:
            return False
        if any(table not in self.tables for table in definition.required_tables):
            return False
        return all(self.has_feature(name) for name in definition.required_features)


@dataclass(frozen=True)
class ReportDescriptor:
    """A statistic resolved against one wiki: titles and ready-to-run SQL."""

    key: str
    title_message: str
    month_title_message: str
    day_title_message: str
    query_month: str
    query_day: str
    section: str

    @property
    def title(self) -> str:
        return msg(self.title_message)

    def query(self, granularity: Granularity) -> str:
        return self.query_month if granularity == Granularity.MONTH else self.query_day

    def panel_title(self, granularity: Granularity) -> str:
        if granularity == Granularity.MONTH:
            return msg(self.month_title_message)
        return msg(self.day_title_message)


@dataclass(frozen=True)
class NavigationEntry:
    key: str
    label: str


@dataclass
class NavigationSection:
    header: str
    entries: list[NavigationEntry] = field(default_factory=list)


def normalize_key(raw_key: str) -> str:
    """Treat underscores and encoded spaces as spaces (``Wall_Messages`` -> ``Wall Messages``)."""
    key = raw_key.replace("%20", " ").replace("_", " ")
    return _WHITESPACE.sub(" ", key).strip()


def quote_table(name: str, dialect: SqlDialect) -> str:
    """PostgreSQL folds unquoted names to lower case, so mixed-case tables are quoted."""
    if dialect == SqlDialect.POSTGRES and name != name.lower():
        return f'"{name}"'
    return name


def build_query(
    definition: StatisticDefinition,
    dialect: SqlDialect,
    granularity: Granularity,
    limit: int,
    table_prefix: str = "",
) -> str:
    """Render the SQL for one statistic at one granularity.

    Rows come back as ``the_count``/``the_date`` pairs, newest bucket first.
    """
    bucket = BUCKET_FORMATS[(dialect, granularity)].replace(
        "{expr}", definition.bucket_date.for_dialect(dialect)
    )
    lines = [
        f"SELECT {definition.count} AS the_count, {bucket} AS the_date",
        f"FROM {definition.source}",
    ]
    if definition.where:
        lines.append(f"WHERE {definition.where}")
    lines.extend(
        [
            f"GROUP BY {bucket}",
            f"ORDER BY {bucket} DESC",
            f"LIMIT {int(limit)}",
        ]
    )
    tables = {
        name: quote_table(f"{table_prefix}{name}", dialect)
        for name in definition.table_names()
    }
    return "\n".join(lines).format_map(tables)


async def detect_capabilities(
    data_source: DataSource,
    features: FeatureRegistry,
    definitions: Iterable[StatisticDefinition] = STATISTICS,
    table_prefix: str = "",
) -> Capabilities:
    """Find out which optional tables exist on the wiki."""
    optional_tables = sorted(
        {table for definition in definitions for table in definition.required_tables}
    )
    present = set()
    for table in optional_tables:
        if await data_source.table_exists(f"{table_prefix}{table}"):
            present.add(table)

    capabilities = Capabilities(
        dialect=data_source.dialect(),
        tables=frozenset(present),
        features=features,
    )
    logger.debug(
        f"Wiki capabilities: dialect={capabilities.dialect.value}, "
        f"tables={sorted(present)}, features={sorted(features.installed)}"
    )
    return capabilities


class ReportCatalog:
    """The statistics offered on one wiki, keyed by statistic name."""

    def __init__(self, descriptors: Iterable[ReportDescriptor]):
        self._descriptors: dict[str, ReportDescriptor] = {}
        for descriptor in descriptors:
            lookup = normalize_key(descriptor.key).casefold()
            if lookup in self._descriptors:
                raise ValueError(f"Duplicate statistic key: {descriptor.key}")
            self._descriptors[lookup] = descriptor

    @classmethod
    def build(
        cls,
        capabilities: Capabilities,
        definitions: Iterable[StatisticDefinition] = STATISTICS,
        table_prefix: str = "",
        month_limit: int = 12,
        day_limit: int = 120,
    ) -> "ReportCatalog":
        """Keep the first supported definition for every key."""
        chosen: dict[str, StatisticDefinition] = {}
        for definition in definitions:
            if definition.key in chosen or not capabilities.supports(definition):
                continue
            chosen[definition.key] = definition

        return cls(
            ReportDescriptor(
                key=definition.key,
                title_message=definition.nav_message,
                month_title_message=definition.month_message,
                day_title_message=definition.day_message,
                query_month=build_query(
                    definition, capabilities.dialect, Granularity.MONTH, month_limit, table_prefix
                ),
                query_day=build_query(
                    definition, capabilities.dialect, Granularity.DAY, day_limit, table_prefix
                ),
                section=definition.section,
            )
            for definition in chosen.values()
        )

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, raw_key: str) -> bool:
        return self.resolve(raw_key) is not None

    @property
    def keys(self) -> list[str]:
        return [descriptor.key for descriptor in self._descriptors.values()]

    def resolve(self, raw_key: str) -> ReportDescriptor | None:
        """Look up a statistic by free-form name; None when it is not offered."""
        return self._descriptors.get(normalize_key(raw_key).casefold())

    def navigation(self) -> list[NavigationSection]:
        """Sections in display order, each with its offered statistics.

        Sections with nothing to offer are left out.
        """
        sections = {header: NavigationSection(header=msg(header)) for header in SECTIONS}
        for descriptor in self._descriptors.values():
            sections[descriptor.section].entries.append(
                NavigationEntry(key=descriptor.key, label=descriptor.title)
            )
        return [section for section in sections.values() if section.entries]
