"""Registry of optional wiki extensions installed on the site."""

from collections.abc import Iterable

from sitemetrics.core.config import settings


class FeatureRegistry:
    """Answers which optional extensions are installed.

    Names are matched case-insensitively ("PollNY" == "pollny").
    """

    def __init__(self, installed: Iterable[str] = (), registration_tracking: bool = False):
        self._installed = {name.strip().lower() for name in installed if name.strip()}
        self.registration_tracking = registration_tracking

    @classmethod
    def from_settings(cls) -> "FeatureRegistry":
        return cls(settings.installed_features, settings.register_track)

    def is_feature_installed(self, name: str) -> bool:
        return name.strip().lower() in self._installed

    @property
    def installed(self) -> frozenset[str]:
        return frozenset(self._installed)
