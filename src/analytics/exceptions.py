"""Error taxonomy for the analytics core."""


class AnalyticsError(Exception):
    """Base class for all analytics errors."""


class InvalidInputError(AnalyticsError, ValueError):
    """Input too short or otherwise unusable for the requested operation."""


class UnknownCategoryError(AnalyticsError, LookupError):
    """Category (or KPI id) has no registered driver pools."""

    def __init__(self, category: str):
        self.category = category
        super().__init__(f"Unknown KPI category: {category!r}")


class NarrativeConfigurationError(AnalyticsError):
    """Narrative layer cannot be built (e.g. missing API credential)."""
