from __future__ import annotations


class AnalyticsDashboardError(Exception):
    """Base class for failures that abort a dashboard request."""


class DatasetNotFoundError(AnalyticsDashboardError, FileNotFoundError):
    """A required export file (or the folder holding it) is missing."""


class MalformedDateRangeError(AnalyticsDashboardError, ValueError):
    """The overview export lacks usable ``Start date:``/``End date:`` comments."""
