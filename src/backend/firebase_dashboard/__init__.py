"""
Firebase Analytics CSV dashboard.

This package reads the CSV files exported from the Firebase Analytics console
(overview, events, pages and screens), tolerates their multi-section layout
and irregular naming, and emits the aggregates the dashboard frontend and the
downloadable report need.
"""

from .errors import (  # noqa: F401
    AnalyticsDashboardError,
    DatasetNotFoundError,
    MalformedDateRangeError,
)
from .features import (  # noqa: F401
    DEFAULT_RELATED_SCREEN_POLICY,
    RelatedScreenPolicy,
    aggregate_features,
    classify_feature_type,
    top_features,
)
from .locator import CSVFileLocator, list_dataset_folders  # noqa: F401
from .models import (  # noqa: F401
    AnalyticsEvent,
    AnalyticsReport,
    DailyActiveUsers,
    DashboardSummary,
    DateRange,
    FeatureUsageDetail,
    FeatureUsageStats,
    ScreenView,
)
from .parser import parse_section  # noqa: F401
from .report import build_csv_report  # noqa: F401
from .repository import (  # noqa: F401
    AnalyticsDataRepository,
    CSVAnalyticsRepository,
    build_repository_from_env,
)
from .service import AnalyticsDashboardService  # noqa: F401
