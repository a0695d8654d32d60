from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, Literal, Mapping, Optional, Sequence, Tuple

FeatureType = Literal["screen", "event", "menu", "action", "system"]
FeatureCategory = Literal["screen", "event", "engagement"]


@dataclass(frozen=True)
class DailyActiveUsers:
    """
    Rolling active-user counts for one calendar day of the overview export.

    The export carries no date column; ``date`` is assigned positionally from
    the ``Start date``/``End date`` comments.
    """

    date: date
    active_users_1_day: int
    active_users_7_days: int
    active_users_30_days: int


@dataclass(frozen=True)
class AnalyticsEvent:
    event_name: str
    event_count: int
    total_users: int
    event_count_per_user: float
    total_revenue: float = 0.0


@dataclass(frozen=True)
class ScreenView:
    """One row of the "Pages and screens" export keyed by screen class."""

    screen_class: str
    views: int
    active_users: int
    views_per_active_user: float
    avg_engagement_time: float
    event_count: int
    key_events: int
    total_revenue: float = 0.0


@dataclass(frozen=True)
class DateRange:
    start_date: date
    end_date: date


@dataclass(frozen=True)
class FeatureUsageDetail:
    """
    A screen or event seen through the unified "feature" lens.

    ``engagement_time`` is only known for screen-derived features and
    ``related_screens`` is only filled for ``menu``/``action`` features that
    matched at least one screen.
    """

    feature_name: str
    feature_type: FeatureType
    usage_count: int
    unique_users: int
    avg_usage_per_user: float
    engagement_time: Optional[float] = None
    related_screens: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class FeatureUsageStats:
    feature_name: str
    category: FeatureCategory
    usage_count: int
    unique_users: int
    avg_usage_per_user: float


@dataclass(frozen=True)
class ScreenViewBreakdown:
    screen_class: str
    views: int
    active_users: int
    avg_engagement_time: float
    views_per_user: float


@dataclass(frozen=True)
class ScreenViewAnalysis:
    total_screen_views: int
    screen_view_breakdown: Sequence[ScreenViewBreakdown] = field(default_factory=tuple)


@dataclass(frozen=True)
class EngagementByScreen:
    screen_class: str
    engagements: int
    active_users: int
    avg_engagement_time: float


@dataclass(frozen=True)
class UserEngagementAnalysis:
    total_engagements: int
    total_users: int
    avg_engagements_per_user: float
    engagement_by_screen: Sequence[EngagementByScreen] = field(default_factory=tuple)


@dataclass(frozen=True)
class EngagementAnalysis:
    total_engagements: int
    avg_engagement_time: float
    top_screens: Sequence[ScreenView] = field(default_factory=tuple)
    engagement_by_screen: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ScreenRankings:
    top_screens: Sequence[ScreenView]
    screens_by_engagement: Sequence[ScreenView]
    screens_by_users: Sequence[ScreenView]

    def as_dict(self) -> Dict[str, Any]:
        return _serialize(self)


@dataclass(frozen=True)
class EventBreakdown:
    custom_events: Sequence[AnalyticsEvent]
    system_events: Sequence[AnalyticsEvent]
    events_by_users: Sequence[AnalyticsEvent]

    def as_dict(self) -> Dict[str, Any]:
        return _serialize(self)


@dataclass(frozen=True)
class DashboardSummary:
    """
    Aggregate root handed to the rendering layer.

    Built fresh from the CSV files on every request and never mutated
    afterwards.
    """

    total_active_users: int
    total_screen_views: int
    total_events: int
    top_features: Sequence[FeatureUsageStats]
    top_screens: Sequence[ScreenView]
    top_events: Sequence[AnalyticsEvent]
    engagement_analysis: EngagementAnalysis
    daily_data: Sequence[DailyActiveUsers]
    date_range: DateRange
    screen_view_analysis: ScreenViewAnalysis
    user_engagement_analysis: UserEngagementAnalysis
    feature_usage_details: Sequence[FeatureUsageDetail]

    def as_dict(self) -> Dict[str, Any]:
        """
        Convert the nested dataclasses into a JSON-serialisable structure.

        Keys use the camelCase names the dashboard frontend reads.
        """

        return _serialize(self)


@dataclass(frozen=True)
class AnalyticsReport:
    summary: DashboardSummary
    csv_data: str


def _serialize(obj: Any) -> Any:
    if isinstance(obj, DashboardSummary):
        return {
            "totalActiveUsers": obj.total_active_users,
            "totalScreenViews": obj.total_screen_views,
            "totalEvents": obj.total_events,
            "topFeatures": _serialize(obj.top_features),
            "topScreens": _serialize(obj.top_screens),
            "topEvents": _serialize(obj.top_events),
            "engagementAnalysis": _serialize(obj.engagement_analysis),
            "dailyData": _serialize(obj.daily_data),
            "dateRange": _serialize(obj.date_range),
            "screenViewAnalysis": _serialize(obj.screen_view_analysis),
            "userEngagementAnalysis": _serialize(obj.user_engagement_analysis),
            "featureUsageDetails": _serialize(obj.feature_usage_details),
        }
    if isinstance(obj, DailyActiveUsers):
        return {
            "date": obj.date.isoformat(),
            "activeUsers30Days": obj.active_users_30_days,
            "activeUsers7Days": obj.active_users_7_days,
            "activeUsers1Day": obj.active_users_1_day,
        }
    if isinstance(obj, AnalyticsEvent):
        return {
            "eventName": obj.event_name,
            "eventCount": obj.event_count,
            "totalUsers": obj.total_users,
            "eventCountPerUser": obj.event_count_per_user,
            "totalRevenue": obj.total_revenue,
        }
    if isinstance(obj, ScreenView):
        return {
            "screenClass": obj.screen_class,
            "views": obj.views,
            "activeUsers": obj.active_users,
            "viewsPerActiveUser": obj.views_per_active_user,
            "avgEngagementTime": obj.avg_engagement_time,
            "eventCount": obj.event_count,
            "keyEvents": obj.key_events,
            "totalRevenue": obj.total_revenue,
        }
    if isinstance(obj, DateRange):
        return {"startDate": obj.start_date.isoformat(), "endDate": obj.end_date.isoformat()}
    if isinstance(obj, FeatureUsageDetail):
        return {
            "featureName": obj.feature_name,
            "featureType": obj.feature_type,
            "usageCount": obj.usage_count,
            "uniqueUsers": obj.unique_users,
            "avgUsagePerUser": obj.avg_usage_per_user,
            "engagementTime": obj.engagement_time,
            "relatedScreens": None if obj.related_screens is None else list(obj.related_screens),
        }
    if isinstance(obj, FeatureUsageStats):
        return {
            "featureName": obj.feature_name,
            "category": obj.category,
            "usageCount": obj.usage_count,
            "uniqueUsers": obj.unique_users,
            "avgUsagePerUser": obj.avg_usage_per_user,
        }
    if isinstance(obj, ScreenViewAnalysis):
        return {
            "totalScreenViews": obj.total_screen_views,
            "screenViewBreakdown": _serialize(obj.screen_view_breakdown),
        }
    if isinstance(obj, ScreenViewBreakdown):
        return {
            "screenClass": obj.screen_class,
            "views": obj.views,
            "activeUsers": obj.active_users,
            "avgEngagementTime": obj.avg_engagement_time,
            "viewsPerUser": obj.views_per_user,
        }
    if isinstance(obj, UserEngagementAnalysis):
        return {
            "totalEngagements": obj.total_engagements,
            "totalUsers": obj.total_users,
            "avgEngagementsPerUser": obj.avg_engagements_per_user,
            "engagementByScreen": _serialize(obj.engagement_by_screen),
        }
    if isinstance(obj, EngagementByScreen):
        return {
            "screenClass": obj.screen_class,
            "engagements": obj.engagements,
            "activeUsers": obj.active_users,
            "avgEngagementTime": obj.avg_engagement_time,
        }
    if isinstance(obj, EngagementAnalysis):
        return {
            "totalEngagements": obj.total_engagements,
            "avgEngagementTime": obj.avg_engagement_time,
            "topScreens": _serialize(obj.top_screens),
            "engagementByScreen": dict(obj.engagement_by_screen),
        }
    if isinstance(obj, ScreenRankings):
        return {
            "topScreens": _serialize(obj.top_screens),
            "screensByEngagement": _serialize(obj.screens_by_engagement),
            "screensByUsers": _serialize(obj.screens_by_users),
        }
    if isinstance(obj, EventBreakdown):
        return {
            "customEvents": _serialize(obj.custom_events),
            "systemEvents": _serialize(obj.system_events),
            "eventsByUsers": _serialize(obj.events_by_users),
        }
    if isinstance(obj, Iterable) and not isinstance(obj, (str, bytes, Mapping)):
        return [_serialize(item) for item in obj]
    return obj
