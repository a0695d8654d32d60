from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from .dataset import SYSTEM_EVENT_NAMES, AnalyticsDataset
from .features import aggregate_features, top_features
from .models import (
    AnalyticsReport,
    DashboardSummary,
    EngagementAnalysis,
    EngagementByScreen,
    EventBreakdown,
    ScreenRankings,
    ScreenViewAnalysis,
    ScreenViewBreakdown,
    UserEngagementAnalysis,
)
from .report import build_csv_report
from .repository import AnalyticsDataRepository

logger = logging.getLogger(__name__)

TOP_SCREENS_LIMIT = 20
ENGAGEMENT_TOP_SCREENS_LIMIT = 10


class AnalyticsDashboardService:
    """
    Turns the record sets of one export folder into dashboard aggregates.

    Every public method reads the files again; nothing is cached between
    calls.
    """

    def __init__(self, repository: AnalyticsDataRepository) -> None:
        self.repository = repository

    def build_summary(self, today: Optional[date] = None) -> DashboardSummary:
        daily = self.repository.load_overview()
        dataset = AnalyticsDataset(
            events=self.repository.load_events(),
            screens=self.repository.load_screen_views(),
            daily=daily,
        )
        date_range = self.repository.get_default_date_range(today=today)

        # screen_view's user total is the closest thing to distinct active users for the period.
        screen_view_event = dataset.find_event("screen_view")
        total_active_users = screen_view_event.total_users if screen_view_event else 0

        summary = DashboardSummary(
            total_active_users=total_active_users,
            total_screen_views=dataset.total_screen_views(),
            total_events=dataset.total_event_count(),
            top_features=tuple(top_features(dataset.events, dataset.screens)),
            top_screens=dataset.screens_by_views(TOP_SCREENS_LIMIT),
            top_events=dataset.events_by_count(),
            engagement_analysis=self._build_engagement_analysis(dataset),
            daily_data=dataset.daily,
            date_range=date_range,
            screen_view_analysis=self._build_screen_view_analysis(dataset),
            user_engagement_analysis=self._build_user_engagement_analysis(dataset),
            feature_usage_details=tuple(aggregate_features(dataset.events, dataset.screens)),
        )
        logger.info(
            "Built summary: %d days, %d screens, %d events, %d features",
            len(summary.daily_data),
            len(dataset.screens),
            len(dataset.events),
            len(summary.feature_usage_details),
        )
        return summary

    def screen_rankings(self, limit: int = TOP_SCREENS_LIMIT) -> ScreenRankings:
        dataset = AnalyticsDataset(events=(), screens=self.repository.load_screen_views())
        return ScreenRankings(
            top_screens=dataset.screens_by_views(limit),
            screens_by_engagement=dataset.screens_by_engagement_time(limit),
            screens_by_users=dataset.screens_by_active_users(limit),
        )

    def event_breakdown(self) -> EventBreakdown:
        dataset = AnalyticsDataset(events=self.repository.load_events(), screens=())
        return EventBreakdown(
            custom_events=tuple(e for e in dataset.events if e.event_name not in SYSTEM_EVENT_NAMES),
            system_events=tuple(e for e in dataset.events if e.event_name in SYSTEM_EVENT_NAMES),
            events_by_users=dataset.events_by_users(),
        )

    def generate_report(self, folder: Optional[str] = None, today: Optional[date] = None) -> AnalyticsReport:
        summary = self.build_summary(today=today)
        return AnalyticsReport(summary=summary, csv_data=build_csv_report(summary, folder))

    @staticmethod
    def _build_engagement_analysis(dataset: AnalyticsDataset) -> EngagementAnalysis:
        total_engagements = sum(screen.event_count for screen in dataset.screens)
        total_users = sum(screen.active_users for screen in dataset.screens)
        weighted_time = sum(screen.avg_engagement_time * screen.active_users for screen in dataset.screens)
        return EngagementAnalysis(
            total_engagements=total_engagements,
            avg_engagement_time=weighted_time / total_users if total_users > 0 else 0.0,
            top_screens=dataset.screens_by_engagement_time(ENGAGEMENT_TOP_SCREENS_LIMIT),
            engagement_by_screen={screen.screen_class: screen.avg_engagement_time for screen in dataset.screens},
        )

    @staticmethod
    def _build_screen_view_analysis(dataset: AnalyticsDataset) -> ScreenViewAnalysis:
        screen_view_event = dataset.find_event("screen_view")
        breakdown = [
            ScreenViewBreakdown(
                screen_class=screen.screen_class,
                views=screen.views,
                active_users=screen.active_users,
                avg_engagement_time=screen.avg_engagement_time,
                views_per_user=screen.views_per_active_user,
            )
            for screen in dataset.iter_named_screens()
        ]
        breakdown.sort(key=lambda row: row.views, reverse=True)
        return ScreenViewAnalysis(
            total_screen_views=screen_view_event.event_count if screen_view_event else 0,
            screen_view_breakdown=tuple(breakdown),
        )

    @staticmethod
    def _build_user_engagement_analysis(dataset: AnalyticsDataset) -> UserEngagementAnalysis:
        engagement_event = dataset.find_event("user_engagement")
        # A screen's event count includes its user_engagement hits.
        by_screen = [
            EngagementByScreen(
                screen_class=screen.screen_class,
                engagements=screen.event_count,
                active_users=screen.active_users,
                avg_engagement_time=screen.avg_engagement_time,
            )
            for screen in dataset.iter_named_screens()
            if screen.event_count > 0
        ]
        by_screen.sort(key=lambda row: row.engagements, reverse=True)
        if engagement_event is None:
            return UserEngagementAnalysis(
                total_engagements=0,
                total_users=0,
                avg_engagements_per_user=0.0,
                engagement_by_screen=tuple(by_screen),
            )
        return UserEngagementAnalysis(
            total_engagements=engagement_event.event_count,
            total_users=engagement_event.total_users,
            avg_engagements_per_user=engagement_event.event_count_per_user,
            engagement_by_screen=tuple(by_screen),
        )
