"""
Feature usage aggregation.

Screens and events are merged into one "feature" view keyed by name. Screens
are seeded first; an event whose name collides with a screen adds its count
to that entry and the per-user average is recomputed. Unique users take the
larger of the two sources because the overlap between them is unknown.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Sequence

from .dataset import SYSTEM_EVENT_NAMES, is_placeholder_name
from .models import (
    AnalyticsEvent,
    FeatureCategory,
    FeatureType,
    FeatureUsageDetail,
    FeatureUsageStats,
    ScreenView,
)

ACTION_MARKERS = ("login", "logout", "select_")
MENU_PREFIX = "menu_"

# Lifecycle events that say nothing about feature usage.
BOOTSTRAP_EVENT_NAMES = frozenset({"session_start", "app_update", "os_update", "first_open"})
TOP_FEATURES_LIMIT = 50


@dataclass(frozen=True)
class RelatedScreenPolicy:
    """
    Keyword heuristic linking menu/action features to screens.

    A screen is related when its lower-cased class name and the lower-cased
    feature name contain the same keyword, e.g. ``menu_document`` and
    ``DocumentViewController``.
    """

    keywords: Sequence[str] = ("document", "course", "dashboard", "audit", "communication")

    def matches(self, feature_name: str, screen_class: str) -> bool:
        feature = feature_name.lower()
        screen = screen_class.lower()
        return any(keyword in feature and keyword in screen for keyword in self.keywords)

    def related_screens(self, feature_name: str, screens: Iterable[ScreenView]) -> List[str]:
        related: List[str] = []
        for screen in screens:
            if screen.screen_class not in related and self.matches(feature_name, screen.screen_class):
                related.append(screen.screen_class)
        return related


DEFAULT_RELATED_SCREEN_POLICY = RelatedScreenPolicy()


def classify_feature_type(event_name: str) -> FeatureType:
    if event_name.startswith(MENU_PREFIX):
        return "menu"
    if any(marker in event_name for marker in ACTION_MARKERS):
        return "action"
    if event_name in SYSTEM_EVENT_NAMES:
        return "system"
    return "event"


def classify_feature_category(event_name: str) -> FeatureCategory:
    if event_name == "screen_view":
        return "screen"
    if event_name == "user_engagement":
        return "engagement"
    return "event"


def _merged_average(usage_count: int, unique_users: int) -> float:
    return usage_count / (unique_users or 1)


def aggregate_features(
    events: Sequence[AnalyticsEvent],
    screens: Sequence[ScreenView],
    policy: RelatedScreenPolicy = DEFAULT_RELATED_SCREEN_POLICY,
) -> List[FeatureUsageDetail]:
    """
    Build the detailed feature list, most used first.

    Features whose name collides with a screen keep the ``screen`` type.
    """

    features: Dict[str, FeatureUsageDetail] = {}

    for screen in screens:
        if is_placeholder_name(screen.screen_class):
            continue
        features[screen.screen_class] = FeatureUsageDetail(
            feature_name=screen.screen_class,
            feature_type="screen",
            usage_count=screen.views,
            unique_users=screen.active_users,
            avg_usage_per_user=screen.views_per_active_user,
            engagement_time=screen.avg_engagement_time,
        )

    for event in events:
        existing = features.get(event.event_name)
        if existing is not None:
            usage_count = existing.usage_count + event.event_count
            unique_users = max(existing.unique_users, event.total_users)
            features[event.event_name] = replace(
                existing,
                usage_count=usage_count,
                unique_users=unique_users,
                avg_usage_per_user=_merged_average(usage_count, unique_users),
            )
            continue
        if is_placeholder_name(event.event_name):
            continue
        features[event.event_name] = FeatureUsageDetail(
            feature_name=event.event_name,
            feature_type=classify_feature_type(event.event_name),
            usage_count=event.event_count,
            unique_users=event.total_users,
            avg_usage_per_user=event.event_count_per_user,
        )

    for name, feature in features.items():
        if feature.feature_type not in ("menu", "action"):
            continue
        related = policy.related_screens(name, screens)
        if related:
            features[name] = replace(feature, related_screens=tuple(related))

    return sorted(features.values(), key=lambda feature: feature.usage_count, reverse=True)


def top_features(
    events: Sequence[AnalyticsEvent],
    screens: Sequence[ScreenView],
    limit: int = TOP_FEATURES_LIMIT,
) -> List[FeatureUsageStats]:
    """Summary variant: three categories, lifecycle events dropped, capped at ``limit``."""

    features: Dict[str, FeatureUsageStats] = {}

    for screen in screens:
        if is_placeholder_name(screen.screen_class):
            continue
        features[screen.screen_class] = FeatureUsageStats(
            feature_name=screen.screen_class,
            category="screen",
            usage_count=screen.views,
            unique_users=screen.active_users,
            avg_usage_per_user=screen.views_per_active_user,
        )

    for event in events:
        if event.event_name in BOOTSTRAP_EVENT_NAMES:
            continue
        existing = features.get(event.event_name)
        if existing is not None:
            usage_count = existing.usage_count + event.event_count
            unique_users = max(existing.unique_users, event.total_users)
            features[event.event_name] = replace(
                existing,
                usage_count=usage_count,
                unique_users=unique_users,
                avg_usage_per_user=_merged_average(usage_count, unique_users),
            )
            continue
        if is_placeholder_name(event.event_name):
            continue
        features[event.event_name] = FeatureUsageStats(
            feature_name=event.event_name,
            category=classify_feature_category(event.event_name),
            usage_count=event.event_count,
            unique_users=event.total_users,
            avg_usage_per_user=event.event_count_per_user,
        )

    ranked = sorted(features.values(), key=lambda feature: feature.usage_count, reverse=True)
    return ranked[:limit]
