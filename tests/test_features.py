"""
Feature merge, classification, related-screen discovery and ranking.
"""

from __future__ import annotations

import itertools

import pytest

from backend.firebase_dashboard.dataset import is_placeholder_name
from backend.firebase_dashboard.features import (
    RelatedScreenPolicy,
    aggregate_features,
    classify_feature_category,
    classify_feature_type,
    top_features,
)
from backend.firebase_dashboard.models import AnalyticsEvent, ScreenView


def _screen(name: str, views: int, users: int, per_user: float = 1.0, engagement: float = 10.0) -> ScreenView:
    return ScreenView(
        screen_class=name,
        views=views,
        active_users=users,
        views_per_active_user=per_user,
        avg_engagement_time=engagement,
        event_count=views,
        key_events=0,
    )


def _event(name: str, count: int, users: int, per_user: float = 1.0) -> AnalyticsEvent:
    return AnalyticsEvent(event_name=name, event_count=count, total_users=users, event_count_per_user=per_user)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("menu_settings", "menu"),
        ("menu_login", "menu"),
        ("login_success", "action"),
        ("user_logout", "action"),
        ("select_course", "action"),
        ("screen_view", "system"),
        ("first_open", "system"),
        ("purchase", "event"),
    ],
)
def test_classify_feature_type(name, expected):
    assert classify_feature_type(name) == expected


def test_classify_feature_category():
    assert classify_feature_category("screen_view") == "screen"
    assert classify_feature_category("user_engagement") == "engagement"
    assert classify_feature_category("menu_settings") == "event"


def test_distinct_screen_and_event_names_stay_separate():
    features = aggregate_features(
        events=[_event("screen_view", 500, 300, 1.67), _event("menu_settings", 20, 15, 1.33)],
        screens=[_screen("HomeScreen", 500, 300, 1.67, 45.2)],
    )
    by_name = {feature.feature_name: feature for feature in features}

    assert by_name["HomeScreen"].feature_type == "screen"
    assert by_name["HomeScreen"].usage_count == 500
    assert by_name["HomeScreen"].engagement_time == pytest.approx(45.2)
    assert by_name["menu_settings"].feature_type == "menu"
    assert by_name["menu_settings"].usage_count == 20
    assert by_name["menu_settings"].engagement_time is None
    assert by_name["screen_view"].feature_type == "system"


def test_colliding_names_merge_counts_and_keep_screen_type():
    features = aggregate_features(
        events=[_event("Checkout", 30, 50, 0.6)],
        screens=[_screen("Checkout", 90, 40, 2.25, 12.0)],
    )
    assert len(features) == 1
    merged = features[0]
    assert merged.feature_type == "screen"
    assert merged.usage_count == 120
    assert merged.unique_users == 50
    assert merged.avg_usage_per_user == pytest.approx(120 / 50)
    assert merged.engagement_time == pytest.approx(12.0)


def test_merge_with_zero_users_does_not_divide_by_zero():
    features = aggregate_features(events=[_event("Orphan", 4, 0)], screens=[_screen("Orphan", 3, 0)])
    assert features[0].avg_usage_per_user == pytest.approx(7.0)


@pytest.mark.parametrize("name", ["(not set)", "(other)"])
def test_placeholder_names_never_become_features(name):
    features = aggregate_features(events=[_event(name, 999, 9)], screens=[_screen(name, 999, 9)])
    assert features == []
    assert top_features(events=[_event(name, 999, 9)], screens=[_screen(name, 999, 9)]) == []


def test_placeholder_check_applies_to_event_names():
    assert is_placeholder_name("")
    assert is_placeholder_name("(other)")
    assert not is_placeholder_name("menu_x")
    assert not is_placeholder_name("HomeScreen")


def test_related_screens_for_menu_and_action_features():
    screens = [
        _screen("DocumentViewController", 50, 10),
        _screen("DocumentListScreen", 40, 10),
        _screen("CourseDetail", 30, 10),
        _screen("Settings", 20, 10),
    ]
    events = [
        _event("menu_document", 15, 5),
        _event("select_course_item", 12, 5),
        _event("menu_settings", 11, 5),
        _event("document_opened", 10, 5),
    ]
    by_name = {feature.feature_name: feature for feature in aggregate_features(events, screens)}

    assert by_name["menu_document"].related_screens == ("DocumentViewController", "DocumentListScreen")
    assert by_name["select_course_item"].related_screens == ("CourseDetail",)
    assert by_name["menu_settings"].related_screens is None
    # Plain events never get related screens even when a keyword matches.
    assert by_name["document_opened"].related_screens is None


def test_related_screens_are_deduplicated():
    screens = [_screen("AuditLog", 5, 1), _screen("AuditLog", 4, 1)]
    features = aggregate_features([_event("menu_audit", 50, 5)], screens)
    menu = next(feature for feature in features if feature.feature_name == "menu_audit")
    assert menu.related_screens == ("AuditLog",)


def test_related_screen_policy_is_pluggable():
    policy = RelatedScreenPolicy(keywords=("settings",))
    features = aggregate_features([_event("menu_settings", 9, 3)], [_screen("SettingsScreen", 1, 1)], policy=policy)
    menu = next(feature for feature in features if feature.feature_name == "menu_settings")
    assert menu.related_screens == ("SettingsScreen",)


def test_features_sorted_by_usage_with_stable_ties():
    features = aggregate_features(
        events=[_event("b_event", 10, 1), _event("c_event", 30, 1)],
        screens=[_screen("AScreen", 10, 1), _screen("ZScreen", 50, 1)],
    )
    assert [feature.feature_name for feature in features] == ["ZScreen", "c_event", "AScreen", "b_event"]


def test_event_order_does_not_change_the_result():
    screens = [_screen("Home", 100, 40), _screen("Profile", 35, 20)]
    events = [
        _event("Home", 7, 50),
        _event("menu_profile", 21, 9),
        _event("purchase", 3, 2),
        _event("login", 64, 30),
    ]
    expected = aggregate_features(events, screens)
    for permutation in itertools.permutations(events):
        assert aggregate_features(list(permutation), screens) == expected


def test_top_features_excludes_bootstrap_events_and_uses_categories():
    events = [
        _event("screen_view", 500, 300),
        _event("user_engagement", 320, 250),
        _event("session_start", 200, 180),
        _event("first_open", 30, 30),
        _event("menu_settings", 20, 15),
    ]
    stats = top_features(events, [_screen("HomeScreen", 400, 300)])
    categories = {stat.feature_name: stat.category for stat in stats}

    assert categories == {
        "screen_view": "screen",
        "HomeScreen": "screen",
        "user_engagement": "engagement",
        "menu_settings": "event",
    }
    assert [stat.feature_name for stat in stats][:2] == ["screen_view", "HomeScreen"]


def test_top_features_is_capped():
    events = [_event(f"event_{index}", index, 1) for index in range(80)]
    stats = top_features(events, [])
    assert len(stats) == 50
    assert stats[0].feature_name == "event_79"
    assert stats[-1].feature_name == "event_30"
