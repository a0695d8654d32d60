from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from .models import AnalyticsEvent, DailyActiveUsers, ScreenView

# Firebase buckets unattributed and long-tail traffic under these screen classes.
PLACEHOLDER_NAMES = frozenset({"(not set)", "(other)"})

SYSTEM_EVENT_NAMES = (
    "screen_view",
    "user_engagement",
    "session_start",
    "app_update",
    "os_update",
    "first_open",
)


def is_placeholder_name(name: str) -> bool:
    """Blank names and Firebase's "(not set)" / "(other)" buckets, for screens and events alike."""

    return not name or name in PLACEHOLDER_NAMES


@dataclass
class AnalyticsDataset:
    """
    The three typed record sets loaded from one export folder.

    Records keep the order of the source files; every ranking helper uses a
    stable sort so ties stay in file order.
    """

    events: Sequence[AnalyticsEvent]
    screens: Sequence[ScreenView]
    daily: Sequence[DailyActiveUsers] = ()

    def __post_init__(self) -> None:
        self.events = tuple(self.events)
        self.screens = tuple(self.screens)
        self.daily = tuple(self.daily)

    def find_event(self, event_name: str) -> Optional[AnalyticsEvent]:
        for event in self.events:
            if event.event_name == event_name:
                return event
        return None

    def iter_named_screens(self) -> Iterator[ScreenView]:
        """Yield screens other than Firebase's ``(not set)``/``(other)`` buckets."""

        for screen in self.screens:
            if not is_placeholder_name(screen.screen_class):
                yield screen

    def total_screen_views(self) -> int:
        return sum(screen.views for screen in self.screens)

    def total_event_count(self) -> int:
        return sum(event.event_count for event in self.events)

    def screens_by_views(self, limit: Optional[int] = None) -> Sequence[ScreenView]:
        ranked = sorted(self.screens, key=lambda screen: screen.views, reverse=True)
        return tuple(ranked[:limit] if limit is not None else ranked)

    def screens_by_engagement_time(self, limit: Optional[int] = None) -> Sequence[ScreenView]:
        ranked = sorted(self.screens, key=lambda screen: screen.avg_engagement_time, reverse=True)
        return tuple(ranked[:limit] if limit is not None else ranked)

    def screens_by_active_users(self, limit: Optional[int] = None) -> Sequence[ScreenView]:
        ranked = sorted(self.screens, key=lambda screen: screen.active_users, reverse=True)
        return tuple(ranked[:limit] if limit is not None else ranked)

    def events_by_count(self) -> Sequence[AnalyticsEvent]:
        return tuple(sorted(self.events, key=lambda event: event.event_count, reverse=True))

    def events_by_users(self) -> Sequence[AnalyticsEvent]:
        return tuple(sorted(self.events, key=lambda event: event.total_users, reverse=True))
