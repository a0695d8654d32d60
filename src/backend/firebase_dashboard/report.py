"""
Flat CSV-style text report.

The layout (section titles, column headers, per-section row caps and decimal
places) is consumed by spreadsheets that users already have set up, so it has
to stay byte-for-byte stable.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Iterable, List, Optional, Sequence

from .models import DashboardSummary

REPORT_TITLE = "Firebase Analytics Report"
DEFAULT_FOLDER = "default"

SCREEN_VIEW_ROWS = 30
ENGAGEMENT_ROWS = 30
FEATURE_DETAIL_ROWS = 50
TOP_FEATURE_ROWS = 30


def format_fixed(value: float, places: int) -> str:
    """Fixed-point text for ``value``, rounding half away from zero on its exact binary value."""

    exact = Decimal(value)
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # Every integer digit plus the requested places must fit.
        ctx.prec = max(ctx.prec, exact.adjusted() + places + 2)
        return str(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def _row(*fields: object) -> str:
    return ",".join(str(field) for field in fields)


def _section(title: str, header: str, rows: Iterable[str]) -> List[str]:
    return [title, header, *rows]


def _is_named_folder(folder: Optional[str]) -> bool:
    return bool(folder) and folder != DEFAULT_FOLDER


def build_csv_report(summary: DashboardSummary, folder: Optional[str] = None) -> str:
    named = _is_named_folder(folder)
    header: List[str] = [f"{REPORT_TITLE} - {folder}" if named else REPORT_TITLE]
    header.append(
        _row("Period", f"{summary.date_range.start_date.isoformat()} ~ {summary.date_range.end_date.isoformat()}")
    )
    if named:
        header.append(_row("Data Source", folder))

    sections: List[Sequence[str]] = [header]
    sections.append(
        _section(
            "SUMMARY",
            "Metric,Value",
            [
                _row("Total Active Users", summary.total_active_users),
                _row("Total Screen Views", summary.total_screen_views),
                _row("Total Events", summary.total_events),
                _row(
                    "Average Engagement Time (seconds)",
                    format_fixed(summary.engagement_analysis.avg_engagement_time, 2),
                ),
            ],
        )
    )
    sections.append(
        _section(
            "SCREEN VIEW ANALYSIS",
            "Screen Class,Views,Active Users,Views Per User,Avg Engagement Time (s)",
            (
                _row(
                    screen.screen_class,
                    screen.views,
                    screen.active_users,
                    format_fixed(screen.views_per_user, 2),
                    format_fixed(screen.avg_engagement_time, 1),
                )
                for screen in summary.screen_view_analysis.screen_view_breakdown[:SCREEN_VIEW_ROWS]
            ),
        )
    )
    sections.append(
        _section(
            "USER ENGAGEMENT ANALYSIS",
            "Screen Class,Engagements,Active Users,Avg Engagement Time (s)",
            (
                _row(
                    screen.screen_class,
                    screen.engagements,
                    screen.active_users,
                    format_fixed(screen.avg_engagement_time, 1),
                )
                for screen in summary.user_engagement_analysis.engagement_by_screen[:ENGAGEMENT_ROWS]
            ),
        )
    )
    sections.append(
        _section(
            "ALL EVENTS",
            "Event Name,Event Count,Total Users,Event Count Per User",
            (
                _row(event.event_name, event.event_count, event.total_users, format_fixed(event.event_count_per_user, 2))
                for event in summary.top_events
            ),
        )
    )
    sections.append(
        _section(
            "TOP SCREENS",
            "Screen Class,Views,Active Users,Views Per User,Avg Engagement Time (s)",
            (
                _row(
                    screen.screen_class,
                    screen.views,
                    screen.active_users,
                    format_fixed(screen.views_per_active_user, 2),
                    format_fixed(screen.avg_engagement_time, 1),
                )
                for screen in summary.top_screens
            ),
        )
    )
    sections.append(
        _section(
            "COMPREHENSIVE FEATURE USAGE",
            "Feature Name,Type,Usage Count,Unique Users,Avg Usage Per User,Engagement Time (s)",
            (
                _row(
                    feature.feature_name,
                    feature.feature_type,
                    feature.usage_count,
                    feature.unique_users,
                    format_fixed(feature.avg_usage_per_user, 2),
                    # Zero engagement time is left blank like a missing one.
                    format_fixed(feature.engagement_time, 1) if feature.engagement_time else "",
                )
                for feature in summary.feature_usage_details[:FEATURE_DETAIL_ROWS]
            ),
        )
    )
    sections.append(
        _section(
            "TOP FEATURES SUMMARY",
            "Feature Name,Category,Usage Count,Unique Users,Avg Usage Per User",
            (
                _row(
                    feature.feature_name,
                    feature.category,
                    feature.usage_count,
                    feature.unique_users,
                    format_fixed(feature.avg_usage_per_user, 2),
                )
                for feature in summary.top_features[:TOP_FEATURE_ROWS]
            ),
        )
    )

    return "\n\n".join("\n".join(section) for section in sections)


def report_filename(folder: Optional[str], timestamp_ms: int) -> str:
    prefix = f"{folder}-" if _is_named_folder(folder) else ""
    return f"analytics-report-{prefix}{timestamp_ms}.csv"
