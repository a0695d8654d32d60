from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import DashboardConfig, load_dashboard_config
from .errors import DatasetNotFoundError, MalformedDateRangeError
from .locator import EVENTS_PATTERN, OVERVIEW_PATTERN, SCREENS_PATTERN, CSVFileLocator, PathLike, resolve_folder
from .models import AnalyticsEvent, DailyActiveUsers, DateRange, ScreenView
from .parser import Row, read_section

logger = logging.getLogger(__name__)

START_DATE_RE = re.compile(r"Start date: (\d{8})")
END_DATE_RE = re.compile(r"End date: (\d{8})")
DEFAULT_LOOKBACK_DAYS = 30


def to_int(raw: Optional[str]) -> int:
    """Integer text as-is, float text truncated toward zero; anything else becomes 0."""

    text = (raw or "").strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return 0
    if math.isnan(value) or math.isinf(value):
        return 0
    return int(value)


def to_float(raw: Optional[str]) -> float:
    text = (raw or "").strip()
    if not text:
        return 0.0
    try:
        value = float(text)
    except ValueError:
        return 0.0
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def _parse_compact_date(value: str) -> date:
    return datetime.strptime(value, "%Y%m%d").date()


def extract_date_range(content: str) -> Optional[DateRange]:
    """Read the ``Start date: YYYYMMDD``/``End date: YYYYMMDD`` comments, if present."""

    start_match = START_DATE_RE.search(content)
    end_match = END_DATE_RE.search(content)
    if not start_match or not end_match:
        return None
    try:
        return DateRange(
            start_date=_parse_compact_date(start_match.group(1)),
            end_date=_parse_compact_date(end_match.group(1)),
        )
    except ValueError:
        return None


def _days_between(date_range: DateRange) -> List[date]:
    span = (date_range.end_date - date_range.start_date).days
    return [date_range.start_date + timedelta(days=offset) for offset in range(span + 1)]


def _fallback_date_range(today: Optional[date] = None) -> DateRange:
    end = today or date.today()
    return DateRange(start_date=end - timedelta(days=DEFAULT_LOOKBACK_DAYS), end_date=end)


class AnalyticsDataRepository:
    """
    Interface for loading the typed record sets of one export folder.

    Loaders raise when their file is missing; numeric fields never do.
    """

    def load_overview(self) -> Sequence[DailyActiveUsers]:
        raise NotImplementedError

    def load_screen_views(self) -> Sequence[ScreenView]:
        raise NotImplementedError

    def load_events(self) -> Sequence[AnalyticsEvent]:
        raise NotImplementedError

    def get_default_date_range(self, today: Optional[date] = None) -> DateRange:
        raise NotImplementedError


class CSVAnalyticsRepository(AnalyticsDataRepository):
    """
    Load Firebase Analytics CSV exports from a single project folder.

    Expected files (case-insensitive, optional numeric suffix):
      - Firebase_overview*.csv
      - Events_Event_name*.csv
      - Pages_and_screens_Page_title_and_screen_class*.csv
    """

    def __init__(self, folder: PathLike):
        self.folder = Path(folder)
        self.locator = CSVFileLocator(self.folder)

    def load_overview(self) -> Sequence[DailyActiveUsers]:
        path = self._require(OVERVIEW_PATTERN)
        records = read_section(path, "30 days")

        date_range = extract_date_range(path.read_text(encoding="utf-8-sig"))
        if date_range is None:
            raise MalformedDateRangeError(f"Could not extract date range from {path.name}")

        rows = [record for record in records if record.get("Nth day") and record.get("30 days")]
        # Row i belongs to day i; surplus rows or days are left unmatched.
        return tuple(
            DailyActiveUsers(
                date=day,
                active_users_1_day=to_int(row.get("1 day")),
                active_users_7_days=to_int(row.get("7 days")),
                active_users_30_days=to_int(row.get("30 days")),
            )
            for row, day in zip(rows, _days_between(date_range))
        )

    def load_screen_views(self) -> Sequence[ScreenView]:
        path = self._require(f"{SCREENS_PATTERN}1", SCREENS_PATTERN)
        records = read_section(path, "Page title and screen class")
        return tuple(
            self._row_to_screen(record)
            for record in records
            if record.get("Page title and screen class") and record.get("Views")
        )

    def load_events(self) -> Sequence[AnalyticsEvent]:
        path = self._require(f"{EVENTS_PATTERN}1", EVENTS_PATTERN)
        records = read_section(path, "Event name")
        return tuple(
            self._row_to_event(record)
            for record in records
            if record.get("Event name") and record.get("Event count")
        )

    def get_default_date_range(self, today: Optional[date] = None) -> DateRange:
        """
        Date range for display framing.

        Unlike ``load_overview`` this never raises: a missing file or missing
        comments give the last 30 days ending ``today``.
        """

        path = self.locator.locate(OVERVIEW_PATTERN)
        if path is None:
            logger.warning("No overview export in %s, using the last %d days", self.folder, DEFAULT_LOOKBACK_DAYS)
            return _fallback_date_range(today)
        try:
            date_range = extract_date_range(path.read_text(encoding="utf-8-sig"))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read %s: %s", path, exc)
            date_range = None
        if date_range is None:
            logger.warning("No date range comments in %s, using the last %d days", path.name, DEFAULT_LOOKBACK_DAYS)
            return _fallback_date_range(today)
        return date_range

    def _require(self, *patterns: str) -> Path:
        path = self.locator.locate_first(*patterns)
        if path is None:
            raise DatasetNotFoundError(f"File not found: {patterns[-1]}*.csv in {self.folder}")
        logger.debug("Using %s for %s", path.name, patterns[-1])
        return path

    @staticmethod
    def _row_to_screen(row: Row) -> ScreenView:
        return ScreenView(
            screen_class=row.get("Page title and screen class", ""),
            views=to_int(row.get("Views")),
            active_users=to_int(row.get("Active users")),
            views_per_active_user=to_float(row.get("Views per active user")),
            avg_engagement_time=to_float(row.get("Average engagement time per active user")),
            event_count=to_int(row.get("Event count")),
            key_events=to_int(row.get("Key events")),
            total_revenue=to_float(row.get("Total revenue")),
        )

    @staticmethod
    def _row_to_event(row: Row) -> AnalyticsEvent:
        return AnalyticsEvent(
            event_name=row.get("Event name", ""),
            event_count=to_int(row.get("Event count")),
            total_users=to_int(row.get("Total users")),
            event_count_per_user=to_float(row.get("Event count per active user")),
            total_revenue=to_float(row.get("Total revenue")),
        )


def build_repository_from_env(
    folder: Optional[str] = None,
    config: Optional[DashboardConfig] = None,
) -> Tuple[CSVAnalyticsRepository, str]:
    """
    Resolve ``folder`` against the configured data directory.

    Returns the repository together with the folder name the request ended up
    using. A folder that does not exist raises ``DatasetNotFoundError``.
    """

    cfg = config or load_dashboard_config()
    name = folder or cfg.default_folder
    path = resolve_folder(name, cfg.data_dir, cfg.default_folder)
    if not path.is_dir():
        raise DatasetNotFoundError(f"Data folder not found: {path}")
    return CSVAnalyticsRepository(path), name
