"""
Shared fixtures: synthetic Firebase Analytics exports written to tmp dirs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pytest

OVERVIEW_CSV = """\
# ----------------------------------------
# Firebase overview
# ----------------------------------------
#
# All Users
# Start date: 20240101
# End date: 20240103
Nth day,30 days,7 days,1 day
1,10,5,2
2,12,6,3
3,15,7,1

# ----------------------------------------
# Firebase overview
# ----------------------------------------
#
# All Users
# Start date: 20240101
# End date: 20240103
Nth day,New users
1,4
2,1
"""

EVENTS_CSV = """\
# ----------------------------------------
# Events: Event name
# ----------------------------------------
#
# All Users
# Start date: 20240101
# End date: 20240103
Event name,Event count,Total users,Event count per active user,Total revenue
screen_view,500,300,1.67,0
user_engagement,320,250,1.28,0
menu_settings,20,15,1.33,0
menu_document_list,40,22,1.82,0
select_course,12,9,1.33,0
session_start,200,180,1.11,0
login_success,30,28,1.07,0
HomeScreen,50,350,0.14,0

# ----------------------------------------
# Events: Event name
# ----------------------------------------
#
# Start date: 20240101
# End date: 20240103
Nth day,Event count
1,100
"""

SCREENS_CSV = """\
# ----------------------------------------
# Pages and screens: Page title and screen class
# ----------------------------------------
#
# All Users
# Start date: 20240101
# End date: 20240103
Page title and screen class,Views,Active users,Views per active user,Average engagement time per active user,Event count,Key events,Total revenue
HomeScreen,500,300,1.67,45.2,500,0,0
DocumentViewController,120,60,2,30.5,150,1,0
CourseListScreen,80,40,2,12.25,0,0,0
(not set),70,20,3.5,4,10,0,0
(other),5,5,1,1,1,0,0
"""


def write_export_folder(
    folder: Path,
    overview: Optional[str] = OVERVIEW_CSV,
    events: Optional[str] = EVENTS_CSV,
    screens: Optional[str] = SCREENS_CSV,
    overview_name: str = "Firebase_overview.csv",
    events_name: str = "Events_Event_name1.csv",
    screens_name: str = "Pages_and_screens_Page_title_and_screen_class1.csv",
) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    if overview is not None:
        (folder / overview_name).write_text(overview, encoding="utf-8")
    if events is not None:
        (folder / events_name).write_text(events, encoding="utf-8")
    if screens is not None:
        (folder / screens_name).write_text(screens, encoding="utf-8")
    return folder


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture()
def export_folder(data_dir: Path) -> Path:
    """A complete export set under ``data/default``."""
    return write_export_folder(data_dir / "default")


@pytest.fixture()
def make_export_folder(data_dir: Path) -> Callable[..., Path]:
    def _make(name: str, **kwargs) -> Path:
        return write_export_folder(data_dir / name, **kwargs)

    return _make
