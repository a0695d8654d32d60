from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Literal, Optional, Tuple

from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .config import DashboardConfig, load_dashboard_config
from .errors import DatasetNotFoundError, MalformedDateRangeError
from .locator import is_folder_name, list_dataset_folders
from .report import report_filename
from .repository import build_repository_from_env
from .service import TOP_SCREENS_LIMIT, AnalyticsDashboardService

config: DashboardConfig = load_dashboard_config()
logging.basicConfig(level=config.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Firebase Analytics Dashboard API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class FoldersResponse(BaseModel):
    folders: List[str]


class AnalyticsResponse(BaseModel):
    data: Dict[str, Any]
    folder: str


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/analytics/folders", response_model=FoldersResponse)
def folders_endpoint() -> FoldersResponse:
    return FoldersResponse(folders=list_dataset_folders(config.data_dir))


@app.get("/analytics", response_model=AnalyticsResponse)
def analytics_endpoint(folder: Optional[str] = None) -> AnalyticsResponse:
    service, name = _service_for(folder)
    summary = _run(service.build_summary)
    return AnalyticsResponse(data=summary.as_dict(), folder=name)


@app.get("/analytics/screens", response_model=AnalyticsResponse)
def screens_endpoint(
    folder: Optional[str] = None,
    limit: int = Query(TOP_SCREENS_LIMIT, ge=1, le=500),
) -> AnalyticsResponse:
    service, name = _service_for(folder)
    rankings = _run(service.screen_rankings, limit)
    return AnalyticsResponse(data=rankings.as_dict(), folder=name)


@app.get("/analytics/events", response_model=AnalyticsResponse)
def events_endpoint(folder: Optional[str] = None) -> AnalyticsResponse:
    service, name = _service_for(folder)
    breakdown = _run(service.event_breakdown)
    return AnalyticsResponse(data=breakdown.as_dict(), folder=name)


@app.get("/analytics/report")
def report_endpoint(
    folder: Optional[str] = None,
    format: Literal["csv"] = "csv",
) -> Response:
    service, name = _service_for(folder)
    report = _run(service.generate_report, name)
    filename = report_filename(name, int(time.time() * 1000))
    return Response(
        content=report.csv_data,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _service_for(folder: Optional[str]) -> Tuple[AnalyticsDashboardService, str]:
    if folder and not is_folder_name(folder):
        logger.warning("Rejected folder argument %r", folder)
        raise HTTPException(status_code=400, detail="Invalid folder name")
    try:
        repository, name = build_repository_from_env(folder, config)
    except DatasetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return AnalyticsDashboardService(repository), name


def _run(func, *args):
    try:
        return func(*args)
    except DatasetNotFoundError as exc:
        logger.warning("Dataset incomplete: %s", exc)
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except MalformedDateRangeError as exc:
        logger.warning("Unusable overview export: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc
