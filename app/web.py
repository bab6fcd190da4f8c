from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.api import get_aggregator, get_source
from datasource.readings import ReadingSource
from services.aggregator import Aggregator, InvalidArgument, Window
from services.params import parse_window


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    window: Optional[str] = None,
    source: ReadingSource = Depends(get_source),
    aggregator: Aggregator = Depends(get_aggregator),
) -> HTMLResponse:
    try:
        selected = parse_window(window) if window else Window.last_day
    except InvalidArgument as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    buckets = aggregator.select_by_window(source.get_all_readings(), selected)
    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "windows": list(Window),
            "selected": selected,
            "since": aggregator.window_start(selected),
            "buckets": buckets,
        },
    )
