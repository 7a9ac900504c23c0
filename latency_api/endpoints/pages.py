"""Páginas estáticas del dashboard."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse, HTMLResponse

router = APIRouter(tags=["pages"], include_in_schema=False)

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

INDEX_HTML = """
<h1>Latency Dashboard</h1>
<ul>
  <li><a href="/latency-heatmap">Latency Heatmap</a></li>
  <li><a href="/latency">Latency Time Series</a></li>
</ul>
"""


@router.get("/", response_class=HTMLResponse)
def index():
    return INDEX_HTML


@router.get("/latency-heatmap")
def latency_heatmap():
    return FileResponse(STATIC_DIR / "heatmap.html", media_type="text/html")


@router.get("/latency")
def latency_timeseries():
    return FileResponse(STATIC_DIR / "latency.html", media_type="text/html")
