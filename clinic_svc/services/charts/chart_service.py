"""
Service layer for dashboard charts.

Architecture:
    API Layer (routers) → ChartService → ChartRepository → Database
                          ChartService → ChartFigureBuilder (Plotly)

Stored charts are loosely typed; every read applies the documented
defaults (title, type, active flag, colour scheme).
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import plotly.io as pio

from core.content_catalog import get_catalog
from core.datetime_utils import utc_now, format_iso, parse_document_datetime
from core.exceptions import DocumentNotFoundError, InvalidDocumentError
from repositories import ChartRepository
from schemas import ChartCreate, ChartUpdate, ChartResponse, ChartStats
from services.charts.plotly_builder import ChartFigureBuilder

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled Chart"
DEFAULT_TYPE = "bar"


def with_defaults(document: Dict[str, Any]) -> ChartResponse:
    """Chart document as a response with missing fields defaulted."""
    created = parse_document_datetime(document.get("createdAt"))
    updated = parse_document_datetime(document.get("lastUpdated"))
    return ChartResponse(
        id=document["id"],
        title=document.get("title") or DEFAULT_TITLE,
        type=document.get("type") or DEFAULT_TYPE,
        data=document.get("data") or [],
        description=document.get("description") or "",
        category=document.get("category") or "",
        isActive=document.get("isActive", True),
        colorScheme=document.get("colorScheme") or list(get_catalog().chart_palette),
        createdAt=format_iso(created) if created else None,
        lastUpdated=format_iso(updated) if updated else None,
    )


class ChartService:
    """
    Service for chart CRUD, statistics and figure rendering.
    """

    def __init__(
        self,
        chart_repository: ChartRepository,
        figure_builder: Optional[ChartFigureBuilder] = None,
        now: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize ChartService.

        Args:
            chart_repository: Repository for chart documents.
            figure_builder: Optional builder for Plotly figure construction.
                            If not provided, a default instance is created.
            now: Clock used for createdAt/lastUpdated.
        """
        self._repo = chart_repository
        self._builder = figure_builder or ChartFigureBuilder()
        self._now = now

    def _get(self, chart_id: str) -> Dict[str, Any]:
        document = self._repo.get(chart_id)
        if document is None:
            raise DocumentNotFoundError(ChartRepository.COLLECTION, chart_id)
        return document

    @staticmethod
    def _check_palette(colors: Optional[List[str]]) -> None:
        if colors is not None and not colors:
            raise InvalidDocumentError("colorScheme must contain at least one colour")

    def list_charts(self, category: str = "all") -> List[ChartResponse]:
        """Charts with defaults applied, most recently updated first."""
        charts = [with_defaults(d) for d in self._repo.list_all()]
        if category not in ("", "all"):
            charts = [c for c in charts if c.category == category]
        dated = [c for c in charts if c.lastUpdated]
        undated = [c for c in charts if not c.lastUpdated]
        dated.sort(key=lambda c: c.lastUpdated, reverse=True)
        return dated + undated

    def categories(self) -> List[str]:
        return sorted({c.category for c in self.list_charts() if c.category})

    def stats(self) -> ChartStats:
        charts = self.list_charts()
        by_type = {t: 0 for t in get_catalog().chart_types}
        for chart in charts:
            by_type[chart.type] = by_type.get(chart.type, 0) + 1
        return ChartStats(
            total=len(charts),
            active=sum(1 for c in charts if c.isActive),
            by_type=by_type,
            latest_update=charts[0].lastUpdated if charts else None,
        )

    def get_chart(self, chart_id: str) -> ChartResponse:
        return with_defaults(self._get(chart_id))

    def create_chart(self, chart: ChartCreate) -> ChartResponse:
        self._check_palette(chart.colorScheme)
        now = format_iso(self._now())
        document = chart.model_dump()
        if document["colorScheme"] is None:
            document["colorScheme"] = list(get_catalog().chart_palette)
        document.update(createdAt=now, lastUpdated=now)
        created = self._repo.add(document)
        logger.info("Chart created", extra={"chart_id": created["id"], "chart_type": chart.type})
        return with_defaults(created)

    def update_chart(self, chart_id: str, update: ChartUpdate) -> ChartResponse:
        """Merge the given fields and touch lastUpdated."""
        self._get(chart_id)
        changes = update.model_dump(exclude_unset=True, exclude_none=True)
        self._check_palette(changes.get("colorScheme"))
        changes["lastUpdated"] = format_iso(self._now())
        return with_defaults(self._repo.update(chart_id, changes))

    def delete_chart(self, chart_id: str) -> None:
        if not self._repo.delete(chart_id):
            raise DocumentNotFoundError(ChartRepository.COLLECTION, chart_id)

    # =========================================================================
    # FIGURES
    # =========================================================================

    def build_figure(self, chart_id: str):
        """Plotly figure for a stored chart."""
        chart = self.get_chart(chart_id)
        fig = self._builder.create_figure()
        if not chart.data:
            self._builder.apply_empty_layout(fig, chart.title)
            return fig
        self._builder.add_traces(fig, chart.type, chart.data, chart.colorScheme)
        self._builder.apply_layout(fig, chart.title, chart.description)
        return fig

    def figure_json(self, chart_id: str) -> str:
        return pio.to_json(self.build_figure(chart_id))

    def figure_html(self, chart_id: str) -> str:
        return pio.to_html(
            self.build_figure(chart_id),
            include_plotlyjs="cdn",
            config=self._builder.get_config(),
            div_id="clinic-chart",
        )
