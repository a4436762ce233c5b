"""
Meta router - clinic vocabulary endpoints.

This router exposes the content catalog (catalog.yaml) so the dashboard
front end can build its category pickers, stage selectors and template
lists without hardcoding them:
- Single source of truth: catalog.yaml
- API endpoint exposes the vocabulary
- Front end fetches and caches it

No authentication required for read-only metadata access.
"""
import logging
from typing import Any, Dict, List

from fastapi import APIRouter
from pydantic import BaseModel

from core.content_catalog import get_catalog, CatalogEntry
from core.pregnancy import (
    TRIMESTER_LABELS,
    FIRST_TRIMESTER_END,
    SECOND_TRIMESTER_END,
    THIRD_TRIMESTER_END,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/meta",
    tags=["Metadata"],
    # No authentication - these are public read-only endpoints
)


# =============================================================================
# RESPONSE MODELS
# =============================================================================

class CatalogEntryResponse(BaseModel):
    id: str
    name: str


class TemplateSeedResponse(BaseModel):
    name: str
    category: str
    message: str


class CatalogResponse(BaseModel):
    """The full clinic vocabulary."""
    broadcast_categories: List[CatalogEntryResponse]
    tip_stages: List[CatalogEntryResponse]
    tip_categories: List[str]
    risk_levels: List[str]
    notification_statuses: List[str]
    notification_types: List[str]
    reminder_timings: List[int]
    default_settings: Dict[str, Any]
    default_templates: List[TemplateSeedResponse]
    chart_types: List[str]
    chart_palette: List[str]
    trimesters: List[str]


def _entries(entries: List[CatalogEntry]) -> List[CatalogEntryResponse]:
    return [CatalogEntryResponse(id=e.id, name=e.name) for e in entries]


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/catalog",
    response_model=CatalogResponse,
    summary="Clinic vocabulary",
    description="Broadcast categories, tip stages, risk levels, default templates and "
                "settings, chart types and palette, and trimester labels."
)
async def get_catalog_definitions() -> CatalogResponse:
    catalog = get_catalog()
    return CatalogResponse(
        broadcast_categories=_entries(catalog.broadcast_categories),
        tip_stages=_entries(catalog.tip_stages),
        tip_categories=list(catalog.tip_categories),
        risk_levels=list(catalog.risk_levels),
        notification_statuses=list(catalog.notification_statuses),
        notification_types=list(catalog.notification_types),
        reminder_timings=list(catalog.reminder_timings),
        default_settings=dict(catalog.default_settings),
        default_templates=[
            TemplateSeedResponse(name=t.name, category=t.category, message=t.message)
            for t in catalog.default_templates
        ],
        chart_types=list(catalog.chart_types),
        chart_palette=list(catalog.chart_palette),
        trimesters=list(TRIMESTER_LABELS),
    )


@router.get(
    "/trimesters",
    summary="Trimester week bounds",
    description="Inclusive upper week bound for each trimester label."
)
async def get_trimester_bounds() -> Dict[str, Any]:
    """
    Trimester buckets used by every patient view.

    Weeks above the third-trimester bound are labelled Delivered when a
    delivery visit exists, otherwise Unknown.
    """
    return {
        "labels": list(TRIMESTER_LABELS),
        "bounds": {
            TRIMESTER_LABELS[0]: FIRST_TRIMESTER_END,
            TRIMESTER_LABELS[1]: SECOND_TRIMESTER_END,
            TRIMESTER_LABELS[2]: THIRD_TRIMESTER_END,
        },
    }
