"""
Content catalog - static clinic vocabulary loaded from catalog.yaml.

This module provides:
- YAML loading and validation of catalog.yaml
- Read-only access to broadcast categories, tip stages, defaults and palettes

YAML access is encapsulated here - no other module reads catalog.yaml directly.

Usage:
    from core.content_catalog import get_catalog, broadcast_category_name

    catalog = get_catalog()
    catalog.tip_stage_ids        # ("first-trimester", ...)
    broadcast_category_name("high_risk")  # "High Risk"
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from core.config import DUE_SOON_DAYS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    """An id/display-name pair such as a broadcast category or tip stage."""
    id: str
    name: str


@dataclass(frozen=True)
class TemplateSeed:
    """Default notification template created on first start."""
    name: str
    category: str
    message: str


@dataclass(frozen=True)
class ContentCatalog:
    """Immutable view of catalog.yaml."""
    broadcast_categories: Tuple[CatalogEntry, ...]
    tip_stages: Tuple[CatalogEntry, ...]
    tip_categories: Tuple[str, ...]
    risk_levels: Tuple[str, ...]
    notification_statuses: Tuple[str, ...]
    notification_types: Tuple[str, ...]
    reminder_timings: Tuple[int, ...]
    default_settings: Dict[str, Any]
    default_templates: Tuple[TemplateSeed, ...]
    chart_types: Tuple[str, ...]
    chart_palette: Tuple[str, ...]

    @property
    def broadcast_category_ids(self) -> Tuple[str, ...]:
        return tuple(c.id for c in self.broadcast_categories)

    @property
    def tip_stage_ids(self) -> Tuple[str, ...]:
        return tuple(s.id for s in self.tip_stages)


def _get_config_path() -> Path:
    """Get the path to the catalog file."""
    return Path(__file__).parent / 'catalog.yaml'


def _load_yaml_config() -> Dict[str, Any]:
    """
    Load and parse catalog.yaml.

    Raises:
        FileNotFoundError: If catalog.yaml is not found
        yaml.YAMLError: If YAML parsing fails
    """
    config_path = _get_config_path()
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except FileNotFoundError:
        logger.error("Catalog file not found", extra={'path': str(config_path)})
        raise
    except yaml.YAMLError as e:
        logger.error("Failed to parse catalog", extra={'path': str(config_path), 'error': str(e)})
        raise


def _parse_entries(raw: Optional[List[Dict[str, Any]]], section: str, **fields: Any) -> Tuple[CatalogEntry, ...]:
    """Entries of one id/name section; names may use {field} placeholders filled from fields."""
    entries = []
    for i, item in enumerate(raw or []):
        if 'id' not in item or 'name' not in item:
            raise ValueError(f"{section} entry at index {i} needs both 'id' and 'name'")
        entries.append(CatalogEntry(id=str(item['id']), name=str(item['name']).format(**fields)))
    if not entries:
        raise ValueError(f"Catalog section '{section}' is empty")
    return tuple(entries)


def _parse_templates(raw: Optional[List[Dict[str, Any]]]) -> Tuple[TemplateSeed, ...]:
    seeds = []
    for i, item in enumerate(raw or []):
        missing = [k for k in ('name', 'category', 'message') if k not in item]
        if missing:
            raise ValueError(f"default_templates entry at index {i} is missing {missing}")
        seeds.append(TemplateSeed(name=item['name'], category=item['category'], message=item['message']))
    return tuple(seeds)


def _validate_palette(palette: List[str]) -> Tuple[str, ...]:
    for color in palette:
        if not re.match(r'^#[0-9A-Fa-f]{6}$', str(color)):
            raise ValueError(f"Invalid chart palette colour: '{color}'")
    if not palette:
        raise ValueError("chart_palette must contain at least one colour")
    return tuple(palette)


@lru_cache(maxsize=1)
def get_catalog() -> ContentCatalog:
    """
    Load and cache the catalog.

    The YAML file is read exactly once per process.
    """
    config = _load_yaml_config()

    catalog = ContentCatalog(
        broadcast_categories=_parse_entries(
            config.get('broadcast_categories'), 'broadcast_categories', due_soon_days=DUE_SOON_DAYS
        ),
        tip_stages=_parse_entries(config.get('tip_stages'), 'tip_stages'),
        tip_categories=tuple(config.get('tip_categories', ['health', 'nutrition'])),
        risk_levels=tuple(config.get('risk_levels', ['Low', 'Medium', 'High'])),
        notification_statuses=tuple(config.get('notification_statuses', [])),
        notification_types=tuple(config.get('notification_types', [])),
        reminder_timings=tuple(int(h) for h in config.get('reminder_timings', [])),
        default_settings=dict(config.get('default_settings') or {}),
        default_templates=_parse_templates(config.get('default_templates')),
        chart_types=tuple(config.get('chart_types', ['bar', 'line', 'pie', 'area'])),
        chart_palette=_validate_palette(list(config.get('chart_palette') or [])),
    )
    logger.info(
        "Content catalog loaded",
        extra={
            'broadcast_categories': len(catalog.broadcast_categories),
            'templates': len(catalog.default_templates),
        }
    )
    return catalog


def broadcast_category_name(category_id: str) -> str:
    """Display name for a broadcast category id (the id itself if unknown)."""
    for entry in get_catalog().broadcast_categories:
        if entry.id == category_id:
            return entry.name
    return category_id


def default_settings() -> Dict[str, Any]:
    """A fresh copy of the default notification settings."""
    return dict(get_catalog().default_settings)
