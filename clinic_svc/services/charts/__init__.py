"""
Chart package for dashboard charts.

This package contains:
- ChartService: Chart CRUD, statistics and figure orchestration
- ChartFigureBuilder: Plotly-specific figure construction

Usage:
    from services.charts import ChartService

    service = ChartService(chart_repository)
    html = service.figure_html(chart_id)
"""

from services.charts.chart_service import ChartService
from services.charts.plotly_builder import ChartFigureBuilder

__all__ = ["ChartService", "ChartFigureBuilder"]
