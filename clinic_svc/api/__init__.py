"""
HTTP API layer: FastAPI routers grouped by domain.
"""
