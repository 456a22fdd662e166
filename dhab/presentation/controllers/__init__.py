"""
Controllers Package - Presentation Layer

FastAPI routers. Controllers delegate to the use cases and map domain
errors onto HTTP status codes.
"""

from .ingestion_controller import router as ingestion_router
from .predictions_controller import router as predictions_router
from .prices_controller import router as prices_router
from .system_controller import router as system_router

__all__ = ["prices_router", "predictions_router", "ingestion_router", "system_router"]
