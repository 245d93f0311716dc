"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from catalog_module.api.associations import router as associations_router
from catalog_module.api.health import router as health_router
from catalog_module.api.products import router as products_router

__all__ = [
    "associations_router",
    "health_router",
    "products_router",
]
