"""API route modules."""

from messledger.api.routes.consumptions import router as consumptions_router
from messledger.api.routes.health import router as health_router
from messledger.api.routes.periods import router as periods_router
from messledger.api.routes.receipts import router as receipts_router
from messledger.api.routes.reports import router as reports_router

__all__ = [
    "health_router",
    "periods_router",
    "receipts_router",
    "consumptions_router",
    "reports_router",
]
