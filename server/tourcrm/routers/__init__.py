"""FastAPI routers package."""

from .admin import audit_router, retention_router
from .auth import router as auth_router
from .bookings import router as bookings_router
from .catalog import offerings_router, suppliers_router, vendors_router
from .clients import router as clients_router
from .exchange_rates import router as exchange_rates_router
from .health import router as health_router
from .leads import router as leads_router
from .manual_quotes import router as manual_quotes_router
from .metrics import router as metrics_router
from .payments import client_payments_router, vendor_payments_router
from .pricing import router as pricing_router
from .quotations import router as quotations_router
from .rates import rate_routers
from .reports import router as reports_router

api_routers = [
    health_router,
    auth_router,
    clients_router,
    leads_router,
    quotations_router,
    bookings_router,
    suppliers_router,
    offerings_router,
    vendors_router,
    *rate_routers,
    pricing_router,
    exchange_rates_router,
    client_payments_router,
    vendor_payments_router,
    manual_quotes_router,
    reports_router,
    audit_router,
    retention_router,
    metrics_router,
]

__all__ = ["api_routers"]
