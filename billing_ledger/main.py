"""
Billing Ledger Import Service: FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

import uvicorn
from fastapi import FastAPI

from billing_ledger.config import get_settings
from billing_ledger.logging_config import configure_logging
from billing_ledger.api.health import router as health_router
from billing_ledger.api.imports import router as imports_router
from billing_ledger.api.customers import router as customers_router
from billing_ledger.api.invoices import router as invoices_router

settings = get_settings()
configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Imports legacy sales ledgers into tenant customer ledgers",
)

# Register routers
app.include_router(health_router)
app.include_router(imports_router)
app.include_router(customers_router)
app.include_router(invoices_router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        "billing_ledger.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
