from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from site_erp.common.error_handlers import register_error_handlers
from site_erp.core.config import settings
from site_erp.api.v1 import (
    audit_log,
    labour_ledger,
    ledger,
    material_ledger,
    site,
    site_expense,
    site_profit,
    site_transaction,
)

app = FastAPI(title="Site ERP", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register API routers
app.include_router(site.router, prefix="/api/sites", tags=["sites"])
app.include_router(ledger.router, prefix="/api/ledgers", tags=["ledgers"])
app.include_router(
    site_expense.router, prefix="/api/site-exp", tags=["site expenses"])
app.include_router(
    site_transaction.router, prefix="/api/site-transactions", tags=["site transactions"])
app.include_router(
    material_ledger.router, prefix="/api/material-supplier-ledger", tags=["material supplier ledger"])
app.include_router(
    labour_ledger.router, prefix="/api/labour-contractor-ledger", tags=["labour contractor ledger"])
app.include_router(site_profit.router, prefix="/api/site-profit", tags=["reports"])
app.include_router(audit_log.router, prefix="/api/audit-log", tags=["audit log"])

# Stored ledger photos / receipts
app.mount(
    settings.UPLOAD_URL_PREFIX,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)


@app.get("/")
def read_root():
    return {"message": "Welcome to the Site ERP APIs!"}
