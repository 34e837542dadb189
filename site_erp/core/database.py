from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from site_erp.core.config import settings


def _engine_kwargs(url: str) -> dict:
    """Pool wait and statement timeouts derived from TX_TIMEOUT_MS."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    kwargs = {"pool_pre_ping": True, "pool_timeout": settings.tx_timeout_seconds}
    if url.startswith("postgresql"):
        kwargs["connect_args"] = {
            "options": f"-c statement_timeout={settings.TX_TIMEOUT_MS}"
        }
    return kwargs


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
