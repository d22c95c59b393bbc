import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine
import structlog

from config.settings import google_ads_credential_status
from core.infrastructure.http_client import init_http_client, close_http_client
from core.metadata import SERVICE_NAME, VERSION
from db import session as db_session
from db.tables import create_tables

logger = structlog.get_logger(__name__)

STARTUP_BANNER = """
╔══════════════════════════════════════════════╗
║  {service} v{version}
║  env: {env} | Google Ads credentials: {credentials}
╚══════════════════════════════════════════════╝"""


async def open_mirror_database() -> AsyncEngine:
    """Engine for DATABASE_URL with the google_ads_* tables in place."""
    engine = db_session.get_engine()
    await create_tables(engine)
    logger.info("Mirror database ready", component="db")
    return engine


def credentials_summary() -> str:
    status = google_ads_credential_status()
    missing = [name for name, present in status.items() if not present]
    # the login customer id is optional
    missing = [name for name in missing if name != "GOOGLE_ADS_LOGIN_CUSTOMER_ID"]
    if not missing:
        return "complete"
    logger.warning(
        "Google Ads credentials incomplete; Google Ads routes will fail",
        missing=missing,
    )
    return f"missing {len(missing)}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        app.state.engine = await open_mirror_database()
    except Exception as e:
        logger.error("Mirror database unavailable", component="db", error=str(e), exc_info=True)
        raise

    # built lazily by the google ads router on first request
    app.state.google_ads_client = None
    init_http_client()

    environment = os.getenv("ENVIRONMENT", "local")
    print(
        STARTUP_BANNER.format(
            service=SERVICE_NAME,
            version=VERSION,
            env=environment,
            credentials=credentials_summary(),
        )
    )
    logger.info("Service started", version=VERSION, environment=environment)
    try:
        yield
    finally:
        logger.info("Service shutting down", version=VERSION)
        await close_http_client()
        await db_session.dispose_engine()
