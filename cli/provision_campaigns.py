"""Create every campaign in the definitions document on Google Ads.

Reads settings from the environment (and .env), provisions each campaign in
order, mirrors created resources into DATABASE_URL and prints a summary.
Exits 1 only on configuration or unexpected fatal errors; individual campaign
failures are reported in the summary.
"""

import asyncio
import sys

import structlog
from dotenv import load_dotenv

from config.logging_config import setup_logging
from config.settings import (
    load_ad_copy_profile,
    load_google_ads_settings,
    load_provisioning_settings,
    require_database_url,
)
from core.infrastructure.http_client import close_http_client, init_http_client
from core.models.batch_result import BatchResult
from db.session import dispose_engine, get_engine
from db.tables import create_tables
from exceptions.custom_exceptions import ConfigurationException
from services.campaign_provisioning_service import CampaignProvisioningService

logger = structlog.get_logger(__name__)

BANNER = """
╔═══════════════════════════════════════════════╗
║  Google Ads campaign provisioning             ║
╚═══════════════════════════════════════════════╝"""


async def run() -> BatchResult:
    google_settings = load_google_ads_settings()
    settings = load_provisioning_settings()
    profile = load_ad_copy_profile()
    database_url = require_database_url()

    logger.info(
        "Configuration loaded",
        customer_id=google_settings.customer_id,
        login_customer_id=google_settings.login_customer_id,
        api_version=google_settings.api_version,
        definitions_path=settings.definitions_path,
        concurrency=settings.max_concurrent_campaigns,
    )

    engine = get_engine(database_url)
    init_http_client()
    try:
        await create_tables(engine)
        service = CampaignProvisioningService.for_google_ads(
            google_settings, settings, engine, profile
        )
        return await service.provision()
    finally:
        await close_http_client()
        await dispose_engine()


def print_summary(result: BatchResult) -> None:
    print("\n" + "=" * 60)
    for line in result.summary_lines():
        print(line)
    print("=" * 60)


def main() -> int:
    load_dotenv()
    setup_logging(renderer="console")
    print(BANNER)

    try:
        result = asyncio.run(run())
    except ConfigurationException as e:
        logger.error("Configuration error", error=e.message, details=e.details)
        return 1
    except Exception as e:
        logger.error("Fatal error", error=str(e), exc_info=True)
        return 1

    print_summary(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
