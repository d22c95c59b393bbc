"""Check Google Ads credentials and which customer accounts they can reach."""

import asyncio
import sys

import httpx
import structlog
from dotenv import load_dotenv

from adapters.google.accounts import GoogleAccountsAdapter
from adapters.google.client import GoogleAdsClient
from config.logging_config import setup_logging
from config.settings import google_ads_credential_status, load_google_ads_settings
from core.infrastructure.http_client import close_http_client, init_http_client
from exceptions.custom_exceptions import BaseAppException

logger = structlog.get_logger(__name__)


async def run() -> dict:
    settings = load_google_ads_settings()
    adapter = GoogleAccountsAdapter(GoogleAdsClient(settings))

    init_http_client()
    try:
        report = await adapter.check_access()
        if report["directly_accessible"] or report["via_manager"]:
            report["customer"] = await adapter.describe_customer(settings.customer_id)
        return report
    finally:
        await close_http_client()


def print_credentials(credentials: dict) -> None:
    print("\nCredentials:")
    for name, present in credentials.items():
        print(f"  {'✓' if present else '✗'} {name}")


def print_report(report: dict) -> None:
    print("\nAccessible customer accounts:")
    for customer_id in report["accessible_customer_ids"]:
        marker = " (configured)" if customer_id == report["configured_customer_id"] else ""
        print(f"  - {customer_id}{marker}")

    if report["directly_accessible"]:
        print(f"\n✓ Customer {report['configured_customer_id']} is directly accessible")
    elif report["via_manager"]:
        print(
            f"\n✓ Customer {report['configured_customer_id']} should be reachable "
            f"through manager {report['login_customer_id']}"
        )
    else:
        print(
            f"\n✗ Customer {report['configured_customer_id']} is not accessible. "
            "Set GOOGLE_ADS_LOGIN_CUSTOMER_ID to the manager account that owns it."
        )

    customer = report.get("customer")
    if customer:
        print(
            f"  name: {customer['name']} | currency: {customer['currency_code']} "
            f"| manager: {customer['manager']}"
        )


def main() -> int:
    load_dotenv()
    setup_logging(renderer="console")

    print_credentials(google_ads_credential_status())
    try:
        report = asyncio.run(run())
    except BaseAppException as e:
        logger.error("Google Ads access check failed", error=e.message, details=e.details)
        return 1
    except httpx.HTTPError as e:
        logger.error("Could not reach Google Ads", error=str(e))
        return 1

    print_report(report)
    return 0 if report["directly_accessible"] or report["via_manager"] else 1


if __name__ == "__main__":
    sys.exit(main())
