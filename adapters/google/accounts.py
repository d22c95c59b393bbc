from structlog import get_logger

from adapters.google.client import GoogleAdsClient

logger = get_logger(__name__)


class GoogleAccountsAdapter:
    CUSTOMER_QUERY = """
    SELECT customer.id, customer.descriptive_name, customer.manager, customer.currency_code
    FROM customer
    """

    def __init__(self, client: GoogleAdsClient) -> None:
        self.client = client

    async def list_accessible_customer_ids(self) -> list[str]:
        """List all accessible customer IDs for the authenticated user."""
        data = await self.client.get("customers:listAccessibleCustomers")
        resource_names = data.get("resourceNames", [])
        customer_ids = [name.split("/")[-1] for name in resource_names]
        logger.info("Found accessible customers", count=len(customer_ids))
        return customer_ids

    async def describe_customer(self, customer_id: str) -> dict:
        """Name, currency and manager flag of one account."""
        results = await self.client.search(self.CUSTOMER_QUERY, customer_id=customer_id)
        customer = results[0].get("customer", {}) if results else {}
        return {
            "customer_id": customer_id,
            "name": customer.get("descriptiveName"),
            "manager": customer.get("manager", False),
            "currency_code": customer.get("currencyCode"),
        }

    async def check_access(self) -> dict:
        """Whether the configured customer is reachable with these credentials."""
        accessible = await self.list_accessible_customer_ids()
        configured = self.client.customer_id
        login_customer_id = self.client.settings.login_customer_id
        report = {
            "configured_customer_id": configured,
            "login_customer_id": login_customer_id,
            "accessible_customer_ids": accessible,
            "directly_accessible": configured in accessible,
            "via_manager": bool(login_customer_id and login_customer_id in accessible),
        }
        logger.info(
            "Checked Google Ads account access",
            customer_id=configured,
            directly_accessible=report["directly_accessible"],
            via_manager=report["via_manager"],
        )
        return report
