"""Local mirror of every Google Ads resource the provisioner created."""

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.ext.asyncio import AsyncEngine

metadata = MetaData()

google_ads_campaigns = Table(
    "google_ads_campaigns",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("resource_name", String(255), nullable=False, unique=True),
    Column("campaign_id", String(32), nullable=False),
    Column("campaign_type", String(100)),
    Column("status", String(20), nullable=False),
    Column("budget_amount_micros", BigInteger, nullable=False),
    Column("bidding_strategy", String(50), nullable=False),
    Column("target_cpa_micros", BigInteger),
    Column("networks", String(255)),
    Column("languages", String(255)),
    Column("locations", Text),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

google_ads_ad_groups = Table(
    "google_ads_ad_groups",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("campaign_id", Integer, ForeignKey("google_ads_campaigns.id"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("resource_name", String(255), nullable=False, unique=True),
    Column("ad_group_id", String(32), nullable=False),
    Column("cpc_bid_micros", BigInteger),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

google_ads_keywords = Table(
    "google_ads_keywords",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("ad_group_id", Integer, ForeignKey("google_ads_ad_groups.id"), nullable=False),
    Column("keyword_text", String(80), nullable=False),
    Column("match_type", String(10), nullable=False),
    Column("resource_name", String(255), nullable=False, unique=True),
    Column("criterion_id", String(32), nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

google_ads_ads = Table(
    "google_ads_ads",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("ad_group_id", Integer, ForeignKey("google_ads_ad_groups.id"), nullable=False),
    Column("resource_name", String(255), nullable=False, unique=True),
    Column("ad_id", String(32), nullable=False),
    # JSON-encoded lists of strings
    Column("headlines", Text, nullable=False),
    Column("descriptions", Text, nullable=False),
    Column("path1", String(15)),
    Column("path2", String(15)),
    Column("final_url", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)


google_ads_conversion_actions = Table(
    "google_ads_conversion_actions",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("conversion_action_id", String(32), nullable=False, unique=True),
    Column("resource_name", String(255), nullable=False),
    Column("name", String(255), nullable=False),
    Column("category", String(50)),
    Column("status", String(20)),
    Column("label", String(100)),
    Column("synced_at", DateTime(timezone=True), server_default=func.now()),
)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
