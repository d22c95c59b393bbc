import os
from dataclasses import dataclass
from typing import Dict, Optional

from core.provisioning.ad_copy import AdCopyProfile
from exceptions.custom_exceptions import ConfigurationException

DEFAULT_API_VERSION = "v21"
DEFAULT_DEFINITIONS_PATH = "data/campaign_definitions.md"

REQUIRED_GOOGLE_ADS_VARS: Dict[str, str] = {
    "client_id": "GOOGLE_ADS_CLIENT_ID",
    "client_secret": "GOOGLE_ADS_CLIENT_SECRET",
    "developer_token": "GOOGLE_ADS_DEVELOPER_TOKEN",
    "customer_id": "GOOGLE_ADS_CUSTOMER_ID",
    "refresh_token": "GOOGLE_ADS_REFRESH_TOKEN",
}

_TRUTHY = {"1", "true", "yes", "on"}


def normalize_customer_id(value: Optional[str]) -> str:
    """'123-456-7890' -> '1234567890'."""
    return (value or "").replace("-", "").strip()


@dataclass(frozen=True)
class GoogleAdsSettings:
    client_id: str
    client_secret: str
    developer_token: str
    customer_id: str
    refresh_token: str
    login_customer_id: Optional[str] = None
    api_version: str = DEFAULT_API_VERSION


@dataclass(frozen=True)
class ProvisioningSettings:
    definitions_path: str = DEFAULT_DEFINITIONS_PATH
    strict_definitions: bool = False
    remote_call_timeout: float = 120.0
    max_concurrent_campaigns: int = 1
    default_cpc_bid_micros: Optional[int] = None


def google_ads_credential_status() -> Dict[str, bool]:
    """Which Google Ads variables are set, without exposing their values."""
    names = list(REQUIRED_GOOGLE_ADS_VARS.values()) + ["GOOGLE_ADS_LOGIN_CUSTOMER_ID"]
    return {name: bool(os.getenv(name, "").strip()) for name in names}


def load_google_ads_settings() -> GoogleAdsSettings:
    """Read Google Ads credentials from the environment.

    Raises ConfigurationException listing every missing variable so the
    operator can fix them in one pass.
    """
    values = {field: os.getenv(env, "").strip() for field, env in REQUIRED_GOOGLE_ADS_VARS.items()}
    missing = [REQUIRED_GOOGLE_ADS_VARS[field] for field, value in values.items() if not value]
    if missing:
        raise ConfigurationException(
            f"Missing Google Ads credentials: {', '.join(missing)}",
            details={"missing": missing},
        )

    values["customer_id"] = normalize_customer_id(values["customer_id"])
    login_customer_id = normalize_customer_id(os.getenv("GOOGLE_ADS_LOGIN_CUSTOMER_ID"))
    return GoogleAdsSettings(
        **values,
        login_customer_id=login_customer_id or None,
        api_version=os.getenv("GOOGLE_ADS_API_VERSION", DEFAULT_API_VERSION),
    )


def load_provisioning_settings() -> ProvisioningSettings:
    return ProvisioningSettings(
        definitions_path=os.getenv("CAMPAIGN_DEFINITIONS_PATH", DEFAULT_DEFINITIONS_PATH),
        strict_definitions=os.getenv("CAMPAIGN_DEFINITIONS_STRICT", "false").lower() in _TRUTHY,
        remote_call_timeout=_number("GOOGLE_ADS_CALL_TIMEOUT_SECONDS", float, 120.0),
        max_concurrent_campaigns=max(1, _number("PROVISIONING_MAX_CONCURRENT_CAMPAIGNS", int, 1)),
        default_cpc_bid_micros=_number("GOOGLE_ADS_DEFAULT_CPC_BID_MICROS", int, None),
    )


def load_ad_copy_profile() -> AdCopyProfile:
    defaults = AdCopyProfile()
    communities = os.getenv("AD_COPY_COMMUNITIES")
    return AdCopyProfile(
        company_name=os.getenv("AD_COPY_COMPANY_NAME", defaults.company_name),
        phone=os.getenv("AD_COPY_PHONE", defaults.phone),
        region=os.getenv("AD_COPY_REGION", defaults.region),
        communities=(
            tuple(name.strip() for name in communities.split(",") if name.strip())
            if communities is not None
            else defaults.communities
        ),
    )


def require_database_url() -> str:
    url = os.getenv("DATABASE_URL", "").strip()
    if not url:
        raise ConfigurationException(
            "DATABASE_URL is not set", details={"missing": ["DATABASE_URL"]}
        )
    return url


def _number(name: str, cast, default):
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigurationException(
            f"{name} must be a number, got {raw!r}", details={"variable": name}
        )
