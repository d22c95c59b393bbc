from fastapi import APIRouter, Depends, Request
import structlog

from adapters.google.campaign_provisioning import GoogleAdsCampaignAdapter
from adapters.google.client import GoogleAdsClient
from config.settings import load_google_ads_settings
from core.models.provisioning import ConversionActionConfig
from db.conversion_action_repository import ConversionActionRepository
from db.mirror_repository import SqlMirrorStore
from services.conversion_action_service import ConversionActionService
from utils.response_helpers import success_response

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/google-ads", tags=["google-ads"])


def get_google_ads_adapter(request: Request) -> GoogleAdsCampaignAdapter:
    client = getattr(request.app.state, "google_ads_client", None)
    if client is None:
        # Credentials are read on first use so the app boots without them
        client = GoogleAdsClient(load_google_ads_settings())
        request.app.state.google_ads_client = client
    return GoogleAdsCampaignAdapter(client)


def get_conversion_action_service(
    request: Request,
    adapter: GoogleAdsCampaignAdapter = Depends(get_google_ads_adapter),
) -> ConversionActionService:
    return ConversionActionService(adapter, ConversionActionRepository(request.app.state.engine))


def get_mirror_store(request: Request) -> SqlMirrorStore:
    return SqlMirrorStore(request.app.state.engine)


@router.get("/conversions")
async def list_conversions(
    service: ConversionActionService = Depends(get_conversion_action_service),
):
    actions = await service.list_conversion_actions()
    return success_response([action.model_dump() for action in actions])


@router.post("/conversions")
async def create_conversion(
    config: ConversionActionConfig,
    service: ConversionActionService = Depends(get_conversion_action_service),
):
    logger.info("Conversion action create requested", name=config.name)
    action = await service.create_conversion_action(config)
    return success_response(action.model_dump())


@router.post("/conversions/sync")
async def sync_conversions(
    service: ConversionActionService = Depends(get_conversion_action_service),
):
    counts = await service.sync()
    return success_response(counts)


@router.get("/conversions/{conversion_action_id}")
async def get_conversion(
    conversion_action_id: str,
    service: ConversionActionService = Depends(get_conversion_action_service),
):
    action = await service.get_conversion_action(conversion_action_id)
    return success_response(action.model_dump())


@router.get("/campaigns")
async def list_campaigns(store: SqlMirrorStore = Depends(get_mirror_store)):
    campaigns = await store.list_campaigns()
    return success_response(campaigns)
