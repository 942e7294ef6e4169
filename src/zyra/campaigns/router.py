"""Campaign API router."""

from fastapi import APIRouter, Depends

from zyra.campaigns.schemas import CampaignCreate, CampaignOut, CampaignUpdate
from zyra.common.security import require_user
from zyra.store.records import User

router = APIRouter()


def _get_service():
    from zyra.deps import get_campaign_service
    return get_campaign_service()


@router.get("/campaigns", response_model=list[CampaignOut])
async def list_campaigns(user: User = Depends(require_user)):
    campaigns = await _get_service().list_campaigns(user.id)
    return [CampaignOut.model_validate(c) for c in campaigns]


@router.post("/campaigns", response_model=CampaignOut)
async def create_campaign(body: CampaignCreate, user: User = Depends(require_user)):
    campaign = await _get_service().create_campaign(user.id, **body.model_dump())
    return CampaignOut.model_validate(campaign)


@router.patch("/campaigns/{campaign_id}", response_model=CampaignOut)
async def update_campaign(campaign_id: str, body: CampaignUpdate, user: User = Depends(require_user)):
    campaign = await _get_service().update_campaign(
        user.id, campaign_id, **body.model_dump(exclude_unset=True),
    )
    return CampaignOut.model_validate(campaign)
