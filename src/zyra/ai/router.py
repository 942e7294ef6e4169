"""AI copy API router."""

from fastapi import APIRouter, Depends

from zyra.ai.schemas import (
    DescriptionResponse,
    GenerateDescriptionRequest,
    OptimizeSEORequest,
    SEOResult,
)
from zyra.common.security import require_user
from zyra.store.records import User

router = APIRouter()


def _get_service():
    from zyra.deps import get_ai_service
    return get_ai_service()


@router.post("/generate-description", response_model=DescriptionResponse)
async def generate_description(body: GenerateDescriptionRequest, user: User = Depends(require_user)):
    description = await _get_service().generate_description(
        user.id,
        product_name=body.product_name,
        category=body.category,
        features=body.features,
        audience=body.audience,
        brand_voice=body.brand_voice,
    )
    return DescriptionResponse(description=description)


@router.post("/optimize-seo", response_model=SEOResult)
async def optimize_seo(body: OptimizeSEORequest, user: User = Depends(require_user)):
    return await _get_service().optimize_seo(
        user.id,
        current_title=body.current_title,
        keywords=body.keywords,
        current_meta=body.current_meta,
        category=body.category,
    )
