"""Pydantic schemas for AI copy endpoints."""

from pydantic import Field

from zyra.common.schemas import CamelModel


class GenerateDescriptionRequest(CamelModel):
    product_name: str = ""
    category: str = ""
    features: str = ""
    audience: str = ""
    brand_voice: str = "sales"


class DescriptionResponse(CamelModel):
    description: str


class OptimizeSEORequest(CamelModel):
    current_title: str = ""
    keywords: str = ""
    current_meta: str = ""
    category: str = ""


class SEOResult(CamelModel):
    optimized_title: str = ""
    optimized_meta: str = ""
    keywords: list[str] = Field(default_factory=list)
    seo_score: int = Field(default=0, ge=0, le=100)
