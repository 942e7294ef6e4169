"""Pydantic schemas for campaign endpoints."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from zyra.common.schemas import CamelModel

CampaignType = Literal["email", "sms"]
CampaignStatus = Literal["draft", "scheduled", "sent"]


class CampaignCreate(CamelModel):
    type: CampaignType
    name: str = Field(..., min_length=1, max_length=255)
    subject: Optional[str] = Field(None, max_length=255)
    content: str = Field(..., min_length=1)
    status: CampaignStatus = "draft"


class CampaignUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    subject: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    status: Optional[CampaignStatus] = None
    sent_count: Optional[int] = Field(None, ge=0)
    open_rate: Optional[int] = Field(None, ge=0)
    click_rate: Optional[int] = Field(None, ge=0)
    conversion_rate: Optional[int] = Field(None, ge=0)


class CampaignOut(CamelModel):
    id: str
    user_id: str
    type: str
    name: str
    subject: Optional[str] = None
    content: str
    status: str
    sent_count: int
    open_rate: int
    click_rate: int
    conversion_rate: int
    created_at: datetime
