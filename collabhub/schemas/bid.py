from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class BidCreate(BaseModel):
    amount: float = Field(ge=0, allow_inf_nan=False)
    message: str | None = Field(default=None, max_length=500)


class BidStatusUpdate(BaseModel):
    status: Literal["ACCEPTED", "REJECTED"]


class BidderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_name: str
    handle: str


class BidOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    listing_id: str
    brand_profile_id: str
    amount: float
    message: str | None
    status: str
    created_at: datetime | None = None


class BidWithBidderOut(BidOut):
    brand_profile: BidderOut


class BidList(BaseModel):
    bids: list[BidWithBidderOut]
