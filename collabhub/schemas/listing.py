from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from collabhub.schemas.niche import NicheOut


class ListingCreate(BaseModel):
    title: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=20)
    pricing_type: Literal["FIXED", "AUCTION"]

    fixed_price: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    starting_bid: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    reserve_price: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    auction_ends_at: datetime | None = None

    niche_ids: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _pricing_fields_present(self):
        if self.pricing_type == "FIXED" and self.fixed_price is None:
            raise ValueError("FIXED requires fixed_price; AUCTION requires starting_bid and auction_ends_at")
        if self.pricing_type == "AUCTION" and (self.starting_bid is None or self.auction_ends_at is None):
            raise ValueError("FIXED requires fixed_price; AUCTION requires starting_bid and auction_ends_at")
        return self


class ListingUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=5, max_length=200)
    description: str | None = Field(default=None, min_length=20)

    # the owner may only close a listing by hand; SOLD comes from an accepted bid
    status: Literal["OPEN", "CLOSED"] | None = None

    fixed_price: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    starting_bid: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    reserve_price: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    auction_ends_at: datetime | None = None

    niche_ids: list[str] | None = None


class ListingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    influencer_profile_id: str
    title: str
    description: str
    pricing_type: str
    fixed_price: float | None
    starting_bid: float | None
    reserve_price: float | None
    auction_ends_at: datetime | None
    status: str
    niches: list[NicheOut] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ListingDetailOut(ListingOut):
    bid_count: int = 0
    highest_bid: float | None = None


class ListingPage(BaseModel):
    listings: list[ListingDetailOut]
    total: int
    page: int
    total_pages: int
