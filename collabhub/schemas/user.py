from typing import Literal

from pydantic import BaseModel, Field, model_validator


class InfluencerProfileIn(BaseModel):
    handle: str = Field(min_length=2, max_length=80)
    bio: str | None = None


class BrandProfileIn(BaseModel):
    handle: str = Field(min_length=2, max_length=80)
    company_name: str = Field(min_length=1, max_length=200)
    website: str | None = Field(default=None, max_length=500)
    industry: str | None = Field(default=None, max_length=120)


class UserBootstrap(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    name: str | None = Field(default=None, max_length=200)
    role: Literal["influencer", "brand"]

    influencer_profile: InfluencerProfileIn | None = None
    brand_profile: BrandProfileIn | None = None

    @model_validator(mode="after")
    def _profile_matches_role(self):
        if self.role == "influencer" and self.influencer_profile is None:
            raise ValueError("influencer role requires influencer_profile")
        if self.role == "brand" and self.brand_profile is None:
            raise ValueError("brand role requires brand_profile")
        return self


class UserBootstrapOut(BaseModel):
    user_id: str
    role: str
    profile_id: str
    api_key: str
