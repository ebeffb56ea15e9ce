from pydantic import BaseModel


class MeOut(BaseModel):
    api_key_id: str
    user_id: str
    role: str | None
    influencer_profile_id: str | None
    brand_profile_id: str | None
