from datetime import datetime

from pydantic import BaseModel, ConfigDict


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    sender_user_id: str
    receiver_user_id: str
    body: str
    listing_id: str | None
    bid_id: str | None
    created_at: datetime
