from datetime import datetime

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from collabhub.core.ids import gen_id
from collabhub.models.base import Base


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("msg"))

    sender_user_id: Mapped[str] = mapped_column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)

    listing_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("influencer_listings.id", ondelete="SET NULL"), nullable=True
    )
    bid_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("listing_bids.id", ondelete="SET NULL"), nullable=True
    )

    # outbox event that produced this message (keeps redelivery from duplicating it)
    source_event_id: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
