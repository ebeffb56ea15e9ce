from datetime import datetime

from sqlalchemy import Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import DateTime

from collabhub.core.ids import gen_id
from collabhub.models.base import Base, TimestampMixin
from collabhub.models.niche import listing_niches


class InfluencerListing(TimestampMixin, Base):
    __tablename__ = "influencer_listings"
    __table_args__ = (
        Index("ix_influencer_listings_status_created", "status", "created_at"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("lst"))
    influencer_profile_id: Mapped[str] = mapped_column(
        String, ForeignKey("influencer_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # "FIXED" | "AUCTION"
    pricing_type: Mapped[str] = mapped_column(String(20), nullable=False)

    # FIXED only
    fixed_price: Mapped[float | None] = mapped_column(Float, nullable=True)

    # AUCTION only. auction_ends_at is enforced at bid time, never swept.
    starting_bid: Mapped[float | None] = mapped_column(Float, nullable=True)
    reserve_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    auction_ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # "OPEN" | "CLOSED" | "SOLD"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="OPEN")

    influencer_profile = relationship("InfluencerProfile", lazy="raise")
    niches = relationship("Niche", secondary=listing_niches, lazy="selectin")
