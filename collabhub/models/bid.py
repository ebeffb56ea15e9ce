from datetime import datetime

from sqlalchemy import Float, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from collabhub.core.ids import gen_id
from collabhub.models.base import Base


class ListingBid(Base):
    __tablename__ = "listing_bids"
    __table_args__ = (
        Index("ix_listing_bids_listing_status_amount", "listing_id", "status", "amount"),
        # at most one winner per listing
        Index(
            "uq_listing_bids_one_accepted",
            "listing_id",
            unique=True,
            postgresql_where=text("status = 'ACCEPTED'"),
            sqlite_where=text("status = 'ACCEPTED'"),
        ),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("bid"))

    # Bids go with their listing; deleting a listing that has bids is refused by the service layer.
    listing_id: Mapped[str] = mapped_column(
        String, ForeignKey("influencer_listings.id", ondelete="CASCADE"), nullable=False
    )
    brand_profile_id: Mapped[str] = mapped_column(
        String, ForeignKey("brand_profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    amount: Mapped[float] = mapped_column(Float, nullable=False)
    message: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # "PENDING" | "ACCEPTED" | "REJECTED" | "OUTBID"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    brand_profile = relationship("BrandProfile", lazy="raise")
