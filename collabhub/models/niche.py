from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column

from collabhub.core.ids import gen_id
from collabhub.models.base import Base


listing_niches = Table(
    "influencer_listing_niches",
    Base.metadata,
    Column("listing_id", String, ForeignKey("influencer_listings.id", ondelete="CASCADE"), primary_key=True),
    Column("niche_id", String, ForeignKey("niches.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Niche(Base):
    __tablename__ = "niches"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("nch"))
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
