from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from collabhub.core.ids import gen_id
from collabhub.models.base import Base, TimestampMixin


class InfluencerProfile(TimestampMixin, Base):
    __tablename__ = "influencer_profiles"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("inf"))
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    handle: Mapped[str] = mapped_column(String(80), nullable=False, unique=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)


class BrandProfile(TimestampMixin, Base):
    __tablename__ = "brand_profiles"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("brd"))
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    handle: Mapped[str] = mapped_column(String(80), nullable=False, unique=True)
    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    industry: Mapped[str | None] = mapped_column(String(120), nullable=True)
