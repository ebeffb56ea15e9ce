from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from collabhub.core.ids import gen_id
from collabhub.models.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id("usr"))
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # "influencer" | "brand"; null until onboarding picks a side
    role: Mapped[str | None] = mapped_column(String(30), nullable=True)
    onboarded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
