from __future__ import annotations

import math
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.errors import Conflict, Forbidden, NotFound, ValidationError
from collabhub.models.bid import ListingBid
from collabhub.models.enums import LIVE_BID_STATUSES, ListingStatus, PricingType, UserRole
from collabhub.models.listing import InfluencerListing
from collabhub.models.niche import Niche
from collabhub.models.profiles import InfluencerProfile
from collabhub.schemas.listing import ListingCreate, ListingUpdate
from collabhub.schemas.niche import NicheOut
from collabhub.services.auth import Actor
from collabhub.services.profiles import get_influencer_profile

MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 12

_AUCTION_FIELDS = ("starting_bid", "reserve_price", "auction_ends_at")


async def get_listing_or_404(db: AsyncSession, listing_id: str, *, for_update: bool = False) -> InfluencerListing:
    stmt = select(InfluencerListing).where(InfluencerListing.id == listing_id)
    if for_update:
        stmt = stmt.with_for_update(of=InfluencerListing)
    listing = (await db.execute(stmt)).scalar_one_or_none()
    if listing is None:
        raise NotFound("Listing not found")
    return listing


async def assert_listing_owner(
    db: AsyncSession, listing: InfluencerListing, actor: Actor, message: str
) -> InfluencerProfile:
    """
    The owner is the user linked to the listing's influencer profile.
    Raises Forbidden with `message` for anyone else.
    """
    profile = await get_influencer_profile(db, actor.user_id)
    if profile is None or profile.id != listing.influencer_profile_id:
        raise Forbidden(message)
    return profile


async def _load_niches(db: AsyncSession, niche_ids: list[str]) -> list[Niche]:
    if not niche_ids:
        return []
    wanted = set(niche_ids)
    rows = (await db.execute(select(Niche).where(Niche.id.in_(wanted)))).scalars().all()
    missing = wanted - {n.id for n in rows}
    if missing:
        raise ValidationError("Unknown niche id(s)", details=[{"niche_id": nid} for nid in sorted(missing)])
    return list(rows)


async def highest_live_bid(db: AsyncSession, listing_id: str) -> float | None:
    """Highest PENDING or ACCEPTED amount on the listing, None when nobody bid yet."""
    stmt = select(func.max(ListingBid.amount)).where(
        ListingBid.listing_id == listing_id,
        ListingBid.status.in_(LIVE_BID_STATUSES),
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def _bid_counts(db: AsyncSession, listing_ids: list[str]) -> dict[str, int]:
    if not listing_ids:
        return {}
    stmt = (
        select(ListingBid.listing_id, func.count())
        .where(ListingBid.listing_id.in_(listing_ids))
        .group_by(ListingBid.listing_id)
    )
    return {lid: n for lid, n in (await db.execute(stmt)).all()}


async def listing_details(db: AsyncSession, listings: list[InfluencerListing]) -> list[dict[str, Any]]:
    counts = await _bid_counts(db, [lst.id for lst in listings])
    out = []
    for lst in listings:
        highest = None
        if lst.pricing_type == PricingType.AUCTION.value:
            highest = await highest_live_bid(db, lst.id)
        out.append({
            "id": lst.id,
            "influencer_profile_id": lst.influencer_profile_id,
            "title": lst.title,
            "description": lst.description,
            "pricing_type": lst.pricing_type,
            "fixed_price": lst.fixed_price,
            "starting_bid": lst.starting_bid,
            "reserve_price": lst.reserve_price,
            "auction_ends_at": lst.auction_ends_at,
            "status": lst.status,
            "niches": [NicheOut.model_validate(n) for n in lst.niches],
            "created_at": lst.created_at,
            "updated_at": lst.updated_at,
            "bid_count": counts.get(lst.id, 0),
            "highest_bid": highest,
        })
    return out


async def create_listing(db: AsyncSession, *, actor: Actor, data: ListingCreate) -> InfluencerListing:
    """
    Insert a listing owned by the caller's influencer profile.
    Only the pricing fields of the chosen mode are stored. Caller commits.
    """
    if actor.role != UserRole.influencer.value:
        raise Forbidden("Only influencers can create sponsorship listings")

    profile = await get_influencer_profile(db, actor.user_id)
    if profile is None:
        raise ValidationError("Influencer profile not found. Complete onboarding first.")

    niches = await _load_niches(db, data.niche_ids)
    is_auction = data.pricing_type == PricingType.AUCTION.value

    listing = InfluencerListing(
        influencer_profile_id=profile.id,
        title=data.title,
        description=data.description,
        pricing_type=data.pricing_type,
        fixed_price=None if is_auction else data.fixed_price,
        starting_bid=data.starting_bid if is_auction else None,
        reserve_price=data.reserve_price if is_auction else None,
        auction_ends_at=data.auction_ends_at if is_auction else None,
        status=ListingStatus.OPEN.value,
        niches=niches,
    )
    db.add(listing)
    await db.flush()
    await db.refresh(listing)
    return listing


async def update_listing(
    db: AsyncSession, *, listing_id: str, actor: Actor, data: ListingUpdate
) -> InfluencerListing:
    listing = await get_listing_or_404(db, listing_id, for_update=True)
    await assert_listing_owner(db, listing, actor, "You can only edit your own listings")

    # SOLD and CLOSED listings are frozen, bids included.
    if listing.status != ListingStatus.OPEN.value:
        raise Conflict("This listing is no longer open and cannot be edited")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    is_auction = listing.pricing_type == PricingType.AUCTION.value

    if "fixed_price" in changes and is_auction:
        raise ValidationError("fixed_price only applies to FIXED listings")
    if not is_auction and any(f in changes for f in _AUCTION_FIELDS):
        raise ValidationError("starting_bid, reserve_price and auction_ends_at only apply to AUCTION listings")

    niche_ids = changes.pop("niche_ids", None)
    if niche_ids is not None:
        listing.niches = await _load_niches(db, niche_ids)

    for field, value in changes.items():
        setattr(listing, field, value)

    await db.flush()
    await db.refresh(listing)
    return listing


async def delete_listing(db: AsyncSession, *, listing_id: str, actor: Actor) -> None:
    listing = await get_listing_or_404(db, listing_id, for_update=True)
    await assert_listing_owner(db, listing, actor, "You can only delete your own listings")

    has_bids = (
        await db.execute(select(ListingBid.id).where(ListingBid.listing_id == listing.id).limit(1))
    ).first()
    if has_bids:
        raise Conflict("Listing has bids and cannot be deleted; close it instead")

    await db.delete(listing)
    await db.flush()


async def search_listings(
    db: AsyncSession,
    *,
    actor: Actor | None,
    mine: bool = False,
    q: str = "",
    niche: str = "",
    pricing_type: str = "",
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> tuple[list[InfluencerListing], int, int, int]:
    """
    Returns (listings, total, page, total_pages).

    `mine` only applies to an influencer caller and returns their listings in
    any status; otherwise only OPEN listings are browsed.
    """
    page = max(1, page)
    limit = min(MAX_PAGE_SIZE, max(1, limit))

    conditions = []
    if mine and actor is not None and actor.role == UserRole.influencer.value:
        profile = await get_influencer_profile(db, actor.user_id)
        if profile is None:
            return [], 0, page, 0
        conditions.append(InfluencerListing.influencer_profile_id == profile.id)
    else:
        conditions.append(InfluencerListing.status == ListingStatus.OPEN.value)

        q = q.strip()
        if q:
            conditions.append(or_(
                InfluencerListing.title.icontains(q, autoescape=True),
                InfluencerListing.description.icontains(q, autoescape=True),
            ))

        pricing_type = pricing_type.strip()
        if pricing_type in (PricingType.FIXED.value, PricingType.AUCTION.value):
            conditions.append(InfluencerListing.pricing_type == pricing_type)

        niche = niche.strip()
        if niche:
            niche_row = (await db.execute(select(Niche).where(Niche.slug == niche))).scalar_one_or_none()
            if niche_row is None:
                return [], 0, page, 0
            conditions.append(InfluencerListing.niches.any(Niche.id == niche_row.id))

    total = (
        await db.execute(select(func.count()).select_from(InfluencerListing).where(*conditions))
    ).scalar_one()

    stmt = (
        select(InfluencerListing)
        .where(*conditions)
        .order_by(InfluencerListing.created_at.desc(), InfluencerListing.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    rows = list((await db.execute(stmt)).scalars().all())
    return rows, total, page, math.ceil(total / limit)
