from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from collabhub.core.db import transaction
from collabhub.core.errors import Conflict, Forbidden, NotFound, ValidationError
from collabhub.core.timeutil import as_utc, utcnow
from collabhub.models.bid import ListingBid
from collabhub.models.enums import BidStatus, ListingStatus, PricingType, UserRole
from collabhub.models.listing import InfluencerListing
from collabhub.schemas.bid import BidCreate
from collabhub.services.auth import Actor
from collabhub.services.listings import assert_listing_owner, get_listing_or_404, highest_live_bid
from collabhub.services.outbox import emit_event
from collabhub.services.profiles import get_brand_profile

log = logging.getLogger(__name__)

RESOLUTION_DECISIONS = (BidStatus.ACCEPTED.value, BidStatus.REJECTED.value)


def format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


async def _get_bid_for_listing(db: AsyncSession, listing_id: str, bid_id: str) -> ListingBid:
    stmt = select(ListingBid).where(ListingBid.id == bid_id).with_for_update()
    bid = (await db.execute(stmt)).scalar_one_or_none()
    if bid is None or bid.listing_id != listing_id:
        raise NotFound("Bid not found for this listing")
    return bid


async def place_bid(db: AsyncSession, *, listing_id: str, actor: Actor, data: BidCreate) -> ListingBid:
    """
    Insert a PENDING bid on an open auction listing.

    The listing row is locked while the current high bid is read, so two
    concurrent bids cannot both clear the same previous high.
    """
    if actor.role != UserRole.brand.value:
        raise Forbidden("Only brands can place bids on influencer listings")

    async with transaction(db):
        listing = await get_listing_or_404(db, listing_id, for_update=True)

        if listing.status != ListingStatus.OPEN.value:
            raise Conflict("This listing is no longer accepting bids")
        if listing.pricing_type != PricingType.AUCTION.value:
            raise ValidationError("Bids are only accepted on auction listings")

        brand_profile = await get_brand_profile(db, actor.user_id)
        if brand_profile is None:
            raise ValidationError("Brand profile not found. Complete onboarding first.")

        if listing.auction_ends_at is not None and utcnow() > as_utc(listing.auction_ends_at):
            raise Conflict("This auction has ended")

        highest = await highest_live_bid(db, listing.id)
        min_required = highest if highest is not None else (listing.starting_bid or 0)
        if data.amount <= min_required:
            raise ValidationError(f"Bid must be higher than {format_amount(min_required)}")

        bid = ListingBid(
            listing_id=listing.id,
            brand_profile_id=brand_profile.id,
            amount=data.amount,
            message=data.message,
            status=BidStatus.PENDING.value,
        )
        db.add(bid)
        await db.flush()

        emit_event(
            db,
            aggregate_type="listing_bid",
            aggregate_id=bid.id,
            event_type="bid.placed",
            payload={
                "listing_id": listing.id,
                "bid_id": bid.id,
                "brand_profile_id": brand_profile.id,
                "amount": bid.amount,
            },
        )

    await db.refresh(bid)
    log.info("bid placed listing=%s bid=%s amount=%s", listing_id, bid.id, bid.amount)
    return bid


async def list_bids(db: AsyncSession, *, listing_id: str, actor: Actor) -> list[ListingBid]:
    listing = await get_listing_or_404(db, listing_id)
    await assert_listing_owner(db, listing, actor, "Only the listing owner can view bids")

    stmt = (
        select(ListingBid)
        .where(ListingBid.listing_id == listing.id)
        .options(selectinload(ListingBid.brand_profile))
        .execution_options(populate_existing=True)
        .order_by(ListingBid.amount.desc(), ListingBid.created_at.asc())
    )
    return list((await db.execute(stmt)).scalars().all())


async def resolve_bid(
    db: AsyncSession,
    *,
    listing_id: str,
    bid_id: str,
    actor: Actor,
    decision: str | BidStatus,
) -> ListingBid:
    """
    Accept or reject one PENDING bid as the listing owner.

    Runs as a single transaction. Accepting also marks every other PENDING bid
    on the listing OUTBID and the listing SOLD; rejecting touches only the
    target bid. Each state change is an explicit UPDATE guarded by the status it
    expects, so a concurrent resolution that got there first surfaces as
    Conflict and this transaction is rolled back whole.
    """
    decision = getattr(decision, "value", decision)

    async with transaction(db):
        listing = await get_listing_or_404(db, listing_id, for_update=True)
        owner = await assert_listing_owner(
            db, listing, actor, "Only the listing owner can accept or reject bids"
        )

        bid = await _get_bid_for_listing(db, listing.id, bid_id)
        if bid.status != BidStatus.PENDING.value:
            raise Conflict("This bid has already been processed")
        if listing.status != ListingStatus.OPEN.value:
            raise Conflict("This listing is no longer open")
        if decision not in RESOLUTION_DECISIONS:
            raise ValidationError("status must be ACCEPTED or REJECTED")

        try:
            result = await db.execute(
                update(ListingBid)
                .where(ListingBid.id == bid.id, ListingBid.status == BidStatus.PENDING.value)
                .values(status=decision)
            )
        except IntegrityError:
            # uq_listing_bids_one_accepted: another bid on this listing won first
            raise Conflict("Another bid on this listing has already been accepted")
        if result.rowcount != 1:
            raise Conflict("This bid has already been processed")

        outbid_ids: list[str] = []
        if decision == BidStatus.ACCEPTED.value:
            result = await db.execute(
                update(InfluencerListing)
                .where(InfluencerListing.id == listing.id, InfluencerListing.status == ListingStatus.OPEN.value)
                .values(status=ListingStatus.SOLD.value)
            )
            if result.rowcount != 1:
                raise Conflict("This listing is no longer open")

            siblings = (
                ListingBid.listing_id == listing.id,
                ListingBid.id != bid.id,
                ListingBid.status == BidStatus.PENDING.value,
            )
            outbid_ids = list((await db.execute(select(ListingBid.id).where(*siblings))).scalars().all())
            await db.execute(
                update(ListingBid).where(*siblings).values(status=BidStatus.OUTBID.value)
            )

        emit_event(
            db,
            aggregate_type="listing_bid",
            aggregate_id=bid.id,
            event_type="bid.accepted" if decision == BidStatus.ACCEPTED.value else "bid.rejected",
            payload={
                "listing_id": listing.id,
                "bid_id": bid.id,
                "owner_profile_id": owner.id,
                "outbid_bid_ids": outbid_ids,
            },
        )

    await db.refresh(bid)
    log.info(
        "bid resolved listing=%s bid=%s decision=%s outbid=%d",
        listing_id, bid_id, decision, len(outbid_ids),
    )
    return bid
