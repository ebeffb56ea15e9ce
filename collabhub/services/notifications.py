from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.models.bid import ListingBid
from collabhub.models.listing import InfluencerListing
from collabhub.models.message import Message
from collabhub.models.outbox import OutboxEvent
from collabhub.models.profiles import BrandProfile, InfluencerProfile
from collabhub.services.bids import format_amount

NOTIFYING_EVENTS = ("bid.placed", "bid.accepted", "bid.rejected")


async def _owner_user_id(db: AsyncSession, listing: InfluencerListing) -> str:
    stmt = select(InfluencerProfile.user_id).where(InfluencerProfile.id == listing.influencer_profile_id)
    return (await db.execute(stmt)).scalar_one()


async def _bidders(db: AsyncSession, bid_ids: list[str]) -> list[tuple[ListingBid, str]]:
    if not bid_ids:
        return []
    stmt = (
        select(ListingBid, BrandProfile.user_id)
        .join(BrandProfile, BrandProfile.id == ListingBid.brand_profile_id)
        .where(ListingBid.id.in_(bid_ids))
        .order_by(ListingBid.amount.desc())
    )
    return [(bid, user_id) for bid, user_id in (await db.execute(stmt)).all()]


async def build_bid_notifications(db: AsyncSession, ev: OutboxEvent) -> list[Message]:
    """
    Messages a bid lifecycle event should produce. Does not add them to the session.
    Unknown event types produce nothing.
    """
    if ev.event_type not in NOTIFYING_EVENTS:
        return []

    listing_id = ev.payload["listing_id"]
    listing = (
        await db.execute(select(InfluencerListing).where(InfluencerListing.id == listing_id))
    ).scalar_one_or_none()
    if listing is None:
        # listing deleted after the event was written
        return []

    owner_user_id = await _owner_user_id(db, listing)
    bid_id = ev.payload["bid_id"]
    pairs = await _bidders(db, [bid_id])
    if not pairs:
        return []
    bid, bidder_user_id = pairs[0]

    def _msg(sender: str, receiver: str, body: str, about: ListingBid) -> Message:
        return Message(
            sender_user_id=sender,
            receiver_user_id=receiver,
            body=body,
            listing_id=listing.id,
            bid_id=about.id,
            source_event_id=ev.id,
        )

    if ev.event_type == "bid.placed":
        return [_msg(
            bidder_user_id, owner_user_id,
            f"New bid of {format_amount(bid.amount)} on \"{listing.title}\"",
            bid,
        )]

    if ev.event_type == "bid.rejected":
        return [_msg(
            owner_user_id, bidder_user_id,
            f"Your bid of {format_amount(bid.amount)} on \"{listing.title}\" was declined",
            bid,
        )]

    messages = [_msg(
        owner_user_id, bidder_user_id,
        f"Your bid of {format_amount(bid.amount)} on \"{listing.title}\" was accepted",
        bid,
    )]
    for outbid, user_id in await _bidders(db, ev.payload.get("outbid_bid_ids", [])):
        messages.append(_msg(
            owner_user_id, user_id,
            f"\"{listing.title}\" was sold to another bid; your bid of {format_amount(outbid.amount)} was outbid",
            outbid,
        ))
    return messages


async def deliver_notifications(db: AsyncSession, ev: OutboxEvent) -> int:
    """Add the event's messages unless an earlier delivery already did. Caller commits."""
    already = (
        await db.execute(select(Message.id).where(Message.source_event_id == ev.id).limit(1))
    ).first()
    if already:
        return 0

    messages = await build_bid_notifications(db, ev)
    db.add_all(messages)
    await db.flush()
    return len(messages)


async def list_inbox(db: AsyncSession, user_id: str, *, limit: int = 50) -> list[Message]:
    stmt = (
        select(Message)
        .where(Message.receiver_user_id == user_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .limit(limit)
    )
    return list((await db.execute(stmt)).scalars().all())
