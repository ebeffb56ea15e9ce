from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.db import get_db
from collabhub.schemas.bid import BidCreate, BidList, BidOut, BidStatusUpdate, BidWithBidderOut
from collabhub.services.auth import Actor, get_actor
from collabhub.services.bids import list_bids, place_bid, resolve_bid

router = APIRouter()


@router.get("/influencer-listings/{listing_id}/bids", response_model=BidList)
async def get_listing_bids(
    listing_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> BidList:
    bids = await list_bids(db, listing_id=listing_id, actor=actor)
    return BidList(bids=[BidWithBidderOut.model_validate(b) for b in bids])


@router.post("/influencer-listings/{listing_id}/bids", response_model=BidOut, status_code=201)
async def create_listing_bid(
    listing_id: str,
    payload: BidCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> BidOut:
    bid = await place_bid(db, listing_id=listing_id, actor=actor, data=payload)
    return BidOut.model_validate(bid)


@router.put("/influencer-listings/{listing_id}/bids/{bid_id}", response_model=BidOut)
async def update_bid_status(
    listing_id: str,
    bid_id: str,
    payload: BidStatusUpdate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> BidOut:
    bid = await resolve_bid(db, listing_id=listing_id, bid_id=bid_id, actor=actor, decision=payload.status)
    return BidOut.model_validate(bid)
