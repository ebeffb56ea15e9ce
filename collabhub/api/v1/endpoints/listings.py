from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.db import get_db
from collabhub.schemas.listing import (
    ListingCreate,
    ListingDetailOut,
    ListingOut,
    ListingPage,
    ListingUpdate,
)
from collabhub.services.auth import Actor, get_actor, get_optional_actor
from collabhub.services.listings import (
    DEFAULT_PAGE_SIZE,
    create_listing,
    delete_listing,
    get_listing_or_404,
    listing_details,
    search_listings,
    update_listing,
)

router = APIRouter()


@router.get("/influencer-listings", response_model=ListingPage)
async def browse_listings(
    mine: bool = False,
    q: str = "",
    niche: str = "",
    pricing_type: str = Query(default="", alias="pricingType"),
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    actor: Actor | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> ListingPage:
    rows, total, page, total_pages = await search_listings(
        db,
        actor=actor,
        mine=mine,
        q=q,
        niche=niche,
        pricing_type=pricing_type,
        page=page,
        limit=limit,
    )
    details = await listing_details(db, rows)
    return ListingPage(
        listings=[ListingDetailOut(**d) for d in details],
        total=total,
        page=page,
        total_pages=total_pages,
    )


@router.post("/influencer-listings", response_model=ListingOut, status_code=201)
async def create_influencer_listing(
    payload: ListingCreate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ListingOut:
    listing = await create_listing(db, actor=actor, data=payload)
    resp = ListingOut.model_validate(listing)
    await db.commit()
    return resp


@router.get("/influencer-listings/{listing_id}", response_model=ListingDetailOut)
async def get_influencer_listing(listing_id: str, db: AsyncSession = Depends(get_db)) -> ListingDetailOut:
    listing = await get_listing_or_404(db, listing_id)
    [detail] = await listing_details(db, [listing])
    return ListingDetailOut(**detail)


@router.put("/influencer-listings/{listing_id}", response_model=ListingOut)
async def update_influencer_listing(
    listing_id: str,
    payload: ListingUpdate,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ListingOut:
    listing = await update_listing(db, listing_id=listing_id, actor=actor, data=payload)
    resp = ListingOut.model_validate(listing)
    await db.commit()
    return resp


@router.delete("/influencer-listings/{listing_id}")
async def delete_influencer_listing(
    listing_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> dict:
    await delete_listing(db, listing_id=listing_id, actor=actor)
    await db.commit()
    return {"status": "deleted", "listing_id": listing_id}
