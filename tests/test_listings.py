import pytest
from sqlalchemy import select

from collabhub.models.listing import InfluencerListing
from collabhub.models.niche import Niche
from tests.fixtures_seed import add_bid, make_listing

LISTINGS_URL = "/v1/influencer-listings"

AUCTION_BODY = {
    "title": "Sponsored TikTok series",
    "description": "Three short-form videos featuring your product over one month.",
    "pricing_type": "AUCTION",
    "starting_bid": 200,
    "reserve_price": 400,
    "auction_ends_at": "2099-01-01T00:00:00Z",
}


async def _niche(db, name: str, slug: str) -> str:
    niche = Niche(name=name, slug=slug)
    db.add(niche)
    await db.commit()
    return niche.id


@pytest.mark.asyncio
async def test_influencer_creates_auction_listing(client, db_session, influencer):
    niche_id = await _niche(db_session, "Gaming", "gaming")

    r = await client.post(LISTINGS_URL, json={**AUCTION_BODY, "niche_ids": [niche_id]}, headers=influencer["headers"])
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "OPEN"
    assert body["influencer_profile_id"] == influencer["profile_id"]
    assert body["starting_bid"] == 200
    assert body["fixed_price"] is None
    assert [n["slug"] for n in body["niches"]] == ["gaming"]


@pytest.mark.asyncio
async def test_fixed_listing_drops_auction_fields(client, db_session, influencer):
    body = {
        "title": "Instagram post",
        "description": "One feed post and two stories about your brand.",
        "pricing_type": "FIXED",
        "fixed_price": 300,
        "starting_bid": 10,
    }
    r = await client.post(LISTINGS_URL, json=body, headers=influencer["headers"])
    assert r.status_code == 201, r.text

    row = (await db_session.execute(select(InfluencerListing).where(InfluencerListing.id == r.json()["id"]))).scalar_one()
    assert row.fixed_price == 300
    assert row.starting_bid is None


@pytest.mark.asyncio
async def test_create_listing_validation(client, influencer):
    r = await client.post(LISTINGS_URL, json={**AUCTION_BODY, "auction_ends_at": None}, headers=influencer["headers"])
    assert r.status_code == 400
    assert "AUCTION requires starting_bid and auction_ends_at" in r.json()["message"]

    r = await client.post(LISTINGS_URL, json={**AUCTION_BODY, "title": "Hey"}, headers=influencer["headers"])
    assert r.status_code == 400

    r = await client.post(LISTINGS_URL, json={**AUCTION_BODY, "niche_ids": ["nch_missing"]}, headers=influencer["headers"])
    assert r.status_code == 400
    assert r.json()["details"] == [{"niche_id": "nch_missing"}]

    r = await client.post(
        LISTINGS_URL,
        content='{"title": "Sponsored TikTok series", "description": "Three short-form videos featuring your product.", '
        '"pricing_type": "AUCTION", "starting_bid": 1e999, "auction_ends_at": "2099-01-01T00:00:00Z"}',
        headers={**influencer["headers"], "Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"
    assert "finite" in r.json()["message"]


@pytest.mark.asyncio
async def test_brand_cannot_create_listing(client, brand):
    r = await client.post(LISTINGS_URL, json=AUCTION_BODY, headers=brand["headers"])
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_get_listing_reports_highest_live_bid(client, db_session, brand, other_brand, auction_listing):
    await add_bid(db_session, auction_listing, brand, 120)
    await add_bid(db_session, auction_listing, other_brand, 999, status="REJECTED")

    r = await client.get(f"{LISTINGS_URL}/{auction_listing}")
    assert r.status_code == 200
    body = r.json()
    assert body["bid_count"] == 2
    assert body["highest_bid"] == 120


@pytest.mark.asyncio
async def test_get_missing_listing(client):
    r = await client.get(f"{LISTINGS_URL}/lst_missing")
    assert r.status_code == 404
    assert r.json() == {"code": "not_found", "message": "Listing not found", "details": []}


@pytest.mark.asyncio
async def test_browse_only_open_listings_with_filters(client, db_session, influencer):
    niche_id = await _niche(db_session, "Beauty", "beauty")
    await make_listing(db_session, influencer, title="Makeup tutorial collab")
    await make_listing(db_session, influencer, pricing_type="FIXED", title="Fixed podcast read")
    await make_listing(db_session, influencer, title="Closed giveaway", status="CLOSED")

    tagged = (await db_session.execute(select(Niche).where(Niche.id == niche_id))).scalar_one()
    listing_id = await make_listing(db_session, influencer, title="Skincare haul")
    row = (await db_session.execute(select(InfluencerListing).where(InfluencerListing.id == listing_id))).scalar_one()
    row.niches = [tagged]
    await db_session.commit()

    r = await client.get(LISTINGS_URL)
    assert r.status_code == 200
    assert r.json()["total"] == 3

    r = await client.get(LISTINGS_URL, params={"q": "MAKEUP"})
    assert [item["title"] for item in r.json()["listings"]] == ["Makeup tutorial collab"]

    r = await client.get(LISTINGS_URL, params={"pricingType": "FIXED"})
    assert [item["title"] for item in r.json()["listings"]] == ["Fixed podcast read"]

    r = await client.get(LISTINGS_URL, params={"niche": "beauty"})
    assert [item["title"] for item in r.json()["listings"]] == ["Skincare haul"]

    r = await client.get(LISTINGS_URL, params={"niche": "unknown"})
    assert r.json() == {"listings": [], "total": 0, "page": 1, "total_pages": 0}


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(client, db_session, influencer):
    await make_listing(db_session, influencer, title="Reach 100% of my followers")
    await make_listing(db_session, influencer, title="Reach 1000 followers")
    await make_listing(db_session, influencer, title="Promo for snake_case fans")
    await make_listing(db_session, influencer, title="Promo for snakeXcase fans")

    r = await client.get(LISTINGS_URL, params={"q": "100%"})
    assert [item["title"] for item in r.json()["listings"]] == ["Reach 100% of my followers"]

    r = await client.get(LISTINGS_URL, params={"q": "snake_case"})
    assert [item["title"] for item in r.json()["listings"]] == ["Promo for snake_case fans"]


@pytest.mark.asyncio
async def test_browse_pagination_is_clamped(client, db_session, influencer):
    for i in range(3):
        await make_listing(db_session, influencer, title=f"Listing number {i}")

    r = await client.get(LISTINGS_URL, params={"limit": 2, "page": 2})
    body = r.json()
    assert body["total"] == 3
    assert body["page"] == 2
    assert body["total_pages"] == 2
    assert len(body["listings"]) == 1

    r = await client.get(LISTINGS_URL, params={"limit": 500, "page": 0})
    body = r.json()
    assert body["page"] == 1
    assert body["total_pages"] == 1


@pytest.mark.asyncio
async def test_mine_returns_own_listings_in_any_status(client, db_session, influencer, other_influencer):
    await make_listing(db_session, influencer, title="My open listing")
    await make_listing(db_session, influencer, title="My sold listing", status="SOLD")
    await make_listing(db_session, other_influencer, title="Someone else's listing")

    r = await client.get(LISTINGS_URL, params={"mine": "true"}, headers=influencer["headers"])
    assert r.status_code == 200
    titles = sorted(item["title"] for item in r.json()["listings"])
    assert titles == ["My open listing", "My sold listing"]


@pytest.mark.asyncio
async def test_owner_updates_open_listing(client, influencer, auction_listing):
    r = await client.put(
        f"{LISTINGS_URL}/{auction_listing}",
        json={"title": "Updated sponsorship title", "starting_bid": 75},
        headers=influencer["headers"],
    )
    assert r.status_code == 200, r.text
    assert r.json()["title"] == "Updated sponsorship title"
    assert r.json()["starting_bid"] == 75


@pytest.mark.asyncio
async def test_update_rules(client, db_session, influencer, other_influencer, auction_listing):
    url = f"{LISTINGS_URL}/{auction_listing}"

    r = await client.put(url, json={"title": "Hijacked listing"}, headers=other_influencer["headers"])
    assert r.status_code == 403

    r = await client.put(url, json={"fixed_price": 10}, headers=influencer["headers"])
    assert r.status_code == 400

    r = await client.put(url, json={"status": "SOLD"}, headers=influencer["headers"])
    assert r.status_code == 400

    r = await client.put(url, json={"status": "CLOSED"}, headers=influencer["headers"])
    assert r.status_code == 200
    assert r.json()["status"] == "CLOSED"

    r = await client.put(url, json={"starting_bid": 1}, headers=influencer["headers"])
    assert r.status_code == 400
    assert r.json()["code"] == "conflict"


@pytest.mark.asyncio
async def test_delete_listing_without_bids(client, influencer, other_influencer, auction_listing):
    url = f"{LISTINGS_URL}/{auction_listing}"

    r = await client.delete(url, headers=other_influencer["headers"])
    assert r.status_code == 403

    r = await client.delete(url, headers=influencer["headers"])
    assert r.status_code == 200
    assert r.json() == {"status": "deleted", "listing_id": auction_listing}

    r = await client.get(url)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_listing_with_bids_is_refused(client, db_session, influencer, brand, auction_listing):
    await add_bid(db_session, auction_listing, brand, 100)

    r = await client.delete(f"{LISTINGS_URL}/{auction_listing}", headers=influencer["headers"])
    assert r.status_code == 400
    assert r.json()["code"] == "conflict"

    r = await client.get(f"{LISTINGS_URL}/{auction_listing}")
    assert r.status_code == 200
