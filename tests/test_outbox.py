import pytest
from sqlalchemy import select

from collabhub.models.message import Message
from collabhub.models.outbox import OutboxEvent
from collabhub.services.bids import resolve_bid
from collabhub.services.outbox_dispatcher import PROCESS_TASK, dispatch_outbox, process_outbox_event
from tests.fixtures_seed import add_bid


class FakeSender:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def __call__(self, name, args=None, queue=None):
        if self.fail:
            raise ConnectionError("broker down")
        self.calls.append((name, args, queue))


async def _messages_for(db, user_id: str) -> list[Message]:
    stmt = select(Message).where(Message.receiver_user_id == user_id).order_by(Message.body)
    return list((await db.execute(stmt)).scalars().all())


@pytest.mark.asyncio
async def test_bid_placement_emits_event_and_notifies_owner(client, db_session, influencer, brand, auction_listing):
    r = await client.post(
        f"/v1/influencer-listings/{auction_listing}/bids", json={"amount": 250}, headers=brand["headers"]
    )
    assert r.status_code == 201

    sender = FakeSender()
    assert await dispatch_outbox(db_session, sender) == 1
    name, (outbox_id, lease_id), queue = sender.calls[0]
    assert name == PROCESS_TASK
    assert queue == "outbox"

    assert await process_outbox_event(db_session, outbox_id, lease_id) is True

    [msg] = await _messages_for(db_session, influencer["user_id"])
    assert msg.sender_user_id == brand["user_id"]
    assert msg.body == 'New bid of $250 on "Sponsored YouTube video"'

    r = await client.get("/v1/messages", headers=influencer["headers"])
    assert r.status_code == 200
    assert [m["bid_id"] for m in r.json()] == [msg.bid_id]


@pytest.mark.asyncio
async def test_acceptance_notifies_winner_and_outbid_bidders(db_session, influencer, brand, other_brand, auction_listing):
    loser = await add_bid(db_session, auction_listing, brand, 100)
    winner = await add_bid(db_session, auction_listing, other_brand, 150)
    await resolve_bid(
        db_session, listing_id=auction_listing, bid_id=winner, actor=influencer["actor"], decision="ACCEPTED"
    )

    sender = FakeSender()
    await dispatch_outbox(db_session, sender)
    [(_, (outbox_id, lease_id), _)] = sender.calls
    assert await process_outbox_event(db_session, outbox_id, lease_id) is True

    [won] = await _messages_for(db_session, other_brand["user_id"])
    assert "was accepted" in won.body
    assert won.bid_id == winner

    [lost] = await _messages_for(db_session, brand["user_id"])
    assert "was outbid" in lost.body
    assert lost.bid_id == loser
    assert lost.sender_user_id == influencer["user_id"]

    ev = (await db_session.execute(select(OutboxEvent.status, OutboxEvent.lease_id))).one()
    assert ev.status == "done"
    assert ev.lease_id is None


@pytest.mark.asyncio
async def test_stale_lease_is_not_processed(db_session, influencer, brand, auction_listing):
    b1 = await add_bid(db_session, auction_listing, brand, 100)
    await resolve_bid(
        db_session, listing_id=auction_listing, bid_id=b1, actor=influencer["actor"], decision="REJECTED"
    )

    sender = FakeSender()
    await dispatch_outbox(db_session, sender)
    [(_, (outbox_id, _lease), _)] = sender.calls

    assert await process_outbox_event(db_session, outbox_id, "someone-else") is False
    assert await _messages_for(db_session, brand["user_id"]) == []


@pytest.mark.asyncio
async def test_enqueue_failure_returns_event_to_pending(db_session, influencer, brand, auction_listing):
    b1 = await add_bid(db_session, auction_listing, brand, 100)
    await resolve_bid(
        db_session, listing_id=auction_listing, bid_id=b1, actor=influencer["actor"], decision="REJECTED"
    )

    assert await dispatch_outbox(db_session, FakeSender(fail=True)) == 0

    row = (await db_session.execute(select(OutboxEvent.status, OutboxEvent.attempts, OutboxEvent.last_error))).one()
    assert row.status == "pending"
    assert row.attempts == 1
    assert row.last_error.startswith("enqueue failed: ConnectionError")


@pytest.mark.asyncio
async def test_nothing_to_dispatch(db_session):
    sender = FakeSender()
    assert await dispatch_outbox(db_session, sender) == 0
    assert sender.calls == []
