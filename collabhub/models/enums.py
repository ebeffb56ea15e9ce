from __future__ import annotations
from enum import Enum


class UserRole(str, Enum):
    influencer = "influencer"
    brand = "brand"


class PricingType(str, Enum):
    FIXED = "FIXED"
    AUCTION = "AUCTION"


class ListingStatus(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    SOLD = "SOLD"


class BidStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    OUTBID = "OUTBID"


# Bids that still count towards the "current high bid" of an auction.
LIVE_BID_STATUSES = (BidStatus.PENDING.value, BidStatus.ACCEPTED.value)
