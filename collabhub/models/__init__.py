from collabhub.models.base import Base  # noqa: F401

from collabhub.models.user import User  # noqa: F401
from collabhub.models.profiles import BrandProfile, InfluencerProfile  # noqa: F401
from collabhub.models.api_key import ApiKey  # noqa: F401
from collabhub.models.niche import Niche, listing_niches  # noqa: F401
from collabhub.models.listing import InfluencerListing  # noqa: F401
from collabhub.models.bid import ListingBid  # noqa: F401
from collabhub.models.message import Message  # noqa: F401
from collabhub.models.outbox import OutboxEvent  # noqa: F401
