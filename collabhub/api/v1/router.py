from fastapi import APIRouter

from collabhub.api.v1.endpoints.health import router as health_router
from collabhub.api.v1.endpoints.users import router as users_router
from collabhub.api.v1.endpoints.me import router as me_router
from collabhub.api.v1.endpoints.niches import router as niches_router
from collabhub.api.v1.endpoints.listings import router as listings_router
from collabhub.api.v1.endpoints.bids import router as bids_router
from collabhub.api.v1.endpoints.messages import router as messages_router


router = APIRouter(prefix="/v1")
router.include_router(health_router, tags=["health"])
router.include_router(users_router, tags=["users"])
router.include_router(me_router, tags=["me"])
router.include_router(niches_router, tags=["niches"])
router.include_router(listings_router, tags=["listings"])
router.include_router(bids_router, tags=["bids"])
router.include_router(messages_router, tags=["messages"])
