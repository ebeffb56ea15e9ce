from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from collabhub.core.db import get_db
from collabhub.core.errors import Conflict
from collabhub.models.niche import Niche
from collabhub.schemas.niche import NicheCreate, NicheOut
from collabhub.services.internal_admin import require_internal_admin

router = APIRouter()


@router.get("/niches", response_model=list[NicheOut])
async def list_niches(db: AsyncSession = Depends(get_db)) -> list[NicheOut]:
    rows = (await db.execute(select(Niche).order_by(Niche.name.asc()))).scalars().all()
    return [NicheOut.model_validate(r) for r in rows]


@router.post(
    "/niches",
    response_model=NicheOut,
    status_code=201,
    dependencies=[Depends(require_internal_admin)],
)
async def create_niche(payload: NicheCreate, db: AsyncSession = Depends(get_db)) -> NicheOut:
    niche = Niche(name=payload.name, slug=payload.slug)
    try:
        db.add(niche)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Niche name or slug already exists")
    return NicheOut.model_validate(niche)
