from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core import ledger
from core.auth import CurrentUser, current_user
from db.database import get_async_session
from schemas.ledger import CollectionCreate, CollectionRead

router = APIRouter()


@router.post("", response_model=CollectionRead)
async def create_collection(
    payload: CollectionCreate,
    db: AsyncSession = Depends(get_async_session),
    user: CurrentUser = Depends(current_user),
):
    event = await ledger.record_collection(
        db,
        date=payload.date,
        s=payload.s,
        m=payload.m,
        l=payload.l,
        xl=payload.xl,
        notes=payload.notes,
    )
    return CollectionRead(**event.to_schema)


@router.get("", response_model=List[CollectionRead])
async def list_collections(
    limit: int = Query(ledger.DEFAULT_LIST_LIMIT, ge=1, le=1000),
    db: AsyncSession = Depends(get_async_session),
    user: CurrentUser = Depends(current_user),
):
    items = await ledger.list_collections(db, limit=limit)
    return [CollectionRead(**c.to_schema) for c in items]
