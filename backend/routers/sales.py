from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core import ledger
from core.auth import CurrentUser, current_user
from core.errors import ValidationError
from db.database import get_async_session
from db.ledger import SALE_TYPE_CHANNELS
from schemas.ledger import SaleCreate, SaleRead

router = APIRouter()


@router.post("", response_model=SaleRead)
async def create_sale(
    payload: SaleCreate,
    db: AsyncSession = Depends(get_async_session),
    user: CurrentUser = Depends(current_user),
):
    if payload.type not in SALE_TYPE_CHANNELS:
        raise ValidationError("type must be mayor or menor")
    if payload.size not in ledger.SIZES:
        raise ValidationError("size must be S,M,L or XL")

    event = await ledger.record_sale(
        db,
        channel=SALE_TYPE_CHANNELS[payload.type],
        size=payload.size,
        quantity=payload.quantity,
        price=payload.price,
        client=payload.client,
        date=payload.date,
    )
    return SaleRead(**event.to_schema)


@router.get("", response_model=List[SaleRead])
async def list_sales(
    limit: int = Query(ledger.DEFAULT_LIST_LIMIT, ge=1, le=1000),
    db: AsyncSession = Depends(get_async_session),
    user: CurrentUser = Depends(current_user),
):
    items = await ledger.list_sales(db, limit=limit)
    return [SaleRead(**s.to_schema) for s in items]
