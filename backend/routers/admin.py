import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import CurrentUser, current_admin
from core.inventory import reconcile_inventory
from core.ledger import reset_all
from db.database import get_async_session
from schemas.inventory import ReconcileRead, ResetRead

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/reset", response_model=ResetRead)
async def reset_ledger(
    db: AsyncSession = Depends(get_async_session),
    user: CurrentUser = Depends(current_admin),
):
    await reset_all(db)
    logger.warning("Ledger reset requested by %s", user.username)
    return ResetRead(ok=True)


@router.post("/reconcile", response_model=ReconcileRead)
async def reconcile(
    db: AsyncSession = Depends(get_async_session),
    user: CurrentUser = Depends(current_admin),
):
    return ReconcileRead(**await reconcile_inventory(db))
