from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import CurrentUser, current_user
from core.inventory import get_inventory
from db.database import get_async_session
from schemas.inventory import InventoryRead

router = APIRouter()


@router.get("", response_model=InventoryRead)
async def read_inventory(
    db: AsyncSession = Depends(get_async_session),
    user: CurrentUser = Depends(current_user),
):
    return InventoryRead(**await get_inventory(db))
