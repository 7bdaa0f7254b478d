from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import authenticate, register_user
from db.database import get_async_session
from schemas.users import LoginRequest, TokenRead, UserCreate, UserRead

router = APIRouter()


@router.post("/register", response_model=UserRead)
async def register(
    payload: UserCreate,
    db: AsyncSession = Depends(get_async_session),
):
    user = await register_user(db, payload.username, payload.password, payload.role)
    return UserRead(**user.to_schema)


@router.post("/login", response_model=TokenRead)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_async_session),
):
    token = await authenticate(db, payload.username, payload.password)
    return TokenRead(token=token)
