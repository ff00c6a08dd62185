from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from content_shield.auth import TOKEN_COOKIE_NAME, create_access_token, get_current_user
from content_shield.config import settings
from content_shield.database import get_db
from content_shield.models.user import User
from content_shield.schemas.user import Token, UserCreate, UserLogin, UserResponse
from content_shield.services.user_service import UserService

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _issue_token(response: Response, user: User) -> Token:
    access_token = create_access_token({"sub": user.email})
    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=access_token,
        httponly=True,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
    )
    return Token(access_token=access_token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(payload: UserCreate, response: Response, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).register_user(payload.email, payload.password)
    return _issue_token(response, user)


@router.post("/login", response_model=Token)
async def login(payload: UserLogin, response: Response, db: AsyncSession = Depends(get_db)):
    user = await UserService(db).authenticate(payload.email, payload.password)
    return _issue_token(response, user)


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME)
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
