"""
Authentication endpoints: signup, signin, signout and session lookup.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.user import User
from eventhive.schemas.user import UserCreate, UserResponse, UserLogin, Token, SessionResponse
from eventhive.services.auth_service import register_user, authenticate_user
from eventhive.core.config import get_settings
from eventhive.core.security import get_optional_user

settings = get_settings()
router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new PLAYER or FACILITY_OWNER account."""
    return await register_user(db, user_data)


@router.post("/signin", response_model=Token)
async def signin(login_data: UserLogin, response: Response, db: AsyncSession = Depends(get_db)):
    """Authenticate; the token is returned in the body and set as an HTTP-only cookie."""
    user, token = await authenticate_user(db, login_data)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.ENVIRONMENT == "production",
    )
    return Token(access_token=token, user=UserResponse.model_validate(user))


@router.post("/signout")
async def signout(response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"success": True}


@router.get("/session", response_model=SessionResponse)
async def session(user: Optional[User] = Depends(get_optional_user)):
    if user is None:
        return SessionResponse(authenticated=False)
    return SessionResponse(authenticated=True, user=UserResponse.model_validate(user))
