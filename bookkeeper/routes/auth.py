import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import authenticate_user, create_access_token, get_current_user
from ..database import get_db
from ..domain.users.router import to_user_response
from ..domain.users.schemas import LoginRequest, TokenResponse, UserResponse
from ..models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange login/password for a Bearer access token"""
    user = authenticate_user(db, data.login, data.password)
    return TokenResponse(accessToken=create_access_token(user), user=to_user_response(user))


@router.post("/logout")
async def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy"""
    logger.info(f"👋 User {current_user.id} logged out")
    return {"success": True}


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return to_user_response(current_user)
