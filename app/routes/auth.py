from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from urllib.parse import urlencode
import requests
from app.config.settings import settings
from app.database import get_db
from app.models.user import User
from app.services.auth import authenticate_user
from app.services.profile_store import upsert_user_profile
from app.utils.auth import create_access_token
from app.utils.oauth2 import (
    GOOGLE_STATE,
    GOOGLE_TOKEN_URL,
    GOOGLE_USERINFO_URL,
    get_google_auth_url,
    google_redirect_uri,
)
from app.middleware.auth import get_current_user
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    display_name: str = Field(min_length=1)
    accept_terms: bool = True

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

def _token_response(user: User) -> dict:
    return {
        "access_token": create_access_token({"sub": user.id}),
        "token_type": "bearer",
        "user_id": user.id,
    }

@router.post("/signup")
async def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    if not payload.accept_terms:
        raise HTTPException(status_code=400, detail="You must accept the Privacy Policy to create an account.")

    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=409, detail="An account with this email already exists")

    try:
        user = upsert_user_profile(
            db,
            uid=None,
            email=payload.email,
            display_name=payload.display_name,
            auth_provider='email',
            password=payload.password,
        )
    except IntegrityError:
        logger.warning(f"Concurrent signup for {payload.email}")
        raise HTTPException(status_code=409, detail="An account with this email already exists")
    except Exception as e:
        logger.error(f"Error creating account for {payload.email}: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not create the account")

    logger.info(f"Account created: {payload.email}")
    return _token_response(user)

@router.post("/login")
async def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user, status = authenticate_user(db, payload.email, payload.password)
    if status in ("DB_CONNECTION_ERROR", "DB_ERROR"):
        raise HTTPException(status_code=503, detail="Service temporarily unavailable")
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return _token_response(user)

@router.get("/google/login")
async def google_login():
    if not settings.GOOGLE_CLIENT_ID:
        logger.error("GOOGLE_CLIENT_ID is not configured")
        raise HTTPException(status_code=500, detail="Google sign-in is not configured")
    return {"url": get_google_auth_url()}

@router.get("/google/callback")
async def google_callback(code: str, state: str, db: Session = Depends(get_db)):
    try:
        logger.info("=== Starting Google callback ===")

        if state != GOOGLE_STATE:
            logger.error("Invalid state parameter")
            raise HTTPException(status_code=400, detail="Invalid state parameter")

        token_response = requests.post(GOOGLE_TOKEN_URL, data={
            "code": code,
            "client_id": settings.GOOGLE_CLIENT_ID,
            "client_secret": settings.GOOGLE_CLIENT_SECRET,
            "redirect_uri": google_redirect_uri(),
            "grant_type": "authorization_code",
        }, timeout=10)
        logger.info(f"Google token response status: {token_response.status_code}")

        if not token_response.ok:
            logger.error(f"Failed to get token from Google: {token_response.text}")
            raise HTTPException(status_code=400, detail="Failed to get token from Google")

        userinfo_response = requests.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {token_response.json()['access_token']}"},
            timeout=10,
        )
        if not userinfo_response.ok:
            logger.error(f"Failed to get user info: {userinfo_response.text}")
            raise HTTPException(status_code=400, detail="Failed to get user info from Google")

        user_info = userinfo_response.json()
        logger.info(f"Received user info for email: {user_info.get('email')}")

        # Reuse the profile if this email already signed up with a password
        existing = db.query(User).filter(User.email == user_info['email']).first()
        user = upsert_user_profile(
            db,
            uid=existing.id if existing else None,
            email=user_info['email'],
            display_name=user_info.get('name'),
            photo_url=user_info.get('picture'),
            auth_provider='google',
            google_id=user_info.get('sub'),
        )

        token = create_access_token({"sub": user.id})
        return RedirectResponse(
            url=f"{settings.FRONTEND_URL}/auth/google/callback?token={token}",
            status_code=303,
        )

    except Exception as e:
        logger.error(f"Error in Google callback: {str(e)}")
        error_redirect = f"{settings.FRONTEND_URL}/login?{urlencode({'error': str(e)})}"
        return RedirectResponse(url=error_redirect, status_code=303)

@router.get("/validate-token")
async def validate_token(current_user: User = Depends(get_current_user)):
    return {"valid": True, "user_id": current_user.id, "email": current_user.email}
