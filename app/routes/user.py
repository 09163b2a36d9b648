from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.models.user import User
from app.middleware.auth import get_current_user
from app.services import profile_store
from app.services.errors import (
    CreditAlreadyClaimedError,
    DocumentNotFoundError,
    PermissionDeniedError,
)
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    photo_url: Optional[str] = None

def profile_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "photo_url": user.photo_url,
        "auth_provider": user.auth_provider,
        "created_at": user.created_at.isoformat() if user.created_at else None,
        "subscription": user.subscription.to_dict() if user.subscription else None,
    }

@router.get("/me")
async def read_user_me(current_user: User = Depends(get_current_user)):
    """Current profile with its subscription."""
    return profile_to_dict(current_user)

@router.get("/credits")
async def get_user_credits(current_user: User = Depends(get_current_user)):
    subscription = current_user.subscription
    return {
        "plan_name": subscription.plan_name,
        "analyses_remaining": subscription.analyses_remaining,
        "advice_chats_remaining": subscription.advice_chats_remaining,
    }

@router.put("/update")
async def update_user(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    data = payload.model_dump(exclude_none=True)
    if not data:
        raise HTTPException(status_code=400, detail="Nothing to update")
    try:
        user = profile_store.update_user_profile(db, current_user.id, current_user.id, data)
        return {"message": "Profile updated successfully", "profile": profile_to_dict(user)}
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating user: {str(e)}")
        raise HTTPException(status_code=500, detail="Error updating profile")

@router.delete("/data")
async def delete_user_data(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Deletes every saved analysis but keeps the account."""
    try:
        deleted = profile_store.delete_all_user_data(db, current_user.id)
        return {"message": "All analysis data deleted", "deleted": deleted}
    except Exception as e:
        logger.error(f"Error deleting user data: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not delete your data")

@router.delete("/me")
async def delete_account(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        profile_store.delete_user_account(db, current_user.id, current_user.id)
        return {"message": "Account deleted"}
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting account: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not delete the account")

@router.post("/claim-social-credit")
async def claim_social_credit(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        subscription = profile_store.claim_social_credit(db, current_user.id)
        return {"message": "Credit added", "subscription": subscription.to_dict()}
    except CreditAlreadyClaimedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error claiming social credit: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not claim the credit")
