import io
from PIL import Image
from sqlalchemy.orm import Session
from app.services.profile_store import upsert_user_profile
from app.utils.auth import create_access_token

TEST_USER_DATA = {
    "email": "test@example.com",
    "password": "Test@123",
    "display_name": "Test User"
}

SAMPLE_ANALYSIS = {
    "face_shape": {
        "shape": "Oval",
        "description": "Balanced proportions with a slightly narrower jaw than forehead."
    },
    "feature_ratings": [
        {"name": "Jawline", "rating": 6, "description": "Softly defined with a rounded angle."},
        {"name": "Forehead", "rating": 5, "description": "Medium height, gently curved."},
        {"name": "Nose", "rating": 4, "description": "Straight bridge, narrow tip."},
        {"name": "Cheekbones", "rating": 7, "description": "High and moderately prominent."},
    ]
}

DATA_URI = "data:image/png;base64,iVBORw0KGgo="
IMAGE_URLS = [DATA_URI, DATA_URI, DATA_URI]

def create_test_user(db: Session, email: str = None, uid: str = None):
    return upsert_user_profile(
        db,
        uid=uid,
        email=email or TEST_USER_DATA["email"],
        display_name=TEST_USER_DATA["display_name"],
    )

def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.id})}"}

def set_credits(db: Session, user, analyses: int = None, advice_chats: int = None):
    subscription = user.subscription
    if analyses is not None:
        subscription.analyses_remaining = analyses
    if advice_chats is not None:
        subscription.advice_chats_remaining = advice_chats
    db.commit()

def png_bytes(size=(8, 8)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 160, 140)).save(buffer, format="PNG")
    return buffer.getvalue()
