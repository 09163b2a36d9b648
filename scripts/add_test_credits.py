import os
import sys
import argparse
import logging
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import SessionLocal
from app.models.user import User
from app.services.profile_store import upsert_user_profile

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def add_test_credits(email: str, analyses: int, advice_chats: int):
    db = SessionLocal()
    try:
        user = db.query(User).filter(User.email == email).first()
        if not user:
            user = upsert_user_profile(db, uid=None, email=email, display_name="Test User")
            logger.info(f"Test user created: {email}")

        subscription = user.subscription
        subscription.analyses_remaining += analyses
        subscription.advice_chats_remaining += advice_chats
        db.commit()
        logger.info(
            f"Credits for {email}: {subscription.analyses_remaining} analyses, "
            f"{subscription.advice_chats_remaining} advice chats"
        )
    except Exception as e:
        logger.error(f"Error adding credits: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Grant credits to a test account")
    parser.add_argument("email", nargs="?", default="test@example.com")
    parser.add_argument("--analyses", type=int, default=4)
    parser.add_argument("--advice-chats", type=int, default=4)
    args = parser.parse_args()
    add_test_credits(args.email, args.analyses, args.advice_chats)
