import os
import sys
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import SessionLocal
from app.models.subscription import Subscription
from app.models.user import User

def check_credits():
    db = SessionLocal()
    try:
        rows = db.query(Subscription, User).join(User).order_by(User.created_at).all()

        print("\n=== User credits ===")
        for subscription, user in rows:
            print(f"\nUser: {user.email}")
            print(f"ID: {user.id}")
            print(f"Plan: {subscription.plan_name}")
            print(f"Analyses remaining: {subscription.analyses_remaining}")
            print(f"Advice chats remaining: {subscription.advice_chats_remaining}")
            print("-" * 30)
    finally:
        db.close()

if __name__ == "__main__":
    check_credits()
