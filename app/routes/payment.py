from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User
from app.middleware.auth import get_current_user
from app.config.settings import settings
from app.services import profile_store, stripe_service
from app.services.errors import DocumentNotFoundError
from app.services.plans import PLANS, get_plan
import stripe
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/plans")
async def list_plans():
    return {
        "plans": [
            {
                "key": plan.key,
                "name": plan.name,
                "price_cents": plan.price_cents,
                "period": plan.period,
                "analyses": plan.analyses,
                "advice_chats": plan.advice_chats,
            }
            for plan in PLANS.values()
        ]
    }

@router.post("/create-checkout-session/{plan_key}")
async def create_checkout_session(
    plan_key: str,
    current_user: User = Depends(get_current_user)
):
    plan = get_plan(plan_key)
    if plan is None:
        raise HTTPException(status_code=404, detail="Unknown plan")

    if not settings.STRIPE_SECRET_KEY:
        logger.error("Stripe settings missing")
        raise HTTPException(status_code=500, detail="Server configuration error")

    try:
        logger.info(f"Creating checkout session for {current_user.id}, plan {plan.key}")
        checkout_session = stripe_service.create_checkout_session(current_user, plan)
        logger.info(f"Checkout session created: {checkout_session['id']}")
        return {"url": checkout_session["url"], "session_id": checkout_session["id"]}
    except stripe.StripeError as e:
        logger.error(f"Stripe error: {str(e)}")
        raise HTTPException(status_code=400, detail=f"Error creating checkout session: {str(e)}")

def _apply_paid_session(db: Session, session) -> dict:
    metadata = session["metadata"] or {}
    user_id = metadata.get("user_id")
    plan_key = metadata.get("plan_key")
    if not user_id or not plan_key:
        logger.error(f"Checkout session {session['id']} has no user or plan metadata")
        return {"status": "error", "message": "Session metadata missing"}

    try:
        subscription, applied = profile_store.apply_plan(db, user_id, plan_key, session["id"])
    except ValueError as e:
        logger.error(f"Checkout session {session['id']} cannot be applied: {str(e)}")
        return {"status": "error", "message": str(e)}
    return {
        "status": "success",
        "applied": applied,
        "subscription": subscription.to_dict(),
    }

@router.post("/webhook")
async def stripe_webhook(request: Request, db: Session = Depends(get_db)):
    payload = await request.body()
    sig_header = request.headers.get('stripe-signature')
    logger.info("Stripe webhook received")

    try:
        event = stripe_service.construct_event(payload, sig_header)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.error(f"Invalid Stripe webhook: {str(e)}")
        raise HTTPException(status_code=400, detail="Invalid webhook")

    logger.info(f"Stripe event: {event['type']}")
    if event['type'] != 'checkout.session.completed':
        return {"status": "ignored"}

    session = event['data']['object']
    if session['payment_status'] != 'paid':
        logger.info(f"Session {session['id']} not paid yet: {session['payment_status']}")
        return {"status": "pending"}

    try:
        return _apply_paid_session(db, session)
    except DocumentNotFoundError as e:
        logger.error(f"User not found for session {session['id']}: {str(e)}")
        return {"status": "error", "message": "User not found"}
    except Exception as e:
        logger.error(f"Error in webhook: {str(e)}")
        raise HTTPException(status_code=500, detail="Error applying plan")

@router.get("/verify-payment/{session_id}")
async def verify_payment(
    session_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        session = stripe_service.retrieve_session(session_id)
    except stripe.StripeError as e:
        logger.error(f"Stripe error: {str(e)}")
        raise HTTPException(status_code=502, detail="Could not verify the payment")

    if (session["metadata"] or {}).get("user_id") != current_user.id:
        raise HTTPException(status_code=403, detail="This checkout session belongs to another user")

    logger.info(f"Payment status for {session_id}: {session['payment_status']}")
    if session["payment_status"] != "paid":
        return {"status": "pending", "message": "Payment not confirmed yet"}

    try:
        return _apply_paid_session(db, session)
    except Exception as e:
        logger.error(f"Error applying plan for session {session_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Error applying plan")
