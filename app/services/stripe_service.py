import stripe
from app.config.settings import settings
from app.models.user import User
from app.services.plans import Plan

stripe.api_key = settings.STRIPE_SECRET_KEY

def create_checkout_session(user: User, plan: Plan):
    if plan.stripe_price_id:
        line_item = {'price': plan.stripe_price_id, 'quantity': 1}
    else:
        line_item = {
            'price_data': {
                'currency': 'usd',
                'product_data': {
                    'name': plan.name,
                    'description': f'{plan.analyses} face analyses and {plan.advice_chats} style advice chats',
                },
                'unit_amount': plan.price_cents,
            },
            'quantity': 1,
        }

    return stripe.checkout.Session.create(
        payment_method_types=['card'],
        line_items=[line_item],
        mode='payment',
        success_url=f'{settings.FRONTEND_URL}/subscription?success=true&session_id={{CHECKOUT_SESSION_ID}}',
        cancel_url=f'{settings.FRONTEND_URL}/subscription?canceled=true',
        customer_email=user.email,
        metadata={
            'user_id': user.id,
            'plan_key': plan.key,
        },
    )

def construct_event(payload: bytes, sig_header: str):
    return stripe.Webhook.construct_event(payload, sig_header, settings.STRIPE_WEBHOOK_SECRET)

def retrieve_session(session_id: str):
    return stripe.checkout.Session.retrieve(session_id)
