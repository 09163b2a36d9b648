from dataclasses import dataclass
from app.config.settings import settings

@dataclass(frozen=True)
class Plan:
    key: str
    name: str
    price_cents: int
    period: str
    analyses: int
    advice_chats: int

    @property
    def stripe_price_id(self) -> str | None:
        return getattr(settings, f"STRIPE_PRICE_ID_{self.key.upper()}", None)

PLANS = {
    "weekly": Plan("weekly", "Weekly Sparkle", 499, "week", analyses=5, advice_chats=5),
    "monthly": Plan("monthly", "Monthly Glow-Up", 1499, "month", analyses=30, advice_chats=30),
    "annual": Plan("annual", "Annual Radiance", 9999, "year", analyses=365, advice_chats=365),
}

def get_plan(plan_key: str) -> Plan | None:
    return PLANS.get(plan_key)
