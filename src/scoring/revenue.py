"""
Revenue and Paid Search Model

Estimates organic traffic, monthly revenue and paid-search economics for a
keyword. Two revenue models are supported:

- Flat: one {ctr, conversion, customer_value} triple per intent.
- Tiered: ctr per intent, conversion per (product tier × intent), customer
  value and currency per (product × market).

Both use the same arithmetic, floored at each stage:

    traffic = floor(volume × ctr)
    revenue = floor(traffic × conversion × customer_value / 12)

Customer value is annual, hence the /12. Traffic is floored before revenue
is computed from it; keep that order.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .helpers import normalize_intent


# ============================================================================
# FLAT MODEL
# ============================================================================

REVENUE_MODELS: Dict[str, Dict[str, float]] = {
    "transactional": {"ctr": 0.08, "conversion": 0.02, "customerValue": 30000},
    "commercial": {"ctr": 0.05, "conversion": 0.005, "customerValue": 30000},
    "informational": {"ctr": 0.03, "conversion": 0.001, "customerValue": 30000},
    "comparison": {"ctr": 0.06, "conversion": 0.008, "customerValue": 30000},
    "navigational": {"ctr": 0.01, "conversion": 0.001, "customerValue": 30000},
}
DEFAULT_REVENUE_INTENT = "commercial"
DEFAULT_CURRENCY = "$"


# ============================================================================
# TIERED MODEL
# ============================================================================

TIERED_CTR: Dict[str, float] = {
    "transactional": 0.08,
    "comparison": 0.06,
    "commercial": 0.05,
    "informational": 0.03,
    "navigational": 0.01,
}
DEFAULT_TIERED_CTR = 0.03

MID_MARKET = "mid_market"
SMALL_BUSINESS = "small_business"

# Product names containing one of these are sold up-market
UPPER_MARKET_MARKERS: Tuple[str, ...] = ("intacct", "x3", "enterprise")

TIER_CONVERSION: Dict[str, Dict[str, float]] = {
    MID_MARKET: {
        "transactional": 0.015,
        "comparison": 0.006,
        "commercial": 0.004,
        "informational": 0.0008,
        "navigational": 0.0005,
    },
    SMALL_BUSINESS: {
        "transactional": 0.03,
        "comparison": 0.012,
        "commercial": 0.008,
        "informational": 0.002,
        "navigational": 0.001,
    },
}
DEFAULT_TIER_CONVERSION: Dict[str, float] = {
    MID_MARKET: 0.002,
    SMALL_BUSINESS: 0.004,
}

# (annual customer value, currency symbol)
CUSTOMER_VALUES: Dict[str, Tuple[int, str]] = {
    "sage_intacct": (45000, "$"),
    "sage_intacct_us": (45000, "$"),
    "sage_intacct_ca": (52000, "C$"),
    "sage_intacct_gb": (32000, "£"),
    "sage_intacct_au": (58000, "A$"),
    "sage_intacct_za": (600000, "R"),
    "sage_x3": (150000, "$"),
    "sage_x3_gb": (110000, "£"),
    "sage_50": (3000, "$"),
    "sage_50_gb": (2000, "£"),
    "sage_50_ca": (3500, "C$"),
    "sage_accounting": (1500, "$"),
    "sage_accounting_gb": (1100, "£"),
    "sage_accounting_za": (18000, "R"),
    "sage_payroll": (2400, "$"),
    "sage_payroll_gb": (1800, "£"),
}
DEFAULT_CUSTOMER_VALUE: Tuple[int, str] = (30000, DEFAULT_CURRENCY)

MARKET_ALIASES: Dict[str, str] = {"uk": "gb"}


# ============================================================================
# PAID SEARCH
# ============================================================================

BASE_PAID_CTR = 0.04
PAID_INTENT_MULTIPLIERS: Dict[str, float] = {
    "transactional": 1.25,
    "informational": 0.5,
}
HIGH_VALUE_CPC = 10
DEFAULT_CPC = 5.0


@dataclass
class RevenueEstimate:
    """Estimated organic traffic and monthly revenue for a keyword."""
    estimated_traffic: int
    monthly_revenue: int
    currency: str
    model: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PaidSearchInsight:
    """Paid-search cost and strategy recommendation for a keyword."""
    estimated_paid_clicks: int
    monthly_paid_cost: int
    annual_paid_cost: int
    paid_strategy: str
    paid_ctr: float
    is_high_value: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "estimatedPaidClicks": self.estimated_paid_clicks,
            "monthlyPaidCost": self.monthly_paid_cost,
            "annualPaidCost": self.annual_paid_cost,
            "paidStrategy": self.paid_strategy,
            "paidCTR": self.paid_ctr,
            "isHighValueKeyword": self.is_high_value,
        }


def _project(volume: int, ctr: float, conversion: float, customer_value: float) -> Tuple[int, int]:
    traffic = math.floor((volume or 0) * ctr)
    revenue = math.floor(traffic * conversion * customer_value / 12)
    return traffic, revenue


def estimate_revenue(volume: int, intent: Optional[str]) -> RevenueEstimate:
    """
    Flat revenue model.

    Args:
        volume: Monthly search volume
        intent: Intent label, any case; unmapped intents use the commercial model

    Returns:
        RevenueEstimate
    """
    params = REVENUE_MODELS.get(normalize_intent(intent)) or REVENUE_MODELS[DEFAULT_REVENUE_INTENT]
    traffic, revenue = _project(volume, params["ctr"], params["conversion"], params["customerValue"])
    return RevenueEstimate(
        estimated_traffic=traffic,
        monthly_revenue=revenue,
        currency=DEFAULT_CURRENCY,
        model={"intent": intent, **params},
    )


def get_product_tier(product: str) -> str:
    """Mid-market if the product name indicates an upper-market product."""
    name = (product or "").lower()
    return MID_MARKET if any(marker in name for marker in UPPER_MARKET_MARKERS) else SMALL_BUSINESS


def _product_key(product: str) -> str:
    return "_".join((product or "").lower().replace("-", " ").split())


def get_customer_value(product: str, market: Optional[str]) -> Tuple[int, str]:
    """
    Look up (customer value, currency) for a product in a market.

    Falls back from `{product}_{market}` to `{product}` to the global default.
    """
    key = _product_key(product)
    market_code = (market or "").lower().strip()
    market_code = MARKET_ALIASES.get(market_code, market_code)

    if market_code and f"{key}_{market_code}" in CUSTOMER_VALUES:
        return CUSTOMER_VALUES[f"{key}_{market_code}"]
    return CUSTOMER_VALUES.get(key, DEFAULT_CUSTOMER_VALUE)


def estimate_tiered_revenue(
    volume: int,
    intent: Optional[str],
    product: str,
    market: Optional[str],
) -> RevenueEstimate:
    """
    Tiered revenue model keyed by product tier and market.

    Args:
        volume: Monthly search volume
        intent: Intent label, any case
        product: Target product name (e.g. "sage_intacct")
        market: Country code (e.g. "us", "gb")

    Returns:
        RevenueEstimate
    """
    intent_key = normalize_intent(intent)
    tier = get_product_tier(product)
    ctr = TIERED_CTR.get(intent_key, DEFAULT_TIERED_CTR)
    conversion = TIER_CONVERSION[tier].get(intent_key, DEFAULT_TIER_CONVERSION[tier])
    customer_value, currency = get_customer_value(product, market)

    traffic, revenue = _project(volume, ctr, conversion, customer_value)
    return RevenueEstimate(
        estimated_traffic=traffic,
        monthly_revenue=revenue,
        currency=currency,
        model={
            "intent": intent,
            "tier": tier,
            "ctr": ctr,
            "conversion": conversion,
            "customerValue": customer_value,
            "currency": currency,
        },
    )


def normalize_cpc(raw_cpc: Optional[float]) -> float:
    """Provider CPC is in cents; missing or zero falls back to the default."""
    if not raw_cpc:
        return DEFAULT_CPC
    return raw_cpc / 100


def choose_paid_strategy(cpc: float, difficulty: Optional[int], intent: str) -> str:
    """First matching rule wins. Unknown difficulty never satisfies a difficulty rule."""
    known = difficulty is not None
    if cpc > 3 and known and difficulty > 50:
        return "paid_first"
    if intent == "transactional" and cpc > 2:
        return "both"
    if cpc > 1.5 and known and difficulty > 40:
        return "both"
    if known and difficulty < 30:
        return "organic"
    return "organic"


def estimate_paid_search(
    volume: int,
    cpc: float,
    difficulty: Optional[int],
    intent: Optional[str],
) -> PaidSearchInsight:
    """
    Paid-search clicks, cost and strategy for a keyword.

    Args:
        volume: Monthly search volume
        cpc: Cost per click in currency units
        difficulty: Keyword difficulty, None if unknown
        intent: Intent label, any case

    Returns:
        PaidSearchInsight
    """
    intent_key = normalize_intent(intent)

    intent_multiplier = PAID_INTENT_MULTIPLIERS.get(intent_key, 1.0)
    if cpc > 3:
        cpc_multiplier = 0.8
    elif cpc > 1.5:
        cpc_multiplier = 0.9
    else:
        cpc_multiplier = 1.1

    paid_ctr = BASE_PAID_CTR * intent_multiplier * cpc_multiplier
    clicks = math.floor((volume or 0) * paid_ctr)
    monthly_cost = math.floor(clicks * cpc)

    return PaidSearchInsight(
        estimated_paid_clicks=clicks,
        monthly_paid_cost=monthly_cost,
        annual_paid_cost=monthly_cost * 12,
        paid_strategy=choose_paid_strategy(cpc, difficulty, intent_key),
        paid_ctr=paid_ctr,
        is_high_value=cpc > HIGH_VALUE_CPC,
    )
