"""
Keyword Pattern Classifier

Pure functions that map a keyword string to a relevance score, an intent
category and a content cluster using static substring tables. No external
calls.

All matching is case-insensitive substring containment, not tokenized.
Table order matters: every check is first-match-wins.
"""

from typing import Dict, Iterable, Tuple

from .helpers import SearchIntent


# ============================================================================
# IRRELEVANCE TABLES (any hit => relevance 0)
# ============================================================================

IRRELEVANT_PATTERNS: Tuple[str, ...] = (
    "login", "credit card", "coupon", "promo", "shipping", "receipt", "check",
    "lowes", "target", "walmart", "amazon", "ebay", "gusto login", "turbo tax",
    "app store", "enterprise", "llc", "the accountant", "schema browser",
)

LOCATION_PATTERNS: Tuple[str, ...] = (
    "near me", "near", "nearby", "local", "in my area", "around me",
    "close to me", "directions", "address", "location", "store hours",
    "hours open", "phone number",
)

COMPETITOR_FINANCIAL_TERMS: Tuple[str, ...] = (
    "venmo", "paypal", "zelle", "cashapp", "square card", "stripe",
    "merchant services",
)

GENERIC_TECH_TERMS: Tuple[str, ...] = (
    "downloads folder", "google timer", "geo tracker", "app store", "mobile app",
)

PERSONAL_FINANCE_TERMS: Tuple[str, ...] = (
    "roth 401k", "personal loan", "credit score", "mortgage calculator",
    "personal budget",
)

# Checked in this order before the relevance boost
IRRELEVANCE_TABLES: Tuple[Tuple[str, ...], ...] = (
    IRRELEVANT_PATTERNS,
    LOCATION_PATTERNS,
    COMPETITOR_FINANCIAL_TERMS,
    GENERIC_TECH_TERMS,
    PERSONAL_FINANCE_TERMS,
)


# ============================================================================
# INTENT TABLES
# ============================================================================

INFORMATIONAL_PATTERNS: Tuple[str, ...] = (
    "calculator", "template", "meaning", "definition", "what is", "how to",
    "guide", "tutorial", "examples", "tips", "advice", "help", "free",
    "example", "sample", "format",
)

TRANSACTIONAL_PATTERNS: Tuple[str, ...] = (
    "buy", "purchase", "pricing", "price", "cost", "trial", "demo",
    "free trial", "sign up", "get started", "download now", "install",
    "subscription", "plan", "quote", "estimate", "consultation",
)

COMMERCIAL_INTENT_PATTERNS: Tuple[str, ...] = (
    "software", "solution", "platform", "system", "service", "app", "best",
    "top", "compare", "vs", "versus", "review", "alternative", "features",
    "benefits", "pros and cons",
)

BUSINESS_RELEVANT_PATTERNS: Tuple[str, ...] = (
    "accounting", "payroll", "bookkeeping", "financial", "invoice", "billing",
    "expense", "tax", "audit", "reporting", "budget", "cash flow", "erp",
    "finance", "business", "small business", "enterprise",
)


# ============================================================================
# CONTENT CLUSTERS (ordered, first match wins)
# ============================================================================

CONTENT_CLUSTERS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("accounting_software", ("accounting", "bookkeeping", "financial management")),
    ("payroll_management", ("payroll", "salary", "wage", "pay", "timecard", "time card", "time clock")),
    ("financial_reporting", ("financial", "reporting", "reports", "statement", "balance sheet", "income statement", "cash flow")),
    ("invoicing_billing", ("invoice", "billing", "receipt", "payment")),
    ("tax_compliance", ("tax", "taxes", "irs", "deduction", "form", "941", "schedule")),
    ("business_planning", ("business plan", "budget", "forecast", "kpi", "analysis")),
    ("small_business_tools", ("small business", "entrepreneur", "startup", "llc", "sole proprietorship")),
    ("templates_calculators", ("calculator", "template", "generator", "tool")),
)

DEFAULT_CLUSTER = "general_business"


# ============================================================================
# COMPETITOR BRAND EXCLUSIONS
# ============================================================================

COMPETITOR_BRAND_TERMS: Dict[str, Tuple[str, ...]] = {
    "quickbooks.intuit.com": ("quickbooks", "intuit"),
    "xero.com": ("xero",),
    "netsuite.com": ("netsuite",),
}

IRRELEVANT_SCORE = 0
RELEVANT_SCORE = 90
NEUTRAL_SCORE = 50


def contains_any(keyword: str, terms: Iterable[str]) -> bool:
    """Case-insensitive substring check against a list of terms."""
    k = keyword.lower()
    return any(term in k for term in terms)


def classify_relevance(keyword: str) -> int:
    """
    Score how relevant a keyword is to the vendor's business.

    Irrelevance tables are checked first, so a keyword matching both an
    irrelevant and a business term is rejected.

    Returns:
        0 (irrelevant), 90 (business relevant) or 50 (neutral)
    """
    for table in IRRELEVANCE_TABLES:
        if contains_any(keyword, table):
            return IRRELEVANT_SCORE
    if contains_any(keyword, BUSINESS_RELEVANT_PATTERNS):
        return RELEVANT_SCORE
    return NEUTRAL_SCORE


def classify_intent(keyword: str) -> str:
    """Classify search intent: informational, transactional or commercial."""
    if contains_any(keyword, INFORMATIONAL_PATTERNS):
        return SearchIntent.INFORMATIONAL.value
    if contains_any(keyword, TRANSACTIONAL_PATTERNS):
        return SearchIntent.TRANSACTIONAL.value
    if contains_any(keyword, COMMERCIAL_INTENT_PATTERNS):
        return SearchIntent.COMMERCIAL.value
    if contains_any(keyword, BUSINESS_RELEVANT_PATTERNS):
        return SearchIntent.INFORMATIONAL.value
    return SearchIntent.COMMERCIAL.value


def classify_cluster(keyword: str) -> str:
    """Return the first content cluster with a matching pattern."""
    for cluster, patterns in CONTENT_CLUSTERS:
        if contains_any(keyword, patterns):
            return cluster
    return DEFAULT_CLUSTER


def brand_terms_for(domain: str) -> Tuple[str, ...]:
    """Brand terms to exclude when tearing down a competitor domain."""
    return COMPETITOR_BRAND_TERMS.get(domain.lower().strip(), ())
