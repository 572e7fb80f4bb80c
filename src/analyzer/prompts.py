"""
Prompt templates for keyword analysis.

Templates are filled with str.format; literal JSON braces are doubled.
Every template that produces prose carries a {language_instruction} slot so a
locale run gets all of its text in the target language.
"""

JSON_SYSTEM_PROMPT = "You are an SEO expert that only responds in valid JSON."


# ============================================================================
# COMPETITOR TEARDOWN
# ============================================================================

KEYWORD_EVALUATION_PROMPT = """You are an expert SEO strategist for {vendor}, a B2B accounting software company.
Analyze the user keyword search query below.

Keyword: "{keyword}"

Your task is to respond ONLY with a valid JSON object with the following schema:
{{
  "category": "Company/Brand Name" | "Software Type" | "Accounting Concept" | "Problem/Task" | "Other",
  "is_branded": boolean,
  "brand_name": string | null,
  "intent": "Navigational" | "Informational" | "Comparison" | "Transactional",
  "commercial_value": number, // From 0-100, how likely is the searcher to purchase B2B accounting software soon?
  "reasoning": "A brief explanation of your analysis."
}}

---
**Examples:**

Keyword: "how to calculate payroll for small business"
{{
  "category": "Problem/Task",
  "is_branded": false,
  "brand_name": null,
  "intent": "Informational",
  "commercial_value": 85,
  "reasoning": "High-value informational query. The user has a core accounting problem, making them an ideal potential customer."
}}

Keyword: "quickbooks login"
{{
  "category": "Company/Brand Name",
  "is_branded": true,
  "brand_name": "QuickBooks",
  "intent": "Navigational",
  "commercial_value": 5,
  "reasoning": "Navigational query for an existing competitor user. Very low acquisition value."
}}
---
{language_instruction}
**Analysis for "{keyword}":**
"""

STRATEGIC_CONTEXT_PROMPT = """For the keyword "{keyword}", which our AI analyzed as having intent "{intent}" and commercial value {commercial_value}/100, write a 1-2 sentence strategic angle for {vendor}, an accounting software company.
{language_instruction}"""


# ============================================================================
# TOPIC EXPANSION
# ============================================================================

TOPIC_DECONSTRUCTION_PROMPT = """You are a B2B market strategist for {vendor}. The target product is "{product}".

Deconstruct the market topic below into the problems buyers are trying to solve.

Topic: "{topic}"

Respond ONLY with a JSON object:
{{
  "core_topic": string,
  "sub_topics": [string],      // 4-8 distinct sub-topics
  "pain_points": [string],     // 4-8 concrete problems a buyer has
  "personas": [string],        // 2-5 job titles who search for this
  "summary": string            // one sentence describing the buying context
}}
{language_instruction}"""

SEED_KEYWORD_PROMPT = """You are an SEO strategist for {vendor}. The target product is "{product}".

Using this topic analysis:
{deconstruction}

Write between 8 and 12 seed keyword phrases a buyer would type into a search engine.
Rules:
- 2 to 5 words each
- No brand names (not {vendor}, not competitors)
- Mix problem-aware, solution-aware and comparison phrasing

Respond ONLY with a JSON object:
{{
  "seed_keywords": [string]
}}
{language_instruction}"""

TOPIC_KEYWORD_EVALUATION_PROMPT = """You are an SEO strategist for {vendor}. The target product is "{product}".

Research context for the topic "{topic}":
{deconstruction}

Evaluate this keyword: "{keyword}"

Respond ONLY with a JSON object:
{{
  "category": "Company/Brand Name" | "Software Type" | "Accounting Concept" | "Problem/Task" | "Other",
  "is_branded": boolean,
  "brand_name": string | null,
  "intent": "Navigational" | "Informational" | "Comparison" | "Transactional",
  "vertical_relevance": number,  // 0-100, how closely the keyword fits the product's niche
  "commercial_value": number,    // 0-100, how likely the searcher buys this kind of product soon
  "reasoning": string
}}
{language_instruction}"""

STRATEGIC_RATIONALE_PROMPT = """For the keyword "{keyword}" (intent "{intent}", vertical relevance {vertical_relevance}/100, commercial value {commercial_value}/100), write a 1-2 sentence content angle that would help {vendor} sell {product}.
{language_instruction}"""


# ============================================================================
# LATERAL EXPANSION AND GEO INSIGHTS
# ============================================================================

LATERAL_TOPICS_PROMPT = """You are an SEO strategist for {vendor}.

A keyword opportunity was identified:
Keyword: "{keyword}"
Why it matters: {reasoning}
Market: {country}

Brainstorm 5-8 related topics a buyer researching this would also look into. Stay adjacent, not synonymous.

Respond ONLY with a JSON object:
{{
  "lateral_topics": [string]
}}"""

CORE_CONCEPT_PROMPT = """Reduce the search keyword below to its core concept in 1-3 words, lowercase, no brand names.

Keyword: "{keyword}"

Respond ONLY with a JSON object:
{{
  "core_concept": string
}}"""

GEO_PROMPTS_PROMPT = """People increasingly ask AI assistants instead of search engines.

Write 5 realistic questions a business buyer in market "{country}" would ask an AI assistant about "{concept}" (from the keyword "{keyword}").

Respond ONLY with a JSON object:
{{
  "prompts": [string]
}}"""


def language_instruction(language: str = None) -> str:
    """Instruction telling the model which language to write text values in."""
    if not language:
        return ""
    return f"Write every text value in {language}. Keep JSON keys and enum values in English.\n"
