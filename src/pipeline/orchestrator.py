"""
Analysis Orchestrator

Runs one analysis job from start to a terminal state.

Two flows share one state machine, selected by PipelineMode:

    Flow A - competitor teardown (HEURISTIC, LEGACY_AI)
        fetch organic keywords -> filter -> classify / evaluate
        -> shortlist -> rank check -> publish

    Flow B - topic expansion (TOPIC_EXPANSION)
        deconstruct topic -> seed keywords -> matching terms -> filter
        -> evaluate -> shortlist -> rank check -> rationale -> publish

Failure policy:
    - A keyword whose evaluation fails is skipped.
    - A failed rank check leaves the vendor position unknown.
    - A failed AI ping, bulk fetch, topic deconstruction or seed generation
      ends the job with an error (PipelineError).
    - Anything else is caught by run_job_safely.
"""

import asyncio
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from src.analyzer import KeywordAnalyst, LLMResponseError
from src.collector import AhrefsClient, AhrefsError
from src.models import RawKeyword, KeywordAnalysis, Opportunity
from src.persistence import JobStore
from src.scoring import (
    ScoringFormula,
    brand_terms_for,
    classify_cluster,
    classify_intent,
    classify_relevance,
    contains_any,
    estimate_paid_search,
    estimate_revenue,
    estimate_tiered_revenue,
    normalize_cpc,
    score_keyword,
)

logger = logging.getLogger(__name__)

CRITICAL_ERROR_MESSAGE = "A critical server error occurred."
AI_UNAVAILABLE_MESSAGE = "AI service unavailable."
SEED_GENERATION_FAILED = "Seed keyword generation failed"

# Heuristic relevance below this never reaches scoring
RELEVANCE_FLOOR = 30


class PipelineError(Exception):
    """Fatal pipeline failure; the message is shown to the client."""
    pass


# ============================================================================
# MODES & OPTIONS
# ============================================================================

class PipelineMode(Enum):
    """Which flow, formula, threshold and revenue model a job uses."""
    HEURISTIC = "heuristic"
    LEGACY_AI = "legacy_ai"
    TOPIC_EXPANSION = "topic_expansion"


@dataclass(frozen=True)
class ModeProfile:
    formula: ScoringFormula
    publish_threshold: int
    tiered_revenue: bool
    uses_ai: bool


MODE_PROFILES: Dict[PipelineMode, ModeProfile] = {
    PipelineMode.HEURISTIC: ModeProfile(ScoringFormula.HEURISTIC, 15, False, False),
    PipelineMode.LEGACY_AI: ModeProfile(ScoringFormula.LEGACY_STRATEGIC, 15, False, True),
    PipelineMode.TOPIC_EXPANSION: ModeProfile(ScoringFormula.STRATEGIC, 25, True, True),
}


@dataclass
class AnalysisOptions:
    """Options submitted with an analysis job."""
    competitor: Optional[str] = None
    topic: Optional[str] = None
    min_volume: int = 100
    country: str = "us"
    keyword_limit: int = 100
    results_limit: int = 20
    enable_ai: bool = False
    target_product: str = "sage_accounting"
    language: Optional[str] = None

    @property
    def mode(self) -> PipelineMode:
        if self.topic:
            return PipelineMode.TOPIC_EXPANSION
        if self.enable_ai:
            return PipelineMode.LEGACY_AI
        return PipelineMode.HEURISTIC

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        return data


@dataclass
class PipelineStats:
    """Counters reported under `debug` in the job result."""
    mode: str
    fetched: int = 0
    low_volume: int = 0
    single_word: int = 0
    competitor_brand: int = 0
    irrelevant: int = 0
    evaluation_failures: int = 0
    analyzed: int = 0
    shortlisted: int = 0
    rank_check_failures: int = 0
    below_threshold: int = 0
    published: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "fetched": self.fetched,
            "filtered": {
                "lowVolume": self.low_volume,
                "singleWord": self.single_word,
                "competitorBrand": self.competitor_brand,
                "irrelevant": self.irrelevant,
            },
            "evaluationFailures": self.evaluation_failures,
            "analyzed": self.analyzed,
            "shortlisted": self.shortlisted,
            "rankCheckFailures": self.rank_check_failures,
            "belowThreshold": self.below_threshold,
            "published": self.published,
        }


@dataclass
class Candidate:
    """A keyword that passed filtering and classification."""
    raw: RawKeyword
    analysis: KeywordAnalysis
    score: int
    own_position: Optional[int] = None


# ============================================================================
# ORCHESTRATOR
# ============================================================================

class AnalysisOrchestrator:
    """
    Drives a job through its flow and records every state change in the store.

    Usage:
        orchestrator = AnalysisOrchestrator(store, ahrefs, analyst)
        await orchestrator.run(job.job_id, AnalysisOptions(competitor="xero.com"))
    """

    def __init__(
        self,
        store: JobStore,
        keywords: AhrefsClient,
        analyst: Optional[KeywordAnalyst] = None,
        vendor_name: str = "Sage",
        vendor_domain: str = "sage.com",
        rank_check_delay: float = 0.6,
    ):
        """
        Args:
            store: Job store this orchestrator writes to
            keywords: Keyword data gateway
            analyst: LLM gateway; None disables AI modes
            vendor_name: Vendor shown in progress messages
            vendor_domain: Domain searched for in SERP results
            rank_check_delay: Pause in seconds between rank checks
        """
        self.store = store
        self.keywords = keywords
        self.analyst = analyst
        self.vendor_name = vendor_name
        self.vendor_domain = vendor_domain
        self.rank_check_delay = rank_check_delay

    async def run(self, job_id: str, options: AnalysisOptions) -> None:
        """
        Run a pending job to completion or error.

        PipelineError ends the job with its message. Other exceptions
        propagate to the caller (see run_job_safely).
        """
        mode = options.mode
        profile = MODE_PROFILES[mode]
        self.store.start(job_id, "Initializing...")
        logger.info(f"[{job_id}] Starting {mode.value} analysis")

        try:
            if profile.uses_ai:
                await self._require_ai()

            if mode is PipelineMode.TOPIC_EXPANSION:
                data = await self._run_topic_expansion(job_id, options, profile)
            else:
                data = await self._run_competitor_teardown(job_id, options, profile)
        except PipelineError as e:
            logger.error(f"[{job_id}] Analysis failed: {e}")
            self.store.fail(job_id, str(e))
            return

        self.store.complete(job_id, data)
        logger.info(f"[{job_id}] Complete! Found {len(data['opportunities'])} opportunities")
        if profile.uses_ai:
            usage = self.analyst.usage_summary()
            logger.info(
                f"[{job_id}] Claude usage: {usage['total_calls']} calls, "
                f"{usage['total_tokens']} tokens, ~${usage['estimated_cost']:.4f}"
            )

    async def _require_ai(self):
        if self.analyst is None or not await self.analyst.ping():
            raise PipelineError(AI_UNAVAILABLE_MESSAGE)

    # ========================================================================
    # FLOW A: COMPETITOR TEARDOWN
    # ========================================================================

    async def _run_competitor_teardown(
        self,
        job_id: str,
        options: AnalysisOptions,
        profile: ModeProfile,
    ) -> Dict[str, Any]:
        stats = PipelineStats(mode=options.mode.value)

        if not options.competitor:
            raise PipelineError("A competitor domain or a topic is required")

        self.store.set_progress(job_id, "Fetching keywords from Ahrefs...")
        try:
            rows = await self.keywords.get_organic_keywords(
                options.competitor, options.country, options.keyword_limit
            )
        except AhrefsError as e:
            raise PipelineError(f"Failed to fetch keywords for {options.competitor}: {e}") from e

        stats.fetched = len(rows)
        if not rows:
            logger.info(f"[{job_id}] No keywords found for {options.competitor}")
            return self._build_result(rows, [], profile, stats)

        exclude_terms = brand_terms_for(options.competitor)
        candidates: List[Candidate] = []

        for i, row in enumerate(rows):
            self.store.set_progress(job_id, f"Analyzing keyword {i + 1} of {len(rows)}...")
            raw = RawKeyword.from_row(row)
            if not self._passes_filters(raw, options.min_volume, exclude_terms, stats):
                continue

            if profile.uses_ai:
                try:
                    analysis = await self.analyst.evaluate_keyword(raw.keyword, options.language)
                except (LLMResponseError, ValueError) as e:
                    logger.warning(f"[{job_id}] AI evaluation failed for '{raw.keyword}': {e}")
                    stats.evaluation_failures += 1
                    continue
            else:
                relevance = classify_relevance(raw.keyword)
                if relevance < RELEVANCE_FLOOR:
                    stats.irrelevant += 1
                    continue
                analysis = KeywordAnalysis(
                    intent=classify_intent(raw.keyword),
                    relevance_score=relevance,
                    content_cluster=classify_cluster(raw.keyword),
                )

            candidates.append(Candidate(
                raw=raw,
                analysis=analysis,
                score=score_keyword(profile.formula, raw, None, analysis),
            ))

        stats.analyzed = len(candidates)
        survivors = await self._check_ranks(job_id, candidates, options, profile, stats)

        if profile.uses_ai:
            for candidate in survivors:
                candidate.analysis.strategic_context = await self.analyst.strategic_context(
                    candidate.raw.keyword, candidate.analysis, options.language
                )

        opportunities = [self._to_opportunity(c, options, profile) for c in survivors]
        return self._build_result(rows, opportunities, profile, stats)

    # ========================================================================
    # FLOW B: TOPIC EXPANSION
    # ========================================================================

    async def _run_topic_expansion(
        self,
        job_id: str,
        options: AnalysisOptions,
        profile: ModeProfile,
    ) -> Dict[str, Any]:
        stats = PipelineStats(mode=options.mode.value)
        product = options.target_product

        self.store.set_progress(job_id, f"Deconstructing topic '{options.topic}'...")
        try:
            deconstruction = await self.analyst.deconstruct_topic(
                options.topic, product, options.language
            )
        except LLMResponseError as e:
            raise PipelineError(f"Topic deconstruction failed: {e}") from e
        self.store.set_intermediate(job_id, {"deconstruction": deconstruction})

        self.store.set_progress(job_id, "Generating seed keywords...")
        try:
            seeds = await self.analyst.generate_seed_keywords(
                deconstruction, product, options.language
            )
        except LLMResponseError as e:
            raise PipelineError(f"{SEED_GENERATION_FAILED}: {e}") from e
        if not seeds:
            raise PipelineError(SEED_GENERATION_FAILED)
        self.store.set_intermediate(job_id, {"seedKeywords": seeds})
        logger.info(f"[{job_id}] Generated {len(seeds)} seed keywords")

        self.store.set_progress(job_id, "Fetching keyword ideas from Ahrefs...")
        try:
            rows = await self.keywords.get_matching_terms(
                seeds, options.country, options.keyword_limit
            )
        except AhrefsError as e:
            raise PipelineError(f"Failed to fetch keyword ideas: {e}") from e

        stats.fetched = len(rows)
        if not rows:
            raise PipelineError("No keyword data returned for the generated seed keywords")

        candidates: List[Candidate] = []
        for i, row in enumerate(rows):
            self.store.set_progress(job_id, f"Analyzing keyword {i + 1} of {len(rows)}...")
            raw = RawKeyword.from_row(row)
            if not self._passes_filters(raw, options.min_volume, (), stats):
                continue

            try:
                analysis = await self.analyst.evaluate_topic_keyword(
                    raw.keyword, options.topic, deconstruction, product, options.language
                )
            except (LLMResponseError, ValueError) as e:
                logger.warning(f"[{job_id}] AI evaluation failed for '{raw.keyword}': {e}")
                stats.evaluation_failures += 1
                continue

            candidates.append(Candidate(
                raw=raw,
                analysis=analysis,
                score=score_keyword(profile.formula, raw, None, analysis),
            ))

        stats.analyzed = len(candidates)
        survivors = await self._check_ranks(job_id, candidates, options, profile, stats)

        for i, candidate in enumerate(survivors):
            self.store.set_progress(job_id, f"Generating rationale {i + 1} of {len(survivors)}...")
            candidate.analysis.strategic_context = await self.analyst.strategic_rationale(
                candidate.raw.keyword, candidate.analysis, product, options.language
            )

        opportunities = [self._to_opportunity(c, options, profile) for c in survivors]
        return self._build_result(rows, opportunities, profile, stats)

    # ========================================================================
    # SHARED STAGES
    # ========================================================================

    @staticmethod
    def _passes_filters(
        raw: RawKeyword,
        min_volume: int,
        exclude_terms: Tuple[str, ...],
        stats: PipelineStats,
    ) -> bool:
        if not raw.volume or raw.volume < min_volume:
            stats.low_volume += 1
            return False
        if raw.word_count <= 1:
            stats.single_word += 1
            return False
        if exclude_terms and contains_any(raw.keyword, exclude_terms):
            stats.competitor_brand += 1
            return False
        return True

    async def _check_ranks(
        self,
        job_id: str,
        candidates: List[Candidate],
        options: AnalysisOptions,
        profile: ModeProfile,
        stats: PipelineStats,
    ) -> List[Candidate]:
        """
        Shortlist the best candidates, look up the vendor's rank for each and
        keep those still at or above the publish threshold.
        """
        shortlist = sorted(candidates, key=lambda c: c.score, reverse=True)
        shortlist = shortlist[:max(options.results_limit, 0)]
        stats.shortlisted = len(shortlist)

        survivors: List[Candidate] = []
        for i, candidate in enumerate(shortlist):
            self.store.set_progress(job_id, self._rank_progress(i, len(shortlist), profile))

            candidate.own_position = await self._find_own_position(
                job_id, candidate.raw.keyword, options.country, stats
            )
            candidate.score = score_keyword(
                profile.formula, candidate.raw, candidate.own_position, candidate.analysis
            )
            if candidate.score >= profile.publish_threshold:
                survivors.append(candidate)
            else:
                stats.below_threshold += 1

            if i < len(shortlist) - 1 and self.rank_check_delay > 0:
                await asyncio.sleep(self.rank_check_delay)

        return survivors

    def _rank_progress(self, index: int, total: int, profile: ModeProfile) -> str:
        if profile.formula is ScoringFormula.LEGACY_STRATEGIC:
            return f"Enriching with AI: Opportunity {index + 1} of {total}..."
        return f"Checking {self.vendor_name} rank: Opportunity {index + 1} of {total}..."

    async def _find_own_position(
        self,
        job_id: str,
        keyword: str,
        country: str,
        stats: PipelineStats,
    ) -> Optional[int]:
        """Best effort: any failure leaves the position unknown."""
        try:
            return await self.keywords.find_domain_position(keyword, self.vendor_domain, country)
        except Exception as e:
            logger.warning(f"[{job_id}] SERP check failed for '{keyword}': {e}")
            stats.rank_check_failures += 1
            return None

    def _to_opportunity(
        self,
        candidate: Candidate,
        options: AnalysisOptions,
        profile: ModeProfile,
    ) -> Opportunity:
        raw = candidate.raw
        intent = candidate.analysis.intent
        cpc = normalize_cpc(raw.cpc)

        if profile.tiered_revenue:
            revenue = estimate_tiered_revenue(
                raw.volume, intent, options.target_product, options.country
            )
        else:
            revenue = estimate_revenue(raw.volume, intent)
        paid = estimate_paid_search(raw.volume, cpc, raw.difficulty, intent)

        return Opportunity(
            keyword=raw.keyword,
            search_volume=raw.volume,
            difficulty=raw.difficulty,
            competitor_position=raw.best_position,
            own_position=candidate.own_position,
            score=candidate.score,
            cpc=cpc,
            estimated_traffic=revenue.estimated_traffic,
            monthly_revenue=revenue.monthly_revenue,
            currency=revenue.currency,
            analysis=candidate.analysis,
            revenue_model=revenue.model,
            paid_insights=paid.to_dict(),
        )

    @staticmethod
    def _build_result(
        rows: List[Dict[str, Any]],
        opportunities: List[Opportunity],
        profile: ModeProfile,
        stats: PipelineStats,
    ) -> Dict[str, Any]:
        ranked = sorted(opportunities, key=lambda o: o.score, reverse=True)
        stats.published = len(ranked)
        return {
            "totalKeywords": len(rows),
            "opportunities": [o.to_dict() for o in ranked],
            "aiAnalysis": {
                "totalAnalyzed": len(rows),
                "aiMode": profile.uses_ai,
            },
            "debug": stats.to_dict(),
        }


async def run_job_safely(
    orchestrator: AnalysisOrchestrator,
    job_id: str,
    options: AnalysisOptions,
) -> None:
    """
    Background task entry point.

    Any exception escaping the orchestrator moves the job to error with a
    generic message so no job stays in processing.
    """
    try:
        await orchestrator.run(job_id, options)
    except Exception:
        logger.exception(f"[{job_id}] Unhandled fatal error in background job")
        job = orchestrator.store.get(job_id)
        if job is not None and not job.is_terminal:
            orchestrator.store.fail(job_id, CRITICAL_ERROR_MESSAGE)
