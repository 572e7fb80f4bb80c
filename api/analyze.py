"""
API Endpoints for Keyword Opportunity Analysis

FastAPI application that:
1. Accepts analysis jobs (competitor teardown or topic expansion)
2. Runs the pipeline in the background
3. Serves job status for polling clients
4. Answers synchronous insight requests (lateral topics, AI-assistant prompts)
"""

import logging
import sys
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, BackgroundTasks, Depends
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.analyzer import ClaudeClient, KeywordAnalyst, LLMResponseError
from src.collector import AhrefsClient
from src.integrations import PromptVisibilityClient, PromptVisibilityError
from src.persistence import JobStore
from src.pipeline import AnalysisOrchestrator, AnalysisOptions, run_job_safely
from src.utils import get_settings

settings = get_settings()

# Configure logging to stdout
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

VERSION = "1.0.0"
PUBLIC_DIR = Path(__file__).resolve().parent.parent / "public"

app = FastAPI(
    title="Keyword Opportunity Engine",
    description="SEO keyword opportunity analysis powered by Ahrefs and Claude AI",
    version=VERSION,
)


# ============================================================================
# DEPENDENCIES
# ============================================================================

@lru_cache
def get_job_store() -> JobStore:
    """The process-wide job store."""
    return JobStore()


@lru_cache
def get_ahrefs_client() -> AhrefsClient:
    if not settings.AHREFS_API_KEY:
        logger.warning("AHREFS_API_KEY not set - keyword fetches will fail")
    return AhrefsClient(api_key=settings.AHREFS_API_KEY or "", timeout=settings.API_TIMEOUT)


@lru_cache
def get_keyword_analyst() -> Optional[KeywordAnalyst]:
    """Claude-backed analyst, or None when no Anthropic key is configured."""
    if not settings.ANTHROPIC_API_KEY:
        logger.warning("ANTHROPIC_API_KEY not set - AI analysis disabled")
        return None
    client = ClaudeClient(
        api_key=settings.ANTHROPIC_API_KEY,
        model=settings.CLAUDE_MODEL,
        fast_model=settings.CLAUDE_FAST_MODEL,
        timeout=settings.API_TIMEOUT,
    )
    return KeywordAnalyst(client, vendor=settings.VENDOR_NAME)


@lru_cache
def get_prompt_visibility_client() -> PromptVisibilityClient:
    return PromptVisibilityClient(
        api_key=settings.PROMPT_VISIBILITY_API_KEY,
        base_url=settings.PROMPT_VISIBILITY_API_URL,
        timeout=settings.API_TIMEOUT,
    )


def get_orchestrator(
    store: JobStore = Depends(get_job_store),
    keywords: AhrefsClient = Depends(get_ahrefs_client),
    analyst: Optional[KeywordAnalyst] = Depends(get_keyword_analyst),
) -> AnalysisOrchestrator:
    return AnalysisOrchestrator(
        store=store,
        keywords=keywords,
        analyst=analyst,
        vendor_name=settings.VENDOR_NAME,
        vendor_domain=settings.VENDOR_DOMAIN,
        rank_check_delay=settings.RANK_CHECK_DELAY_SECONDS,
    )


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ============================================================================
# SHUTDOWN - Close HTTP clients
# ============================================================================

@app.on_event("shutdown")
async def shutdown_event():
    """Close gateway clients that were created during the process lifetime."""
    if get_ahrefs_client.cache_info().currsize:
        await get_ahrefs_client().close()
    if get_prompt_visibility_client.cache_info().currsize:
        await get_prompt_visibility_client().close()
    logger.info("Gateway clients closed")


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class AnalyzeRequest(BaseModel):
    """
    Request to start an analysis job.

    Exactly one flow is selected: `topic` runs topic expansion, otherwise
    `competitor` runs a competitor teardown. Numeric fields also accept
    strings, and `enableAI` accepts "true"/"false", for form-based clients.
    """
    model_config = ConfigDict(populate_by_name=True)

    competitor: Optional[str] = None
    topic: Optional[str] = None
    min_volume: int = Field(default=100, alias="minVolume", ge=0)
    country: str = "us"
    keyword_limit: int = Field(default=100, alias="keywordLimit", ge=1)
    results_limit: int = Field(default=20, alias="resultsLimit", ge=1)
    enable_ai: bool = Field(default=False, alias="enableAI")
    target_product: Optional[str] = Field(default=None, alias="targetProduct")
    language: Optional[str] = None

    @model_validator(mode="after")
    def require_target(self) -> "AnalyzeRequest":
        self.competitor = (self.competitor or "").strip().lower() or None
        self.topic = (self.topic or "").strip() or None
        if not self.competitor and not self.topic:
            raise ValueError("Either competitor or topic must be provided")
        self.country = self.country.strip().lower() or "us"
        return self

    def to_options(self) -> AnalysisOptions:
        return AnalysisOptions(
            competitor=self.competitor,
            topic=self.topic,
            min_volume=self.min_volume,
            country=self.country,
            keyword_limit=self.keyword_limit,
            results_limit=self.results_limit,
            enable_ai=self.enable_ai,
            target_product=self.target_product or settings.DEFAULT_PRODUCT,
            language=self.language,
        )


class AnalyzeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")


class ExpandRequest(BaseModel):
    keyword: Optional[str] = None
    reasoning: Optional[str] = None
    country: str = "us"


class GeoInsightsRequest(BaseModel):
    keyword: Optional[str] = None
    country: str = "us"


# ============================================================================
# API ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Serve the single-page client, or a plain status when it is absent."""
    index = PUBLIC_DIR / "index.html"
    if index.is_file():
        return FileResponse(index)
    return {"status": "ok", "service": "Keyword Opportunity Engine"}


@app.get("/api/health")
async def health(store: JobStore = Depends(get_job_store)):
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": VERSION,
        "environment": settings.ENVIRONMENT,
        "jobs": store.count_by_status(),
        "total_jobs": len(store),
    }


@app.post("/api/analyze", status_code=202, response_model=AnalyzeResponse, response_model_by_alias=True)
async def trigger_analysis(
    request: AnalyzeRequest,
    background_tasks: BackgroundTasks,
    store: JobStore = Depends(get_job_store),
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """
    Start an analysis job.

    Creates a pending job, schedules the pipeline in the background and
    returns the job id immediately.
    """
    options = request.to_options()
    job = store.create(options.to_dict())

    logger.info(
        f"Analysis requested (job: {job.job_id}): mode={options.mode.value}, "
        f"target={options.topic or options.competitor}, country={options.country}"
    )

    background_tasks.add_task(run_job_safely, orchestrator, job.job_id, options)

    return AnalyzeResponse(job_id=job.job_id)


@app.get("/api/status/{job_id}")
async def get_job_status(job_id: str, store: JobStore = Depends(get_job_store)):
    """Get status of an analysis job."""
    job = store.get(job_id)
    if job is None:
        return error_response(404, "Job not found")
    return job.to_dict()


@app.post("/api/expand")
async def expand_topics(
    request: ExpandRequest,
    analyst: Optional[KeywordAnalyst] = Depends(get_keyword_analyst),
):
    """Brainstorm lateral topics for a keyword."""
    keyword = (request.keyword or "").strip()
    if not keyword:
        return error_response(400, "Keyword is required")
    if analyst is None:
        return error_response(503, "AI service unavailable.")

    try:
        topics = await analyst.lateral_topics(keyword, request.reasoning or "", request.country)
    except LLMResponseError as e:
        logger.error(f"Topic expansion failed for '{keyword}': {e}")
        return error_response(500, "Failed to generate lateral topics")

    return {"lateral_topics": topics}


@app.post("/api/geo-insights")
async def geo_insights(
    request: GeoInsightsRequest,
    analyst: Optional[KeywordAnalyst] = Depends(get_keyword_analyst),
    visibility: PromptVisibilityClient = Depends(get_prompt_visibility_client),
):
    """
    Prompts buyers send to AI assistants about a keyword's core concept.

    Real prompts from the visibility provider are preferred; when it has
    none (or no key is configured) the prompts are generated by Claude.
    """
    keyword = (request.keyword or "").strip()
    if not keyword:
        return error_response(400, "Keyword is required")
    if analyst is None:
        return error_response(503, "AI service unavailable.")

    concept = await analyst.core_concept(keyword)

    prompts = []
    try:
        prompts = await visibility.search_prompts(contains=concept)
    except PromptVisibilityError as e:
        logger.warning(f"Prompt visibility lookup failed for '{concept}': {e}")

    if not prompts:
        try:
            prompts = await analyst.geo_prompts(keyword, concept, request.country)
        except LLMResponseError as e:
            logger.error(f"GEO prompt generation failed for '{keyword}': {e}")
            return error_response(500, "Failed to generate GEO insights")

    return {"insights": prompts}
