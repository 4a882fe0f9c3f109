"""
AI dispatch routes.

Routes:
- GET    /ai            - Dispatch a prompt (query parameters)
- POST   /ai            - Dispatch a prompt (JSON body)
- POST   /batch         - Dispatch several prompts with bounded parallelism
- GET    /api/image     - Standalone image generation

Upstream failures are reported in the envelope with HTTP 200; only request
validation problems change the status code.
"""

import asyncio
from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from relay.api.envelope import success_envelope, utc_timestamp
from relay.api.middleware import add_batch_to_wide_event, add_dispatch_to_wide_event
from relay.core.exceptions import ProviderChainError, ValidationError
from relay.services.ai import AIGateway, get_ai_gateway
from relay.services.ai.models_registry import DEFAULT_MODEL_ID, registry
from relay.services.ai.types import ModelDescriptor, NormalizedResult, RequestContext

logger = structlog.get_logger()

router = APIRouter()

MISSING_PROMPT = "Please provide a prompt"
INVALID_PROMPT = "Prompt must be valid UTF-8 text"


# ============================================================================
# Request Models
# ============================================================================

class AIRequest(BaseModel):
    """Body of POST /ai."""
    prompt: str | None = None
    model: str | None = None
    temperature: float | None = None
    max_tokens: int | None = None


class BatchRequest(BaseModel):
    """Body of POST /batch. Items that are not usable prompts fail individually."""
    prompts: list[Any] | None = None
    model: str | None = None


# ============================================================================
# Helpers
# ============================================================================

def _is_blank(prompt: Any) -> bool:
    return not isinstance(prompt, str) or not prompt.strip()


def _prompt_problem(prompt: Any) -> str | None:
    """Reason a prompt cannot be dispatched, or None if it can."""
    if _is_blank(prompt):
        return MISSING_PROMPT
    try:
        prompt.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates survive JSON decoding but not URL encoding
        return INVALID_PROMPT
    return None


def _resolve_model(model: str | None) -> ModelDescriptor:
    model_id = model or DEFAULT_MODEL_ID
    descriptor = registry.resolve(model_id)
    if descriptor is None:
        raise ValidationError(
            f"Invalid model. Available: {', '.join(registry.model_ids())}",
            details={"model": model_id},
        )
    return descriptor


def _build_context(
    prompt: str | None,
    model: str | None,
    temperature: float | None = None,
    max_tokens: int | None = None,
) -> tuple[RequestContext, ModelDescriptor]:
    """Validate inbound fields. Raises ValidationError before any upstream call."""
    problem = _prompt_problem(prompt)
    if problem:
        raise ValidationError(problem)
    descriptor = _resolve_model(model)
    ctx = RequestContext(
        prompt=prompt.strip(),
        model_id=descriptor.id,
        temperature=temperature,
        max_tokens=max_tokens,
    )
    return ctx, descriptor


def _record(result: NormalizedResult) -> None:
    add_dispatch_to_wide_event(
        model=result.model,
        source=result.source_provider,
        used_fallback=result.used_fallback,
        fallback_from=result.fallback_from,
    )


async def _dispatch(
    gateway: AIGateway,
    ctx: RequestContext,
    descriptor: ModelDescriptor,
) -> dict[str, Any]:
    try:
        result = await gateway.dispatch(ctx, descriptor)
    except ProviderChainError as e:
        add_dispatch_to_wide_event(
            model=descriptor.id,
            success=False,
            error_kind=e.code.value,
        )
        raise
    _record(result)
    return success_envelope(result)


# ============================================================================
# Endpoints
# ============================================================================

@router.get("/ai")
async def ai_get(
    gateway: Annotated[AIGateway, Depends(get_ai_gateway)],
    prompt: Annotated[str | None, Query()] = None,
    model: Annotated[str | None, Query()] = None,
    temperature: Annotated[float | None, Query()] = None,
    max_tokens: Annotated[int | None, Query()] = None,
) -> dict:
    """Dispatch a prompt given as query parameters."""
    ctx, descriptor = _build_context(prompt, model, temperature, max_tokens)
    return await _dispatch(gateway, ctx, descriptor)


@router.post("/ai")
async def ai_post(
    gateway: Annotated[AIGateway, Depends(get_ai_gateway)],
    request: AIRequest | None = None,
) -> dict:
    """Dispatch a prompt given as a JSON body."""
    request = request or AIRequest()
    ctx, descriptor = _build_context(
        request.prompt,
        request.model,
        request.temperature,
        request.max_tokens,
    )
    return await _dispatch(gateway, ctx, descriptor)


@router.post("/batch")
async def batch(
    gateway: Annotated[AIGateway, Depends(get_ai_gateway)],
    request: BatchRequest | None = None,
) -> dict:
    """Dispatch every prompt independently; results keep input order."""
    if request is None or request.prompts is None:
        raise ValidationError("Prompts array is required")

    descriptor = _resolve_model(request.model)
    semaphore = asyncio.Semaphore(gateway.settings.batch_concurrency)

    async def run_one(prompt: Any) -> dict[str, Any]:
        problem = _prompt_problem(prompt)
        if problem == INVALID_PROMPT:
            # The response body must stay encodable
            prompt = prompt.encode("utf-8", errors="replace").decode("utf-8")
        if problem:
            return {"prompt": prompt, "error": problem, "success": False}
        ctx = RequestContext(prompt=prompt.strip(), model_id=descriptor.id)
        async with semaphore:
            try:
                result = await gateway.dispatch(ctx, descriptor)
            except ProviderChainError as e:
                return {"prompt": prompt, "error": e.message, "success": False}
        return {"prompt": prompt, "response": result.text, "success": True}

    results = await asyncio.gather(*(run_one(p) for p in request.prompts))

    processed = sum(1 for r in results if r["success"])
    failed = len(results) - processed
    add_batch_to_wide_event(total=len(results), processed=processed, failed=failed)
    logger.info(
        "batch_completed",
        model=descriptor.id,
        total=len(results),
        processed=processed,
        failed=failed,
    )

    return {
        "success": True,
        "total": len(results),
        "processed": processed,
        "failed": failed,
        "results": list(results),
        "timestamp": utc_timestamp(),
    }


@router.get("/api/image")
async def image(
    gateway: Annotated[AIGateway, Depends(get_ai_gateway)],
    prompt: Annotated[str | None, Query()] = None,
) -> dict:
    """Standalone image generation, bypassing the model registry."""
    problem = _prompt_problem(prompt)
    if problem:
        raise ValidationError(problem)

    ctx = RequestContext(prompt=prompt.strip(), model_id="image")
    try:
        result = await gateway.generate_image(ctx)
    except ProviderChainError as e:
        add_dispatch_to_wide_event(model="image", success=False, error_kind=e.code.value)
        raise

    _record(result)
    return {
        "success": True,
        "source": result.source_provider,
        "response": result.text,
        "timestamp": utc_timestamp(),
    }
