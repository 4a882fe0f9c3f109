"""Shared dispatch data structures."""

from dataclasses import dataclass, field
from typing import Any

from relay.core.models import ErrorKind, ProviderClass


@dataclass(frozen=True)
class ModelDescriptor:
    id: str
    display_name: str
    provider_class: ProviderClass


@dataclass(frozen=True)
class RequestContext:
    """One inbound call. Never shared across requests."""

    prompt: str
    model_id: str
    temperature: float | None = None
    max_tokens: int | None = None


@dataclass(frozen=True)
class ProviderRequest:
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float = 10.0


@dataclass
class ProviderOutcome:
    ok: bool
    raw_body: Any = None
    error_kind: ErrorKind | None = None
    error_detail: str | None = None
    status_code: int | None = None

    @classmethod
    def success(cls, raw_body: Any, status_code: int | None = None) -> "ProviderOutcome":
        return cls(ok=True, raw_body=raw_body, status_code=status_code)

    @classmethod
    def failure(
        cls,
        error_kind: ErrorKind,
        error_detail: str,
        status_code: int | None = None,
    ) -> "ProviderOutcome":
        return cls(
            ok=False,
            error_kind=error_kind,
            error_detail=error_detail,
            status_code=status_code,
        )


@dataclass
class NormalizedResult:
    text: str
    model: str
    source_provider: str
    used_fallback: bool = False
    fallback_from: str | None = None
