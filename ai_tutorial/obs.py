"""Optional tracing for model calls and index operations.

Two independent backends, both shipped in the "observability" extra:
- Langfuse: a per-request Trace records retrieval events and the grounded
  answer of a RAG query. Enabled only when LANGFUSE_HOST and both keys are set.
- OpenTelemetry: span() wraps chat completions and vector store calls and
  exports to the console once a tracer provider is installed.

Without either package every helper here does nothing.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from ai_tutorial.config import settings

logger = logging.getLogger(__name__)

try:
    from langfuse import Langfuse
except Exception as e:  # pragma: no cover
    logger.debug("Langfuse not installed, request traces disabled: %s", e)
    Langfuse = None  # type: ignore

try:
    from opentelemetry import trace as otel_trace
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
except Exception as e:  # pragma: no cover
    logger.debug("OpenTelemetry not installed, spans disabled: %s", e)
    otel_trace = None  # type: ignore


_state: Dict[str, Any] = {"langfuse": None, "tracer": None}


def langfuse_enabled() -> bool:
    return bool(
        Langfuse is not None
        and settings.LANGFUSE_HOST
        and settings.LANGFUSE_PUBLIC_KEY
        and settings.LANGFUSE_SECRET_KEY
    )


def _langfuse():
    if _state["langfuse"] is None and langfuse_enabled():
        _state["langfuse"] = Langfuse(
            host=settings.LANGFUSE_HOST,
            public_key=settings.LANGFUSE_PUBLIC_KEY,
            secret_key=settings.LANGFUSE_SECRET_KEY,
        )
    return _state["langfuse"]


def _tracer():
    """Install a console-exporting provider on first use and return the tracer."""
    if otel_trace is None:
        return None
    if _state["tracer"] is None:
        provider = TracerProvider()
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        otel_trace.set_tracer_provider(provider)
        _state["tracer"] = otel_trace.get_tracer("ai_tutorial")
    return _state["tracer"]


@contextmanager
def span(name: str, attributes: Optional[Dict[str, Any]] = None) -> Iterator[None]:
    """Time the enclosed block as an OpenTelemetry span named `name`."""
    tracer = _tracer()
    if tracer is None:
        yield
        return
    with tracer.start_as_current_span(name, attributes=attributes or {}):
        yield


class Trace:
    """One Langfuse trace per RAG request; every method is a no-op when disabled."""

    def __init__(self, name: str, input: Optional[Dict[str, Any]] = None):
        self.name = name
        self._trace = None
        client = _langfuse()
        if client is None:
            return
        try:
            self._trace = client.trace(name=name, input=input or {})
        except Exception as e:
            logger.warning("Langfuse trace %s not started: %s", name, e)

    @property
    def enabled(self) -> bool:
        return self._trace is not None

    def _record(self, what: str, call, **kwargs) -> None:
        if self._trace is None:
            return
        try:
            call(**kwargs)
        except Exception as e:
            logger.debug("Langfuse %s on %s dropped: %s", what, self.name, e)

    def event(self, name: str, data: Optional[Dict[str, Any]] = None) -> None:
        if self._trace is not None:
            self._record("event", self._trace.event, name=name, input=data or {})

    def generation(self, name: str, prompt: str, output: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        if self._trace is not None:
            self._record(
                "generation",
                self._trace.generation,
                name=name,
                input=prompt,
                output=output,
                metadata=metadata or {},
                model=settings.OPENAI_MODEL,
            )

    def end(self, output: Optional[Dict[str, Any]] = None) -> None:
        if self._trace is not None:
            self._record("update", self._trace.update, output=output or {})
