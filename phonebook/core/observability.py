"""OpenTelemetry initialization helpers for the Phonebook service."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from phonebook.core.config import Settings

logger = logging.getLogger(__name__)
_TRACING_INITIALIZED = False


def setup_tracing(app: FastAPI, config: Settings) -> None:
    """Configure the tracer provider once and instrument the given app."""

    global _TRACING_INITIALIZED
    if not _TRACING_INITIALIZED:
        resource = Resource.create(
            {
                "service.name": config.API_TITLE.lower().replace(" ", "-"),
                "service.version": config.API_VERSION,
                "environment": config.ENVIRONMENT,
            }
        )
        provider = TracerProvider(resource=resource)
        if config.OTEL_EXPORTER_OTLP_ENDPOINT:
            exporter = OTLPSpanExporter(
                endpoint=str(config.OTEL_EXPORTER_OTLP_ENDPOINT),
                headers=_parse_headers(config.OTEL_EXPORTER_OTLP_HEADERS) or None,
            )
            provider.add_span_processor(BatchSpanProcessor(exporter))
            logger.info("OpenTelemetry tracing exporting to %s", config.OTEL_EXPORTER_OTLP_ENDPOINT)
        else:
            logger.info("OpenTelemetry tracing enabled without an exporter")
        trace.set_tracer_provider(provider)
        _TRACING_INITIALIZED = True

    FastAPIInstrumentor.instrument_app(app)


def _parse_headers(raw_headers: Optional[str]) -> Dict[str, str]:
    if not raw_headers:
        return {}
    pairs = {}
    for item in raw_headers.split(","):
        if "=" not in item:
            continue
        key, value = item.split("=", 1)
        pairs[key.strip()] = value.strip()
    return pairs


__all__ = ["setup_tracing"]
