"""Prometheus metrics for the person write paths."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

saga_runs_total = Counter(
    "phonebook_saga_runs_total",
    "Multi-store writes by final outcome",
    ["saga", "outcome"],
)

saga_compensations_total = Counter(
    "phonebook_saga_compensations_total",
    "Compensating actions attempted after a failed write",
    ["saga", "step", "result"],
)

photo_upload_bytes = Histogram(
    "phonebook_photo_upload_bytes",
    "Size of photos accepted for upload",
    buckets=(16_384, 65_536, 262_144, 1_048_576, 4_194_304, 16_777_216),
)


def observe_saga(saga: str, outcome: str) -> None:
    """Count a saga by outcome: committed, compensated, uncompensated or failed before any step."""

    saga_runs_total.labels(saga=saga, outcome=outcome).inc()


def observe_compensation(saga: str, step: str, succeeded: bool) -> None:
    saga_compensations_total.labels(saga=saga, step=step, result="ok" if succeeded else "failed").inc()


def observe_photo_upload(size: int) -> None:
    photo_upload_bytes.observe(size)


__all__ = ["observe_compensation", "observe_photo_upload", "observe_saga"]
