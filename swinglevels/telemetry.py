"""Prometheus counters for level-engine outcomes."""

from __future__ import annotations

from prometheus_client import Counter


LEVELS_ACCEPTED = Counter(
    "levels_accepted_total",
    "Number of setups that produced accepted trade levels.",
    labelnames=("family", "archetype"),
)

LEVELS_REJECTED = Counter(
    "levels_rejected_total",
    "Number of setups rejected, broken out by rejection kind.",
    labelnames=("family", "kind"),
)

TARGET_CAPPED = Counter(
    "target_capped_total",
    "Number of main targets capped by the maximum-reward guardrail.",
    labelnames=("family",),
)

TARGET_BASIS = Counter(
    "target_basis_total",
    "Main target selections broken out by structural basis.",
    labelnames=("family", "basis"),
)


def record_accepted(family: str, archetype: str, target2_basis: str | None, capped: bool) -> None:
    LEVELS_ACCEPTED.labels(family=family, archetype=archetype or "unknown").inc()
    TARGET_BASIS.labels(family=family, basis=target2_basis or "unknown").inc()
    if capped:
        TARGET_CAPPED.labels(family=family).inc()


def record_rejected(family: str, kind: str) -> None:
    LEVELS_REJECTED.labels(family=family, kind=kind or "economic").inc()


__all__ = [
    "LEVELS_ACCEPTED",
    "LEVELS_REJECTED",
    "TARGET_CAPPED",
    "TARGET_BASIS",
    "record_accepted",
    "record_rejected",
]
