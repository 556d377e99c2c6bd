"""
Prometheus metrics for the MCP dispatcher.
Uses a process-local registry so repeated imports in tests never clash with the default one.
"""
from __future__ import annotations

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest, CONTENT_TYPE_LATEST

from utils import env_flag

# Single registry for the process
_REGISTRY: Optional[CollectorRegistry] = None

# Metrics objects
REQUESTS_TOTAL: Optional[Counter] = None
REQUEST_LATENCY: Optional[Histogram] = None
PROJECTS: Optional[Gauge] = None


def metrics_enabled() -> bool:
    return env_flag("METRICS_ENABLED", "1")


def _get_registry() -> CollectorRegistry:
    global _REGISTRY
    if _REGISTRY is None:
        _REGISTRY = CollectorRegistry()
    return _REGISTRY


def init_metrics() -> None:
    global REQUESTS_TOTAL, REQUEST_LATENCY, PROJECTS
    if REQUESTS_TOTAL is not None:
        return
    reg = _get_registry()
    REQUESTS_TOTAL = Counter("mcp_requests_total", "Total requests by method and outcome", ["method", "outcome"], registry=reg)
    REQUEST_LATENCY = Histogram("mcp_request_latency_seconds", "Request latency by method", ["method"], registry=reg)
    PROJECTS = Gauge("mcp_projects", "Number of projects in the registry", registry=reg)


def record_request(method: str, success: bool, latency_s: float) -> None:
    if not metrics_enabled():
        return
    init_metrics()
    outcome = "success" if success else "failure"
    REQUESTS_TOTAL.labels(method=method, outcome=outcome).inc()
    REQUEST_LATENCY.labels(method=method).observe(max(0.0, latency_s))


def set_project_count(count: int) -> None:
    if not metrics_enabled():
        return
    init_metrics()
    PROJECTS.set(count)


def metrics_payload_bytes() -> bytes:
    init_metrics()
    return generate_latest(_get_registry())


__all__ = [
    "CONTENT_TYPE_LATEST",
    "init_metrics",
    "metrics_payload_bytes",
    "record_request",
    "set_project_count",
]
