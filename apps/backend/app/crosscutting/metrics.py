"""
===============================================================================
MÓDULO: Métricas Prometheus (HTTP + moderación + auditoría + DB)
===============================================================================

Objetivo
--------
Exponer métricas de baja cardinalidad para:
- Tráfico HTTP (requests, latencia)
- Decisiones de moderación (acción + outcome)
- Salud de la auditoría (fallas de escritura, backlog pendiente)
- Duración de queries DB (por tipo de statement)

Notas
-----
- Registry propio (CollectorRegistry) para no mezclar con métricas de procesos
  externos y para poder resetear en tests.
- Los labels NUNCA incluyen IDs (offer_id, actor): cardinalidad acotada.
===============================================================================
"""

from __future__ import annotations

import re

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

# -----------------------------------------------------------------------------
# HTTP
# -----------------------------------------------------------------------------
_requests_total = Counter(
    "offers_requests_total",
    "Total de requests HTTP",
    ["endpoint", "method", "status"],
    registry=_registry,
)

_request_latency = Histogram(
    "offers_request_latency_seconds",
    "Latencia de requests HTTP (segundos)",
    ["endpoint", "method"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=_registry,
)

# -----------------------------------------------------------------------------
# Moderación
# -----------------------------------------------------------------------------
_moderation_actions_total = Counter(
    "offers_moderation_actions_total",
    "Acciones de moderación por resultado",
    ["action", "outcome"],
    registry=_registry,
)

# -----------------------------------------------------------------------------
# Auditoría
# -----------------------------------------------------------------------------
_audit_write_failures_total = Counter(
    "offers_audit_write_failures_total",
    "Escrituras de auditoría que fallaron luego de reintentos",
    ["action"],
    registry=_registry,
)

_audit_dropped_total = Counter(
    "offers_audit_dropped_total",
    "Eventos de auditoría descartados por backlog lleno",
    registry=_registry,
)

_audit_pending_events = Gauge(
    "offers_audit_pending_events",
    "Eventos de auditoría pendientes de reintento",
    registry=_registry,
)

# -----------------------------------------------------------------------------
# DB
# -----------------------------------------------------------------------------
_db_query_duration = Histogram(
    "offers_db_query_duration_seconds",
    "Duración de queries DB (segundos)",
    ["kind"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
    registry=_registry,
)


# -----------------------------------------------------------------------------
# API pública (helpers de registro)
# -----------------------------------------------------------------------------


def record_request_metrics(
    endpoint: str,
    method: str,
    status_code: int,
    latency_seconds: float,
) -> None:
    """Registra métricas HTTP (endpoint normalizado, status agrupado)."""
    normalized = _normalize_endpoint(endpoint)
    _requests_total.labels(
        endpoint=normalized,
        method=method,
        status=_status_bucket(status_code),
    ).inc()
    _request_latency.labels(endpoint=normalized, method=method).observe(
        latency_seconds
    )


def record_moderation_action(action: str, outcome: str) -> None:
    """Cuenta una acción de moderación (outcome: success|conflict|illegal|...)."""
    _moderation_actions_total.labels(action=action, outcome=outcome).inc()


def record_audit_write_failure(action: str) -> None:
    _audit_write_failures_total.labels(action=action).inc()


def record_audit_dropped() -> None:
    _audit_dropped_total.inc()


def set_audit_pending(count: int) -> None:
    _audit_pending_events.set(count)


def observe_db_query_duration(kind: str, seconds: float) -> None:
    """
    Observa duración de una query DB.

    Reglas:
      - `kind` debe ser baja cardinalidad (SELECT/INSERT/UPDATE/...).
      - NO incluir SQL completo.
    """
    _db_query_duration.labels(kind=(kind or "UNKNOWN").upper()).observe(seconds)


# -----------------------------------------------------------------------------
# Helpers internos
# -----------------------------------------------------------------------------

_UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    flags=re.IGNORECASE,
)


def _normalize_endpoint(path: str) -> str:
    """Reemplaza UUIDs e IDs numéricos por `{id}` para evitar cardinalidad alta."""
    path = _UUID_RE.sub("{id}", path)
    return re.sub(r"/\d+", "/{id}", path)


def _status_bucket(code: int) -> str:
    """Agrupa status code para baja cardinalidad."""
    if 200 <= code < 300:
        return "2xx"
    if 400 <= code < 500:
        return "4xx"
    if 500 <= code < 600:
        return "5xx"
    return "other"


# -----------------------------------------------------------------------------
# Exposición del endpoint /metrics
# -----------------------------------------------------------------------------


def get_metrics_response() -> tuple[bytes, str]:
    """Genera el body y content-type para /metrics."""
    return generate_latest(_registry), CONTENT_TYPE_LATEST


def get_registry() -> CollectorRegistry:
    """Registry propio (tests leen valores con get_sample_value)."""
    return _registry
