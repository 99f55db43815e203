"""
===============================================================================
TARJETA CRC — app/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer dependencias (repositorios, trail de auditoría, casos de uso).
  - Exponer factories para FastAPI (Depends).
  - Mantener singletons con caching (lru_cache) para recursos compartidos:
    repositorios, AuditTrail (backlog en memoria) y PerOfferLocks.
  - Centralizar decisiones runtime basadas en Settings (config).

Colaboradores:
  - app.crosscutting.config.get_settings
  - app.domain.repositories.* (puertos)
  - app.infrastructure.repositories.* (implementaciones)
  - app.application.usecases.* (casos de uso)

Patrones aplicados:
  - Composition Root
  - Dependency Inversion (use cases dependen de puertos)
  - Lazy singletons con lru_cache

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO debe depender de FastAPI (solo expone factories).
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application import PerOfferLocks
from .application.usecases import (
    ApproveOfferUseCase,
    ArchiveOfferUseCase,
    CreateOfferUseCase,
    GetOfferStatisticsUseCase,
    GetOfferUseCase,
    ListOffersUseCase,
    ListPublishedOffersUseCase,
    PublishOfferUseCase,
    RejectOfferUseCase,
    SubmitOfferUseCase,
)
from .audit import AuditTrail
from .crosscutting.config import get_settings
from .domain.repositories import AuditEventRepository, DriverOfferRepository
from .infrastructure.repositories import (
    InMemoryAuditEventRepository,
    InMemoryDriverOfferRepository,
    PostgresAuditEventRepository,
    PostgresDriverOfferRepository,
)

# =============================================================================
# Helpers internos
# =============================================================================


def _is_test_env() -> bool:
    """app_env ∈ {"test", "testing", "ci"} => in-memory adapters."""
    return get_settings().is_test()


# =============================================================================
# Repositorios y servicios compartidos (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_offer_repository() -> DriverOfferRepository:
    """Repositorio de ofertas (in-memory en test, Postgres en runtime)."""
    if _is_test_env():
        return InMemoryDriverOfferRepository()
    return PostgresDriverOfferRepository()


@lru_cache(maxsize=1)
def get_audit_repository() -> AuditEventRepository:
    """Repositorio de auditoría (append-only)."""
    if _is_test_env():
        return InMemoryAuditEventRepository()
    return PostgresAuditEventRepository()


@lru_cache(maxsize=1)
def get_audit_trail() -> AuditTrail:
    """Trail único por proceso: el backlog pendiente vive aquí."""
    settings = get_settings()
    return AuditTrail(
        get_audit_repository(),
        max_attempts=settings.retry_max_attempts,
        base_delay=settings.retry_base_delay_seconds,
        max_delay=settings.retry_max_delay_seconds,
        pending_max=settings.audit_pending_max,
    )


@lru_cache(maxsize=1)
def get_offer_locks() -> PerOfferLocks:
    """Locks de orden por oferta (compartidos entre todos los comandos)."""
    return PerOfferLocks()


# =============================================================================
# Casos de uso — moderación
# =============================================================================


def get_approve_offer_use_case() -> ApproveOfferUseCase:
    return ApproveOfferUseCase(
        get_offer_repository(), get_audit_trail(), get_offer_locks()
    )


def get_reject_offer_use_case() -> RejectOfferUseCase:
    return RejectOfferUseCase(
        get_offer_repository(),
        get_audit_trail(),
        get_offer_locks(),
        max_reason_chars=get_settings().max_reason_chars,
    )


def get_publish_offer_use_case() -> PublishOfferUseCase:
    return PublishOfferUseCase(
        get_offer_repository(), get_audit_trail(), get_offer_locks()
    )


def get_archive_offer_use_case() -> ArchiveOfferUseCase:
    return ArchiveOfferUseCase(
        get_offer_repository(), get_audit_trail(), get_offer_locks()
    )


def get_get_offer_use_case() -> GetOfferUseCase:
    return GetOfferUseCase(get_offer_repository())


def get_list_offers_use_case() -> ListOffersUseCase:
    return ListOffersUseCase(get_offer_repository())


def get_offer_statistics_use_case() -> GetOfferStatisticsUseCase:
    return GetOfferStatisticsUseCase(get_offer_repository())


# =============================================================================
# Casos de uso — conductor / público
# =============================================================================


def get_create_offer_use_case() -> CreateOfferUseCase:
    settings = get_settings()
    return CreateOfferUseCase(
        get_offer_repository(),
        get_audit_trail(),
        max_seats=settings.offer_max_seats,
        min_advance_minutes=settings.offer_min_advance_minutes,
        default_currency=settings.offer_default_currency,
    )


def get_submit_offer_use_case() -> SubmitOfferUseCase:
    return SubmitOfferUseCase(
        get_offer_repository(), get_audit_trail(), get_offer_locks()
    )


def get_list_published_offers_use_case() -> ListPublishedOffersUseCase:
    return ListPublishedOffersUseCase(get_offer_repository())


# =============================================================================
# Testing helpers
# =============================================================================


def reset_container() -> None:
    """Descarta singletons (tests que necesitan estado limpio)."""
    for factory in (
        get_offer_repository,
        get_audit_repository,
        get_audit_trail,
        get_offer_locks,
    ):
        factory.cache_clear()
