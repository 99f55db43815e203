"""
===============================================================================
TARJETA CRC — identity/auth.py
===============================================================================

Módulo:
    Autenticación por API Key (X-API-Key) + resolución del actor

Responsabilidades:
    - Cargar/parsear la configuración de API keys desde Settings (env).
    - Validar API keys con comparación en tiempo constante (mitiga timing attacks).
    - Validar scopes (offers:read, offers:moderate, offers:write, audit:read, metrics).
    - Resolver el actor (actor_id) que se registra en reviewed_by y en auditoría.
    - Exponer dependencias FastAPI (require_scope, require_actor, require_metrics_auth).
    - Nunca loguear la key en claro; solo hash recortado.

Colaboradores:
    - crosscutting.config.get_settings: obtiene API_KEYS_CONFIG + settings de métricas.
    - crosscutting.error_responses: unauthorized/forbidden estándar.
    - crosscutting.logger: logging estructurado.

Formato de API_KEYS_CONFIG:
    {"key-a": ["offers:read"]}                                  -> actor derivado
    {"key-b": {"actor_id": "moderator:7", "scopes": ["*"]}}     -> actor explícito

Sin keys configuradas (dev local) la auth está deshabilitada:
    - lecturas abiertas
    - mutaciones toman el actor de X-Actor-Id (401 si falta)
===============================================================================
"""

from __future__ import annotations

import hashlib
import hmac
import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from fastapi import Header, Request
from fastapi.security import APIKeyHeader

from ..crosscutting.error_responses import forbidden, unauthorized
from ..crosscutting.logger import logger

# ---------------------------------------------------------------------------
# Constantes de seguridad
# ---------------------------------------------------------------------------

# R: Longitud del hash recortado para logs y actor derivado.
_KEY_HASH_LEN: int = 12

# R: Largo máximo aceptado para X-Actor-Id (modo sin auth).
_MAX_ACTOR_ID_LEN: int = 128

# R: Security scheme (para OpenAPI). auto_error=False: controlamos el error nosotros.
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


@dataclass(frozen=True)
class ApiKeyEntry:
    scopes: tuple[str, ...]
    actor_id: str | None = None


@dataclass(frozen=True)
class Actor:
    """Identidad autenticada que ejecuta la acción."""

    actor_id: str
    scopes: tuple[str, ...] = ()
    key_hash: str | None = None

    def has_scope(self, scope: str) -> bool:
        return scope in self.scopes or "*" in self.scopes


# ---------------------------------------------------------------------------
# Helpers internos (NO exportados)
# ---------------------------------------------------------------------------


def _hash_key(key: str) -> str:
    """Hashea la API key para logging seguro (nunca loguear en claro)."""
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    return digest[:_KEY_HASH_LEN]


def _constant_time_compare(a: str, b: str) -> bool:
    """Comparación en tiempo constante (mitiga timing attacks)."""
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def _normalize_key(key: str | None) -> str | None:
    """Normaliza inputs triviales (espacios)."""
    if key is None:
        return None
    key = key.strip()
    return key or None


def _clean_scopes(value: object) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(s, str) for s in value):
        return ()
    return tuple(s.strip() for s in value if s.strip())


def _validate_config_shape(raw: object) -> dict[str, ApiKeyEntry]:
    """Valida/normaliza el shape del JSON de API keys (entradas inválidas se ignoran)."""
    if not isinstance(raw, dict):
        return {}

    cfg: dict[str, ApiKeyEntry] = {}
    for k, v in raw.items():
        if not isinstance(k, str) or not k.strip():
            continue

        actor_id: str | None = None
        if isinstance(v, dict):
            scopes = _clean_scopes(v.get("scopes"))
            raw_actor = v.get("actor_id")
            if isinstance(raw_actor, str) and raw_actor.strip():
                actor_id = raw_actor.strip()
        else:
            scopes = _clean_scopes(v)

        if scopes:
            cfg[k.strip()] = ApiKeyEntry(scopes=scopes, actor_id=actor_id)
    return cfg


@lru_cache(maxsize=1)
def _parse_keys_config() -> dict[str, ApiKeyEntry]:
    """Parsea API_KEYS_CONFIG desde Settings. Dict vacío si falta o es inválido."""
    from ..crosscutting.config import get_settings

    config_str = (get_settings().api_keys_config or "").strip()
    if not config_str:
        return {}

    try:
        raw = json.loads(config_str)
    except json.JSONDecodeError as exc:
        logger.warning("API_KEYS_CONFIG inválido (JSON)", extra={"error": str(exc)})
        return {}

    cfg = _validate_config_shape(raw)
    if not cfg:
        logger.warning("API_KEYS_CONFIG inválido (shape)")
        return {}

    return cfg


# ---------------------------------------------------------------------------
# API pública del módulo (para otras capas)
# ---------------------------------------------------------------------------


def get_keys_config() -> dict[str, ApiKeyEntry]:
    """Devuelve el config de keys (cacheado)."""
    return _parse_keys_config()


def clear_keys_cache() -> None:
    """Limpia el cache (tests / hot-reload local)."""
    _parse_keys_config.cache_clear()


def is_auth_enabled() -> bool:
    """Indica si hay API keys configuradas."""
    return bool(get_keys_config())


class APIKeyValidator:
    """Validador puro para API keys, scopes y actor."""

    def __init__(self, keys_config: dict[str, ApiKeyEntry]):
        self._keys = keys_config

    def _lookup(self, key: str) -> ApiKeyEntry | None:
        # R: Recorremos todas las keys para no filtrar timing por early-return.
        match: ApiKeyEntry | None = None
        for valid_key, entry in self._keys.items():
            if _constant_time_compare(key, valid_key):
                match = entry
        return match

    def validate_key(self, key: str) -> bool:
        return bool(key) and self._lookup(key) is not None

    def get_scopes(self, key: str) -> list[str]:
        entry = self._lookup(key) if key else None
        return list(entry.scopes) if entry else []

    def validate_scope(self, key: str, required_scope: str) -> bool:
        """True si la key tiene el scope requerido o wildcard '*'."""
        scopes = self.get_scopes(key)
        return required_scope in scopes or "*" in scopes

    def resolve_actor(self, key: str) -> Actor | None:
        """Actor de la key: actor_id configurado o `apikey:<hash>`."""
        entry = self._lookup(key) if key else None
        if entry is None:
            return None
        key_hash = _hash_key(key)
        return Actor(
            actor_id=entry.actor_id or f"apikey:{key_hash}",
            scopes=entry.scopes,
            key_hash=key_hash,
        )


def _get_validator() -> APIKeyValidator:
    return APIKeyValidator(get_keys_config())


def authenticate(
    api_key: str | None, scope: str, *, path: str = ""
) -> Actor | None:
    """
    Valida key + scope. None si la auth está deshabilitada.

    Raises:
        AppHTTPException 401: falta la key.
        AppHTTPException 403: key inválida o sin scope.
    """
    if not is_auth_enabled():
        return None

    api_key_norm = _normalize_key(api_key)
    if not api_key_norm:
        logger.warning(
            "Auth falló: falta X-API-Key",
            extra={"path": path, "scope": scope},
        )
        raise unauthorized("Falta API key. Enviá el header X-API-Key.")

    validator = _get_validator()
    actor = validator.resolve_actor(api_key_norm)
    if actor is None:
        logger.warning(
            "Auth falló: API key inválida",
            extra={"key_hash": _hash_key(api_key_norm), "path": path},
        )
        raise forbidden("API key inválida.")

    if not actor.has_scope(scope):
        logger.warning(
            "Auth falló: scope insuficiente",
            extra={
                "key_hash": actor.key_hash,
                "path": path,
                "required_scope": scope,
                "available_scopes": list(actor.scopes),
            },
        )
        raise forbidden(f"La API key no tiene el scope requerido: {scope}")

    return actor


def require_scope(scope: str) -> Callable:
    """Dependency FastAPI para lecturas: key válida + scope (NO-OP sin keys)."""

    async def dependency(
        request: Request,
        api_key: str | None = Header(None, alias="X-API-Key"),
    ) -> Actor | None:
        actor = authenticate(api_key, scope, path=request.url.path)
        if actor is not None:
            request.state.api_key_hash = actor.key_hash
        return actor

    return dependency


def require_actor(scope: str) -> Callable:
    """
    Dependency FastAPI para mutaciones: siempre devuelve un Actor.

    - Con keys configuradas: actor de la key (401/403 como require_scope).
    - Sin keys: actor desde X-Actor-Id; 401 si falta.
    """

    async def dependency(
        request: Request,
        api_key: str | None = Header(None, alias="X-API-Key"),
        actor_header: str | None = Header(None, alias="X-Actor-Id"),
    ) -> Actor:
        actor = authenticate(api_key, scope, path=request.url.path)
        if actor is not None:
            request.state.api_key_hash = actor.key_hash
            return actor

        actor_id = (actor_header or "").strip()
        if not actor_id or len(actor_id) > _MAX_ACTOR_ID_LEN:
            raise unauthorized("Falta identidad del actor. Enviá el header X-Actor-Id.")
        return Actor(actor_id=actor_id, scopes=("*",))

    return dependency


def require_metrics_auth() -> Callable:
    """Dependency FastAPI: auth opcional para /metrics (controlado por settings)."""

    async def dependency(
        request: Request,
        api_key: str | None = Header(None, alias="X-API-Key"),
    ) -> None:
        from ..crosscutting.config import get_settings

        if not get_settings().metrics_require_auth:
            return None

        authenticate(api_key, "metrics", path=request.url.path)
        return None

    return dependency
