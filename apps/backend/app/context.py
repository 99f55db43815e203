"""
===============================================================================
TARJETA CRC — app/context.py (Contexto por request)
===============================================================================

Responsabilidades:
  - Mantener contexto “request-scoped” usando ContextVars (async-safe).
  - Permitir correlación de logs/métricas/auditoría sin pasar parámetros por todo el stack.
  - Proveer helpers mínimos: set_*(), get_context_dict(), get_client_info(), clear_context().

Colaboradores:
  - app.crosscutting.middleware: setea request_id/method/path/ip/user-agent al inicio.
  - app.crosscutting.logger: enriquece logs leyendo get_context_dict().
  - app.audit: toma ip/user-agent del request que originó la acción.

Patrones aplicados:
  - Ambient Context (controlado y explícito).
  - Async-safe “thread-local” (ContextVar).

Restricciones:
  - Solo tipos primitivos (str) para serialización segura.
  - Defaults vacíos ("") para evitar None y simplificar JSON.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Final

# =============================================================================
# ContextVars: cada variable representa un dato correlacionable del request
# =============================================================================

# Identificador de request (idealmente UUID o ID estable).
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Metadatos HTTP básicos para logs (método y path).
http_method_var: ContextVar[str] = ContextVar("http_method", default="")
http_path_var: ContextVar[str] = ContextVar("http_path", default="")

# Cliente que originó el request (para auditoría; NO se loguea el user-agent).
client_ip_var: ContextVar[str] = ContextVar("client_ip", default="")
user_agent_var: ContextVar[str] = ContextVar("user_agent", default="")

# Claves estándar (para consistencia al construir dicts).
_CTX_REQUEST_ID: Final[str] = "request_id"
_CTX_METHOD: Final[str] = "method"
_CTX_PATH: Final[str] = "path"
_CTX_CLIENT_IP: Final[str] = "client_ip"


# =============================================================================
# API pública (usada por logger/middleware/auditoría)
# =============================================================================


def set_request_context(
    *,
    request_id: str = "",
    method: str = "",
    path: str = "",
    client_ip: str = "",
    user_agent: str = "",
) -> None:
    """
    Setea el contexto mínimo del request.

    Regla:
      - Strings vacíos significan “no disponible”.
    """
    request_id_var.set(request_id or "")
    http_method_var.set(method or "")
    http_path_var.set(path or "")
    client_ip_var.set(client_ip or "")
    user_agent_var.set(user_agent or "")


def get_context_dict() -> dict[str, str]:
    """
    Devuelve el contexto actual como dict, omitiendo claves vacías.

    Uso típico:
      - Enriquecimiento de logs estructurados.
    """
    ctx: dict[str, str] = {}

    if val := request_id_var.get():
        ctx[_CTX_REQUEST_ID] = val
    if val := http_method_var.get():
        ctx[_CTX_METHOD] = val
    if val := http_path_var.get():
        ctx[_CTX_PATH] = val
    if val := client_ip_var.get():
        ctx[_CTX_CLIENT_IP] = val

    return ctx


def get_client_info() -> tuple[str | None, str | None]:
    """(ip, user_agent) del request actual, None si no hay request."""
    return (client_ip_var.get() or None, user_agent_var.get() or None)


def clear_context() -> None:
    """
    Limpia el contexto al final del request.

    Importante:
      - Esto evita “filtración de contexto” entre requests cuando hay workers async.
    """
    request_id_var.set("")
    http_method_var.set("")
    http_path_var.set("")
    client_ip_var.set("")
    user_agent_var.set("")
