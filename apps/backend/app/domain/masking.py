"""
===============================================================================
TARJETA CRC — domain/masking.py
===============================================================================

Módulo:
    Enmascarado de PII para payloads de auditoría

Responsabilidades:
    - Reemplazar por completo los valores de claves sensibles
      (phone, phone_e164, email, password, code, token; case-insensitive).
    - Recorrer recursivamente dicts y listas.
    - Enmascarado parcial de strings sueltos:
        * teléfono E.164:  "+998901234567"      -> "+998**...67"
        * email:           "driver@example.com" -> "d**r@example.com"
                           "ab@example.com"     -> "***@example.com"

Colaboradores:
    - app.audit.AuditTrail: enmascara antes de persistir.

Notas:
    - Función pura: no muta el input, devuelve estructuras nuevas.
    - `preserve` permite dejar claves en claro (ej. "reason": los motivos
      de rechazo no se consideran sensibles).
===============================================================================
"""

from __future__ import annotations

import re
from typing import Any, Collection

MASKED_KEYS: frozenset[str] = frozenset(
    {"phone", "phone_e164", "email", "password", "code", "token"}
)

REDACTION_MARKER = "***MASKED***"
PARTIAL_MARKER = "**"

_E164_RE = re.compile(r"^\+[1-9]\d{1,14}$")


def mask_phone(value: str) -> str:
    return value[:4] + PARTIAL_MARKER + "..." + value[-2:]


def mask_email(value: str) -> str:
    local, _, domain = value.rpartition("@")
    if len(local) > 2:
        return f"{local[0]}{PARTIAL_MARKER}{local[-1]}@{domain}"
    return f"***@{domain}"


def mask_string(value: str) -> str:
    """Enmascarado parcial de un string suelto (teléfono o email)."""
    if _E164_RE.match(value):
        return mask_phone(value)
    if "@" in value:
        return mask_email(value)
    return value


def mask_payload(value: Any, *, preserve: Collection[str] = ()) -> Any:
    """Devuelve una copia enmascarada de `value` (dict/list/str/escalares)."""
    preserved = {k.lower() for k in preserve}
    return _mask(value, preserved)


def _mask(value: Any, preserved: set[str]) -> Any:
    if isinstance(value, str):
        return mask_string(value)

    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for key, item in value.items():
            lowered = str(key).lower()
            if lowered in MASKED_KEYS:
                out[key] = REDACTION_MARKER
            elif lowered in preserved:
                out[key] = item
            else:
                out[key] = _mask(item, preserved)
        return out

    if isinstance(value, (list, tuple)):
        return [_mask(item, preserved) for item in value]

    return value
