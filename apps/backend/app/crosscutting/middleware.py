# apps/backend/app/crosscutting/middleware.py
"""
===============================================================================
MÓDULO: Middlewares HTTP (contexto + límites de payload)
===============================================================================

Objetivo
--------
1) RequestContextMiddleware:
   - Generar/propagar request_id
   - Setear contextvars (method/path/ip/user-agent) para logs y auditoría
   - Log y métricas por request

2) BodyLimitMiddleware:
   - Defender la API de payloads gigantes (incluyendo chunked uploads)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componentes:
  - RequestContextMiddleware
  - BodyLimitMiddleware

Colaboradores:
  - app/context.py
  - crosscutting/metrics.py
  - crosscutting/error_responses.py
===============================================================================
"""

from __future__ import annotations

import json
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..context import clear_context, set_request_context
from .error_responses import PROBLEM_JSON_MEDIA_TYPE, ErrorCode, ErrorDetail
from .logger import logger
from .metrics import record_request_metrics

_MAX_REQUEST_ID_LEN = 128


def _client_ip(request: Request) -> str:
    """IP del cliente; respeta el primer hop de X-Forwarded-For si existe."""
    forwarded = (request.headers.get("x-forwarded-for") or "").strip()
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    - Genera/acepta X-Request-Id y lo devuelve en la respuesta
    - Setea contextvars para correlación de logs y metadata de auditoría
    - Emite logs y métricas por request
    - Garantiza clear_context() para evitar leaks
    """

    _QUIET_PATHS = {"/healthz", "/readyz", "/metrics"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = (request.headers.get("x-request-id") or "").strip()
        request_id = (
            incoming if self._is_valid_request_id(incoming) else str(uuid.uuid4())
        )

        set_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=_client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
        )
        request.state.request_id = request_id

        start = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-Id"] = request_id
            return response
        except Exception:
            latency = time.perf_counter() - start
            logger.exception(
                "request falló",
                extra={"status_code": 500, "latency_ms": round(latency * 1000, 2)},
            )
            raise
        finally:
            latency = time.perf_counter() - start

            record_request_metrics(
                endpoint=request.url.path,
                method=request.method,
                status_code=status_code,
                latency_seconds=latency,
            )

            if request.url.path not in self._QUIET_PATHS:
                logger.info(
                    "request completado",
                    extra={
                        "status_code": status_code,
                        "latency_ms": round(latency * 1000, 2),
                    },
                )

            clear_context()

    @staticmethod
    def _is_valid_request_id(value: str) -> bool:
        # Aceptamos UUIDs y también ids cortos razonables.
        return bool(value) and len(value) <= _MAX_REQUEST_ID_LEN


class _BodyTooLarge(Exception):
    pass


class BodyLimitMiddleware:
    """
    Rechaza requests cuyo body exceda max_body_bytes (Content-Length o chunked).
    Responde 413 en formato RFC7807.
    """

    def __init__(self, app, max_body_bytes: int | None = None):
        self.app = app
        if max_body_bytes is None:
            from .config import get_settings

            max_body_bytes = get_settings().max_body_bytes
        self._max_bytes = max_body_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = {k.decode().lower(): v.decode() for k, v in scope.get("headers", [])}
        path = scope.get("path", "")
        req_id = (headers.get("x-request-id") or "").strip() or str(uuid.uuid4())

        cl = headers.get("content-length")
        if cl and cl.isdigit() and int(cl) > self._max_bytes:
            logger.warning(
                "payload demasiado grande (por content-length)",
                extra={"content_length": cl, "max_bytes": self._max_bytes, "path": path},
            )
            await self._send_413(send, path=path, request_id=req_id)
            return

        started = False

        async def send_wrapper(message):
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        received = 0

        async def receive_limited():
            nonlocal received
            msg = await receive()
            if msg["type"] == "http.request":
                received += len(msg.get("body", b"") or b"")
                if received > self._max_bytes:
                    raise _BodyTooLarge()
            return msg

        try:
            await self.app(scope, receive_limited, send_wrapper)
        except _BodyTooLarge:
            # Si ya arrancó la respuesta, no podemos enviar otra sin romper el protocolo
            if started:
                logger.error(
                    "payload excedió límite luego de iniciar respuesta",
                    extra={"path": path},
                )
                raise
            logger.warning(
                "payload demasiado grande (streaming)",
                extra={"received_bytes": received, "max_bytes": self._max_bytes, "path": path},
            )
            await self._send_413(send, path=path, request_id=req_id)

    async def _send_413(self, send, *, path: str, request_id: str) -> None:
        problem = ErrorDetail(
            type="about:blank/payload_too_large",
            title="Payload Too Large",
            status=413,
            detail=f"Request body demasiado grande. Máximo permitido: {self._max_bytes} bytes",
            code=ErrorCode.PAYLOAD_TOO_LARGE,
            instance=path,
            errors=[{"request_id": request_id}],
        ).model_dump(mode="json", exclude_none=True)

        await send(
            {
                "type": "http.response.start",
                "status": 413,
                "headers": [
                    (b"content-type", PROBLEM_JSON_MEDIA_TYPE.encode()),
                    (b"x-request-id", request_id.encode()),
                ],
            }
        )
        await send(
            {
                "type": "http.response.body",
                "body": json.dumps(problem, ensure_ascii=False).encode("utf-8"),
            }
        )
