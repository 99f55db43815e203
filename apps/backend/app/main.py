"""
Name: ASGI entrypoint (app.main)

Responsibilities:
  - Exponer la app FastAPI del servicio de moderación como `app.main:app`

Notes:
  - Sin IO ni configuración: todo el wiring vive en app.api.main.
  - uvicorn app.main:app --host 0.0.0.0 --port 8000
"""

from app.api.main import app

__all__ = ["app"]
