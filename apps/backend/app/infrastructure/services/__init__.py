"""
Infrastructure Services

Utilidades de resiliencia para IO de persistencia:
  - create_retry_decorator: tenacity con exponential backoff + jitter
  - is_transient_error: política transient vs permanent
"""

from .retry import create_retry_decorator, is_transient_error

__all__ = ["create_retry_decorator", "is_transient_error"]
