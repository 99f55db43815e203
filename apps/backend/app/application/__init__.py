"""
===============================================================================
APPLICATION LAYER (Public API / Exports)
===============================================================================

Expone los servicios de aplicación compartidos:
  - PerOfferLocks: orden de transición + auditoría por oferta

Nota:
  - Los casos de uso se importan desde `usecases/` subdirectories.
===============================================================================
"""

from .offer_locks import PerOfferLocks

__all__ = ["PerOfferLocks"]
