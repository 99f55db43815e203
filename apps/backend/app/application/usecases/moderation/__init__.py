"""
===============================================================================
MODERATION USE CASES PACKAGE (Public API / Exports)
===============================================================================

Casos de uso del panel de moderación:
  - comandos de estado: approve / reject / publish / archive
  - lecturas: detalle, listado paginado, estadísticas
===============================================================================
"""

from .approve_offer import ApproveOfferUseCase
from .archive_offer import ArchiveOfferUseCase
from .get_offer import GetOfferUseCase
from .get_statistics import GetOfferStatisticsUseCase
from .list_offers import ListOffersInput, ListOffersUseCase, OfferPage
from .offer_command import OfferCommandUseCase, outcome_label
from .publish_offer import PublishOfferUseCase
from .reject_offer import RejectOfferUseCase

__all__ = [
    "ApproveOfferUseCase",
    "RejectOfferUseCase",
    "PublishOfferUseCase",
    "ArchiveOfferUseCase",
    "OfferCommandUseCase",
    "outcome_label",
    "GetOfferUseCase",
    "ListOffersInput",
    "ListOffersUseCase",
    "OfferPage",
    "GetOfferStatisticsUseCase",
]
