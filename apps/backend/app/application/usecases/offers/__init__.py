"""
Driver/public offer use cases: create, submit (and resubmit), public listing.
"""

from .create_offer import CreateOfferInput, CreateOfferUseCase
from .list_published_offers import (
    ListPublishedOffersInput,
    ListPublishedOffersUseCase,
)
from .submit_offer import SubmitOfferUseCase

__all__ = [
    "CreateOfferInput",
    "CreateOfferUseCase",
    "SubmitOfferUseCase",
    "ListPublishedOffersInput",
    "ListPublishedOffersUseCase",
]
