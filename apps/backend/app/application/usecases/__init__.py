"""
Use Cases Layer (Business Operations)

This package exposes entry points for business logic, organized by feature.

Structure
---------
usecases/
├── moderation/     # Admin panel: approve/reject/publish/archive, list, statistics
└── offers/         # Driver and public side: create, submit, published listing

Usage
-----
    from app.application.usecases.moderation import ApproveOfferUseCase
    from app.application.usecases import CreateOfferUseCase
"""

# Moderation
from .moderation import (
    ApproveOfferUseCase,
    ArchiveOfferUseCase,
    GetOfferStatisticsUseCase,
    GetOfferUseCase,
    ListOffersInput,
    ListOffersUseCase,
    OfferPage,
    PublishOfferUseCase,
    RejectOfferUseCase,
)

# Driver / public
from .offers import (
    CreateOfferInput,
    CreateOfferUseCase,
    ListPublishedOffersInput,
    ListPublishedOffersUseCase,
    SubmitOfferUseCase,
)

__all__ = [
    # Moderation
    "ApproveOfferUseCase",
    "RejectOfferUseCase",
    "PublishOfferUseCase",
    "ArchiveOfferUseCase",
    "GetOfferUseCase",
    "ListOffersInput",
    "ListOffersUseCase",
    "OfferPage",
    "GetOfferStatisticsUseCase",
    # Driver / public
    "CreateOfferInput",
    "CreateOfferUseCase",
    "SubmitOfferUseCase",
    "ListPublishedOffersInput",
    "ListPublishedOffersUseCase",
]
