from nearpay.services.ratings import RatingService
from nearpay.services.requests import RequestAnalytics, RequestEntry, RequestService
from nearpay.services.transfers import TransferPreview, TransferService

__all__ = [
    "RatingService",
    "RequestAnalytics",
    "RequestEntry",
    "RequestService",
    "TransferPreview",
    "TransferService",
]
