"""Ratings users leave for each other after an exchange."""

import logging
from decimal import ROUND_HALF_UP, Decimal

from nearpay.core.clock import Clock
from nearpay.core.exceptions import InvalidRatingError
from nearpay.models import UserRating
from nearpay.registry import SharedRegistry
from nearpay.services.validation import require_session
from nearpay.session import UserSession
from nearpay.sim_logging import log_session_context

logger = logging.getLogger(__name__)


class RatingService:
    """Per-user rating lists kept in the shared registry."""

    def __init__(self, registry: SharedRegistry, clock: Clock):
        self._registry = registry
        self._clock = clock

    def rate_user(
        self,
        session: UserSession | None,
        username: str,
        rating: int,
        comment: str = "",
    ) -> UserRating:
        """Record a 1-5 rating from the current user.

        Raises:
            NotLoggedInError: No session.
            InvalidRatingError: rating outside 1-5, not a whole number, or
                aimed at the rater.
        """
        session = require_session(session)
        if username == session.username:
            raise InvalidRatingError("Cannot rate yourself", details={"username": username})
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise InvalidRatingError(
                "Rating must be a whole number from 1 to 5", details={"rating": rating}
            )

        entry = UserRating(
            rating=rating,
            comment=comment,
            rater=session.username,
            timestamp=self._clock.now(),
        )
        with log_session_context(session.username):
            self._registry.add_user_rating(username, entry)
            logger.info(f"Rated {username} {rating}/5")
        return entry

    def average_rating(self, username: str) -> float:
        """Mean received rating to one decimal, halves rounded up; 0.0 when unrated."""
        ratings = self._registry.get_user_ratings(username)
        if not ratings:
            return 0.0
        mean = sum(r.rating for r in ratings) / len(ratings)
        return float(Decimal(mean).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
