import pytest

from nearpay.core.clock import ManualClock
from nearpay.core.exceptions import InvalidRatingError, NotLoggedInError
from nearpay.registry import SharedRegistry
from nearpay.services import RatingService
from nearpay.session import UserSession
from tests.factories import DEFAULT_TIME


@pytest.mark.unit
class TestRateUser:
    def test_rating_recorded_with_rater_and_time(
        self,
        rating_service: RatingService,
        session: UserSession,
        registry: SharedRegistry,
        clock: ManualClock,
    ) -> None:
        clock.advance(30)

        entry = rating_service.rate_user(session, "John Doe", 4, comment="Quick handover")

        assert entry.rater == "DemoUser"
        assert entry.comment == "Quick handover"
        assert entry.timestamp == clock.now()
        assert entry.timestamp > DEFAULT_TIME
        assert registry.get_user_ratings("John Doe") == [entry]

    def test_ratings_kept_per_user(
        self, rating_service: RatingService, session: UserSession, registry: SharedRegistry
    ) -> None:
        rating_service.rate_user(session, "John Doe", 5)
        rating_service.rate_user(session, "Jane Smith", 2)
        rating_service.rate_user(session, "John Doe", 3)

        assert [r.rating for r in registry.get_user_ratings("John Doe")] == [5, 3]
        assert [r.rating for r in registry.get_user_ratings("Jane Smith")] == [2]
        assert registry.get_user_ratings("Alex Chen") == []

    @pytest.mark.parametrize("rating", [0, 6, -1, 3.5, True, "4"])
    def test_out_of_range_rating_rejected(
        self,
        rating_service: RatingService,
        session: UserSession,
        registry: SharedRegistry,
        rating: object,
    ) -> None:
        with pytest.raises(InvalidRatingError):
            rating_service.rate_user(session, "John Doe", rating)
        assert registry.get_user_ratings("John Doe") == []

    def test_cannot_rate_self(self, rating_service: RatingService, session: UserSession) -> None:
        with pytest.raises(InvalidRatingError):
            rating_service.rate_user(session, "DemoUser", 5)

    def test_requires_login(self, rating_service: RatingService) -> None:
        with pytest.raises(NotLoggedInError):
            rating_service.rate_user(None, "John Doe", 5)


@pytest.mark.unit
class TestAverageRating:
    def test_unrated_user_averages_zero(self, rating_service: RatingService) -> None:
        assert rating_service.average_rating("John Doe") == 0.0

    def test_average_rounded_to_one_decimal(
        self, rating_service: RatingService, session: UserSession
    ) -> None:
        for value in (5, 4, 4):
            rating_service.rate_user(session, "John Doe", value)

        assert rating_service.average_rating("John Doe") == 4.3

    def test_half_rounds_up(self, rating_service: RatingService, session: UserSession) -> None:
        for value in (4, 4, 5, 4):
            rating_service.rate_user(session, "Jane Smith", value)

        assert rating_service.average_rating("Jane Smith") == 4.3

    def test_ratings_cleared_with_registry(
        self, rating_service: RatingService, session: UserSession, registry: SharedRegistry
    ) -> None:
        rating_service.rate_user(session, "John Doe", 5)
        registry.clear()
        assert rating_service.average_rating("John Doe") == 0.0
