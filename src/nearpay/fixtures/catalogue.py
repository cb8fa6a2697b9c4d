"""Static demo catalogue: synthetic users, sample requests and places."""

from datetime import datetime, timedelta
from typing import Literal

from nearpay.models import (
    DeviceType,
    ExternalUser,
    Location,
    NearbyPlace,
    Request,
    RequestKind,
    SafeMeetupSpot,
    Transaction,
    Urgency,
    User,
)

DEMO_CENTER = Location(lat=16.922251, lng=82.000117)

ChatTemplateKind = Literal["greetings", "questions", "confirmations"]

CHAT_TEMPLATES: dict[str, list[str]] = {
    "greetings": [
        "Hi! I'm interested in your request.",
        "Hello! I can help you with that.",
        "Hey there! I'd like to assist you.",
        "Good day! I'm available to help.",
    ],
    "questions": [
        "When do you need this by?",
        "Where would you like to meet?",
        "Is there anything specific I should know?",
        "What's the best time for you?",
    ],
    "confirmations": [
        "Perfect! I'll be there soon.",
        "Great! See you in a bit.",
        "Excellent! I'm on my way.",
        "Awesome! I'll meet you there.",
    ],
}

REQUEST_DESCRIPTIONS = [
    "Need help with something urgent",
    "Looking for assistance nearby",
    "Quick favor needed",
    "Emergency situation",
    "Need cash for immediate use",
    "Help with transportation",
    "Service request in the area",
]

REQUEST_CATEGORIES = ["food", "transport", "shopping", "services", "delivery"]

# (id, username, rating, completed, seconds since last seen)
_USER_ROWS = [
    (1, "John Doe", 4.8, 15, 300),
    (2, "Jane Smith", 4.9, 23, 120),
    (3, "Mike Johnson", 4.7, 8, 60),
    (4, "Sarah Wilson", 4.6, 12, 180),
    (5, "Alex Chen", 4.9, 31, 45),
    (6, "Maria Garcia", 4.5, 7, 240),
]

_EXTERNAL_ROWS = [
    (101, "ExternalUser1", 4.6, 18, 120, DeviceType.MOBILE),
    (102, "ExternalUser2", 4.8, 25, 180, DeviceType.TABLET),
    (103, "ExternalUser3", 4.7, 12, 240, DeviceType.DESKTOP),
]

# (id, amount, kind, description, requester, seconds ago, urgency, category, rating)
_REQUEST_ROWS = [
    (1, 25.50, RequestKind.MONEY, "Need cash for lunch at the food court. Will pay back tomorrow!",
     "John Doe", 300, Urgency.MEDIUM, "food", None),
    (2, 15.00, RequestKind.SERVICE, "Help with grocery shopping. Need someone to pick up a few items.",
     "Jane Smith", 600, Urgency.LOW, "shopping", None),
    (3, 50.00, RequestKind.MONEY, "Emergency cash needed for taxi fare. Will transfer immediately.",
     "Mike Johnson", 900, Urgency.HIGH, "transport", None),
    (4, 30.00, RequestKind.GOODS, "Looking for someone to deliver a small package within the area.",
     "Sarah Wilson", 1200, Urgency.MEDIUM, "delivery", None),
    (5, 12.00, RequestKind.MONEY, "Need cash for coffee - will pay back immediately!",
     "Alex Chen", 180, Urgency.LOW, "food", 4.9),
    (6, 8.50, RequestKind.SERVICE, "Quick help with carrying groceries to my car",
     "Maria Garcia", 240, Urgency.LOW, "services", 4.5),
]  # fmt: skip


class DemoCatalogue:
    """In-memory fixture store backing the synthetic population.

    Users are frozen models; movement replaces an entry with an updated copy
    while keeping catalogue order, which the proximity engine relies on for
    tie-breaking.
    """

    def __init__(
        self,
        users: list[User],
        external_users: list[ExternalUser],
        sample_requests: list[Request],
        safe_meetup_spots: list[SafeMeetupSpot],
        nearby_places: list[NearbyPlace],
        transaction_history: list[Transaction],
        chat_templates: dict[str, list[str]] | None = None,
    ):
        self._users = list(users)
        self._external_users = list(external_users)
        self._sample_requests = list(sample_requests)
        self._safe_meetup_spots = list(safe_meetup_spots)
        self._nearby_places = list(nearby_places)
        self._transaction_history = list(transaction_history)
        self._chat_templates = chat_templates or CHAT_TEMPLATES

    @property
    def users(self) -> list[User]:
        return list(self._users)

    @property
    def external_users(self) -> list[ExternalUser]:
        return list(self._external_users)

    @property
    def sample_requests(self) -> list[Request]:
        return list(self._sample_requests)

    @property
    def safe_meetup_spots(self) -> list[SafeMeetupSpot]:
        return list(self._safe_meetup_spots)

    @property
    def nearby_places(self) -> list[NearbyPlace]:
        return list(self._nearby_places)

    @property
    def transaction_history(self) -> list[Transaction]:
        return list(self._transaction_history)

    def find_user(self, username: str) -> User | None:
        for user in self._users:
            if user.username == username:
                return user
        for external in self._external_users:
            if external.username == username:
                return external
        return None

    def add_users(self, users: list[User]) -> None:
        known = {u.username for u in self._users}
        for user in users:
            if user.username not in known:
                self._users.append(user)
                known.add(user.username)

    def replace_user(self, user: User) -> None:
        """Swap in an updated copy of a synthetic or external user."""
        target = self._external_users if isinstance(user, ExternalUser) else self._users
        for index, existing in enumerate(target):
            if existing.username == user.username:
                target[index] = user
                return
        raise KeyError(user.username)

    def chat_messages(self, kind: ChatTemplateKind | str = "greetings") -> list[str]:
        """Canned chat lines of one kind; unknown kinds fall back to greetings."""
        return list(self._chat_templates.get(kind) or self._chat_templates["greetings"])


def build_demo_catalogue(now: datetime, center: Location = DEMO_CENTER) -> DemoCatalogue:
    """Build the demo catalogue with timestamps relative to ``now``."""
    users = [
        User(
            id=user_id,
            username=name,
            phone=f"+1-555-{100 + user_id:04d}",
            location=center,
            rating=rating,
            completed_transactions=completed,
            is_online=True,
            last_seen=now - timedelta(seconds=seen_ago),
        )
        for user_id, name, rating, completed, seen_ago in _USER_ROWS
    ]

    external_users = [
        ExternalUser(
            id=user_id,
            username=name,
            phone=f"+1-555-{100 + user_id:04d}",
            location=center,
            rating=rating,
            completed_transactions=completed,
            is_online=True,
            last_seen=now - timedelta(seconds=seen_ago),
            device_type=device,
            login_source="external_device",
        )
        for user_id, name, rating, completed, seen_ago, device in _EXTERNAL_ROWS
    ]

    sample_requests = [
        Request(
            id=request_id,
            amount=amount,
            kind=kind,
            description=description,
            requester=requester,
            timestamp=now - timedelta(seconds=ago),
            location=center,
            urgency=urgency,
            category=category,
            user_rating=rating,
        )
        for request_id, amount, kind, description, requester, ago, urgency, category, rating in (
            _REQUEST_ROWS
        )
    ]

    safe_meetup_spots = [
        SafeMeetupSpot(name="Central Park Bench", location=center, safety="high"),
        SafeMeetupSpot(name="Coffee Shop Entrance", location=center, safety="high"),
        SafeMeetupSpot(name="Subway Station Platform", location=center, safety="medium"),
        SafeMeetupSpot(name="Shopping Mall Food Court", location=center, safety="high"),
    ]

    nearby_places = [
        NearbyPlace(name="Central Park", distance_m=150, type="landmark"),
        NearbyPlace(name="Coffee Shop", distance_m=200, type="business"),
        NearbyPlace(name="Subway Station", distance_m=300, type="transport"),
        NearbyPlace(name="Shopping Mall", distance_m=450, type="business"),
        NearbyPlace(name="Library", distance_m=600, type="public"),
    ]

    transaction_history = [
        Transaction(
            id="TXN001",
            amount=20.00,
            kind="money",
            requester="John Doe",
            responder="DemoUser",
            timestamp=now - timedelta(days=1),
            rating=5,
        ),
        Transaction(
            id="TXN002",
            amount=35.50,
            kind="service",
            requester="DemoUser",
            responder="Jane Smith",
            timestamp=now - timedelta(days=2),
            rating=4,
        ),
    ]

    return DemoCatalogue(
        users=users,
        external_users=external_users,
        sample_requests=sample_requests,
        safe_meetup_spots=safe_meetup_spots,
        nearby_places=nearby_places,
        transaction_history=transaction_history,
    )
