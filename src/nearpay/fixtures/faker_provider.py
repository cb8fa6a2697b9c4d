"""Faker providers for growing the synthetic population around a point."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from faker import Faker
from faker.providers import BaseProvider

from nearpay.fixtures.catalogue import REQUEST_CATEGORIES, REQUEST_DESCRIPTIONS
from nearpay.models import Location, User

if TYPE_CHECKING:
    from faker.proxy import Faker as FakerType

# Meters per degree of latitude; longitude shrinks by cos(lat).
_METERS_PER_DEGREE = 111_320.0


class DemoPhoneProvider(BaseProvider):
    """Phone numbers in the demo's +1-555-XXXX range."""

    def demo_phone(self) -> str:
        digits = "".join(self.random_elements("0123456789", length=4, unique=False))
        return f"+1-555-{digits}"


class PeerLocationProvider(BaseProvider):
    """Positions scattered uniformly inside a disc around a center."""

    def peer_location(self, center: Location, max_offset_m: float = 650.0) -> Location:
        rng = self.generator.random
        # sqrt keeps the density uniform over the disc area
        radius_m = max_offset_m * math.sqrt(rng.random())
        bearing = rng.uniform(0.0, 2 * math.pi)

        dlat = (radius_m * math.cos(bearing)) / _METERS_PER_DEGREE
        cos_lat = max(math.cos(math.radians(center.lat)), 1e-6)
        dlng = (radius_m * math.sin(bearing)) / (_METERS_PER_DEGREE * cos_lat)

        lat = max(-90.0, min(90.0, center.lat + dlat))
        lng = ((center.lng + dlng + 180.0) % 360.0) - 180.0
        return Location(lat=lat, lng=lng)


class RequestTextProvider(BaseProvider):
    def request_description(self) -> str:
        return self.random_element(REQUEST_DESCRIPTIONS)

    def request_category(self) -> str:
        return self.random_element(REQUEST_CATEGORIES)


def create_faker_instance(seed: int | None = None) -> FakerType:
    """Create a Faker instance with the demo providers registered.

    Args:
        seed: Optional seed for reproducible random data.

    Returns:
        Configured en_US Faker instance.
    """
    fake: FakerType = Faker("en_US")

    if seed is not None:
        Faker.seed(seed)
        fake.seed_instance(seed)

    fake.add_provider(DemoPhoneProvider)
    fake.add_provider(PeerLocationProvider)
    fake.add_provider(RequestTextProvider)

    return fake


def generate_population(
    fake: FakerType,
    count: int,
    center: Location,
    now: datetime,
    start_id: int = 1000,
    max_offset_m: float = 650.0,
) -> list[User]:
    """Generate ``count`` synthetic users around ``center`` with unique names."""
    users: list[User] = []
    seen: set[str] = set()
    next_id = start_id
    while len(users) < count:
        name = fake.name()
        if name in seen:
            continue
        seen.add(name)
        users.append(
            User(
                id=next_id,
                username=name,
                phone=fake.demo_phone(),
                location=fake.peer_location(center, max_offset_m),
                rating=round(fake.pyfloat(min_value=3.5, max_value=5.0), 1),
                completed_transactions=fake.random_int(min=0, max=40),
                is_online=True,
                last_seen=now - timedelta(seconds=fake.random_int(min=0, max=600)),
            )
        )
        next_id += 1
    return users
