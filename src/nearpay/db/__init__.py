"""Database persistence module."""

from .database import init_database
from .schema import Base, RegistryEntry, SimulationMetadata
from .transaction import transaction

__all__ = [
    "init_database",
    "Base",
    "RegistryEntry",
    "SimulationMetadata",
    "transaction",
]
