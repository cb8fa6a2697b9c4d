"""SQLAlchemy ORM models backing the shared registry."""

from datetime import UTC, datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _naive_utc() -> datetime:
    # SQLite stores datetimes as TEXT without an offset
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class RegistryEntry(Base):
    """One key of the persisted key/value scratch pad."""

    __tablename__ = "registry_entries"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_naive_utc,
        onupdate=_naive_utc,
    )


class SimulationMetadata(Base):
    __tablename__ = "simulation_metadata"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(String, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_naive_utc,
        onupdate=_naive_utc,
    )
