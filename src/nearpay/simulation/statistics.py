"""Counters for fabricated activity.

Session-only; a new driver starts from zero on every login.
"""

from dataclasses import dataclass


@dataclass
class SimulationStatistics:
    """What the simulation driver did during one session."""

    sync_cycles: int = 0
    sync_skipped: int = 0
    movement_ticks: int = 0
    requests_promoted: int = 0
    requests_generated: int = 0
    external_requests_generated: int = 0
    logins_simulated: int = 0
    external_logins_simulated: int = 0
    proximity_alerts: int = 0
    external_detections: int = 0
    request_alerts: int = 0

    def record_sync(self, skipped: bool) -> None:
        if skipped:
            self.sync_skipped += 1
        else:
            self.sync_cycles += 1

    def record_request(self, external: bool) -> None:
        if external:
            self.external_requests_generated += 1
        else:
            self.requests_generated += 1

    @property
    def total_requests(self) -> int:
        """Requests placed in the registry by the driver, promoted or generated."""
        return self.requests_promoted + self.requests_generated + self.external_requests_generated

    def as_dict(self) -> dict[str, int]:
        return {
            "sync_cycles": self.sync_cycles,
            "sync_skipped": self.sync_skipped,
            "movement_ticks": self.movement_ticks,
            "requests_promoted": self.requests_promoted,
            "requests_generated": self.requests_generated,
            "external_requests_generated": self.external_requests_generated,
            "logins_simulated": self.logins_simulated,
            "external_logins_simulated": self.external_logins_simulated,
            "proximity_alerts": self.proximity_alerts,
            "external_detections": self.external_detections,
            "request_alerts": self.request_alerts,
        }
