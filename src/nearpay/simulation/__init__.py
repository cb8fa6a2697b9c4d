from nearpay.simulation.driver import DriverTimings, SimulationDriver, offset_location
from nearpay.simulation.event_source import EventSource, RandomEventSource
from nearpay.simulation.ids import IdAllocator
from nearpay.simulation.statistics import SimulationStatistics

__all__ = [
    "DriverTimings",
    "EventSource",
    "IdAllocator",
    "RandomEventSource",
    "SimulationDriver",
    "SimulationStatistics",
    "offset_location",
]
