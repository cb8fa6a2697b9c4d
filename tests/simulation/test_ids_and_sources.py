import re

import pytest

from nearpay.core.clock import ManualClock
from nearpay.simulation import IdAllocator, RandomEventSource, SimulationStatistics


@pytest.mark.unit
class TestIdAllocator:
    def test_ids_follow_clock(self, clock: ManualClock) -> None:
        ids = IdAllocator(clock)
        first = ids.next_id()
        clock.advance(1)
        assert first == 1736935200000
        assert ids.next_id() == first + 1000

    def test_strictly_increasing_within_one_millisecond(self, clock: ManualClock) -> None:
        ids = IdAllocator(clock)
        issued = [ids.next_id() for _ in range(5)]
        assert issued == sorted(set(issued))
        assert issued[-1] - issued[0] == 4

    def test_observe_raises_floor(self, clock: ManualClock) -> None:
        ids = IdAllocator(clock)
        ids.observe(clock.now_ms() + 500)
        assert ids.next_id() == clock.now_ms() + 501

    def test_observe_lower_id_ignored(self, clock: ManualClock) -> None:
        ids = IdAllocator(clock, floor=10)
        ids.observe(3)
        assert ids.last == 10

    def test_transaction_ids(self, clock: ManualClock) -> None:
        assert IdAllocator(clock).next_txn_id() == f"TXN{clock.now_ms()}"


@pytest.mark.unit
class TestRandomEventSource:
    def test_seeded_sources_agree(self) -> None:
        a, b = RandomEventSource(42), RandomEventSource(42)
        assert [a.uniform(0, 1) for _ in range(5)] == [b.uniform(0, 1) for _ in range(5)]
        assert a.device_id() == b.device_id()

    def test_device_id_format(self) -> None:
        assert re.fullmatch(r"device_[a-z0-9]{9}", RandomEventSource(1).device_id())

    def test_jitter_within_half_span(self) -> None:
        source = RandomEventSource(7)
        for _ in range(200):
            assert -0.00005 <= source.jitter(0.0001) < 0.00005

    def test_chance_extremes(self) -> None:
        source = RandomEventSource(3)
        assert not any(source.chance(0.0) for _ in range(50))
        assert all(source.chance(1.0) for _ in range(50))

    def test_choice_and_uniform_bounds(self) -> None:
        source = RandomEventSource(11)
        assert source.choice(["only"]) == "only"
        for _ in range(50):
            assert 5.0 <= source.uniform(5.0, 15.0) <= 15.0


@pytest.mark.unit
class TestSimulationStatistics:
    def test_record_sync(self) -> None:
        stats = SimulationStatistics()
        stats.record_sync(skipped=False)
        stats.record_sync(skipped=True)
        assert (stats.sync_cycles, stats.sync_skipped) == (1, 1)

    def test_total_requests(self) -> None:
        stats = SimulationStatistics(requests_promoted=6)
        stats.record_request(external=False)
        stats.record_request(external=True)
        assert stats.total_requests == 8

    def test_as_dict_covers_every_counter(self) -> None:
        assert SimulationStatistics().as_dict() == {
            "sync_cycles": 0,
            "sync_skipped": 0,
            "movement_ticks": 0,
            "requests_promoted": 0,
            "requests_generated": 0,
            "external_requests_generated": 0,
            "logins_simulated": 0,
            "external_logins_simulated": 0,
            "proximity_alerts": 0,
            "external_detections": 0,
            "request_alerts": 0,
        }
