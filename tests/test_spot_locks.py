"""Per-spot serialization."""
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from hazardhub.services.spot_locks import SpotLockRegistry


class TestSpotLockRegistry:

    def test_entries_are_dropped_after_release(self):
        registry = SpotLockRegistry()
        for i in range(100):
            with registry.hold(f"spot_{i}"):
                assert len(registry) == 1
        assert len(registry) == 0

    def test_reentrant_hold_keeps_entry_until_outermost_exit(self):
        registry = SpotLockRegistry()
        with registry.hold("s1"):
            with registry.hold("s1"):
                assert len(registry) == 1
            assert len(registry) == 1
        assert len(registry) == 0

    def test_entry_released_when_body_raises(self):
        registry = SpotLockRegistry()
        try:
            with registry.hold("s1"):
                raise ValueError("boom")
        except ValueError:
            pass
        assert len(registry) == 0

    def test_same_spot_is_serialized(self):
        registry = SpotLockRegistry()
        inside = []
        overlaps = []
        start = threading.Barrier(8)

        def work(_):
            start.wait()
            with registry.hold("s1"):
                inside.append(1)
                if len(inside) > 1:
                    overlaps.append(len(inside))
                time.sleep(0.005)
                inside.pop()

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(work, range(8)))

        assert overlaps == []
        assert len(registry) == 0

    def test_different_spots_do_not_block_each_other(self):
        registry = SpotLockRegistry()
        entered = threading.Event()
        release = threading.Event()

        def hold_s1():
            with registry.hold("s1"):
                entered.set()
                release.wait(timeout=2)

        holder = threading.Thread(target=hold_s1)
        holder.start()
        assert entered.wait(timeout=2)

        with registry.hold("s2"):
            assert len(registry) == 2

        release.set()
        holder.join(timeout=2)
        assert len(registry) == 0
