"""Threaded tests: ensure+take atomicity and safe adapter teardown."""
import threading

import pytest

from netrand.generator import Generator
from netrand.pool import PoolManager
from netrand.sources import ByteSource, RandomSource


class BlockingSource(ByteSource):
    """Byte source whose fetch blocks until released, recording if it was closed meanwhile."""

    name = "blocking"

    def __init__(self, data: bytes):
        self.data = data
        self.started = threading.Event()
        self.release = threading.Event()
        self.closed = False
        self.closed_during_fetch = None

    def fetch(self) -> bytes:
        self.started.set()
        self.release.wait(5)
        self.closed_during_fetch = self.closed
        return self.data

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def pools_with():
    created = []

    def _make(adapter):
        pools = PoolManager(adapters={RandomSource.RANDOM_ORG: adapter})
        created.append(pools)
        return pools

    yield _make
    for pools in created:
        pools.close()


class TestTeardownWaitsForFetch:
    def test_register_waits_for_running_fetch(self, pools_with, fake_source):
        slow = BlockingSource(b"\x01\x02")
        pools = pools_with(slow)
        outcome = []
        fetcher = threading.Thread(target=lambda: outcome.append(pools.ensure("random.org", 2)))
        fetcher.start()
        assert slow.started.wait(5)

        swapper = threading.Thread(target=pools.register, args=("random.org", fake_source(b"\x03")))
        swapper.start()
        swapper.join(0.2)
        assert swapper.is_alive()
        assert not slow.closed

        slow.release.set()
        fetcher.join(5)
        swapper.join(5)
        assert outcome == [True]
        assert slow.closed
        assert slow.closed_during_fetch is False
        assert pools.take("random.org", 2) == b"\x01\x02"

    def test_close_waits_for_draw_in_progress(self, pools_with, fake_source):
        fake = fake_source(b"\x05\x06")
        pools = pools_with(fake)
        inside, release = threading.Event(), threading.Event()
        drawn = []

        def draw():
            with pools.lock("random.org"):
                inside.set()
                release.wait(5)
                gen = Generator("random.org", min=0, max=9, pools=pools)
                drawn.append(gen.get(2))

        worker = threading.Thread(target=draw)
        worker.start()
        assert inside.wait(5)

        closer = threading.Thread(target=pools.close)
        closer.start()
        closer.join(0.2)
        assert closer.is_alive()
        assert not fake.closed

        release.set()
        worker.join(5)
        closer.join(5)
        assert drawn == [[5, 6]]
        assert fake.closed
        assert pools.stats() == {}


class TestSharedPoolThreads:
    def test_concurrent_draws_split_the_feed(self, pools_with, fake_source):
        feed = bytes(range(200))
        fake = fake_source(*[feed[i:i + 10] for i in range(0, len(feed), 10)])
        pools = pools_with(fake)
        n_threads, per_thread = 8, 25
        barrier = threading.Barrier(n_threads)
        results, errors = [], []

        def worker():
            gen = Generator("random.org", min=0, max=255, pools=pools)
            barrier.wait()
            try:
                results.append(gen.get(per_thread))
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(n_threads)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(10)

        assert errors == []
        assert len(results) == n_threads
        assert all(len(r) == per_thread for r in results)
        # every byte handed out exactly once
        assert sorted(v for r in results for v in r) == list(feed)
        # a whole draw runs under the source lock, so each list is one contiguous run
        for r in results:
            assert r == list(range(r[0], r[0] + per_thread))
        assert pools.available("random.org") == 0
