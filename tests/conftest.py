"""Pytest fixtures: fake byte sources and isolated pool managers."""
import pytest

from netrand.pool import PoolManager, close_pool_manager
from netrand.sources import ByteSource, RandomSource


class FakeSource(ByteSource):
    """Byte source that hands out scripted blocks, then empty results."""

    name = "fake"

    def __init__(self, *blocks: bytes):
        self.blocks = list(blocks)
        self.calls = 0
        self.closed = False

    def fetch(self) -> bytes:
        self.calls += 1
        if not self.blocks:
            return b""
        return self.blocks.pop(0)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_source():
    return FakeSource


@pytest.fixture
def make_pools():
    """Build a PoolManager whose random.org adapter is a FakeSource."""
    created = []

    def _make(*blocks: bytes, source=RandomSource.RANDOM_ORG):
        fake = FakeSource(*blocks)
        pools = PoolManager(adapters={source: fake})
        created.append(pools)
        return pools, fake

    yield _make
    for pools in created:
        pools.close()


@pytest.fixture(autouse=True)
def _reset_process_pools():
    yield
    close_pool_manager()
