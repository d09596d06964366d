import logging
import numbers
from typing import Optional

import numpy as np

from .errors import ConfigurationError, OutOfRangeError
from .pool import PoolManager, get_pool_manager
from .sources import RandomSource

logger = logging.getLogger(__name__)

MAX_VALUE = 2**32 - 1
MAX_BYTES = 4


def _is_int(v) -> bool:
    return isinstance(v, numbers.Integral) and not isinstance(v, bool)


def bytes_per_value(width: int) -> int:
    """Bytes crudos que hacen falta para cubrir max - min (1..4)."""
    for nbytes in range(1, MAX_BYTES + 1):
        if width < 1 << (8 * nbytes):
            return nbytes
    raise OutOfRangeError(f"range width {width} needs more than {MAX_BYTES} bytes")


def rejection_limit(span: int, nbytes: int) -> int:
    """Mayor múltiplo de span representable en nbytes; por encima se descarta."""
    return span * ((1 << (8 * nbytes)) // span)


class Generator:
    """
    Enteros en [min, max] a partir de bytes remotos, con rechazo (sin sesgo de módulo).

        rand = Generator("fourmilab.ch", min=1, max=2000)
        numbers = rand.get(5)     # lista de 5 enteros, o None si no hay aleatoriedad
    """

    def __init__(self, source=None, min=0, max=255, pools: Optional[PoolManager] = None, **extra):
        if extra:
            raise ConfigurationError(f"unknown parameters: {', '.join(sorted(extra))}")
        try:
            self.source = RandomSource(source)
        except ValueError:
            raise ConfigurationError(f"unknown random source: {source!r}") from None
        if not _is_int(min) or not _is_int(max):
            raise ConfigurationError("min and max must be integers")
        if min < 0:
            raise ConfigurationError(f"min must be >= 0, got {min}")
        if max > MAX_VALUE:
            raise ConfigurationError(f"max must be <= {MAX_VALUE}, got {max}")
        if min >= max:
            raise ConfigurationError(f"min ({min}) must be less than max ({max})")
        self._min = int(min)
        self._max = int(max)
        self._bytes = bytes_per_value(self._max - self._min)
        self._pools = pools

    @property
    def min(self) -> int:
        return self._min

    @property
    def max(self) -> int:
        return self._max

    @property
    def bytes_per_value(self) -> int:
        return self._bytes

    @property
    def pools(self) -> PoolManager:
        # sin manager inyectado tiramos del compartido por todo el proceso
        return self._pools if self._pools is not None else get_pool_manager()

    def get(self, count=1) -> Optional[list[int]]:
        if not _is_int(count) or count < 0:
            raise ConfigurationError(f"count must be a non-negative integer, got {count!r}")
        pools = self.pools
        span = self._max - self._min + 1
        limit = rejection_limit(span, self._bytes)
        results: list[int] = []
        with pools.lock(self.source):
            while len(results) < count:
                if not pools.ensure(self.source, self._bytes):
                    logger.warning("%s: not enough random data, %d of %d values drawn",
                                   self.source.value, len(results), count)
                    return None
                raw = int.from_bytes(pools.take(self.source, self._bytes), "big")
                if raw > limit:
                    continue
                results.append(self._min + raw % span)
        return results

    def get_array(self, count=1) -> Optional[np.ndarray]:
        """Igual que get() pero como np.ndarray uint32 (para salida binaria)."""
        values = self.get(count)
        if values is None:
            return None
        return np.asarray(values, dtype=np.uint32)

    def __repr__(self):
        return f"Generator(source={self.source.value!r}, min={self._min}, max={self._max})"
