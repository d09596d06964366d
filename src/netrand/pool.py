import logging
import threading
from collections import deque
from contextlib import contextmanager
from typing import Mapping, Optional

from .config import FetchConfig
from .errors import OutOfRangeError
from .sources import ByteSource, RandomSource, make_source

logger = logging.getLogger(__name__)


class BytePool:
    """
    FIFO por bloques de bytes: cada fetch entra como un chunk y se consume por
    la cabeza, en el mismo orden en que llegó.
    """
    def __init__(self):
        self.chunks: deque[bytes] = deque()
        self.size = 0

    def offer(self, data: bytes) -> int:
        if not data:
            return 0
        self.chunks.append(bytes(data))
        self.size += len(data)
        return len(data)

    def poll(self, count: int) -> bytes:
        if count > self.size:
            raise OutOfRangeError(f"pool underflow: want {count}, have {self.size}")
        out = bytearray()
        remaining = count
        while remaining > 0:
            head = self.chunks[0]
            if len(head) <= remaining:
                out += head
                self.size -= len(head)
                remaining -= len(head)
                self.chunks.popleft()
            else:
                out += head[:remaining]
                self.chunks[0] = head[remaining:]
                self.size -= remaining
                remaining = 0
        return bytes(out)

    def available(self) -> int:
        return self.size

    def clear(self):
        self.chunks.clear()
        self.size = 0


class _Slot:
    def __init__(self, adapter: ByteSource):
        self.adapter = adapter
        self.pool = BytePool()
        self.lock = threading.RLock()
        self.fetches = 0
        self.failed_fetches = 0
        self.closed = False


class PoolManager:
    """
    Un pool por RandomSource, compartido por todos los Generator de esa fuente.
    La red sólo se toca en ensure(); take() es memoria pura.
    """

    def __init__(self, adapters: Optional[Mapping[RandomSource, ByteSource]] = None,
                 cfg: Optional[FetchConfig] = None):
        self.cfg = cfg or FetchConfig()
        self._slots: dict[RandomSource, _Slot] = {}
        self._registry_lock = threading.Lock()
        for source, adapter in (adapters or {}).items():
            self.register(source, adapter)

    def _slot(self, source) -> _Slot:
        source = RandomSource(source)
        with self._registry_lock:
            slot = self._slots.get(source)
            if slot is None or slot.closed:
                # adaptador por defecto creado al primer uso
                slot = _Slot(make_source(source, self.cfg))
                self._slots[source] = slot
            return slot

    def register(self, source, adapter: ByteSource) -> None:
        """Sustituye el adaptador de una fuente; conserva los bytes ya acumulados."""
        source = RandomSource(source)
        while True:
            with self._registry_lock:
                slot = self._slots.get(source)
                if slot is None or slot.closed:
                    self._slots[source] = _Slot(adapter)
                    return
            # nunca cerrar un adaptador a mitad de un fetch
            with slot.lock:
                if slot.closed:
                    continue
                old, slot.adapter = slot.adapter, adapter
                old.close()
                return

    @contextmanager
    def lock(self, source):
        """ensure()+take() bajo este lock forman una unidad atómica por fuente."""
        slot = self._slot(source)
        with slot.lock:
            yield

    def available(self, source) -> int:
        return self._slot(source).pool.available()

    def ensure(self, source, nbytes: int) -> bool:
        slot = self._slot(source)
        with slot.lock:
            if slot.closed:
                logger.warning("%s: pool manager closed", RandomSource(source).value)
                return False
            if slot.pool.available() >= nbytes:
                return True
            # un único intento, sin reintentos
            data = slot.adapter.fetch()
            slot.fetches += 1
            if data:
                slot.pool.offer(data)
                logger.debug("%s: recharged %d bytes (pool=%d)",
                             slot.adapter.name, len(data), slot.pool.available())
            else:
                slot.failed_fetches += 1
                logger.warning("%s: fetch returned no bytes", RandomSource(source).value)
            return slot.pool.available() >= nbytes

    def take(self, source, nbytes: int) -> bytes:
        slot = self._slot(source)
        with slot.lock:
            return slot.pool.poll(nbytes)

    def stats(self) -> dict:
        with self._registry_lock:
            slots = dict(self._slots)
        return {
            source.value: {
                "available": slot.pool.available(),
                "fetches": slot.fetches,
                "failed_fetches": slot.failed_fetches,
            }
            for source, slot in slots.items()
        }

    def close(self) -> None:
        with self._registry_lock:
            slots = dict(self._slots)
        # espera a que termine cualquier draw en curso sobre cada fuente
        for slot in slots.values():
            with slot.lock:
                slot.adapter.close()
                slot.pool.clear()
                slot.closed = True
        with self._registry_lock:
            for source, slot in slots.items():
                if self._slots.get(source) is slot:
                    del self._slots[source]


_manager: Optional[PoolManager] = None
_manager_lock = threading.Lock()


def get_pool_manager() -> PoolManager:
    """Manager de proceso: se crea al primer uso y vive hasta close_pool_manager()."""
    global _manager
    with _manager_lock:
        if _manager is None:
            _manager = PoolManager(cfg=FetchConfig.from_env())
        return _manager


def close_pool_manager() -> None:
    global _manager
    with _manager_lock:
        if _manager is not None:
            _manager.close()
            _manager = None
