import logging
import time
from enum import Enum
from typing import Optional

import requests

from .config import FetchConfig
from .utils import parse_hex_pairs, parse_hex_tokens, parse_quota

logger = logging.getLogger(__name__)


class RandomSource(str, Enum):
    """Proveedores remotos conocidos. El valor es el nombre público del proveedor."""

    FOURMILAB = "fourmilab.ch"
    RANDOM_ORG = "random.org"


class ByteSource:
    """Un proveedor: cada fetch() es una única petición de un bloque fijo de bytes."""

    name = "?"

    def fetch(self) -> bytes:
        raise NotImplementedError

    def close(self) -> None:
        pass


class HttpByteSource(ByteSource):
    def __init__(self, cfg: Optional[FetchConfig] = None, session: Optional[requests.Session] = None):
        self.cfg = cfg or FetchConfig()
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = self.cfg.user_agent
        if self.cfg.from_address:
            self.session.headers["From"] = self.cfg.from_address

    def _get_text(self, url: str) -> Optional[str]:
        try:
            r = self.session.get(url, timeout=self.cfg.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            logger.warning("%s: error talking to provider: %s", self.name, e)
            return None
        return r.text

    def close(self):
        self.session.close()


class HotBitsSource(HttpByteSource):
    name = RandomSource.FOURMILAB.value

    def fetch(self) -> bytes:
        body = self._get_text(self.cfg.hotbits_url.format(nbytes=self.cfg.block_size))
        if body is None:
            return b""
        data = parse_hex_pairs(body)
        if not data:
            logger.warning("%s: no random bytes in response", self.name)
        return data


class RandomOrgSource(HttpByteSource):
    """
    random.org raciona su buffer: antes de cada fetch miramos checkbuf y, si
    está por debajo de quota_low_water, esperamos quota_pause segundos. La pausa
    no cancela la petición, sólo la retrasa.
    """

    name = RandomSource.RANDOM_ORG.value

    def _wait_for_quota(self) -> bool:
        body = self._get_text(self.cfg.checkbuf_url)
        if body is None:
            return False
        level = parse_quota(body)
        # sin número legible lo tratamos como buffer bajo
        if level is None or level < self.cfg.quota_low_water:
            logger.warning("%s: buffer nearly empty (%s), pausing %.1fs",
                           self.name, level, self.cfg.quota_pause)
            time.sleep(self.cfg.quota_pause)
        return True

    def fetch(self) -> bytes:
        if not self._wait_for_quota():
            return b""
        body = self._get_text(self.cfg.randomorg_url.format(nbytes=self.cfg.block_size))
        if body is None:
            return b""
        try:
            data = parse_hex_tokens(body)
        except ValueError as e:
            logger.warning("%s: malformed response: %s", self.name, e)
            return b""
        if not data:
            logger.warning("%s: no random bytes in response", self.name)
        return data


ADAPTERS = {
    RandomSource.FOURMILAB: HotBitsSource,
    RandomSource.RANDOM_ORG: RandomOrgSource,
}


def make_source(source: RandomSource, cfg: Optional[FetchConfig] = None) -> ByteSource:
    return ADAPTERS[RandomSource(source)](cfg)
