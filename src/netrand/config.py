import os, socket, getpass
from dataclasses import dataclass, field

VERSION = "1.0.0"

HOTBITS_URL   = "https://www.fourmilab.ch/cgi-bin/uncgi/Hotbits?nbytes={nbytes}&fmt=hex"
RANDOMORG_URL = "https://www.random.org/cgi-bin/randbyte?nbytes={nbytes}&format=hex"
CHECKBUF_URL  = "https://www.random.org/cgi-bin/checkbuf"

def default_from_address() -> str:
    """Cabecera From para que el proveedor sepa quién pide: userid_<uid>@<host>."""
    uid = os.getuid() if hasattr(os, "getuid") else getpass.getuser()
    return f"userid_{uid}@{socket.gethostname()}"

@dataclass
class FetchConfig:
    block_size: int = 1024          # bytes pedidos por fetch, da igual cuántos haga falta
    timeout: float = 120.0
    quota_low_water: int = 20       # random.org: por debajo de esto, pausa antes de pedir
    quota_pause: float = 15.0
    user_agent: str = f"python-netrand/{VERSION}"
    from_address: str = field(default_factory=default_from_address)   # "" = no se envía
    hotbits_url: str = HOTBITS_URL
    randomorg_url: str = RANDOMORG_URL
    checkbuf_url: str = CHECKBUF_URL

    @classmethod
    def from_env(cls) -> "FetchConfig":
        cfg = cls()
        env = os.environ
        if "NETRAND_BLOCK_SIZE" in env:
            cfg.block_size = int(env["NETRAND_BLOCK_SIZE"])
        if "NETRAND_TIMEOUT" in env:
            cfg.timeout = float(env["NETRAND_TIMEOUT"])
        if "NETRAND_QUOTA_LOW_WATER" in env:
            cfg.quota_low_water = int(env["NETRAND_QUOTA_LOW_WATER"])
        if "NETRAND_QUOTA_PAUSE" in env:
            cfg.quota_pause = float(env["NETRAND_QUOTA_PAUSE"])
        if "NETRAND_FROM" in env:
            cfg.from_address = env["NETRAND_FROM"]
        return cfg
