# api/app.py
from __future__ import annotations
import os, logging
from fastapi import FastAPI, Response, Query
from fastapi.responses import JSONResponse
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware

from netrand.errors import ConfigurationError
from netrand.generator import Generator
from netrand.pool import get_pool_manager, close_pool_manager
from netrand.sources import RandomSource

logger = logging.getLogger(__name__)

middleware = [
    Middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,    # con '*' no se puede True
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-Count", "X-Available-After"],
    )
]

app = FastAPI(title="netrand API", middleware=middleware)

DEFAULT_SOURCE = os.environ.get("NETRAND_DEFAULT_SOURCE", RandomSource.RANDOM_ORG.value)
MAX_COUNT      = int(os.environ.get("NETRAND_MAX_COUNT", "100000"))

def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})

@app.on_event("startup")
async def _startup():
    # el manager de proceso nace aquí y muere en shutdown
    pools = get_pool_manager()
    logger.info("netrand api started (block_size=%d)", pools.cfg.block_size)

@app.on_event("shutdown")
async def _shutdown():
    close_pool_manager()

@app.get("/health")
def health():
    return {"status": "ok", "sources": [s.value for s in RandomSource]}

@app.get("/pool/stats")
def pool_stats():
    return get_pool_manager().stats()

# handlers síncronos: fastapi los manda al threadpool, así el fetch/pausa no bloquea el loop
@app.get("/rng/ints")
def rng_ints(src: str = Query(default=DEFAULT_SOURCE),
             min: int = Query(default=0),
             max: int = Query(default=255),
             count: int = Query(default=1),
             fmt: str = Query(default="json", pattern="^(json|bin)$")):
    pools = get_pool_manager()
    try:
        gen = Generator(src, min=min, max=max, pools=pools)
        if count > MAX_COUNT:
            raise ConfigurationError(f"count must be <= {MAX_COUNT}, got {count}")
        vals = gen.get_array(count) if fmt == "bin" else gen.get(count)
    except ConfigurationError as e:
        return _error(400, str(e))
    if vals is None:
        return _error(503, "randomness unavailable")
    headers = {"X-Count": str(len(vals)),
               "X-Available-After": str(pools.available(gen.source))}
    if fmt == "bin":
        payload = vals.astype("<u4").tobytes()
        return Response(content=payload, media_type="application/octet-stream", headers=headers)
    return JSONResponse(content={"source": gen.source.value, "count": len(vals),
                                 "min": min, "max": max, "values": vals},
                        headers=headers)
