"""
HTTP surface for listing, resolving and writing scoped preferences.
"""

from fastapi import FastAPI, HTTPException, Depends, Request
from fastapi.responses import JSONResponse

from .schemas import (
    PrefSetRequest,
    PrefResponse,
    PrefListResponse,
    HealthResponse,
    ErrorResponse,
)
from ..core.config import VERSION, api_enabled, debug_enabled, get_db_path
from ..core.db import PrefsStore
from ..core.prefs import (
    PrefsCorruptionError,
    find_prefs,
    get_pref,
    get_prefs,
    resolve_pref,
    set_pref,
)
from ..core.schema import Prefs
from ..util.logging import logger

# Initialize the FastAPI application
app = FastAPI(
    title="Scoped Prefs API",
    version=VERSION,
    description="Key/value settings scoped by user, channel, broker and plugin",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)


def get_store() -> PrefsStore:
    """Store dependency; overridden in tests."""
    return PrefsStore(get_db_path())


def require_api_enabled():
    if not api_enabled():
        raise HTTPException(status_code=404, detail="Prefs API disabled")


@app.exception_handler(PrefsCorruptionError)
async def corruption_handler(request: Request, exc: PrefsCorruptionError):
    logger.error(f"Corrupt prefs storage on {request.url.path}: {exc}")
    body = ErrorResponse(error_type="PREFS_CORRUPTION", message=str(exc))
    return JSONResponse(status_code=500, content=body.model_dump())


def _list_response(prefs: Prefs) -> PrefListResponse:
    return PrefListResponse(
        prefs=[PrefResponse.from_pref(p) for p in prefs],
        table=prefs.table(),
    )


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(store: PrefsStore = Depends(get_store)):
    """Check system health."""
    db_health = store.health_check()

    return HealthResponse(
        status="healthy" if db_health else "unhealthy",
        version=VERSION,
        db_health=db_health,
        pref_count=store.count() if db_health else 0
    )


# Define /prefs/find endpoint BEFORE /prefs/{key} to avoid path parameter conflict
@app.get("/prefs/find", response_model=PrefListResponse, dependencies=[Depends(require_api_enabled)])
def find_prefs_endpoint(user: str = "", channel: str = "", broker: str = "", plugin: str = "",
                        key: str = "", store: PrefsStore = Depends(get_store)):
    """All prefs matching any of the given fields."""
    return _list_response(find_prefs(store, user, broker, channel, plugin, key))


@app.get("/prefs", response_model=PrefListResponse, dependencies=[Depends(require_api_enabled)])
def list_prefs_endpoint(user: str = "", channel: str = "", broker: str = "", plugin: str = "",
                        store: PrefsStore = Depends(get_store)):
    """All keys stored at exactly this scope."""
    return _list_response(get_prefs(store, user, broker, channel, plugin))


@app.get("/prefs/{key}", response_model=PrefResponse, dependencies=[Depends(require_api_enabled)])
def get_pref_endpoint(key: str, user: str = "", channel: str = "", broker: str = "", plugin: str = "",
                      default: str = "", cascade: bool = False, store: PrefsStore = Depends(get_store)):
    """Resolve a single pref, optionally walking the precedence order."""
    lookup = resolve_pref if cascade else get_pref
    pref = lookup(store, user, broker, channel, plugin, key, default)
    return PrefResponse.from_pref(pref)


@app.put("/prefs", response_model=PrefResponse, dependencies=[Depends(require_api_enabled)])
def put_pref_endpoint(req: PrefSetRequest, store: PrefsStore = Depends(get_store)):
    """Write a pref and return the stored record."""
    pref = set_pref(store, req.user, req.broker, req.channel, req.plugin, req.key, req.value)
    if pref.error is not None:
        raise HTTPException(status_code=500, detail=f"Failed to store pref: {pref.error}")

    return PrefResponse.from_pref(pref)
