"""
AutoMatch Engine - FastAPI Web Application

Public AutoMatch endpoints plus the authoritative scoring service route.
Both run the same automatch.core pipeline.
"""

import dataclasses
import secrets
from pathlib import Path
from typing import Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ConfigDict, Field

from automatch import __version__
from automatch.api import (
    MatchOrchestrator,
    RegistryError,
    RegistryStorage,
    RemoteScoringClient,
    create_sample_registry,
)
from automatch.config import settings

logger = structlog.get_logger()


# Initialize FastAPI app
app = FastAPI(
    title="AutoMatch Engine",
    description="Deal / allocator matching API",
    version=__version__,
)

BASE_DIR = Path(__file__).parent.parent

bearer_scheme = HTTPBearer(auto_error=False)

# Global instances
_storage: Optional[RegistryStorage] = None
_orchestrator: Optional[MatchOrchestrator] = None


def get_storage() -> RegistryStorage:
    """Get or create the global registry storage."""
    global _storage
    if _storage is None:
        storage_path = Path(settings.REGISTRY_STORAGE_PATH)
        if not storage_path.is_absolute():
            storage_path = BASE_DIR / storage_path
        _storage = RegistryStorage(str(storage_path))

        # Seed a sample registry if storage is empty
        counts = _storage.count()
        if counts["allocators"] == 0 and counts["requests"] == 0:
            create_sample_registry(_storage)

    return _storage


def get_orchestrator() -> MatchOrchestrator:
    """Get or create the global orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = MatchOrchestrator(get_storage(), remote=RemoteScoringClient())
    return _orchestrator


def bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Caller's bearer token, forwarded to the scoring service."""
    return credentials.credentials if credentials else None


def verify_service_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> None:
    """Guard for the service route; open when no service token is configured."""
    expected = settings.AUTOMATCH_SERVICE_TOKEN
    if not expected:
        return
    if credentials is None or not secrets.compare_digest(
        credentials.credentials.encode(), expected.encode()
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid service token",
        )


# Pydantic models for request bodies
class AutoMatchOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    min_score: float = Field(default=settings.RUN_MIN_SCORE, ge=0, le=100, alias="minScore")
    max_results: int = Field(default=settings.MAX_RESULTS, ge=1, alias="maxResults")


class AutoMatchRun(AutoMatchOptions):
    request_id: str = Field(min_length=1, alias="requestId")


# Routes

@app.get("/api/health")
def health(storage: RegistryStorage = Depends(get_storage)):
    """Health check endpoint."""
    try:
        counts = storage.count()
    except RegistryError as e:
        logger.error("health_registry_failed", error=str(e))
        return JSONResponse(content={"status": "error"}, status_code=503)
    return {"status": "ok", "registry": counts}


@app.post("/api/automatch")
def run_automatch(
    data: AutoMatchRun,
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
    access_token: Optional[str] = Depends(bearer_token),
):
    """Run AutoMatch for one funding request (remote first, local fallback)."""
    result = orchestrator.run_for_request(
        data.request_id,
        access_token=access_token,
        min_score=data.min_score,
        max_results=data.max_results,
    )
    return JSONResponse(content=result.to_dict(), status_code=result.status)


@app.get("/api/automatch")
def query_automatch(
    scan: bool = False,
    allocator_id: Optional[str] = Query(default=None, alias="allocatorId"),
    request_id: Optional[str] = Query(default=None, alias="requestId"),
    min_score: float = Query(default=settings.SCAN_MIN_SCORE, ge=0, le=100, alias="minScore"),
    max_results: int = Query(default=settings.MAX_RESULTS, ge=1, alias="maxResults"),
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
    access_token: Optional[str] = Depends(bearer_token),
):
    """
    Allocator scan (scan=true&allocatorId=...) or saved matches for a
    request (requestId=...).
    """
    if scan:
        if not allocator_id:
            raise HTTPException(status_code=400, detail="allocatorId required for scan")
        result = orchestrator.scan_for_allocator(
            allocator_id,
            min_score=min_score,
            max_results=max_results,
        )
        return JSONResponse(content=result.to_dict(), status_code=result.status)

    if not request_id:
        raise HTTPException(status_code=400, detail="requestId required")

    result = orchestrator.get_saved_matches(request_id, access_token)
    return JSONResponse(content=result.to_dict(), status_code=result.status)


@app.post("/automatch/run/{request_id}", dependencies=[Depends(verify_service_token)])
def service_run(
    request_id: str,
    data: Optional[AutoMatchOptions] = None,
    orchestrator: MatchOrchestrator = Depends(get_orchestrator),
):
    """Authoritative scoring service route; always scores locally."""
    options = data or AutoMatchOptions()
    result = orchestrator.run_local(
        request_id,
        min_score=options.min_score,
        max_results=options.max_results,
    )

    if not result.ok:
        return JSONResponse(
            content={"success": False, "error": result.error},
            status_code=result.status,
        )

    # Callers of this route see the service as the remote scorer
    result = dataclasses.replace(result, source="remote")
    return {"success": True, "data": result.to_dict()}


# Run with: uvicorn web.app:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
