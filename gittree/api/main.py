from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from typing import List, Optional
from pathlib import Path
import os

from gittree.api.service import ViewerService
from gittree.api.schemas import (
    CommitResponse,
    EventRequest,
    EventResponse,
    FilterRequest,
    RefResponse,
    RefreshResponse,
    RenderResponse,
    SelectionResponse,
)
from gittree.config import load_settings
from gittree.dag.models import FilterOptions
from gittree.errors import GitCommandError

import logging

# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="gittree commit graph API")

# By default look in CWD. Can be overridden by env var GITTREE_REPO.
repo_path = os.getenv("GITTREE_REPO", ".")
service = ViewerService(Path(repo_path), load_settings())

@app.exception_handler(GitCommandError)
async def git_error_handler(request, exc: GitCommandError):
    logger.error(f"Git command failed: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})

@app.get("/api/commits", response_model=List[CommitResponse])
def get_commits(limit: int = Query(50, ge=1), skip: int = Query(0, ge=0)):
    """Get loaded commits in log order."""
    return service.get_commits(limit, skip)

@app.get("/api/commits/{hash}", response_model=CommitResponse)
def get_commit(hash: str):
    """Get a commit with its changed files."""
    commit = service.get_commit(hash)
    if not commit:
        raise HTTPException(status_code=404, detail="Commit not found")
    return commit

@app.get("/api/refs", response_model=List[RefResponse])
def get_refs():
    return service.get_refs()

@app.get("/api/session", response_model=SelectionResponse)
def get_session():
    """Current selection state."""
    return service.selection()

@app.post("/api/session/events", response_model=EventResponse)
def post_event(req: EventRequest):
    """Apply one navigation or command event to the session."""
    return service.handle_event(req.event, req.name)

@app.get("/api/render", response_model=RenderResponse)
def get_render(height: Optional[int] = Query(None, ge=1)):
    """Lines for the current frame."""
    return service.render(height)

@app.post("/api/refresh", response_model=RefreshResponse)
def refresh(req: FilterRequest):
    """Reload commits with a new filter."""
    store = service.refresh(FilterOptions(**req.model_dump()))
    return RefreshResponse(commits=len(store))

@app.get("/health")
def health_check():
    return {"status": "ok", "repo": str(service.repo_path)}
