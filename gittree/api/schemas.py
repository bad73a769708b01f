from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel

from gittree.nav.controller import Event

class GraphTokenResponse(BaseModel):
    kind: str
    column: int
    is_merge_marker: bool

class CommitResponse(BaseModel):
    hash: str
    short_hash: str
    author: str
    email: str
    date: datetime
    message: str
    parents: List[str]
    refs: List[str]
    lane: int
    graph: List[GraphTokenResponse]
    # Filled for the detail endpoint only
    files: List[str] = []
    stats: Dict[str, int] = {}

class RefResponse(BaseModel):
    name: str
    target: str

class SelectionResponse(BaseModel):
    selected_index: Optional[int] = None
    selected_hash: Optional[str] = None
    viewport_offset: int
    show_help: bool
    unicode: bool
    quit_requested: bool

class EventRequest(BaseModel):
    event: Event
    name: Optional[str] = None # branch/tag name

class CommandResultResponse(BaseModel):
    action: str
    hash: str
    ok: bool
    message: str
    details: Optional[CommitResponse] = None

class EventResponse(BaseModel):
    selection: SelectionResponse
    result: Optional[CommandResultResponse] = None

class RenderLineResponse(BaseModel):
    text: str
    index: Optional[int] = None
    selected: bool = False
    graph_color: Optional[str] = None
    ref_color: Optional[str] = None

class RenderResponse(BaseModel):
    mode: str
    selected_row: Optional[int] = None
    lines: List[RenderLineResponse]

class FilterRequest(BaseModel):
    author: Optional[str] = None
    path: Optional[str] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    range: Optional[str] = None
    max_commits: Optional[int] = None

class RefreshResponse(BaseModel):
    commits: int
