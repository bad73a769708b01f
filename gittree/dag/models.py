from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

class GraphTokenKind(Enum):
    NONE = "none"
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"
    CORNER = "corner"
    MERGE = "merge"

@dataclass(frozen=True)
class GraphToken:
    kind: GraphTokenKind
    column: int
    is_merge_marker: bool = False

@dataclass
class CommitRecord:
    hash: str
    short_hash: str
    author: str = ""
    email: str = ""
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    message: str = ""
    parents: List[str] = field(default_factory=list)
    refs: List[str] = field(default_factory=list)
    lane: int = 0
    graph_tokens: List[GraphToken] = field(default_factory=list)
    # Only filled in by the detail lookup
    files: List[str] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def first_parent(self) -> Optional[str]:
        return self.parents[0] if self.parents else None

    @property
    def subject(self) -> str:
        lines = self.message.splitlines()
        return lines[0] if lines else ""

@dataclass(frozen=True)
class Reference:
    name: str
    target: str

@dataclass
class FilterOptions:
    """Options handed to `git log`; the graph code never interprets them."""
    author: Optional[str] = None
    path: Optional[str] = None
    since: Optional[datetime] = None
    until: Optional[datetime] = None
    range: Optional[str] = None
    max_commits: Optional[int] = None
