from typing import Iterable, List

from gittree.dag.models import CommitRecord, GraphToken, GraphTokenKind

LANE_KINDS = (GraphTokenKind.VERTICAL, GraphTokenKind.MERGE)

def lane_for(tokens: List[GraphToken]) -> int:
    """Column of the first vertical or merge token, 0 if there is none."""
    for token in tokens:
        if token.kind in LANE_KINDS:
            return token.column
    return 0

def assign_lanes(records: Iterable[CommitRecord]) -> None:
    """Set `lane` on every record from its own row of graph tokens.

    Rows are looked at in isolation; lane occupancy is not carried from one
    row to the next.
    """
    for record in records:
        record.lane = lane_for(record.graph_tokens)
