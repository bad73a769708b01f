import logging
from typing import Iterable, Union

from gittree.dag.lanes import assign_lanes
from gittree.dag.models import Reference
from gittree.dag.parser import DEFAULT_DELIMITER, parse_log
from gittree.dag.refs import attach_refs
from gittree.dag.store import CommitGraphStore

logger = logging.getLogger(__name__)

def build_store(
    log_output: Union[str, bytes],
    references: Iterable[Reference] = (),
    delimiter: str = DEFAULT_DELIMITER,
) -> CommitGraphStore:
    """Run parse -> lane assignment -> ref attachment and freeze the result."""
    records = parse_log(log_output, delimiter)
    assign_lanes(records)
    attach_refs(records, references)
    logger.debug("Built commit store with %d commits", len(records))
    return CommitGraphStore(records)
