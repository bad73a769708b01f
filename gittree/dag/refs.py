from typing import Dict, Iterable, List

from gittree.dag.models import CommitRecord, Reference

def build_ref_map(references: Iterable[Reference]) -> Dict[str, List[str]]:
    """Group reference names by the commit hash they resolve to.

    Names keep the order they were listed in.
    """
    ref_map: Dict[str, List[str]] = {}
    for ref in references:
        names = ref_map.setdefault(ref.target, [])
        if ref.name not in names:
            names.append(ref.name)
    return ref_map

def attach_refs(records: Iterable[CommitRecord], references: Iterable[Reference]) -> None:
    """Replace each record's `refs` with the names pointing at its hash.

    References to commits outside `records` are ignored.
    """
    ref_map = build_ref_map(references)
    for record in records:
        record.refs = list(ref_map.get(record.hash, []))
