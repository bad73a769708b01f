from typing import Dict, Iterable, Iterator, Optional, Tuple

from gittree.dag.models import CommitRecord

class CommitGraphStore:
    """Ordered, read-only view over the commits of one log query.

    Row 0 is the most recent commit in the order `git log --date-order`
    produced. Hash and child lookups return the earliest matching row.
    """

    def __init__(self, records: Iterable[CommitRecord] = ()):
        self._records: Tuple[CommitRecord, ...] = tuple(records)
        self._index: Dict[str, int] = {}
        self._first_child: Dict[str, int] = {}

        for i, record in enumerate(self._records):
            self._index.setdefault(record.hash, i)
            for parent in record.parents:
                self._first_child.setdefault(parent, i)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[CommitRecord]:
        return iter(self._records)

    def __getitem__(self, index: int) -> CommitRecord:
        return self._records[index]

    def __bool__(self) -> bool:
        return bool(self._records)

    @property
    def records(self) -> Tuple[CommitRecord, ...]:
        return self._records

    def get(self, hash_: str) -> Optional[CommitRecord]:
        index = self.index_of(hash_)
        return self._records[index] if index is not None else None

    def index_of(self, hash_: str) -> Optional[int]:
        return self._index.get(hash_)

    def parent_index(self, index: int) -> Optional[int]:
        """Row of the first parent of the commit at `index`, if loaded."""
        parent = self._records[index].first_parent
        if parent is None:
            return None
        return self.index_of(parent)

    def first_child_index(self, hash_: str) -> Optional[int]:
        """Earliest row that lists `hash_` among its parents."""
        return self._first_child.get(hash_)
