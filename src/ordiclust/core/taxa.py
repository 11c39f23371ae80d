"""Taxa: ordered bijection between 1-based integer ids and sample labels.

Ids are issued in insertion order starting at 1 and are never reused, so
after a removal the id space may be sparse.
"""

from __future__ import annotations

from typing import Iterable, Iterator


class Taxa:
    """Ordered set of unique labels, each with a stable positive id.

    Distances and tree builders interpret matrix row ``i`` as the taxon
    with id ``i``; build the Taxa once from the sample names and leave it
    untouched while an engine runs.
    """

    __slots__ = ("_id2label", "_label2id", "_next_id")

    def __init__(self) -> None:
        self._id2label: dict[int, str] = {}
        self._label2id: dict[str, int] = {}
        self._next_id = 1

    @classmethod
    def from_labels(cls, labels: Iterable) -> Taxa:
        """Create a Taxa from a sequence of labels. Labels must be unique."""
        taxa = cls()
        for label in labels:
            label = str(label)
            if label in taxa:
                raise ValueError(f"Taxon labels must be unique. Duplicate: '{label}'")
            taxa.add(label)
        return taxa

    def add(self, label: str) -> int:
        """Add a label and return its id. Re-adding returns the existing id."""
        if not isinstance(label, str):
            raise TypeError(f"Taxon label must be a str, got {type(label).__name__}.")
        existing = self._label2id.get(label)
        if existing is not None:
            return existing
        tid = self._next_id
        self._next_id += 1
        self._id2label[tid] = label
        self._label2id[label] = tid
        return tid

    def remove(self, label: str) -> int:
        """Remove a label and return the id it had. Its id is not reused."""
        tid = self._label2id.pop(label, None)
        if tid is None:
            raise KeyError(f"Taxon '{label}' not found.")
        del self._id2label[tid]
        return tid

    def get_label(self, tid: int) -> str:
        """Return the label of the given id."""
        try:
            return self._id2label[tid]
        except KeyError:
            raise KeyError(f"No taxon with id {tid}.") from None

    def index_of(self, label: str) -> int:
        """Return the id of a label, or -1 if it is not present."""
        return self._label2id.get(label, -1)

    def size(self) -> int:
        return len(self._id2label)

    def max_id(self) -> int:
        """Largest id issued so far (0 if none)."""
        return self._next_id - 1

    def ids(self) -> list[int]:
        """Assigned ids in increasing order."""
        return sorted(self._id2label)

    def labels(self) -> list[str]:
        """Labels ordered by id."""
        return [self._id2label[tid] for tid in self.ids()]

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, label: object) -> bool:
        return label in self._label2id

    def __iter__(self) -> Iterator[str]:
        return iter(self.labels())

    def __repr__(self) -> str:
        return f"Taxa({self.labels()!r})"
