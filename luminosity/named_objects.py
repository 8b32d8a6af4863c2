"""
Named objects (lenses, cameras) interned by the catalog.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass
class NamedObject:
    id: int
    name: str

    def to_dict(self) -> Dict[str, object]:
        return {'id': self.id, 'name': self.name}


class NamedObjectList(list):
    """
    A list of named objects, kept unique by name when merged. Names
    compare by code point, so "Z" sorts before "a".
    """

    @classmethod
    def from_rows(cls, rows: Iterable[Tuple[int, Optional[str]]]) -> 'NamedObjectList':
        """Build a list from (id, name) rows; a NULL name becomes ""."""
        return cls(NamedObject(id=row_id, name=name or "") for row_id, name in rows)

    def to_map(self) -> Dict[str, NamedObject]:
        return {obj.name: obj for obj in self}

    def merge(self, other: Iterable[NamedObject]) -> 'NamedObjectList':
        """
        Return a new list holding every name from both lists once. When
        both lists contain a name, the entry from this list is kept, so
        the first id seen for a name wins.
        """
        merged = {}
        for obj in self:
            merged.setdefault(obj.name, obj)
        for obj in other:
            merged.setdefault(obj.name, obj)
        return NamedObjectList(sorted(merged.values(), key=lambda o: o.name))

    def names(self) -> List[str]:
        return [obj.name for obj in self]

    def to_list(self) -> List[Dict[str, object]]:
        return [obj.to_dict() for obj in self]
