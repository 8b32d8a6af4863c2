"""
Catalog collections and the collection hierarchy.

The hierarchy is stored as a flat table of nodes keyed by collection
id; parents and children are referenced by id. Lightroom allows
several top-level collections, so they all hang off a synthetic root
node whose id is None.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence


class CollectionType(Enum):
    STANDARD = "standard"
    SMART = "smart"
    GROUP = "group"

    @classmethod
    def from_creation_id(cls, creation_id: Optional[str]) -> 'CollectionType':
        if creation_id == "com.adobe.ag.library.smart_collection":
            return cls.SMART
        if creation_id == "com.adobe.ag.library.group":
            return cls.GROUP
        return cls.STANDARD


COLLECTIONS_QUERY = """
SELECT   id_local,
         name,
         parent,
         creationId
FROM     AgLibraryCollection
WHERE    systemOnly  = 0
AND      creationId != 'com.adobe.ag.library.group'
ORDER BY creationId, name, parent
"""

COLLECTION_TREE_QUERY = """
SELECT   id_local,
         name,
         parent,
         creationId
FROM     AgLibraryCollection
WHERE    systemOnly = 0
ORDER BY parent, name
"""

ROOT_NAME = "Root"


def _id_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


@dataclass
class Collection:
    id: Optional[str]
    name: Optional[str]
    parent_id: Optional[str] = None
    type: CollectionType = CollectionType.STANDARD
    children: List[Optional[str]] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> 'Collection':
        collection_id, name, parent, creation_id = row
        return cls(
            id=_id_str(collection_id),
            name=name,
            parent_id=_id_str(parent),
            type=CollectionType.from_creation_id(creation_id),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {'id': self.id, 'name': self.name, 'type': self.type.value}
        if self.parent_id is not None:
            result['parent_id'] = self.parent_id
        return result


class CollectionTree:
    """Collections indexed by id, with parent/child links held as ids."""

    def __init__(self, collections: Iterable[Collection] = ()):
        self.root = Collection(id=None, name=ROOT_NAME, type=CollectionType.GROUP)
        self.nodes: Dict[Optional[str], Collection] = {None: self.root}
        for collection in collections:
            collection.children = []
            self.nodes[collection.id] = collection

        for collection in self.nodes.values():
            if collection is self.root:
                continue
            parent_id = collection.parent_id
            if parent_id not in self.nodes or parent_id == collection.id:
                # orphaned or top-level
                parent_id = None
            self.nodes[parent_id].children.append(collection.id)

    def __len__(self) -> int:
        return len(self.nodes) - 1

    def parent(self, collection_id: str) -> Collection:
        collection = self.nodes[collection_id]
        if collection.parent_id in self.nodes:
            return self.nodes[collection.parent_id]
        return self.root

    def children(self, collection_id: Optional[str]) -> List[Collection]:
        return [self.nodes[child] for child in self.nodes[collection_id].children]

    def to_dict(self, collection_id: Optional[str] = None) -> Dict[str, Any]:
        """Nested rendering of the subtree below a node (the root by default)."""
        node = self.nodes[collection_id]
        result = node.to_dict()
        if node.children:
            result['children'] = [self.to_dict(child) for child in node.children]
        return result
