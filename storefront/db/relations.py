"""
Relationship and join population

Documents are stored with references as plain ids. On read, ``depth``
controls how far references are expanded: each level replaces relationship
ids with the referenced documents (read at ``depth - 1``) and fills join
fields. Ids that no longer resolve stay as ids.
"""
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Dict, List

from storefront.db.collections import get_collection, reference_id

if TYPE_CHECKING:
    from storefront.db.store import Document, DocumentStore


async def _load_by_ids(store: "DocumentStore", collection: str, ids: set, depth: int) -> Dict[Any, "Document"]:
    if not ids:
        return {}
    result = await store.find(collection, {"id": {"in": sorted(ids)}}, depth=depth)
    return {doc["id"]: doc for doc in result.docs}


async def populate(store: "DocumentStore", collection: str, docs: List["Document"], depth: int) -> List["Document"]:
    if depth <= 0 or not docs:
        return docs

    config = get_collection(collection)

    for rel in config.relationships:
        ids = set()
        for doc in docs:
            if rel.array is None:
                ids.add(doc.get(rel.field))
            else:
                for row in doc.get(rel.array) or []:
                    ids.add(row.get(rel.field))
        ids.discard(None)

        related = await _load_by_ids(store, rel.relation_to, ids, depth - 1)

        for doc in docs:
            if rel.array is None:
                value = doc.get(rel.field)
                if value in related:
                    doc[rel.field] = related[value]
            else:
                for row in doc.get(rel.array) or []:
                    value = row.get(rel.field)
                    if value in related:
                        row[rel.field] = related[value]

    for join in config.joins:
        ids = [doc["id"] for doc in docs]
        result = await store.find(join.collection, {join.on: {"in": ids}}, depth=depth - 1)
        grouped = defaultdict(list)
        for related_doc in result.docs:
            grouped[reference_id(related_doc.get(join.on))].append(related_doc)
        for doc in docs:
            matches = grouped.get(doc["id"], [])
            if join.has_many:
                doc[join.field] = matches
            else:
                doc[join.field] = matches[0] if matches else None

    return docs
