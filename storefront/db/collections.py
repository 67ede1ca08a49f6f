"""
Collection declarations

Each collection lists the field rules both document stores enforce:
required and unique fields, numeric minimums, choices, slug generation,
relationship fields (stored as ids) and joins (derived on read).
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from storefront.core.exceptions import DocumentValidationError, StoreError
from storefront.core.utils import slugify

USERS = "users"
PRODUCTS = "products"
CATEGORIES = "categories"
CART = "cart"
ORDERS = "orders"

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")


@dataclass(frozen=True)
class Relationship:
    """A field holding the id of a document in another collection.

    ``array`` names the array field the relationship lives in, if any
    (e.g. ``products`` for cart lines).
    """
    field: str
    relation_to: str
    array: Optional[str] = None


@dataclass(frozen=True)
class Join:
    """A derived field listing documents of ``collection`` whose ``on`` equals this id."""
    field: str
    collection: str
    on: str
    has_many: bool = True


@dataclass(frozen=True)
class ArrayField:
    name: str
    required: Tuple[str, ...] = ()
    minimums: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class CollectionConfig:
    slug: str
    required: Tuple[str, ...] = ()
    unique: Tuple[str, ...] = ()
    minimums: Dict[str, float] = field(default_factory=dict)
    integers: Tuple[str, ...] = ()
    defaults: Dict[str, Any] = field(default_factory=dict)
    choices: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    slug_source: Optional[str] = None
    relationships: Tuple[Relationship, ...] = ()
    joins: Tuple[Join, ...] = ()
    arrays: Tuple[ArrayField, ...] = ()

    def relationship(self, name: str) -> Optional[Relationship]:
        for rel in self.relationships:
            if rel.array is None and rel.field == name:
                return rel
        return None

    def array(self, name: str) -> Optional[ArrayField]:
        for arr in self.arrays:
            if arr.name == name:
                return arr
        return None

    def array_relationships(self, array_name: str) -> Tuple[Relationship, ...]:
        return tuple(rel for rel in self.relationships if rel.array == array_name)

    def join(self, name: str) -> Optional[Join]:
        for j in self.joins:
            if j.field == name:
                return j
        return None


COLLECTIONS: Dict[str, CollectionConfig] = {
    USERS: CollectionConfig(
        slug=USERS,
        required=("name", "email", "hashed_password"),
        unique=("email",),
        defaults={"is_admin": False},
        joins=(Join(field="cart", collection=CART, on="user", has_many=False),),
    ),
    CATEGORIES: CollectionConfig(
        slug=CATEGORIES,
        required=("name", "slug"),
        unique=("slug",),
        slug_source="name",
        joins=(Join(field="products", collection=PRODUCTS, on="category"),),
    ),
    PRODUCTS: CollectionConfig(
        slug=PRODUCTS,
        required=("name", "slug", "price", "category", "inventory"),
        unique=("slug",),
        minimums={"price": 0, "inventory": 0},
        integers=("inventory",),
        defaults={"inventory": 0},
        slug_source="name",
        relationships=(Relationship(field="category", relation_to=CATEGORIES),),
    ),
    CART: CollectionConfig(
        slug=CART,
        required=("user",),
        unique=("user",),
        defaults={"products": []},
        relationships=(
            Relationship(field="user", relation_to=USERS),
            Relationship(field="product", relation_to=PRODUCTS, array="products"),
        ),
        arrays=(ArrayField(name="products", required=("product", "quantity"), minimums={"quantity": 1}),),
    ),
    ORDERS: CollectionConfig(
        slug=ORDERS,
        required=("user", "status", "total"),
        minimums={"total": 0},
        defaults={"status": "pending", "items": []},
        choices={"status": ORDER_STATUSES},
        relationships=(
            Relationship(field="user", relation_to=USERS),
            Relationship(field="product", relation_to=PRODUCTS, array="items"),
        ),
        arrays=(
            ArrayField(
                name="items",
                required=("product", "quantity", "price"),
                minimums={"quantity": 1, "price": 0},
            ),
        ),
    ),
}


def get_collection(slug: str) -> CollectionConfig:
    try:
        return COLLECTIONS[slug]
    except KeyError:
        raise StoreError(f"Unknown collection '{slug}'", details={"collection": slug})


def reference_id(value: Any) -> Any:
    """Reduce a reference (id, resolved dict or object with ``id``) to its id."""
    if value is None:
        return None
    if isinstance(value, dict):
        return value.get("id")
    if hasattr(value, "id") and not isinstance(value, (int, str)):
        return value.id
    return value


def new_row_id() -> str:
    return uuid.uuid4().hex[:24]


def prepare_document(config: CollectionConfig, data: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Normalize an incoming write.

    - joins and ids are dropped (derived / assigned by the store)
    - relationship fields are reduced to ids
    - array rows get ids; rows that already carry one keep it
    - on create, defaults fill missing fields and the slug is generated
    """
    creating = existing is None
    doc = {k: v for k, v in data.items() if config.join(k) is None and k not in ("id", "created_at", "updated_at")}

    for rel in config.relationships:
        if rel.array is None and rel.field in doc:
            doc[rel.field] = reference_id(doc[rel.field])

    for arr in config.arrays:
        if arr.name not in doc:
            continue
        rows = []
        for row in doc[arr.name] or []:
            row = dict(row)
            for rel in config.array_relationships(arr.name):
                if rel.field in row:
                    row[rel.field] = reference_id(row[rel.field])
            row["id"] = row.get("id") or new_row_id()
            rows.append(row)
        doc[arr.name] = rows

    if creating:
        for key, default in config.defaults.items():
            if doc.get(key) is None:
                doc[key] = list(default) if isinstance(default, list) else default

    # Slugs are generated on create, or on update when explicitly blanked
    if config.slug_source and not doc.get("slug") and (creating or "slug" in doc):
        source = doc.get(config.slug_source) or (existing or {}).get(config.slug_source)
        if source:
            doc["slug"] = slugify(source)

    return doc


def validate_document(config: CollectionConfig, doc: Dict[str, Any]) -> None:
    """Check a complete (merged) document against the collection rules."""
    errors: Dict[str, str] = {}

    for name in config.required:
        if doc.get(name) is None or doc.get(name) == "":
            errors[name] = "This field is required"

    for name, minimum in config.minimums.items():
        value = doc.get(name)
        if value is not None and value < minimum:
            errors[name] = f"Must be at least {minimum}"

    for name in config.integers:
        value = doc.get(name)
        if value is not None and int(value) != value:
            errors[name] = "Must be a whole number"

    for name, allowed in config.choices.items():
        value = doc.get(name)
        if value is not None and value not in allowed:
            errors[name] = f"Must be one of: {', '.join(allowed)}"

    for arr in config.arrays:
        for index, row in enumerate(doc.get(arr.name) or []):
            for name in arr.required:
                if row.get(name) is None:
                    errors[f"{arr.name}.{index}.{name}"] = "This field is required"
            for name, minimum in arr.minimums.items():
                value = row.get(name)
                if value is not None and value < minimum:
                    errors[f"{arr.name}.{index}.{name}"] = f"Must be at least {minimum}"

    if errors:
        raise DocumentValidationError(config.slug, errors)
