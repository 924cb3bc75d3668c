"""
Sample product catalog used to seed a freshly created index.

Product names come from a small set of vocabularies, one word (or nothing)
per vocabulary, in the spirit of the well known "Microsoft Product Name
Generator". The index schema is derived from the field annotations on
`Product`, so the documents and the index can never drift apart.
"""

import dataclasses
import random
from typing import Iterator, List, Optional

from azure.search.documents.indexes.models import (
    SearchableField,
    SearchField,
    SearchFieldDataType,
    SimpleField,
)

DEFAULT_CATALOG_SIZE = 100

PREFIXES = [None, "Visual", "Compact", "Embedded", "Expression"]
PRODUCTS = [None, "Windows", "Office", "SQL", "FoxPro", "BizTalk"]
TERMS = [
    "Web", "Robotics", "Network", "Testing", "Project", "Small Business", "Team", "Management",
    "Graphic", "Presentation", "Communication", "Workflow", "Ajax", "XML", "Content", "Source Control",
]
TYPES = [None, "Client", "Workstation", "Server", "System", "Console", "Shell", "Designer"]
SUFFIXES = [None, "Express", "Standard", "Professional", "Enterprise", "Ultimate", "Foundation", ".NET", "Framework"]

COMPONENTS = [PREFIXES, PRODUCTS, TERMS, TYPES, SUFFIXES]

MIN_PRICE = 99.99
MAX_PRICE = 999.99


def search_field(searchable: bool = False, **attributes):
    """Annotate a dataclass attribute with the search field it maps to."""
    return dataclasses.field(metadata={"search": dict(attributes, searchable=searchable)})


@dataclasses.dataclass
class Product:
    id: str = search_field(key=True)
    name: str = search_field(searchable=True, filterable=True)
    price: float = search_field(sortable=True)

    def to_document(self) -> dict:
        return dataclasses.asdict(self)

    def __str__(self) -> str:
        return f"{self.id}: {self.name} for ${self.price:,.2f}"


_EDM_TYPES = {
    str: SearchFieldDataType.String,
    float: SearchFieldDataType.Double,
    int: SearchFieldDataType.Int32,
    bool: SearchFieldDataType.Boolean,
}


def build_fields(model=Product) -> List[SearchField]:
    """
    Build the index field list from the `search` metadata of a dataclass.

    Searchable attributes become `SearchableField`s, everything else a
    `SimpleField`. Attributes without metadata are not indexed.
    """
    fields = []
    for attribute in dataclasses.fields(model):
        annotation = attribute.metadata.get("search")
        if annotation is None:
            continue
        options = dict(annotation)
        searchable = options.pop("searchable", False)
        try:
            edm_type = _EDM_TYPES[attribute.type]
        except KeyError:
            raise TypeError(f"No search field type for attribute '{attribute.name}' of type {attribute.type!r}")
        if searchable:
            fields.append(SearchableField(name=attribute.name, type=edm_type, **options))
        else:
            fields.append(SimpleField(name=attribute.name, type=edm_type, **options))
    return fields


def random_name(rng: random.Random) -> str:
    words = (rng.choice(values) for values in COMPONENTS)
    return " ".join(word for word in words if word is not None)


def random_price(rng: random.Random) -> float:
    # 99.99, 149.99, ... 949.99
    return rng.randint(2, 19) * 100.0 / 2.0 - 0.01


def generate_catalog(count: int = DEFAULT_CATALOG_SIZE, rng: Optional[random.Random] = None) -> Iterator[Product]:
    """
    Yield `count` products with sequential ids "1".."count".

    Args:
        count: number of products to generate, must not be negative.
        rng: random source, pass a seeded `random.Random` for reproducible catalogs.
    """
    if count < 0:
        raise ValueError(f"Catalog size must not be negative, got {count}")
    rng = rng or random.Random()
    for i in range(1, count + 1):
        yield Product(id=str(i), name=random_name(rng), price=random_price(rng))
