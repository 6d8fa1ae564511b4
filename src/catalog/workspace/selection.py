"""Selection set and price-edit transaction log for a catalog workspace.

SelectionSet holds the product ids picked for export. It lives only as
long as its workspace (one page load) and is never persisted.

PriceLedger formalizes the optimistic update: before a catalog price edit
is applied in memory, the previous value is recorded as a PriceEntry. If
the store write fails, rollback() applies the compensating action and
restores exactly that one product's previous price.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from decimal import Decimal

from src.catalog.products.schemas import ProductRead


class SelectionSet:
    """Set of selected product ids, in selection order."""

    def __init__(self, product_ids: Iterable[str] = ()) -> None:
        self._ids: dict[str, None] = dict.fromkeys(product_ids)

    def toggle(self, product_id: str) -> bool:
        """Flip the selection state of a product; return the new state."""
        if product_id in self._ids:
            del self._ids[product_id]
            return False
        self._ids[product_id] = None
        return True

    def select(self, product_id: str) -> None:
        self._ids[product_id] = None

    def clear(self) -> None:
        self._ids.clear()

    def is_selected(self, product_id: str) -> bool:
        return product_id in self._ids

    def retain(self, product_ids: Iterable[str]) -> None:
        """Drop selections whose product no longer exists."""
        keep = set(product_ids)
        self._ids = {pid: None for pid in self._ids if pid in keep}

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __len__(self) -> int:
        return len(self._ids)


@dataclass(frozen=True)
class PriceEntry:
    """Compensating record for one in-flight catalog price edit."""

    product_id: str
    previous: Decimal | None
    new: Decimal | None
    entry_id: str = field(default_factory=lambda: str(uuid.uuid4()))


class PriceLedger:
    """Open price edits and their compensating actions."""

    def __init__(self) -> None:
        self._open: dict[str, PriceEntry] = {}

    def begin(self, product_id: str, previous: Decimal | None, new: Decimal | None) -> PriceEntry:
        entry = PriceEntry(product_id=product_id, previous=previous, new=new)
        self._open[entry.entry_id] = entry
        return entry

    def commit(self, entry: PriceEntry) -> None:
        self._open.pop(entry.entry_id, None)

    def rollback(self, entry: PriceEntry, products: list[ProductRead]) -> list[ProductRead]:
        """Restore the entry's previous price in a product list.

        Only the product named by the entry is replaced, and only while it
        still holds the value this entry wrote; a newer edit to the same
        product is left alone.
        """
        self._open.pop(entry.entry_id, None)
        restored: list[ProductRead] = []
        for product in products:
            if product.id == entry.product_id and product.catalog_price == entry.new:
                product = product.model_copy(update={"catalog_price": entry.previous})
            restored.append(product)
        return restored

    @property
    def pending(self) -> list[PriceEntry]:
        return list(self._open.values())
