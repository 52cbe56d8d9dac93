"""Parent-linked category forest stored as an id-indexed arena.

Transactions refer to categories by display name, so the tree also keeps a
case-insensitive name index. Cycles in the parent links (bad input) are
tolerated: every walk tracks the ids it has already visited.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set

from finhealth.entities import ZERO, Category, Snapshot, coerce_amount
from finhealth.periods import in_range, validate_range


@dataclass(frozen=True)
class CategoryRollup:
    category_id: str
    name: str
    type: str
    parent_id: Optional[str]
    own_amount: Decimal
    total_amount: Decimal
    own_transaction_count: int
    total_transaction_count: int
    child_ids: List[str]


class CategoryTree:
    def __init__(self, categories: Iterable[Category]) -> None:
        self._nodes: Dict[str, Category] = {}
        self._children: Dict[str, List[str]] = {}
        self._by_name: Dict[str, str] = {}
        for category in categories:
            self._nodes[category.id] = category
            self._by_name.setdefault(_normalize_name(category.name), category.id)
        for category in self._nodes.values():
            if category.parent_id is not None and category.parent_id in self._nodes:
                self._children.setdefault(category.parent_id, []).append(category.id)

    def __contains__(self, category_id: str) -> bool:
        return category_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, category_id: str) -> Optional[Category]:
        return self._nodes.get(category_id)

    def find_by_name(self, name: Optional[str]) -> Optional[Category]:
        if not name:
            return None
        category_id = self._by_name.get(_normalize_name(name))
        return self._nodes.get(category_id) if category_id else None

    def children(self, category_id: str) -> List[str]:
        return list(self._children.get(category_id, []))

    def roots(self) -> List[str]:
        return [
            category.id
            for category in self._nodes.values()
            if category.parent_id is None or category.parent_id not in self._nodes
        ]

    def resolve_ancestry_chain(self, category_id: str) -> List[str]:
        """Ids from ``category_id`` up to its root, inclusive. Empty if unknown."""
        chain: List[str] = []
        seen: Set[str] = set()
        current = self._nodes.get(category_id)
        while current is not None and current.id not in seen:
            chain.append(current.id)
            seen.add(current.id)
            if current.parent_id is None:
                break
            current = self._nodes.get(current.parent_id)
        return chain

    def is_descendant_of(self, child_id: str, ancestor_id: str) -> bool:
        if child_id == ancestor_id:
            return False
        return ancestor_id in self.resolve_ancestry_chain(child_id)[1:]

    def descendants(self, category_id: str) -> List[str]:
        result: List[str] = []
        seen: Set[str] = {category_id}
        stack = list(reversed(self._children.get(category_id, [])))
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            result.append(current)
            stack.extend(reversed(self._children.get(current, [])))
        return result

    def subtree_names(self, category_id: str) -> Set[str]:
        """Normalized names of a category and all of its descendants."""
        ids = [category_id] + self.descendants(category_id)
        return {_normalize_name(self._nodes[node_id].name) for node_id in ids if node_id in self._nodes}


def category_rollup(
    snapshot: Snapshot,
    start_date: date,
    end_date: date,
) -> List[CategoryRollup]:
    validate_range(start_date, end_date)
    tree = CategoryTree(snapshot.categories)

    own_amounts: Dict[str, Decimal] = {}
    own_counts: Dict[str, int] = {}
    for txn in snapshot.transactions:
        if not in_range(txn.date, start_date, end_date):
            continue
        category = tree.find_by_name(txn.category)
        if category is None:
            continue
        own_amounts[category.id] = own_amounts.get(category.id, ZERO) + coerce_amount(txn.amount)
        own_counts[category.id] = own_counts.get(category.id, 0) + 1

    rollups: List[CategoryRollup] = []
    for category in snapshot.categories:
        if tree.get(category.id) is not category:
            continue
        subtree = [category.id] + tree.descendants(category.id)
        rollups.append(
            CategoryRollup(
                category_id=category.id,
                name=category.name,
                type=category.type,
                parent_id=category.parent_id,
                own_amount=own_amounts.get(category.id, ZERO),
                total_amount=sum((own_amounts.get(node_id, ZERO) for node_id in subtree), ZERO),
                own_transaction_count=own_counts.get(category.id, 0),
                total_transaction_count=sum(own_counts.get(node_id, 0) for node_id in subtree),
                child_ids=tree.children(category.id),
            )
        )
    return rollups


def _normalize_name(value: str) -> str:
    return value.strip().lower()
