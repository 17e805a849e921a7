# stockdesk/utils/grouping.py
"""Grouping of flat stock movements into multi-line documents.

The backend records one row per product per warehouse. Stock-in receipts,
purchase orders, transfers and adjustments are several of those rows
sharing a ``reference_id``; the screens list them as one document each.
All functions here are pure and never modify their inputs.
"""
import math
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from stockdesk.schemas.stock import GroupedOrder, QuantityConvention, StockMovementRecord

MovementPredicate = Callable[[StockMovementRecord], bool]
T = TypeVar("T")


def group_movements(
    records: Iterable[StockMovementRecord],
    predicate: Optional[MovementPredicate] = None,
    convention: QuantityConvention = QuantityConvention.SIGNED,
) -> List[GroupedOrder]:
    """Group records by reference id, in order of first appearance.

    Records without a reference id, or rejected by ``predicate``, are skipped.
    The first record of each group supplies its header fields. With
    ``QuantityConvention.MAGNITUDE`` line quantities are summed as absolute
    values (adjustments), otherwise as signed values.
    """
    groups: Dict[str, GroupedOrder] = {}

    for record in records:
        ref_id = record.reference_id
        if not ref_id:
            continue
        if predicate is not None and not predicate(record):
            continue

        group = groups.get(ref_id)
        if group is None:
            group = GroupedOrder(
                reference_id=ref_id,
                reference_type=record.reference_type,
                reference_number=record.reference_number,
                supplier_name=record.supplier_name,
                processed_by=record.processed_by,
                processed_date=record.processed_date,
                created_at=record.created_at,
            )
            groups[ref_id] = group

        if convention == QuantityConvention.MAGNITUDE:
            group.total_quantity += abs(record.quantity)
        else:
            group.total_quantity += record.quantity
        group.total_amount += record.total_amount or Decimal("0")
        group.items.append(record)

    return list(groups.values())


def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle in value.lower()


def filter_by_search_term(groups: Sequence[GroupedOrder], term: Optional[str]) -> List[GroupedOrder]:
    """Case-insensitive substring search over documents and their lines."""
    if not term or not term.strip():
        return list(groups)

    needle = term.strip().lower()
    result = []
    for group in groups:
        header_match = (
            _contains(group.reference_id, needle)
            or _contains(group.processed_by, needle)
            or _contains(group.reference_number, needle)
            or _contains(group.supplier_name, needle)
        )
        if header_match or any(
            _contains(item.product_name, needle) or _contains(item.product_sku, needle)
            for item in group.items
        ):
            result.append(group)
    return result


def filter_movements_by_search_term(records: Sequence[StockMovementRecord], term: Optional[str]) -> List[StockMovementRecord]:
    # Flat stock history: product, sku, warehouse or reason
    if not term or not term.strip():
        return list(records)
    needle = term.strip().lower()
    return [
        r for r in records
        if _contains(r.product_name, needle)
        or _contains(r.product_sku, needle)
        or _contains(r.warehouse_name, needle)
        or _contains(r.reason, needle)
    ]


def filter_by_period(groups: Sequence[GroupedOrder], year: int, month: Optional[int] = None) -> List[GroupedOrder]:
    # Purchase orders are filed by processed date
    result = []
    for group in groups:
        when = group.processed_date or group.created_at
        if when.year != year:
            continue
        if month is not None and when.month != month:
            continue
        result.append(group)
    return result


def filter_by_supplier(groups: Sequence[GroupedOrder], supplier_name: Optional[str]) -> List[GroupedOrder]:
    if not supplier_name:
        return list(groups)
    return [g for g in groups if g.supplier_name == supplier_name]


def paginate(groups: Sequence[T], page: int, page_size: int) -> Tuple[List[T], int]:
    """Return the 1-indexed ``page`` of ``groups`` and the page count.

    ``page`` is not clamped here; use :func:`clamp_page` first.
    """
    total_pages = math.ceil(len(groups) / page_size)
    start = (page - 1) * page_size
    return list(groups[start:start + page_size]), total_pages


def clamp_page(page: int, total_pages: int) -> int:
    return max(1, min(page, max(total_pages, 1)))
