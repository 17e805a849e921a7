# tests/test_grouping.py
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from stockdesk.schemas.stock import QuantityConvention, StockMovementRecord
from stockdesk.utils.grouping import (
    clamp_page,
    filter_by_period,
    filter_by_search_term,
    filter_by_supplier,
    filter_movements_by_search_term,
    group_movements,
    paginate,
)

from _helpers import movement


def rec(id, reference_id, quantity, **extra) -> StockMovementRecord:
    return StockMovementRecord.model_validate(movement(id, reference_id, quantity, **extra))


def test_example_scenario_two_purchase_orders():
    records = [
        rec(1, "PO-1", 5, total_amount=50),
        rec(2, "PO-1", 3, total_amount=30),
        rec(3, "PO-2", 10, total_amount=100),
    ]

    groups = group_movements(records)

    assert [g.reference_id for g in groups] == ["PO-1", "PO-2"]
    assert groups[0].total_quantity == 8
    assert groups[0].total_amount == Decimal("80")
    assert groups[0].items == [records[0], records[1]]
    assert groups[1].total_quantity == 10
    assert groups[1].total_amount == Decimal("100")
    assert groups[1].items == [records[2]]


def test_each_record_lands_in_exactly_one_group_and_blank_references_are_skipped():
    records = [
        rec(1, "A", 1),
        rec(2, None, 4),
        rec(3, "B", 2),
        rec(4, "", 7),
        rec(5, "A", 3),
    ]

    groups = group_movements(records)

    grouped_ids = [item.id for g in groups for item in g.items]
    assert sorted(grouped_ids) == ["1", "3", "5"]
    assert len(grouped_ids) == len(set(grouped_ids))
    for g in groups:
        assert all(item.reference_id == g.reference_id for item in g.items)


def test_groups_and_items_keep_first_seen_order():
    records = [rec(1, "Z", 1), rec(2, "A", 1), rec(3, "Z", 1), rec(4, "M", 1), rec(5, "A", 1)]

    groups = group_movements(records)

    assert [g.reference_id for g in groups] == ["Z", "A", "M"]
    assert [i.id for i in groups[0].items] == ["1", "3"]
    assert [i.id for i in groups[1].items] == ["2", "5"]


def test_header_fields_come_from_first_member():
    first = rec(1, "T-1", 2, reference_type="transfer", processed_by_first_name="Jan", processed_by_last_name="Kowal",
                created_at="2024-01-01T08:00:00Z", processed_date="2024-01-02T08:00:00Z")
    second = rec(2, "T-1", 2, reference_type="transfer", processed_by_first_name="Other", processed_by_last_name="User",
                 created_at="2024-03-01T08:00:00Z")

    group = group_movements([first, second])[0]

    assert group.reference_type == "transfer"
    assert group.processed_by == "Jan Kowal"
    assert group.created_at == datetime(2024, 1, 1, 8, tzinfo=timezone.utc)
    assert group.processed_date == datetime(2024, 1, 2, 8, tzinfo=timezone.utc)
    assert group.item_count == 2


def test_signed_and_magnitude_totals():
    records = [
        rec(1, "ADJ-1", 5, reference_type="adjustment"),
        rec(2, "ADJ-1", -3, reference_type="adjustment"),
        rec(3, "ADJ-1", -2, reference_type="adjustment"),
    ]

    signed = group_movements(records)[0]
    magnitude = group_movements(records, convention=QuantityConvention.MAGNITUDE)[0]

    assert signed.total_quantity == 0
    assert magnitude.total_quantity == 10


def test_missing_amounts_count_as_zero():
    records = [rec(1, "PO-9", 2, total_amount="12.50"), rec(2, "PO-9", 1), rec(3, "PO-9", 1, total_amount=None)]

    group = group_movements(records)[0]

    assert group.total_amount == Decimal("12.50")


def test_predicate_is_applied_before_grouping():
    records = [
        rec(1, "R-1", 4, movement_type="in"),
        rec(2, "R-1", 4, movement_type="out"),
        rec(3, "R-2", 1, movement_type="out"),
    ]

    groups = group_movements(records, predicate=lambda m: m.movement_type == "in")

    assert [g.reference_id for g in groups] == ["R-1"]
    assert [i.id for i in groups[0].items] == ["1"]
    assert groups[0].total_quantity == 4


def test_grouping_is_idempotent_and_leaves_input_alone():
    records = [rec(1, "A", 2, total_amount=4), rec(2, "B", 1), rec(3, "A", 5)]
    snapshot = [r.model_dump() for r in records]

    first = group_movements(records)
    second = group_movements(records)

    assert first == second
    assert [r.model_dump() for r in records] == snapshot


def test_record_defaults_are_filled_once():
    record = StockMovementRecord.model_validate({
        "id": 7,
        "movement_type": "in",
        "quantity": 3,
        "reference_id": "",
        "reference_type": None,
        "processed_by": "3f9c0000-0000-0000-0000-000000000000",
        "user_first_name": "Piotr",
        "user_last_name": "Nowak",
        "created_at": "2024-02-02T10:00:00Z",
    })

    assert record.id == "7"
    assert record.product_name == "Unknown"
    assert record.product_sku == ""
    assert record.warehouse_name == ""
    assert record.reference_id is None
    assert record.reference_type == "unspecified"
    assert record.processed_by == "Piotr Nowak"
    assert record.processed_date == record.created_at


def test_processed_by_falls_back_to_unknown():
    record = rec(1, "A", 1, processed_by_first_name=None, processed_by_last_name=None)
    assert record.processed_by == "Unknown"


# ---- search ----

def test_empty_search_term_returns_every_group():
    groups = group_movements([rec(1, "A", 1), rec(2, "B", 1)])

    assert filter_by_search_term(groups, "") == groups
    assert filter_by_search_term(groups, "   ") == groups
    assert filter_by_search_term(groups, None) == groups


def test_search_matches_header_fields_and_lines_case_insensitively():
    groups = group_movements([
        rec(1, "PO-100", 1, product_name="Steel Bolt", product_sku="BLT-01"),
        rec(2, "PO-200", 1, product_name="Copper Wire", product_sku="CW-9",
            processed_by_first_name="Maria", processed_by_last_name="Lopez"),
        rec(3, "PO-300", 1, product_name="Glue", product_sku="GL-1", supplier_name="Acme Tools",
            reference_number="INV-555"),
    ])

    assert [g.reference_id for g in filter_by_search_term(groups, "po-2")] == ["PO-200"]
    assert [g.reference_id for g in filter_by_search_term(groups, "LOPEZ")] == ["PO-200"]
    assert [g.reference_id for g in filter_by_search_term(groups, "steel")] == ["PO-100"]
    assert [g.reference_id for g in filter_by_search_term(groups, "blt-")] == ["PO-100"]
    assert [g.reference_id for g in filter_by_search_term(groups, "acme")] == ["PO-300"]
    assert [g.reference_id for g in filter_by_search_term(groups, "inv-555")] == ["PO-300"]
    assert filter_by_search_term(groups, "nothing-like-this") == []


def test_history_search_covers_warehouse_and_reason():
    records = [
        rec(1, None, 1, warehouse_name="North Depot"),
        rec(2, None, 1, reason="Damaged in transit"),
        rec(3, None, 1),
    ]

    assert [r.id for r in filter_movements_by_search_term(records, "north")] == ["1"]
    assert [r.id for r in filter_movements_by_search_term(records, "DAMAGED")] == ["2"]
    assert len(filter_movements_by_search_term(records, "")) == 3


# ---- purchase order filters ----

def test_period_and_supplier_filters():
    groups = group_movements([
        rec(1, "PO-1", 1, processed_date="2024-05-03T10:00:00Z", supplier_name="Acme"),
        rec(2, "PO-2", 1, processed_date="2024-06-03T10:00:00Z", supplier_name="Acme"),
        rec(3, "PO-3", 1, processed_date="2023-05-03T10:00:00Z", supplier_name="Globex"),
    ])

    assert [g.reference_id for g in filter_by_period(groups, 2024)] == ["PO-1", "PO-2"]
    assert [g.reference_id for g in filter_by_period(groups, 2024, 5)] == ["PO-1"]
    assert [g.reference_id for g in filter_by_supplier(groups, "Globex")] == ["PO-3"]
    assert filter_by_supplier(groups, None) == groups


# ---- pagination ----

def test_pagination_of_23_groups():
    groups = group_movements([rec(i, f"REF-{i}", 1) for i in range(23)])

    first, total_pages = paginate(groups, 1, 10)
    last, _ = paginate(groups, 3, 10)

    assert total_pages == 3
    assert first == groups[:10]
    assert last == groups[20:]
    assert len(last) == 3


def test_pagination_of_empty_list():
    items, total_pages = paginate([], 1, 10)

    assert items == []
    assert total_pages == 0
    assert clamp_page(1, total_pages) == 1


def test_clamp_page_keeps_page_in_range():
    assert clamp_page(0, 3) == 1
    assert clamp_page(2, 3) == 2
    assert clamp_page(9, 3) == 3
