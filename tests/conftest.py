import pytest

from factories import build_snapshot, daily_sales, days_ago, make_item, make_restock, make_sale


@pytest.fixture
def hardware_store():
    """A small store with a steady seller, a stale item, an unsold item and a return."""
    items = [
        make_item("HAM", "Claw Hammer", category="Tools", quantity=12, reorder_level=3),
        make_item("NAI", "Box Nails", category="Fasteners", quantity=0, reorder_level=5),
        make_item("PNT", "White Paint", category="Paint", quantity=2, reorder_level=4),
    ]
    transactions = daily_sales("HAM", [4, 5, 6, 5, 4], start_days_ago=20) + [
        make_sale("NAI", 10, days_ago(150), cost_price=1, selling_price=2),
        make_sale("PNT", 3, days_ago(2), transaction_type="demo"),
    ]
    restocks = [
        make_restock("HAM", 1, "damaged-return", timestamp=days_ago(3)),
        make_restock("PNT", 20, "new-stock", timestamp=days_ago(30)),
    ]
    return build_snapshot(items, transactions, restocks)


@pytest.fixture
def empty_store():
    return build_snapshot()


@pytest.fixture
def returns_only_store():
    """Catalog items with returns and demo movements but no genuine sales."""
    items = [make_item("HAM", "Claw Hammer", quantity=12), make_item("SAW", "Hand Saw")]
    transactions = [make_sale("SAW", 1, days_ago(3), transaction_type="demo")]
    restocks = [
        make_restock("HAM", 2, "damaged-return", timestamp=days_ago(5)),
        make_restock("SAW", 1, "supplier-return", timestamp=days_ago(6)),
    ]
    return build_snapshot(items, transactions, restocks)
