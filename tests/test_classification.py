"""ABC classification tests."""

import pytest

from inventory_analytics import perform_abc_analysis, perform_abc_analysis_with_returns
from inventory_analytics.classification import RECOMMENDATIONS, assign_category
from factories import build_snapshot, days_ago, make_item, make_restock, make_sale


def _sale(item_id, revenue, **kwargs):
    return make_sale(item_id, 1, days_ago(5), total_revenue=revenue, **kwargs)


class TestCategoryThresholds:
    @pytest.mark.parametrize(
        "pct, expected",
        [(10, "A"), (80, "A"), (80.01, "B"), (95, "B"), (95.01, "C"), (100, "C")],
    )
    def test_boundaries_are_inclusive(self, pct, expected):
        assert assign_category(pct) == expected


class TestABCAnalysis:
    def test_pareto_split(self):
        items = [make_item("A1"), make_item("B1"), make_item("C1")]
        transactions = [_sale("C1", 50), _sale("A1", 800), _sale("B1", 150)]
        snapshot = build_snapshot(items, transactions)

        result = perform_abc_analysis(snapshot.items, snapshot.transactions)

        assert list(result["item_id"]) == ["A1", "B1", "C1"]
        assert list(result["category"]) == ["A", "B", "C"]
        assert list(result["revenue_contribution"]) == pytest.approx([80, 15, 5])
        assert list(result["cumulative_percentage"]) == pytest.approx([80, 95, 100])

    def test_revenue_is_summed_per_item(self):
        items = [make_item("I1"), make_item("I2")]
        transactions = [_sale("I1", 30), _sale("I2", 50), _sale("I1", 40)]
        snapshot = build_snapshot(items, transactions)

        result = perform_abc_analysis(snapshot.items, snapshot.transactions)
        revenue = dict(zip(result["item_id"], result["revenue"]))
        assert revenue == {"I1": 70, "I2": 50}

    def test_non_genuine_sales_are_excluded(self):
        items = [make_item("I1"), make_item("I2")]
        transactions = [
            _sale("I1", 100),
            _sale("I2", 1000, transaction_type="demo"),
            _sale("I2", 1000, transaction_type="transfer"),
        ]
        snapshot = build_snapshot(items, transactions)

        result = perform_abc_analysis(snapshot.items, snapshot.transactions)
        assert list(result["item_id"]) == ["I1"]

    def test_categories_are_monotonic_and_cover_all_revenue(self):
        revenues = [5, 400, 12, 90, 33, 250, 7, 61, 140, 2]
        items = [make_item(f"I{i}") for i in range(len(revenues))]
        transactions = [_sale(f"I{i}", r) for i, r in enumerate(revenues)]
        snapshot = build_snapshot(items, transactions)

        result = perform_abc_analysis(snapshot.items, snapshot.transactions)

        assert list(result["revenue"]) == sorted(revenues, reverse=True)
        rank = {"A": 0, "B": 1, "C": 2}
        ranks = [rank[c] for c in result["category"]]
        assert ranks == sorted(ranks)
        assert result["cumulative_percentage"].iloc[-1] == pytest.approx(100)

    def test_ties_keep_first_sale_order(self):
        items = [make_item("I1"), make_item("I2"), make_item("I3")]
        transactions = [_sale("I2", 100), _sale("I1", 100), _sale("I3", 100)]
        snapshot = build_snapshot(items, transactions)

        result = perform_abc_analysis(snapshot.items, snapshot.transactions)
        assert list(result["item_id"]) == ["I2", "I1", "I3"]

    def test_recommendations_follow_category(self):
        items = [make_item("A1"), make_item("B1"), make_item("C1")]
        transactions = [_sale("A1", 800), _sale("B1", 150), _sale("C1", 50)]
        snapshot = build_snapshot(items, transactions)

        result = perform_abc_analysis(snapshot.items, snapshot.transactions)
        for category, recommendation in zip(result["category"], result["recommendation"]):
            assert recommendation == RECOMMENDATIONS[category]

    def test_catalog_name_preferred(self):
        items = [make_item("I1", name="Catalog Name")]
        transactions = [_sale("I1", 10, item_name="Old Name")]
        snapshot = build_snapshot(items, transactions)

        result = perform_abc_analysis(snapshot.items, snapshot.transactions)
        assert result["item_name"].iloc[0] == "Catalog Name"

    def test_orphaned_sales_keep_transaction_name(self):
        transactions = [_sale("GONE", 10, item_name="Deleted Item")]
        snapshot = build_snapshot([make_item("I1")], transactions)

        result = perform_abc_analysis(snapshot.items, snapshot.transactions)
        assert result["item_name"].iloc[0] == "Deleted Item"

    def test_no_sales_returns_empty_report(self):
        snapshot = build_snapshot([make_item("I1")])
        result = perform_abc_analysis(snapshot.items, snapshot.transactions)

        assert result.empty
        assert "cumulative_percentage" in result.columns

    def test_zero_revenue_returns_empty_report(self):
        snapshot = build_snapshot([make_item("I1")], [_sale("I1", 0)])
        assert perform_abc_analysis(snapshot.items, snapshot.transactions).empty


class TestABCAnalysisWithReturns:
    def test_return_cost_is_netted_out(self):
        items = [make_item("I1"), make_item("I2")]
        transactions = [_sale("I1", 100), _sale("I2", 90)]
        restocks = [make_restock("I1", 3, "damaged-return", total_cost=30)]
        snapshot = build_snapshot(items, transactions, restocks)

        result = perform_abc_analysis_with_returns(
            snapshot.items, snapshot.transactions, snapshot.restocks
        )

        assert list(result["item_id"]) == ["I2", "I1"]
        row = result[result["item_id"] == "I1"].iloc[0]
        assert row["gross_revenue"] == 100
        assert row["return_value"] == 30
        assert row["revenue"] == 70

    def test_items_with_no_net_revenue_are_excluded(self):
        items = [make_item("I1"), make_item("I2")]
        transactions = [_sale("I1", 100), _sale("I2", 50)]
        restocks = [make_restock("I2", 5, "supplier-return", total_cost=50)]
        snapshot = build_snapshot(items, transactions, restocks)

        result = perform_abc_analysis_with_returns(
            snapshot.items, snapshot.transactions, snapshot.restocks
        )

        assert list(result["item_id"]) == ["I1"]
        assert result["cumulative_percentage"].iloc[-1] == pytest.approx(100)

    def test_ordinary_restocks_are_not_returns(self):
        items = [make_item("I1")]
        transactions = [_sale("I1", 100)]
        restocks = [make_restock("I1", 10, "new-stock", total_cost=80)]
        snapshot = build_snapshot(items, transactions, restocks)

        result = perform_abc_analysis_with_returns(
            snapshot.items, snapshot.transactions, snapshot.restocks
        )
        assert result["revenue"].iloc[0] == 100
