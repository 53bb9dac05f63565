"""Data quality checker tests."""

import pandas as pd

from inventory_analytics import DataQualityChecker, DataQualityIssue


def _issue_types(report):
    return [i.issue_type for i in report.issues]


class TestDataQualityChecker:
    def test_clean_frame_has_no_issues(self):
        df = pd.DataFrame({"id": ["1", "2"], "quantity": [3, 4]})
        report = (
            DataQualityChecker("Items", required_columns=["id"])
            .check_duplicates(["id"])
            .check_outliers("quantity", min_val=0)
            .run(df)
        )

        assert report.issues == []
        assert report.total_rows == 2

    def test_missing_value_severity_scales(self):
        df = pd.DataFrame({"name": ["a", None, None, "d"]})
        report = DataQualityChecker("Items", required_columns=["name"]).run(df)

        issue = report.issues[0]
        assert issue.issue_type == "missing"
        assert issue.count == 2
        assert issue.percentage == 50
        assert issue.severity == "critical"

    def test_duplicates(self):
        df = pd.DataFrame({"id": ["1", "1", "2"]})
        report = DataQualityChecker("Items").check_duplicates(["id"], severity="critical").run(df)

        assert report.has_critical_issues
        assert report.critical_issues[0].count == 2
        assert report.critical_issues[0].sample_values == ["1", "1"]

    def test_invalid_values_ignore_missing(self):
        df = pd.DataFrame({"type": ["sale", "restock", "refund", None]})
        report = DataQualityChecker("Transactions").check_invalid_values(
            "type", {"sale", "restock"}
        ).run(df)

        assert _issue_types(report) == ["invalid_value"]
        assert report.issues[0].sample_values == ["refund"]

    def test_outliers(self):
        df = pd.DataFrame({"quantity": [5, -2, 1000]})
        report = (
            DataQualityChecker("Items").check_outliers("quantity", min_val=0, max_val=500).run(df)
        )
        assert report.issues[0].count == 2

    def test_unparsed_timestamps(self):
        df = pd.DataFrame(
            {
                "timestamp_raw": ["2024-01-01", "not a date", None],
                "timestamp": pd.to_datetime(["2024-01-01", None, None]),
            }
        )
        report = DataQualityChecker("Restocks").check_unparsed("timestamp_raw", "timestamp").run(df)

        issue = report.issues[0]
        assert issue.issue_type == "unparsed_timestamp"
        assert issue.count == 1
        assert issue.sample_values == ["not a date"]

    def test_orphan_references(self):
        df = pd.DataFrame({"item_id": ["A", "B", "GONE", "GONE"]})
        report = (
            DataQualityChecker("Transactions")
            .check_orphan_references("item_id", {"A", "B"})
            .run(df)
        )

        issue = report.issues[0]
        assert issue.issue_type == "orphan_reference"
        assert issue.severity == "info"
        assert issue.count == 2
        assert issue.sample_values == ["GONE"]

    def test_missing_columns_are_skipped(self):
        df = pd.DataFrame({"other": [1]})
        report = (
            DataQualityChecker("Items", required_columns=["id"])
            .check_duplicates(["id"])
            .check_outliers("quantity", min_val=0)
            .check_orphan_references("item_id", set())
            .run(df)
        )
        assert report.issues == []

    def test_empty_frame_skips_checks(self):
        report = DataQualityChecker("Items", required_columns=["id"]).run(
            pd.DataFrame(columns=["id"])
        )
        assert report.total_rows == 0
        assert report.issues == []

    def test_custom_check(self):
        def no_free_items(df):
            free = int((df["selling_price"] == 0).sum())
            return [DataQualityIssue("selling_price", "free_item", "warning", free, 0.0)]

        df = pd.DataFrame({"selling_price": [0, 10]})
        report = DataQualityChecker("Items").add_check(no_free_items).run(df)

        assert _issue_types(report) == ["free_item"]
        assert len(report.by_severity("warning")) == 1

    def test_summary(self):
        df = pd.DataFrame({"id": ["1", "1"], "quantity": [-1, 2]})
        report = (
            DataQualityChecker("Items")
            .check_duplicates(["id"], severity="critical")
            .check_outliers("quantity", min_val=0)
            .check_orphan_references("id", {"1"})
            .run(df)
        )

        assert report.summary() == {
            "source": "Items",
            "total_rows": 2,
            "critical": 1,
            "warning": 1,
            "info": 0,
            "affected_rows": {"duplicate": 2, "outlier": 1},
        }

    def test_affected_rows_sum_across_columns(self):
        df = pd.DataFrame({"quantity": [-1, -2, 3], "cost_price": [-1, 1, 1]})
        report = (
            DataQualityChecker("Items")
            .check_outliers("quantity", min_val=0)
            .check_outliers("cost_price", min_val=0)
            .run(df)
        )
        assert report.affected_rows() == {"outlier": 3}
