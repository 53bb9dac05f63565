"""
Data quality checks for inventory snapshots.

The analytics engine never rejects or corrects business data. Problems such
as unparseable timestamps, references to deleted items or negative stock
are collected here so the caller can surface them next to the reports.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Any
import pandas as pd

SEVERITIES = ("critical", "warning", "info")


@dataclass
class DataQualityIssue:
    """One kind of problem in one column, with the rows it affects."""

    column: str
    issue_type: str  # missing, duplicate, invalid_value, outlier, unparsed_timestamp, orphan_reference
    severity: str  # one of SEVERITIES
    count: int
    percentage: float
    sample_values: list[Any] = field(default_factory=list)
    description: str = ""


@dataclass
class DataQualityReport:
    """Issues found in one source (items, transactions or restocks)."""

    source_name: str
    total_rows: int
    issues: list[DataQualityIssue] = field(default_factory=list)

    def by_severity(self, severity: str) -> list[DataQualityIssue]:
        return [i for i in self.issues if i.severity == severity]

    @property
    def critical_issues(self) -> list[DataQualityIssue]:
        return self.by_severity("critical")

    @property
    def has_critical_issues(self) -> bool:
        return len(self.critical_issues) > 0

    def affected_rows(self) -> dict[str, int]:
        """Rows affected per issue type, summed over columns."""
        counts = Counter()
        for issue in self.issues:
            counts[issue.issue_type] += issue.count
        return dict(counts)

    def summary(self) -> dict:
        """Issue counts per severity plus affected rows per issue type."""
        severities = Counter(i.severity for i in self.issues)
        return {
            "source": self.source_name,
            "total_rows": self.total_rows,
            **{severity: severities[severity] for severity in SEVERITIES},
            "affected_rows": self.affected_rows(),
        }


class DataQualityChecker:
    """
    Configurable checker for one snapshot frame.

    Checks are registered with the check_* builders (or add_check for a
    custom function) and executed in order by run().
    """

    def __init__(self, source_name: str, required_columns: list[str] | None = None):
        self.source_name = source_name
        self._checks: list[Callable[[pd.DataFrame], list[DataQualityIssue]]] = []
        if required_columns:
            self.check_missing_values(required_columns)

    def add_check(
        self, check_fn: Callable[[pd.DataFrame], list[DataQualityIssue]]
    ) -> "DataQualityChecker":
        """Add a custom check function. Returns self for chaining."""
        self._checks.append(check_fn)
        return self

    def check_missing_values(
        self, columns: list[str], severity: str | None = None
    ) -> "DataQualityChecker":
        """Flag missing values in the given columns (severity scales with share)."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            issues = []
            for col in columns:
                if col not in df.columns:
                    continue
                missing = int(df[col].isna().sum())
                if missing > 0:
                    pct = (missing / len(df)) * 100
                    level = severity or (
                        "critical" if pct > 20 else "warning" if pct > 5 else "info"
                    )
                    issues.append(
                        DataQualityIssue(
                            column=col,
                            issue_type="missing",
                            severity=level,
                            count=missing,
                            percentage=pct,
                            description=f"{missing:,} missing values ({pct:.1f}%)",
                        )
                    )
            return issues

        self._checks.append(check)
        return self

    def check_duplicates(
        self, key_columns: list[str], severity: str = "warning"
    ) -> "DataQualityChecker":
        """Add a duplicate check for the given columns."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if any(c not in df.columns for c in key_columns):
                return []
            dupes = int(df.duplicated(subset=key_columns, keep=False).sum())
            if dupes > 0:
                return [
                    DataQualityIssue(
                        column=", ".join(key_columns),
                        issue_type="duplicate",
                        severity=severity,
                        count=dupes,
                        percentage=(dupes / len(df)) * 100,
                        sample_values=df.loc[
                            df.duplicated(subset=key_columns, keep=False), key_columns[0]
                        ]
                        .head(5)
                        .tolist(),
                        description=f"{dupes:,} rows share the same {', '.join(key_columns)}",
                    )
                ]
            return []

        self._checks.append(check)
        return self

    def check_invalid_values(
        self,
        column: str,
        valid_values: set,
        severity: str = "warning",
    ) -> "DataQualityChecker":
        """Add a check for values outside an allowed set."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                return []

            col_values = df[column].dropna()
            invalid_mask = ~col_values.isin(valid_values)
            invalid = int(invalid_mask.sum())
            if invalid > 0:
                return [
                    DataQualityIssue(
                        column=column,
                        issue_type="invalid_value",
                        severity=severity,
                        count=invalid,
                        percentage=(invalid / len(df)) * 100,
                        sample_values=col_values[invalid_mask].head(5).tolist(),
                        description=f"{invalid:,} unexpected values",
                    )
                ]
            return []

        self._checks.append(check)
        return self

    def check_outliers(
        self,
        column: str,
        min_val: float | None = None,
        max_val: float | None = None,
        severity: str = "warning",
    ) -> "DataQualityChecker":
        """Add a check for values outside min/max bounds."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                return []

            values = pd.to_numeric(df[column], errors="coerce")
            outlier_mask = pd.Series(False, index=df.index)

            if min_val is not None:
                outlier_mask |= values < min_val
            if max_val is not None:
                outlier_mask |= values > max_val

            outliers = int(outlier_mask.sum())
            if outliers > 0:
                return [
                    DataQualityIssue(
                        column=column,
                        issue_type="outlier",
                        severity=severity,
                        count=outliers,
                        percentage=(outliers / len(df)) * 100,
                        sample_values=df.loc[outlier_mask, column].head(5).tolist(),
                        description=f"{outliers:,} values outside expected range",
                    )
                ]
            return []

        self._checks.append(check)
        return self

    def check_unparsed(
        self,
        original_col: str,
        parsed_col: str,
        issue_type: str = "unparsed_timestamp",
        severity: str = "warning",
    ) -> "DataQualityChecker":
        """Flag values present in original_col that failed to parse into parsed_col."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if original_col not in df.columns or parsed_col not in df.columns:
                return []

            unparsed = df[original_col].notna() & df[parsed_col].isna()
            count = int(unparsed.sum())
            if count > 0:
                return [
                    DataQualityIssue(
                        column=original_col,
                        issue_type=issue_type,
                        severity=severity,
                        count=count,
                        percentage=(count / len(df)) * 100,
                        sample_values=df.loc[unparsed, original_col].head(5).tolist(),
                        description=f"{count:,} values couldn't be parsed",
                    )
                ]
            return []

        self._checks.append(check)
        return self

    def check_orphan_references(
        self,
        column: str,
        known_ids: set,
        severity: str = "info",
    ) -> "DataQualityChecker":
        """Flag rows referencing ids that are not in the catalog."""

        def check(df: pd.DataFrame) -> list[DataQualityIssue]:
            if column not in df.columns:
                return []

            orphaned = df[column].notna() & ~df[column].isin(known_ids)
            count = int(orphaned.sum())
            if count > 0:
                return [
                    DataQualityIssue(
                        column=column,
                        issue_type="orphan_reference",
                        severity=severity,
                        count=count,
                        percentage=(count / len(df)) * 100,
                        sample_values=df.loc[orphaned, column].drop_duplicates().head(5).tolist(),
                        description=f"{count:,} rows reference items not in the catalog",
                    )
                ]
            return []

        self._checks.append(check)
        return self

    def run(self, df: pd.DataFrame) -> DataQualityReport:
        """Run all checks and return a quality report."""
        all_issues = []
        if len(df) > 0:
            for check_fn in self._checks:
                all_issues.extend(check_fn(df))

        return DataQualityReport(
            source_name=self.source_name, total_rows=len(df), issues=all_issues
        )
