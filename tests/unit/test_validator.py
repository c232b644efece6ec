"""Unit tests for DatasetValidator."""

import pytest

from models.dataset import Dataset
from stages.validator import DatasetValidator


@pytest.fixture
def validator():
    return DatasetValidator()


def issues_for(validator, headers, row):
    result = validator.validate(Dataset(headers=headers, rows=[row]))
    if not result.validation_issues:
        return []
    return result.validation_issues[0].issues


class TestRowRules:
    """Tests for individual rules."""

    def test_valid_row(self, validator):
        result = validator.validate(
            Dataset(headers=["Region", "Manager", "Age"], rows=[["North", "Kim", 30]])
        )
        assert result.rows == [["North", "Kim", 30]]
        assert result.valid_records_count == 1
        assert result.invalid_records_count == 0

    @pytest.mark.parametrize("value", [None, "", "N/A", "n/a"])
    def test_missing_value(self, validator, value):
        assert issues_for(validator, ["Notes"], [value]) == ["Missing value in column 'Notes'"]

    def test_order_after_delivery(self, validator):
        issues = issues_for(
            validator, ["Order_Date", "Delivery_Date"], ["2021-03-01", "2021-02-01"]
        )
        assert issues == [
            "Business rule violation: Order_Date (2021-03-01) is not before "
            "Delivery_Date (2021-02-01)"
        ]

    def test_same_day_delivery_violates(self, validator):
        issues = issues_for(
            validator, ["Order_Date", "Delivery_Date"], ["2021-03-01", "2021-03-01"]
        )
        assert len(issues) == 1

    def test_unparseable_dates_skip_order_rule(self, validator):
        issues = issues_for(
            validator, ["Order_Date", "Delivery_Date"], ["soon", "2021-03-01"]
        )
        assert issues == []

    def test_salary_cap(self, validator):
        assert issues_for(validator, ["Salary"], [1_000_001]) == [
            "Range violation: Salary (1000001) exceeds $1M."
        ]
        assert issues_for(validator, ["Salary"], [1_000_000]) == []

    def test_non_numeric_salary_skipped(self, validator):
        assert issues_for(validator, ["Salary"], ["lots"]) == []

    @pytest.mark.parametrize("age", [17, 101, "12"])
    def test_age_out_of_range(self, validator, age):
        assert issues_for(validator, ["Age"], [age]) == [
            f"Range violation: Age ({age}) is out of expected range (18-100)."
        ]

    @pytest.mark.parametrize("age", [18, 100, "45"])
    def test_age_in_range(self, validator, age):
        assert issues_for(validator, ["Age"], [age]) == []

    def test_cancelled_with_amount(self, validator):
        assert issues_for(validator, ["Status", "Amount"], ["CANCELLED", 25]) == [
            "Cross-column violation: Status is 'Cancelled' but Amount is not 0 (25)."
        ]

    def test_cancelled_with_zero_amount(self, validator):
        assert issues_for(validator, ["Status", "Amount"], ["cancelled", "0"]) == []

    def test_invalid_region(self, validator):
        assert issues_for(validator, ["Region", "Manager"], ["Mars", "Kim"]) == [
            "Reference integrity: Invalid Region 'Mars'."
        ]

    def test_region_match_is_case_sensitive(self, validator):
        issues = issues_for(validator, ["Region", "Manager"], ["north", "Kim"])
        assert issues == ["Reference integrity: Invalid Region 'north'."]

    def test_region_without_manager(self, validator):
        issues = issues_for(validator, ["Region", "Manager"], ["South", "N/A"])
        assert issues == [
            "Missing value in column 'Manager'",
            "Custom constraint: Region 'South' has no manager assigned.",
        ]

    def test_all_rules_contribute(self, validator):
        issues = issues_for(
            validator,
            ["Age", "Region", "Manager"],
            [150, "Atlantis", None],
        )
        assert len(issues) == 4


class TestPartition:
    """Tests for valid/invalid partitioning."""

    def test_partition_is_complete(self, validator):
        rows = [
            ["C1", "North", 30],
            ["C2", "Nowhere", 30],
            ["C1", "South", 30],
            ["C3", "East", 10],
            ["C4", "West", 50],
        ]
        result = validator.validate(
            Dataset(headers=["Customer_ID", "Region", "Age"], rows=rows)
        )

        invalid_rows = {issue.row for issue in result.validation_issues}
        assert invalid_rows == {2, 3, 4}
        assert result.valid_records_count + result.invalid_records_count == len(rows)
        assert result.rows == [rows[0], rows[4]]

    def test_duplicate_customer_id_joins_row_issues(self, validator):
        result = validator.validate(
            Dataset(
                headers=["Customer_ID", "Age"],
                rows=[["C1", 30], ["C1", 10]],
            )
        )
        assert result.invalid_records_count == 1
        assert result.validation_issues[0].row == 2
        assert result.validation_issues[0].issues == [
            "Range violation: Age (10) is out of expected range (18-100).",
            "Duplicate Customer_ID found: 'C1'",
        ]

    def test_issue_carries_row_data(self, validator):
        result = validator.validate(Dataset(headers=["Region"], rows=[["Mars"]]))
        assert result.validation_issues[0].data == {"Region": "Mars"}

    def test_metadata_and_messages(self, validator):
        result = validator.validate(
            Dataset(headers=["Region"], rows=[["North"], ["Mars"]])
        )
        assert result.metadata["validated"] is True
        assert result.metadata["valid_row_count"] == 1
        assert result.metadata["invalid_row_count"] == 1
        assert result.message == "Validation completed for 2 records."
        assert result.summary == "1 issues found. 1 valid records."

    def test_run_reports_total_rows(self, validator):
        result = validator.run(Dataset(headers=["Region"], rows=[["North"], ["Mars"]]))
        assert result.records_processed == 2
        assert result.errors_found == ["Reference integrity: Invalid Region 'Mars'."]

    def test_custom_regions(self):
        validator = DatasetValidator(valid_regions=frozenset({"EMEA"}))
        result = validator.validate(Dataset(headers=["Region"], rows=[["EMEA"], ["North"]]))
        assert result.valid_records_count == 1
