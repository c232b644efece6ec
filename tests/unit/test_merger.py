"""Unit tests for SchemaHarmonizer and DatasetMerger."""

import pytest

from models.dataset import Dataset
from stages.harmonizer import SchemaHarmonizer
from stages.merger import DatasetMerger


@pytest.fixture
def harmonizer():
    return SchemaHarmonizer()


@pytest.fixture
def merger(harmonizer):
    return DatasetMerger(harmonizer)


@pytest.fixture
def sales_files():
    return [
        Dataset(
            headers=["Item", "Sales_Date", "Units_Sold"],
            rows=[["Widget", 44197, 5]],
            metadata={"row_count": 1},
        ),
        Dataset(
            headers=["Product", "Date", "Quantity"],
            rows=[["Gadget", "2021-02-01", 3]],
            metadata={"row_count": 1},
        ),
    ]


class TestSchemaHarmonizer:
    """Tests for header harmonization."""

    def test_renames_synonyms(self, harmonizer):
        result = harmonizer.harmonize_one(
            Dataset(headers=["Item", "Revenue", "Region"], rows=[["A", 10, "North"]])
        )
        assert result.headers == ["Product_Name", "Revenue_Amount", "Region"]
        assert result.rows == [["A", 10, "North"]]
        assert result.metadata["harmonized"] is True
        assert result.metadata["column_count"] == 3

    def test_first_synonym_wins_on_collision(self, harmonizer):
        result = harmonizer.harmonize_one(
            Dataset(headers=["Item", "Product"], rows=[["first", "second"]])
        )
        assert result.headers == ["Product_Name"]
        assert result.rows == [["first"]]

    def test_short_rows_padded(self, harmonizer):
        result = harmonizer.harmonize_one(Dataset(headers=["Item", "Qty"], rows=[["A"]]))
        assert result.rows == [["A", None]]

    def test_custom_synonyms(self):
        harmonizer = SchemaHarmonizer({"sku": "SKU"})
        result = harmonizer.harmonize_one(Dataset(headers=["sku", "Item"], rows=[]))
        assert result.headers == ["SKU", "Item"]

    def test_idempotent(self, harmonizer, sales_files):
        once = harmonizer.harmonize(sales_files)
        twice = harmonizer.harmonize(once)
        assert [d.headers for d in twice] == [d.headers for d in once]
        assert [d.rows for d in twice] == [d.rows for d in once]

    def test_input_not_mutated(self, harmonizer):
        dataset = Dataset(headers=["Item"], rows=[["A"]])
        harmonizer.harmonize([dataset])
        assert dataset.headers == ["Item"]


class TestDatasetMerger:
    """Tests for merging datasets."""

    def test_two_file_sales_merge(self, merger, sales_files):
        result = merger.run(sales_files)
        merged = result.output

        assert merged.headers == ["Product_Name", "Transaction_Date", "Units_Count"]
        assert merged.rows == [["Widget", 44197, 5], ["Gadget", "2021-02-01", 3]]
        assert merged.metadata["row_count"] == 2
        assert merged.merge_issues == []
        assert result.records_processed == 2
        assert result.errors_found == []

    def test_union_headers_keeps_first_seen_order(self, merger):
        headers = merger.union_headers(
            [Dataset(headers=["A", "B"]), Dataset(headers=["C", "A"])]
        )
        assert headers == ["A", "B", "C"]

    def test_missing_columns_filled_with_none(self, merger):
        merged = merger.merge(
            [
                Dataset(headers=["A", "B"], rows=[[1, 2]]),
                Dataset(headers=["A", "C"], rows=[[3, 4]]),
            ]
        )
        assert merged.headers == ["A", "B", "C"]
        assert merged.rows == [[1, 2, None], [3, None, 4]]

    def test_schema_inconsistency_reported(self, merger):
        merged = merger.merge(
            [
                Dataset(headers=["A", "B"], rows=[[1, 2]]),
                Dataset(headers=["A", "C"], rows=[[3, 4]]),
            ]
        )
        assert (
            "Schema inconsistency detected after harmonization between file 1 and file 2."
            in merged.merge_issues
        )

    def test_identical_rows_keep_own_provenance(self, merger):
        merged = merger.merge(
            [
                Dataset(headers=["A", "B"], rows=[[1, 2]]),
                Dataset(headers=["B", "A"], rows=[[2, 1], [2, 1]]),
            ]
        )
        assert merged.rows == [[1, 2], [1, 2], [1, 2]]

    def test_declared_row_count_mismatch_reported(self, merger):
        merged = merger.merge(
            [Dataset(headers=["A"], rows=[[1]], metadata={"row_count": 5})]
        )
        assert len(merged.merge_issues) == 1
        assert "does not match sum of input row counts (5)" in merged.merge_issues[0]

    def test_metadata(self, merger, sales_files):
        merged = merger.merge(sales_files)
        assert merged.metadata["merged"] is True
        assert merged.metadata["file_type"] == "merged"
        assert merged.metadata["total_merged_rows"] == 2
        assert merged.metadata["column_count"] == 3

    def test_empty_input(self, merger):
        merged = merger.merge([])
        assert merged.headers == []
        assert merged.rows == []
        assert merged.metadata["has_headers"] is False
