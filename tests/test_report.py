"""Tests for JSON reports."""

import pytest

from conftest import build_database, build_declared_model, table_of
from db_schema_compare.compare.comparer import compare_models_to_database
from db_schema_compare.compare.options import CompareConfig
from db_schema_compare.report import format_errors, load_json_model, load_report, write_report
from db_schema_compare.schema.declared import DeclaredModel


@pytest.fixture
def result():
    database = build_database()
    table_of(database).columns[1].store_type = "datetime"
    return compare_models_to_database(
        [build_declared_model()], database, CompareConfig(dialect="sqlserver")
    )


class TestReport:
    def test_round_trip(self, tmp_path, result) -> None:
        path = write_report(result, tmp_path / "report.json")

        restored = load_report(path)

        assert restored == result
        assert restored.errors() == result.errors()

    def test_states_written_as_names(self, tmp_path, result) -> None:
        text = write_report(result, tmp_path / "report.json").read_text()

        assert '"state": "Different"' in text
        assert '"attribute": "ColumnType"' in text

    def test_missing_report(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError, match="Report not found"):
            load_report(tmp_path / "missing.json")

    def test_invalid_report(self, tmp_path) -> None:
        path = tmp_path / "report.json"
        path.write_text('{"logs": "nope"}')
        with pytest.raises(ValueError, match="Invalid report"):
            load_report(path)

    def test_format_errors(self, result) -> None:
        assert format_errors(result.logs) == (
            "DIFFERENT: MyEntity->Property 'MyDateTime', column type. "
            "Expected = datetime2, found = datetime"
        )

    def test_format_no_errors(self) -> None:
        assert format_errors([]) == "No differences"


class TestJsonModels:
    def test_declared_model_from_json(self, tmp_path) -> None:
        path = tmp_path / "model.json"
        path.write_text(build_declared_model().model_dump_json(by_alias=True))

        assert load_json_model(path, DeclaredModel) == build_declared_model()

    def test_invalid_json_model(self, tmp_path) -> None:
        path = tmp_path / "model.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Invalid DeclaredModel"):
            load_json_model(path, DeclaredModel)
