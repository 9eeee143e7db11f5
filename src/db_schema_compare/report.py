"""JSON reports of comparison results.

Usage:
    from db_schema_compare.report import write_report, load_report

    write_report(result, "schema-report.json")
    result = load_report("schema-report.json")
"""

import json
from pathlib import Path

from db_schema_compare.compare.comparer import CompareResult
from db_schema_compare.compare.log import CompareLog, list_all_errors


def write_report(result: CompareResult, path: str | Path) -> Path:
    """Write *result* as indented JSON and return the path written.

    Enum members are written as their CamelCase values (``"NotInDatabase"``,
    ``"ColumnType"``).
    """
    report_path = Path(path)
    report_path.write_text(result.model_dump_json(indent=2))
    return report_path


def load_report(path: str | Path) -> CompareResult:
    """Read a report written by ``write_report``.

    Raises:
        FileNotFoundError: If the report does not exist.
        ValueError: If the file is not a valid report.
    """
    report_path = Path(path)
    if not report_path.exists():
        raise FileNotFoundError(f"Report not found: {report_path}")
    try:
        return CompareResult.model_validate_json(report_path.read_text())
    except ValueError as e:
        raise ValueError(f"Invalid report {report_path}: {e}") from e


def format_errors(logs: list[CompareLog]) -> str:
    """All errors, one per line; ``No differences`` when there are none."""
    errors = list(list_all_errors(logs))
    if not errors:
        return "No differences"
    return "\n".join(errors)


def load_json_model(path: str | Path, model_type: type):
    """Validate a JSON file into *model_type* (a pydantic model class).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the JSON does not match the model.
    """
    model_path = Path(path)
    if not model_path.exists():
        raise FileNotFoundError(f"Model file not found: {model_path}")
    try:
        return model_type.model_validate(json.loads(model_path.read_text()))
    except ValueError as e:
        raise ValueError(f"Invalid {model_type.__name__} in {model_path}: {e}") from e
