import csv
import io
from dataclasses import field, fields
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple, Type

from core.errors import ParseError
from core.report import compute_identity


def load_sample_export(path: Path) -> bytes:
    if not path.exists():
        return b""
    return path.read_bytes()


def csv_field(name: str, default: Any = "", optional: bool = False):
    """Declare a raw record attribute read from the export column 'name'."""
    metadata = {"csv": name}
    if optional:
        metadata["optional"] = True
    return field(default=default, metadata=metadata)


def decode_csv(data: bytes, provider: str) -> List[List[str]]:
    """Split a raw export into rows of string cells."""
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError(f"export is not valid UTF-8: {exc}", provider=provider) from exc
    try:
        return list(csv.reader(io.StringIO(text, newline=""), strict=True))
    except csv.Error as exc:
        raise ParseError(f"malformed CSV: {exc}", provider=provider) from exc


def csv_columns(record_cls: Type) -> List[Tuple[str, str]]:
    """(attribute, header) pairs of a raw record dataclass, in declaration order."""
    return [(item.name, item.metadata["csv"]) for item in fields(record_cls) if "csv" in item.metadata]


def split_header(rows: Sequence[List[str]], first_column: str, provider: str) -> Tuple[List[str], List[List[str]]]:
    """
    Locate the header row by its first cell and return it with the rows after it.

    Exports may carry a free-text preamble before the header; anything above
    it is discarded.
    """
    for index, row in enumerate(rows):
        if row and row[0].strip() == first_column:
            return [cell.strip() for cell in row], list(rows[index + 1 :])
    raise ParseError(f"header row starting with '{first_column}' not found", provider=provider)


def map_rows(
    header: Sequence[str],
    rows: Sequence[List[str]],
    record_cls: Type,
    provider: str,
) -> List[Dict[str, str]]:
    positions = {name: index for index, name in enumerate(header)}
    optional = {item.metadata["csv"] for item in fields(record_cls) if item.metadata.get("optional")}
    columns = csv_columns(record_cls)
    missing = [column for _, column in columns if column not in positions and column not in optional]
    if missing:
        raise ParseError(f"export is missing columns: {', '.join(missing)}", provider=provider)

    mapped: List[Dict[str, str]] = []
    for row in rows:
        values: Dict[str, str] = {}
        for attribute, column in columns:
            index = positions.get(column)
            values[attribute] = row[index].strip() if index is not None and index < len(row) else ""
        mapped.append(values)
    return mapped


def identity_fields(record: Any) -> List[Tuple[str, Any]]:
    return [(item.name, getattr(record, item.name)) for item in fields(record) if item.metadata.get("identity", True)]


def record_hash(record: Any, region: str) -> str:
    return compute_identity(identity_fields(record), region)
