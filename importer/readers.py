"""
Read import items from CSV or JSON files
"""

import json
import pandas as pd
from typing import List, Dict, Any
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


def _normalize_key(key: Any) -> str:
    """Normalize column names (strip whitespace, lowercase)"""
    return str(key).strip().lower().replace(' ', '_')


def _drop_empty_cells(record: Dict[str, Any]) -> Dict[str, Any]:
    """Empty CSV cells leave the field unset"""
    return {
        key: value for key, value in record.items()
        if not (isinstance(value, float) and pd.isna(value))
    }


def _read_csv(path: Path) -> List[Dict[str, Any]]:
    # Only empty cells are missing; literal "NA" or "null" are values
    df = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
    df.columns = [_normalize_key(column) for column in df.columns]
    return [_drop_empty_cells(record) for record in df.to_dict(orient="records")]


def _read_json(path: Path) -> List[Dict[str, Any]]:
    # Loaded without a DataFrame so explicit nulls stay distinct from absent keys
    with path.open(encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError(f"{path.name} must hold a JSON array of objects")

    return [{_normalize_key(key): value for key, value in item.items()} for item in data]


def read_items(file_path: str) -> List[Dict[str, Any]]:
    """
    Read an item file into a list of records, in file order.

    CSV cells are read as strings and converted to column types later; an
    empty cell leaves its field unset. JSON files must hold an array of
    objects, and an explicit ``null`` is kept so a patch can clear a field.

    Raises:
        FileNotFoundError: The file does not exist
        ValueError: The file extension is not .csv or .json, or the JSON is not an array of objects
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Item file not found: {path}")

    suffix = path.suffix.lower()
    logger.info(f"Reading import items from {path}")

    if suffix == ".csv":
        records = _read_csv(path)
    elif suffix == ".json":
        records = _read_json(path)
    else:
        raise ValueError(f"Unsupported item file type: {suffix or path.name}")

    logger.info(f"Read {len(records)} items from {path.name}")
    return records
