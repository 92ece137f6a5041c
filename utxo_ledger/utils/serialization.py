"""
UTXO Ledger - Serialization Utilities
=======================================
JSON helpers for pool / transaction documents.
"""

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from utxo_ledger.logging_setup import get_logger

logger = get_logger("utils.serialization")


# ============================================================================
# JSON SERIALIZATION
# ============================================================================

def serialize_to_json(obj: Any, indent: Optional[int] = None) -> str:
    """
    Serialize object to JSON string.

    Handles Decimal, bytes, and objects exposing to_dict().

    Examples:
        >>> serialize_to_json({"value": Decimal("1.5"), "key": b"\\x01"})
        '{"value": "1.5", "key": "01"}'
    """
    def default_handler(o):
        if isinstance(o, Decimal):
            return str(o)
        elif isinstance(o, bytes):
            return o.hex()
        elif hasattr(o, 'to_dict'):
            return o.to_dict()
        raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")

    return json.dumps(obj, default=default_handler, indent=indent)


def deserialize_from_json(json_str: str) -> Any:
    """
    Deserialize JSON string to Python object.

    Raises:
        json.JSONDecodeError: If the document is not valid JSON
    """
    try:
        return json.loads(json_str)
    except json.JSONDecodeError as e:
        logger.error(f"Deserialization failed: {e}")
        raise


# ============================================================================
# FILES
# ============================================================================

def load_json_file(path: Path) -> Any:
    """Read and parse a JSON document."""
    return deserialize_from_json(Path(path).read_text(encoding="utf-8"))


def dump_json_file(obj: Any, path: Path) -> None:
    """Write obj as indented JSON."""
    Path(path).write_text(serialize_to_json(obj, indent=2) + "\n", encoding="utf-8")


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "serialize_to_json",
    "deserialize_from_json",
    "load_json_file",
    "dump_json_file",
]
