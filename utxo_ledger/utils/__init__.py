"""
UTXO Ledger - Utilities Package
=================================
Common utility functions and helpers.
"""

from utxo_ledger.utils.serialization import (
    serialize_to_json,
    deserialize_from_json,
    load_json_file,
    dump_json_file,
)

__all__ = [
    "serialize_to_json",
    "deserialize_from_json",
    "load_json_file",
    "dump_json_file",
]
