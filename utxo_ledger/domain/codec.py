"""
UTXO Ledger - Transaction Codec
=================================
Serializzazione canonica di una transazione: TXID e messaggio da firmare.

Security Level: CRITICAL
Last Updated: 2026-10-18
Version: 1.0.0

Il ledger non conosce il formato byte delle transazioni: usa un
TransactionCodec iniettabile. CanonicalJSONCodec è l'implementazione
di default (JSON canonico, chiavi ordinate, separatori compatti).

Messaggio per input i:
- riferimento UTXO dell'input i
- indice i
- tutti gli output e il nonce
- NESSUNA firma (né la propria né quelle degli altri input)
"""

import json
from decimal import Decimal
from typing import Any, Dict, Protocol
from abc import abstractmethod

from utxo_ledger.domain.crypto_core import compute_sha256


# ============================================================================
# CODEC PROTOCOL
# ============================================================================

class TransactionCodec(Protocol):
    """Protocol per identità e messaggi firmabili di una transazione."""

    @abstractmethod
    def compute_txid(self, tx) -> str:
        """TXID stabile derivato dal contenuto (hex minuscolo, byte interi)."""
        pass

    @abstractmethod
    def message_for_input(self, tx, index: int) -> bytes:
        """Bytes firmati dall'input `index`."""
        pass


# ============================================================================
# CANONICAL JSON CODEC
# ============================================================================

def canonical_value(value: Decimal) -> str:
    """
    Rappresentazione canonica di un valore.

    Valori numericamente uguali producono la stessa stringa.

    Examples:
        >>> canonical_value(Decimal("10.00"))
        '10'
        >>> canonical_value(Decimal("1E+2"))
        '100'
    """
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


class CanonicalJSONCodec:
    """
    Codec JSON canonico (sort_keys, separators compatti, UTF-8).

    Examples:
        >>> codec = CanonicalJSONCodec()
        >>> txid = codec.compute_txid(tx)
        >>> msg = codec.message_for_input(tx, 0)
    """

    @staticmethod
    def _encode(data: Dict[str, Any]) -> bytes:
        return json.dumps(data, sort_keys=True, separators=(',', ':')).encode('utf-8')

    @staticmethod
    def _outputs(tx) -> list:
        return [
            {
                "value": canonical_value(out.value),
                "recipient_key": out.recipient_key.hex(),
            }
            for out in tx.outputs
        ]

    def compute_txid(self, tx) -> str:
        """
        SHA-256 hex della serializzazione completa (firme incluse).

        Due transazioni che differiscono solo per le firme hanno TXID diversi.
        """
        data = {
            "inputs": [
                {
                    "prev_txid": inp.prev_txid,
                    "output_index": inp.output_index,
                    "signature": inp.signature.hex() if inp.signature is not None else None,
                }
                for inp in tx.inputs
            ],
            "outputs": self._outputs(tx),
            "nonce": tx.nonce,
        }

        return compute_sha256(self._encode(data)).hex()

    def message_for_input(self, tx, index: int) -> bytes:
        """
        Messaggio firmato dall'input `index`.

        Raises:
            IndexError: Se index fuori range
        """
        if not 0 <= index < len(tx.inputs):
            raise IndexError(f"input index {index} out of range ({len(tx.inputs)} inputs)")

        inp = tx.inputs[index]
        data = {
            "input_index": index,
            "input": {
                "prev_txid": inp.prev_txid,
                "output_index": inp.output_index,
            },
            "outputs": self._outputs(tx),
            "nonce": tx.nonce,
        }

        return self._encode(data)


# Istanza condivisa (stateless)
DEFAULT_CODEC = CanonicalJSONCodec()


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "TransactionCodec",
    "CanonicalJSONCodec",
    "canonical_value",
    "DEFAULT_CODEC",
]
