"""
UTXO Ledger - UTXO Pool
=========================
Pool degli output non spesi (Unspent Transaction Outputs).

Security Level: CRITICAL
Last Updated: 2026-10-18
Version: 1.0.0

UTXO Pool:
- Mapping UTXOKey -> TxOutput
- Copia indipendente (copy constructor / copy())
- Nessun ordinamento semantico: le viste elencate sono ordinate per
  (txid, index) solo per determinismo

Performance:
- O(1) lookup per UTXO key
- O(1) add/remove
- O(n) copy

Concorrenza:
    Nessun lock. Un pool appartiene a un solo TxHandler alla volta;
    chi lavora in parallelo usa copie indipendenti.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Dict, List, Tuple, Optional, Iterator, Any

# Internal imports
from utxo_ledger.domain.models import UTXOKey, TxOutput, sum_values
from utxo_ledger.errors import UTXONotFoundError
from utxo_ledger.logging_setup import get_logger


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("utxo")


# ============================================================================
# UTXO POOL
# ============================================================================

class UTXOPool:
    """
    Pool di UTXO (Unspent Transaction Outputs).

    Invariante: ogni chiave presente è un output non ancora consumato da
    alcuna transazione committata.

    Attributes:
        _utxos (dict): Mapping UTXOKey -> TxOutput

    Examples:
        >>> pool = UTXOPool()
        >>> key = UTXOKey("ab" * 32, 0)
        >>> pool.add_utxo(key, TxOutput(10, b"pub"))
        >>> pool.contains(key)
        True
        >>> copy = UTXOPool(pool)
        >>> copy.remove_utxo(key).value
        Decimal('10')
        >>> pool.contains(key)
        True
    """

    def __init__(self, other: Optional[UTXOPool] = None):
        """
        Inizializza pool vuoto, o copia indipendente di `other`.

        TxOutput è immutabile: copiare il mapping equivale a una deep copy.
        """
        self._utxos: Dict[UTXOKey, TxOutput] = dict(other._utxos) if other is not None else {}

        logger.debug(
            "UTXOPool initialized",
            extra_data={"total_utxos": len(self._utxos)}
        )

    def add_utxo(self, utxo_key: UTXOKey, output: TxOutput) -> None:
        """
        Aggiungi (o sovrascrivi) UTXO.

        Args:
            utxo_key: Chiave UTXO (txid + index)
            output: Output referenziato
        """
        if utxo_key in self._utxos:
            logger.debug(
                "UTXO overwritten",
                extra_data={"utxo_key": str(utxo_key)}
            )

        self._utxos[utxo_key] = output

    def remove_utxo(self, utxo_key: UTXOKey) -> TxOutput:
        """
        Rimuovi UTXO dal pool (quando speso).

        Returns:
            TxOutput: Output rimosso

        Raises:
            UTXONotFoundError: Se UTXO non presente
        """
        try:
            return self._utxos.pop(utxo_key)
        except KeyError:
            raise UTXONotFoundError(
                f"UTXO {utxo_key} not found in pool",
                code="UTXO_NOT_FOUND",
                details={"utxo_key": str(utxo_key)}
            ) from None

    def get_txoutput(self, utxo_key: UTXOKey) -> TxOutput:
        """
        Ottieni output per chiave.

        Raises:
            UTXONotFoundError: Se UTXO non presente (chiamare contains() prima)
        """
        try:
            return self._utxos[utxo_key]
        except KeyError:
            raise UTXONotFoundError(
                f"UTXO {utxo_key} not found in pool",
                code="UTXO_NOT_FOUND",
                details={"utxo_key": str(utxo_key)}
            ) from None

    def contains(self, utxo_key: UTXOKey) -> bool:
        """Check se UTXO presente nel pool"""
        return utxo_key in self._utxos

    def copy(self) -> UTXOPool:
        """Copia indipendente del pool"""
        return UTXOPool(self)

    def get_all_utxo(self) -> List[UTXOKey]:
        """Tutte le chiavi, ordinate per (txid, index)"""
        return sorted(self._utxos)

    def items(self) -> List[Tuple[UTXOKey, TxOutput]]:
        """Coppie (key, output), ordinate per key"""
        return [(key, self._utxos[key]) for key in sorted(self._utxos)]

    def total_value(self) -> Decimal:
        """Somma valori di tutti gli UTXO"""
        return sum_values(output.value for output in self._utxos.values())

    def utxo_count(self) -> int:
        return len(self._utxos)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializza pool (lista ordinata di entry).

        Format:
            {"utxos": [{"txid": ..., "output_index": ..., "value": ..., "recipient_key": ...}]}
        """
        return {
            "utxos": [
                {**key.to_dict(), **output.to_dict()}
                for key, output in self.items()
            ]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UTXOPool:
        """Deserializza pool."""
        pool = cls()
        for entry in data.get("utxos", []):
            pool.add_utxo(UTXOKey.from_dict(entry), TxOutput.from_dict(entry))
        return pool

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------

    def __contains__(self, utxo_key: object) -> bool:
        return utxo_key in self._utxos

    def __len__(self) -> int:
        """Numero UTXO nel pool"""
        return len(self._utxos)

    def __iter__(self) -> Iterator[UTXOKey]:
        return iter(self.get_all_utxo())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UTXOPool):
            return NotImplemented
        return self._utxos == other._utxos

    __hash__ = None

    def __repr__(self) -> str:
        return f"UTXOPool(utxos={len(self._utxos)}, total_value={self.total_value()})"


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "UTXOPool",
]
