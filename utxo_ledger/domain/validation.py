"""
UTXO Ledger - Transaction Validation
======================================
Regole di validazione di una transazione contro il pool UTXO corrente.

Security Level: CRITICAL
Last Updated: 2026-10-18
Version: 1.0.0

Validation Rules (in ordine, si ferma alla prima violata):
1. Tutti gli output hanno valore >= 0
2. Ogni input reclama un UTXO presente nel pool
3. Nessun UTXO reclamato da più di un input
4. Ogni input ha firma valida sotto la recipient_key dell'UTXO reclamato
5. Somma input >= somma output (surplus ammesso, non redistribuito)

IMPORTANTE: la validazione è una lettura pura del pool.
"""

from decimal import Decimal
from typing import List, Optional, Set

# Internal imports
from utxo_ledger.domain.models import Transaction, UTXOKey, sum_values
from utxo_ledger.domain.utxo import UTXOPool
from utxo_ledger.domain.codec import TransactionCodec
from utxo_ledger.domain.crypto_core import SignatureVerifier
from utxo_ledger.errors import (
    TransactionError,
    NegativeOutputError,
    UTXONotInPoolError,
    DoubleSpendError,
    InvalidSignatureError,
    InsufficientFundsError,
)


# ============================================================================
# TRANSACTION VALIDATION
# ============================================================================

class TransactionValidator:
    """
    Validatore transazioni.

    Legge il pool passato (per riferimento, non una copia): il TxHandler
    gli passa il proprio pool di lavoro, così ogni validazione vede le
    mutazioni degli epoch precedenti.

    Attributes:
        utxo_pool: Pool UTXO corrente
        verifier: Verifica firme
        codec: Derivazione messaggio per input
    """

    def __init__(
        self,
        utxo_pool: UTXOPool,
        verifier: SignatureVerifier,
        codec: TransactionCodec
    ):
        self.utxo_pool = utxo_pool
        self.verifier = verifier
        self.codec = codec

    def validate_transaction(self, tx: Transaction) -> None:
        """
        Validazione completa transazione.

        Raises:
            NegativeOutputError: Regola 1
            UTXONotInPoolError: Regola 2
            DoubleSpendError: Regola 3
            InvalidSignatureError: Regola 4
            InsufficientFundsError: Regola 5
            ValidationError: Somma non esatta (VALUE_SUM_INEXACT), non è un rifiuto

        Errori dei collaboratori (codec, verifier) si propagano invariati.
        """
        sum_of_outputs = self._validate_outputs(tx)
        self._validate_inputs_exist(tx)
        self._validate_no_double_claim(tx)
        sum_of_inputs = self._validate_signatures(tx)
        self._validate_balance(sum_of_inputs, sum_of_outputs)

    def check_transaction(self, tx: Transaction) -> Optional[TransactionError]:
        """
        Come validate_transaction, ma restituisce la violazione invece di
        sollevarla (None se la transazione è valida).
        """
        try:
            self.validate_transaction(tx)
        except TransactionError as e:
            return e
        return None

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _validate_outputs(self, tx: Transaction) -> Decimal:
        """Regola 1: output non negativi. Restituisce somma output (esatta)."""
        for idx, output in tx.enumerate_outputs():
            if output.is_negative():
                raise NegativeOutputError(
                    f"Negative output value at index {idx}: {output.value}",
                    code="NEGATIVE_OUTPUT_VALUE",
                    details={"index": idx, "value": str(output.value)}
                )

        return sum_values(output.value for output in tx.outputs)

    def _validate_inputs_exist(self, tx: Transaction) -> None:
        """Regola 2: ogni UTXO reclamato è nel pool."""
        for idx, inp in enumerate(tx.inputs):
            utxo_key = inp.utxo_key
            if not self.utxo_pool.contains(utxo_key):
                raise UTXONotInPoolError(
                    f"Input {idx} claims UTXO {utxo_key} not in pool",
                    code="INPUT_UTXO_NOT_FOUND",
                    details={"input_index": idx, "utxo_key": str(utxo_key)}
                )

    def _validate_no_double_claim(self, tx: Transaction) -> None:
        """Regola 3: nessun UTXO reclamato due volte nella stessa tx."""
        # Set transitorio, nuovo per ogni chiamata
        claimed: Set[UTXOKey] = set()

        for idx, inp in enumerate(tx.inputs):
            utxo_key = inp.utxo_key
            if utxo_key in claimed:
                raise DoubleSpendError(
                    f"Input {idx} claims UTXO {utxo_key} already claimed by this transaction",
                    code="DUPLICATE_INPUT_UTXO",
                    details={"input_index": idx, "utxo_key": str(utxo_key)}
                )
            claimed.add(utxo_key)

    def _validate_signatures(self, tx: Transaction) -> Decimal:
        """Regola 4: firme valide. Restituisce somma input (esatta)."""
        claimed_values: List[Decimal] = []

        for idx, inp in enumerate(tx.inputs):
            output = self.utxo_pool.get_txoutput(inp.utxo_key)

            if not inp.is_signed():
                raise InvalidSignatureError(
                    f"Input {idx} not signed",
                    code="INPUT_NOT_SIGNED",
                    details={"input_index": idx}
                )

            message = self.codec.message_for_input(tx, idx)
            if not self.verifier.verify(message, inp.signature, output.recipient_key):
                raise InvalidSignatureError(
                    f"Invalid signature on input {idx}",
                    code="INVALID_SIGNATURE",
                    details={"input_index": idx, "utxo_key": str(inp.utxo_key)}
                )

            claimed_values.append(output.value)

        return sum_values(claimed_values)

    def _validate_balance(self, sum_of_inputs: Decimal, sum_of_outputs: Decimal) -> None:
        """Regola 5: conservazione valore (surplus implicitamente bruciato)."""
        if sum_of_inputs < sum_of_outputs:
            raise InsufficientFundsError(
                f"Inputs ({sum_of_inputs}) less than outputs ({sum_of_outputs})",
                code="INPUTS_LESS_THAN_OUTPUTS",
                details={
                    "sum_of_inputs": str(sum_of_inputs),
                    "sum_of_outputs": str(sum_of_outputs),
                }
            )


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "TransactionValidator",
]
