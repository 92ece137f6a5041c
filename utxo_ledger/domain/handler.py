"""
UTXO Ledger - Transaction Handler
===================================
Validazione transazioni e processamento epoch contro il pool UTXO.

Security Level: CRITICAL
Last Updated: 2026-10-18
Version: 1.0.0

Epoch processing:
- Candidati processati nell'ordine dato (nessun riordinamento)
- Ogni candidato validato contro il pool corrente
- Se valido: accettato e applicato subito (input rimossi, output aggiunti)
- Se invalido: scartato, nessun effetto

Politica greedy a singolo passaggio: su candidati in conflitto vince il
primo valido nell'ordine del chiamante.
"""

import logging
from typing import List, Optional, Sequence

# Internal imports
from utxo_ledger.domain.models import Transaction, UTXOKey
from utxo_ledger.domain.utxo import UTXOPool
from utxo_ledger.domain.codec import TransactionCodec, CanonicalJSONCodec
from utxo_ledger.domain.crypto_core import SignatureVerifier, get_crypto_provider
from utxo_ledger.domain.validation import TransactionValidator
from utxo_ledger.config import LedgerSettings, get_settings
from utxo_ledger.errors import TransactionError
from utxo_ledger.logging_setup import get_logger, get_audit_logger, PerformanceLogger, AuditLogger


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("handler")


# ============================================================================
# TRANSACTION HANDLER
# ============================================================================

class TxHandler:
    """
    Ledger pubblico il cui stato è un UTXOPool privato.

    Attributes:
        config: Configurazione
        verifier: Verifica firme (default: provider di config.crypto_algorithm)
        codec: TXID e messaggi firmabili (default: CanonicalJSONCodec)
        audit_logger: Audit trail opzionale

    Examples:
        >>> handler = TxHandler(pool)
        >>> handler.is_valid_tx(tx)
        True
        >>> accepted = handler.handle_txs([tx_a, tx_b])
    """

    def __init__(
        self,
        utxo_pool: UTXOPool,
        config: Optional[LedgerSettings] = None,
        verifier: Optional[SignatureVerifier] = None,
        codec: Optional[TransactionCodec] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Crea handler con una copia indipendente di `utxo_pool`.

        Mutazioni successive del pool del chiamante non toccano lo stato
        dell'handler, e viceversa.
        """
        self.config = config or get_settings()
        self.verifier = verifier or get_crypto_provider(self.config.crypto_algorithm)
        self.codec = codec or CanonicalJSONCodec()
        self.audit_logger = audit_logger

        if self.audit_logger is None and self.config.audit_enabled:
            self.audit_logger = get_audit_logger(self.config.log_dir)

        self._utxo_pool = UTXOPool(utxo_pool)
        self._validator = TransactionValidator(self._utxo_pool, self.verifier, self.codec)

        logger.debug(
            "TxHandler initialized",
            extra_data={
                "utxo_count": len(self._utxo_pool),
                "verifier": type(self.verifier).__name__,
            }
        )

    # ========================================================================
    # VALIDATION
    # ========================================================================

    def validate_transaction(self, tx: Transaction) -> None:
        """
        Valida tx contro il pool corrente (lettura pura).

        Raises:
            TransactionError: Prima regola violata
        """
        self._validator.validate_transaction(tx)

    def is_valid_tx(self, tx: Transaction) -> bool:
        """
        True se:
        (1) tutti gli output hanno valore non negativo,
        (2) tutti gli UTXO reclamati sono nel pool corrente,
        (3) nessun UTXO è reclamato più volte,
        (4) le firme di ogni input sono valide,
        (5) somma input >= somma output;
        False altrimenti.

        Nessuna mutazione del pool. Errori dei collaboratori si propagano.
        """
        try:
            self._validator.validate_transaction(tx)
        except TransactionError as e:
            if logger.is_enabled_for(logging.DEBUG):
                logger.debug(
                    "Transaction rejected",
                    extra_data={
                        "txid": self.codec.compute_txid(tx)[:16] + "...",
                        "reason": e.code,
                        **e.details,
                    }
                )
            return False

        return True

    # ========================================================================
    # EPOCH PROCESSING
    # ========================================================================

    def handle_txs(self, possible_txs: Sequence[Transaction]) -> List[Transaction]:
        """
        Processa un epoch di transazioni candidate.

        Ogni candidato, nell'ordine dato, è validato contro il pool corrente
        (già mutato dai candidati accettati prima di lui) e, se valido,
        applicato subito.

        Args:
            possible_txs: Candidati in ordine

        Returns:
            List[Transaction]: Transazioni accettate, in ordine di accettazione
        """
        accepted: List[Transaction] = []

        with PerformanceLogger(logger, "handle_txs", threshold_ms=self.config.slow_epoch_threshold_ms):
            for tx in possible_txs:
                if self.is_valid_tx(tx):
                    self._apply_transaction(tx)
                    accepted.append(tx)

        logger.info(
            "Epoch processed",
            extra_data={
                "candidates": len(possible_txs),
                "accepted": len(accepted),
                "rejected": len(possible_txs) - len(accepted),
                "utxo_count": len(self._utxo_pool),
            }
        )

        if self.audit_logger is not None:
            self.audit_logger.log_epoch_processed(
                candidates=len(possible_txs),
                accepted=len(accepted),
                utxo_count=len(self._utxo_pool),
            )

        return accepted

    def _apply_transaction(self, tx: Transaction) -> None:
        """Rimuovi input spesi, aggiungi output come nuovi UTXO (txid, index)."""
        txid = self.codec.compute_txid(tx)

        # Chiavi nuove costruite (e validate) prima di toccare il pool
        new_utxos = [(UTXOKey(txid, idx), output) for idx, output in tx.enumerate_outputs()]

        for inp in tx.inputs:
            self._utxo_pool.remove_utxo(inp.utxo_key)

        for utxo_key, output in new_utxos:
            self._utxo_pool.add_utxo(utxo_key, output)

        logger.debug(
            "Transaction applied to UTXO pool",
            extra_data={
                "txid": txid[:16] + "...",
                "inputs_removed": tx.num_inputs(),
                "outputs_added": tx.num_outputs(),
            }
        )

        if self.audit_logger is not None:
            self.audit_logger.log_transaction_accepted(
                txid=txid,
                inputs_spent=tx.num_inputs(),
                outputs_created=tx.num_outputs(),
            )

    # ========================================================================
    # STATE
    # ========================================================================

    def get_utxo_pool(self) -> UTXOPool:
        """Copia dello stato corrente (modificarla non tocca l'handler)."""
        return UTXOPool(self._utxo_pool)

    def __repr__(self) -> str:
        return f"TxHandler(utxos={len(self._utxo_pool)})"


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "TxHandler",
]
