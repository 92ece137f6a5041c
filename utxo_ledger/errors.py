"""
UTXO Ledger - Custom Exceptions
=================================
Gerarchia di eccezioni per gestione errori granulare.

Security Level: HIGH
Last Updated: 2026-10-18
Version: 1.0.0

Nota:
    Le violazioni delle regole di validazione sono eccezioni solo all'interno
    del validatore. TxHandler le converte in un verdetto booleano.
"""

from typing import Optional


# ============================================================================
# BASE EXCEPTION
# ============================================================================

class LedgerException(Exception):
    """
    Eccezione base per tutte le eccezioni UTXO Ledger.

    Attributes:
        message (str): Messaggio errore
        code (str): Codice errore (es. "INPUT_UTXO_NOT_FOUND")
        details (dict): Dettagli aggiuntivi
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Serializza eccezione per CLI/logging"""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            return f"[{self.code}] {self.message} | Details: {self.details}"
        return f"[{self.code}] {self.message}"


# ============================================================================
# VALIDATION ERRORS
# ============================================================================

class ValidationError(LedgerException):
    """Errore validazione (base)"""
    pass


class TransactionError(ValidationError):
    """Errore transazione (regola di validazione violata)"""
    pass


class NegativeOutputError(TransactionError):
    """Output con valore negativo"""
    pass


class UTXONotInPoolError(TransactionError):
    """Input che reclama un UTXO assente dal pool (speso o inesistente)"""
    pass


class DoubleSpendError(TransactionError):
    """Stesso UTXO reclamato da più input"""
    pass


class InvalidSignatureError(TransactionError):
    """Firma invalida"""
    pass


class InsufficientFundsError(TransactionError):
    """Somma input minore della somma output"""
    pass


# ============================================================================
# UTXO ERRORS
# ============================================================================

class UTXOError(LedgerException):
    """Errore UTXO pool"""
    pass


class UTXONotFoundError(UTXOError):
    """UTXO non trovato nel pool"""
    pass


# ============================================================================
# CRYPTO ERRORS
# ============================================================================

class CryptoError(LedgerException):
    """Errore crittografico"""
    pass


class InvalidKeyError(CryptoError):
    """Chiave invalida"""
    pass


# ============================================================================
# HELPERS
# ============================================================================

def format_validation_error(error: LedgerException) -> str:
    """
    Formatta errore di validazione per display.

    Args:
        error: Eccezione da formattare

    Returns:
        str: Messaggio leggibile

    Examples:
        >>> err = DoubleSpendError("UTXO claimed twice", code="DUPLICATE_INPUT_UTXO")
        >>> format_validation_error(err)
        'DUPLICATE_INPUT_UTXO: UTXO claimed twice'
    """
    message = f"{error.code}: {error.message}"

    if error.details:
        details = ", ".join(f"{k}={v}" for k, v in sorted(error.details.items()))
        message += f" ({details})"

    return message


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "LedgerException",
    "ValidationError",
    "TransactionError",
    "NegativeOutputError",
    "UTXONotInPoolError",
    "DoubleSpendError",
    "InvalidSignatureError",
    "InsufficientFundsError",
    "UTXOError",
    "UTXONotFoundError",
    "CryptoError",
    "InvalidKeyError",
    "format_validation_error",
]
