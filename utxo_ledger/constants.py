"""
UTXO Ledger - Core Constants
==============================
Costanti del protocollo ledger.

Security Level: CRITICAL
Last Updated: 2026-10-18
Version: 1.0.0
"""

from decimal import Decimal
from typing import Final, Tuple


# ============================================================================
# IDENTIFICAZIONE PROGETTO
# ============================================================================

PROJECT_NAME: Final[str] = "utxo-ledger"
SOFTWARE_VERSION: Final[str] = "1.0.0"


# ============================================================================
# IDENTIFICATORI
# ============================================================================

# TXID del codec di default = SHA-256 hex digest.
# Codec alternativi possono produrre txid hex di altra lunghezza.
TXID_BYTES: Final[int] = 32
TXID_HEX_LENGTH: Final[int] = TXID_BYTES * 2


# ============================================================================
# VALORI
# ============================================================================

ZERO_VALUE: Final[Decimal] = Decimal("0")

# Cifre decimali mostrate in output CLI (i valori interni sono Decimal esatti)
DISPLAY_DECIMALS: Final[int] = 8

# Limiti di un singolo valore: al massimo VALUE_DECIMALS cifre decimali e
# modulo <= MAX_VALUE. Somme calcolate con VALUE_SUM_PRECISION cifre.
VALUE_DECIMALS: Final[int] = 8
VALUE_QUANTUM: Final[Decimal] = Decimal(1).scaleb(-VALUE_DECIMALS)
MAX_VALUE: Final[Decimal] = Decimal("1E+18")
VALUE_SUM_PRECISION: Final[int] = 80


def format_value(value: Decimal) -> str:
    """
    Formatta valore per display umano.

    Examples:
        >>> format_value(Decimal("10"))
        '10.00000000'
    """
    return f"{value:.{DISPLAY_DECIMALS}f}"


# ============================================================================
# CRITTOGRAFIA
# ============================================================================

SIGNATURE_ALGORITHMS: Final[Tuple[str, ...]] = ("ecdsa", "ed25519")
DEFAULT_SIGNATURE_ALGORITHM: Final[str] = "ecdsa"


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "PROJECT_NAME",
    "SOFTWARE_VERSION",
    "TXID_BYTES",
    "TXID_HEX_LENGTH",
    "ZERO_VALUE",
    "DISPLAY_DECIMALS",
    "VALUE_DECIMALS",
    "VALUE_QUANTUM",
    "MAX_VALUE",
    "VALUE_SUM_PRECISION",
    "format_value",
    "SIGNATURE_ALGORITHMS",
    "DEFAULT_SIGNATURE_ALGORITHM",
]
