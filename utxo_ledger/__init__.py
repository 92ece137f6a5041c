"""
UTXO Ledger - Unspent Output Ledger Core
==========================================
Validazione transazioni e selezione greedy di epoch contro un pool UTXO.

Version: 1.0.0
Author: UTXO Ledger Team
License: MIT
"""

__version__ = "1.0.0"
__author__ = "UTXO Ledger Team"
__license__ = "MIT"

# Core imports
from utxo_ledger.domain.models import UTXOKey, TxInput, TxOutput, Transaction
from utxo_ledger.domain.utxo import UTXOPool
from utxo_ledger.domain.handler import TxHandler
from utxo_ledger.domain.keypairs import KeyPair, sign_transaction
from utxo_ledger.config import LedgerSettings, get_settings

__all__ = [
    # Version
    "__version__",

    # Core
    "UTXOKey",
    "TxInput",
    "TxOutput",
    "Transaction",
    "UTXOPool",
    "TxHandler",
    "KeyPair",
    "sign_transaction",
    "LedgerSettings",
    "get_settings",
]
