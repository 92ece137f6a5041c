"""
UTXO Ledger - Domain Layer
===========================
Modelli, pool UTXO, validazione e processamento epoch.
"""

from utxo_ledger.domain.crypto_core import (
    SignatureVerifier,
    CryptoProvider,
    ECDSAProvider,
    Ed25519Provider,
    get_crypto_provider,
)
from utxo_ledger.domain.codec import TransactionCodec, CanonicalJSONCodec

# Models
from utxo_ledger.domain.models import (
    UTXOKey,
    TxInput,
    TxOutput,
    Transaction,
)

# UTXO pool
from utxo_ledger.domain.utxo import UTXOPool

# Validation
from utxo_ledger.domain.validation import TransactionValidator

# Handler
from utxo_ledger.domain.handler import TxHandler

# Keys
from utxo_ledger.domain.keypairs import KeyPair, sign_transaction

__all__ = [
    "SignatureVerifier",
    "CryptoProvider",
    "ECDSAProvider",
    "Ed25519Provider",
    "get_crypto_provider",
    "TransactionCodec",
    "CanonicalJSONCodec",
    "UTXOKey",
    "TxInput",
    "TxOutput",
    "Transaction",
    "UTXOPool",
    "TransactionValidator",
    "TxHandler",
    "KeyPair",
    "sign_transaction",
]
