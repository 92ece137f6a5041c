"""
UTXO Ledger - KeyPair Management
==================================
Coppie chiavi per firmare gli input delle transazioni.

Security Level: CRITICAL
Last Updated: 2026-10-18
Version: 1.0.0

Features:
- KeyPair wrapper immutabile
- Firma/verifica messaggi
- Firma di tutti gli input di una transazione
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Sequence

# Internal imports
from utxo_ledger.domain.crypto_core import get_crypto_provider, CryptoProvider
from utxo_ledger.domain.codec import TransactionCodec, DEFAULT_CODEC
from utxo_ledger.domain.models import Transaction
from utxo_ledger.errors import InvalidKeyError, CryptoError
from utxo_ledger.logging_setup import get_logger


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("keypairs")


# ============================================================================
# KEYPAIR CLASS
# ============================================================================

@dataclass(frozen=True)
class KeyPair:
    """
    Coppia chiavi crittografiche immutabile.

    Attributes:
        private_key (bytes): Chiave privata (PEM)
        public_key (bytes): Chiave pubblica (PEM), usata come recipient_key
        _provider (CryptoProvider): Provider crittografico interno

    Examples:
        >>> keypair = KeyPair.generate()
        >>> signature = keypair.sign(b"transaction_data")
        >>> keypair.verify(b"transaction_data", signature)
        True
    """

    private_key: bytes
    public_key: bytes
    _provider: CryptoProvider = field(repr=False, compare=False)

    def __post_init__(self):
        """Validazione post-init"""
        for name in ("private_key", "public_key"):
            value = getattr(self, name)
            if not value or not isinstance(value, bytes):
                raise InvalidKeyError(
                    f"Invalid {name}: must be non-empty bytes",
                    code=f"INVALID_{name.upper()}"
                )
            if not value.startswith(b'-----BEGIN'):
                raise InvalidKeyError(
                    f"{name} must be in PEM format",
                    code="INVALID_KEY_FORMAT"
                )

    @classmethod
    def generate(cls, algorithm: str = "ecdsa") -> KeyPair:
        """Genera nuova coppia chiavi con il provider richiesto."""
        provider = get_crypto_provider(algorithm)
        private_key, public_key = provider.generate_keypair()
        return cls(private_key, public_key, provider)

    @classmethod
    def from_pem(cls, private_key: bytes, public_key: bytes, algorithm: str = "ecdsa") -> KeyPair:
        return cls(private_key, public_key, get_crypto_provider(algorithm))

    @property
    def public_key_hex(self) -> str:
        return self.public_key.hex()

    def sign(self, message: bytes) -> bytes:
        """
        Firma messaggio con chiave privata.

        Raises:
            CryptoError: Se message non è bytes
            InvalidKeyError: Se firma fallisce
        """
        if not isinstance(message, bytes):
            raise CryptoError(
                f"Message must be bytes, got {type(message).__name__}",
                code="INVALID_MESSAGE_TYPE"
            )

        return self._provider.sign(message, self.private_key)

    def verify(self, message: bytes, signature: bytes) -> bool:
        """Verifica firma con chiave pubblica (False se invalida)."""
        if not isinstance(message, bytes) or not isinstance(signature, bytes):
            return False

        return self._provider.verify(message, signature, self.public_key)

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.public_key_hex[:24]}...)"


# ============================================================================
# TRANSACTION SIGNING
# ============================================================================

def sign_transaction(
    tx: Transaction,
    keypairs: Sequence[KeyPair],
    codec: Optional[TransactionCodec] = None
) -> Transaction:
    """
    Firma ogni input di tx: input i con keypairs[i].

    Il messaggio per input i non contiene firme, quindi l'ordine di
    firma è irrilevante.

    Args:
        tx: Transazione (firme esistenti sovrascritte)
        keypairs: Una coppia chiavi per input
        codec: Codec per i messaggi (default: CanonicalJSONCodec)

    Returns:
        Transaction: Nuova transazione firmata

    Raises:
        CryptoError: Se numero keypairs diverso da numero input
    """
    if len(keypairs) != tx.num_inputs():
        raise CryptoError(
            f"Expected {tx.num_inputs()} keypairs, got {len(keypairs)}",
            code="KEYPAIR_COUNT_MISMATCH"
        )

    codec = codec or DEFAULT_CODEC

    signed = tx
    for idx, keypair in enumerate(keypairs):
        signed = signed.with_signature(idx, keypair.sign(codec.message_for_input(tx, idx)))

    logger.debug("Transaction signed", extra_data={"inputs": tx.num_inputs()})

    return signed


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "KeyPair",
    "sign_transaction",
]
