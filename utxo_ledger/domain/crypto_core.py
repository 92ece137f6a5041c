"""
UTXO Ledger - Cryptographic Core Layer
========================================
Layer crittografico di basso livello: hash e firme digitali.

Security Level: CRITICAL
Last Updated: 2026-10-18
Version: 1.0.0

SECURITY NOTICE:
Questo modulo implementa primitive crittografiche critiche.
Il ledger consuma solo `SignatureVerifier.verify`; i provider sono
sostituibili (iniettati nel TxHandler).

Algorithms:
- Hash: SHA-256
- Signature: ECDSA (secp256k1), Ed25519

Dependencies:
- cryptography (>=41.0.0)
- hashlib (stdlib)
"""

import hashlib
from typing import Tuple, Protocol
from abc import abstractmethod

# Cryptography library (production-grade)
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519
from cryptography.exceptions import InvalidSignature as CryptoInvalidSignature
from cryptography.exceptions import UnsupportedAlgorithm

# Internal imports
from utxo_ledger.errors import (
    CryptoError,
    InvalidKeyError,
)
from utxo_ledger.constants import SIGNATURE_ALGORITHMS
from utxo_ledger.logging_setup import get_logger


# ============================================================================
# MODULE LOGGER
# ============================================================================

logger = get_logger("crypto")


# ============================================================================
# HASH FUNCTIONS
# ============================================================================

def compute_sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash.

    SHA-256 è l'hash primario per i Transaction ID.

    Args:
        data: Input data da hashare

    Returns:
        bytes: 32-byte hash digest

    Examples:
        >>> compute_sha256(b"").hex()
        'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'
    """
    if not isinstance(data, bytes):
        raise CryptoError(
            f"compute_sha256 requires bytes, got {type(data).__name__}",
            code="INVALID_INPUT_TYPE"
        )

    return hashlib.sha256(data).digest()


def compute_double_sha256(data: bytes) -> bytes:
    """Compute double SHA-256 (SHA256(SHA256(data)))."""
    return compute_sha256(compute_sha256(data))


# ============================================================================
# SIGNATURE PROTOCOLS
# ============================================================================

class SignatureVerifier(Protocol):
    """
    Protocol minimo consumato dal ledger.

    verify() deve essere deterministico e senza side-effect.
    """

    @abstractmethod
    def verify(self, message: bytes, signature: bytes, public_key: bytes) -> bool:
        """
        Verifica firma.

        Args:
            message: Messaggio originale
            signature: Firma da verificare
            public_key: Chiave pubblica

        Returns:
            bool: True se firma valida
        """
        pass


class CryptoProvider(SignatureVerifier, Protocol):
    """
    Protocol per provider crittografici completi.

    Permette supporto multi-algorithm:
    - ECDSA secp256k1 (default)
    - Ed25519
    """

    @abstractmethod
    def generate_keypair(self) -> Tuple[bytes, bytes]:
        """
        Genera coppia chiavi.

        Returns:
            tuple: (private_key, public_key) in formato PEM
        """
        pass

    @abstractmethod
    def sign(self, message: bytes, private_key: bytes) -> bytes:
        """
        Firma messaggio.

        Args:
            message: Messaggio da firmare
            private_key: Chiave privata (PEM)

        Returns:
            bytes: Firma
        """
        pass


def _serialize_keypair(private_key_obj) -> Tuple[bytes, bytes]:
    private_pem = private_key_obj.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )
    public_pem = private_key_obj.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    )
    return (private_pem, public_pem)


def _load_public_key(public_key: bytes):
    # Chiave malformata o di altro algoritmo -> None (firma non autorizzata)
    try:
        return serialization.load_pem_public_key(public_key)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        logger.debug("Public key could not be loaded", extra_data={"error": str(e)})
        return None


# ============================================================================
# ECDSA PROVIDER (secp256k1)
# ============================================================================

class ECDSAProvider:
    """
    Provider ECDSA con curva secp256k1.

    Features:
    - Curve: secp256k1
    - Hash: SHA-256
    - Signature: DER encoded
    - Key format: PEM

    Examples:
        >>> provider = ECDSAProvider()
        >>> priv, pub = provider.generate_keypair()
        >>> sig = provider.sign(b"test", priv)
        >>> provider.verify(b"test", sig, pub)
        True
        >>> provider.verify(b"wrong", sig, pub)
        False
    """

    algorithm = "ecdsa"

    def __init__(self):
        self.curve = ec.SECP256K1()
        self.hash_algo = hashes.SHA256()

    def generate_keypair(self) -> Tuple[bytes, bytes]:
        """Genera keypair ECDSA (private_pem, public_pem)."""
        private_key_obj = ec.generate_private_key(self.curve)

        logger.debug("ECDSA keypair generated")

        return _serialize_keypair(private_key_obj)

    def sign(self, message: bytes, private_key: bytes) -> bytes:
        """
        Firma messaggio con ECDSA.

        Raises:
            InvalidKeyError: Se la chiave privata non è una chiave EC PEM valida
        """
        try:
            private_key_obj = serialization.load_pem_private_key(private_key, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise InvalidKeyError(f"ECDSA signing failed: {e}", code="SIGN_ERROR")

        if not isinstance(private_key_obj, ec.EllipticCurvePrivateKey):
            raise InvalidKeyError(
                "ECDSA signing requires an EC private key",
                code="WRONG_KEY_TYPE"
            )

        return private_key_obj.sign(message, ec.ECDSA(self.hash_algo))

    def verify(self, message: bytes, signature: bytes, public_key: bytes) -> bool:
        """
        Verifica firma ECDSA.

        Returns:
            bool: True se firma valida, False altrimenti (anche per chiave malformata)
        """
        public_key_obj = _load_public_key(public_key)
        if not isinstance(public_key_obj, ec.EllipticCurvePublicKey):
            return False

        try:
            public_key_obj.verify(signature, message, ec.ECDSA(self.hash_algo))
            return True
        except CryptoInvalidSignature:
            logger.debug("ECDSA signature verification failed: invalid signature")
            return False


# ============================================================================
# ED25519 PROVIDER
# ============================================================================

class Ed25519Provider:
    """
    Provider Ed25519.

    Firme deterministiche a 64 byte, chiavi in formato PEM.
    """

    algorithm = "ed25519"

    def generate_keypair(self) -> Tuple[bytes, bytes]:
        """Genera keypair Ed25519 (private_pem, public_pem)."""
        private_key_obj = ed25519.Ed25519PrivateKey.generate()

        logger.debug("Ed25519 keypair generated")

        return _serialize_keypair(private_key_obj)

    def sign(self, message: bytes, private_key: bytes) -> bytes:
        """Firma messaggio con Ed25519."""
        try:
            private_key_obj = serialization.load_pem_private_key(private_key, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise InvalidKeyError(f"Ed25519 signing failed: {e}", code="SIGN_ERROR")

        if not isinstance(private_key_obj, ed25519.Ed25519PrivateKey):
            raise InvalidKeyError(
                "Ed25519 signing requires an Ed25519 private key",
                code="WRONG_KEY_TYPE"
            )

        return private_key_obj.sign(message)

    def verify(self, message: bytes, signature: bytes, public_key: bytes) -> bool:
        """Verifica firma Ed25519."""
        public_key_obj = _load_public_key(public_key)
        if not isinstance(public_key_obj, ed25519.Ed25519PublicKey):
            return False

        try:
            public_key_obj.verify(signature, message)
            return True
        except CryptoInvalidSignature:
            logger.debug("Ed25519 signature verification failed: invalid signature")
            return False


# ============================================================================
# PROVIDER FACTORY
# ============================================================================

def get_crypto_provider(algorithm: str = "ecdsa") -> CryptoProvider:
    """
    Factory per ottenere crypto provider.

    Args:
        algorithm: Algoritmo ("ecdsa", "ed25519")

    Raises:
        CryptoError: Se algorithm non supportato

    Examples:
        >>> isinstance(get_crypto_provider("ecdsa"), ECDSAProvider)
        True
    """
    algorithm = algorithm.lower()

    if algorithm == "ecdsa":
        return ECDSAProvider()

    elif algorithm == "ed25519":
        return Ed25519Provider()

    else:
        raise CryptoError(
            f"Unsupported crypto algorithm: {algorithm}",
            code="UNSUPPORTED_ALGORITHM",
            details={"supported": list(SIGNATURE_ALGORITHMS)}
        )


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================

def generate_keypair(algorithm: str = "ecdsa") -> Tuple[bytes, bytes]:
    """
    Genera keypair usando provider specificato.

    Examples:
        >>> private_key, public_key = generate_keypair()
        >>> public_key.startswith(b"-----BEGIN PUBLIC KEY-----")
        True
    """
    return get_crypto_provider(algorithm).generate_keypair()


def sign_message(message: bytes, private_key: bytes, algorithm: str = "ecdsa") -> bytes:
    """Firma messaggio usando provider specificato."""
    return get_crypto_provider(algorithm).sign(message, private_key)


def verify_signature(
    message: bytes,
    signature: bytes,
    public_key: bytes,
    algorithm: str = "ecdsa"
) -> bool:
    """
    Verifica firma usando provider specificato.

    Examples:
        >>> priv, pub = generate_keypair()
        >>> sig = sign_message(b"test", priv)
        >>> verify_signature(b"test", sig, pub)
        True
    """
    return get_crypto_provider(algorithm).verify(message, signature, public_key)


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    # Hash functions
    "compute_sha256",
    "compute_double_sha256",

    # Crypto providers
    "SignatureVerifier",
    "CryptoProvider",
    "ECDSAProvider",
    "Ed25519Provider",
    "get_crypto_provider",

    # Convenience functions
    "generate_keypair",
    "sign_message",
    "verify_signature",
]
