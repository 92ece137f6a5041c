"""
UTXO Ledger - Pytest Configuration
====================================
Fixtures e configurazione per testing.

Last Updated: 2026-10-18
Version: 1.0.0
"""

import pytest
from pathlib import Path
import tempfile
import shutil

# Internal imports
from utxo_ledger.config import LedgerSettings
from utxo_ledger.domain.handler import TxHandler
from utxo_ledger.domain.keypairs import KeyPair, sign_transaction
from utxo_ledger.domain.models import UTXOKey, TxOutput, Transaction
from utxo_ledger.domain.utxo import UTXOPool


GENESIS_TXID = "00" * 31 + "01"
OTHER_TXID = "00" * 31 + "02"


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================

@pytest.fixture
def test_config(temp_data_dir):
    """Test configuration"""
    return LedgerSettings(
        crypto_algorithm="ecdsa",
        audit_enabled=False,
        log_level="DEBUG",
        log_dir=temp_data_dir / "logs",
    )


@pytest.fixture
def temp_data_dir():
    """Temporary data directory"""
    temp_dir = Path(tempfile.mkdtemp())
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


# ============================================================================
# KEY FIXTURES
# ============================================================================

@pytest.fixture(scope="session")
def alice():
    """ECDSA keypair (owner of funded UTXOs)"""
    return KeyPair.generate("ecdsa")


@pytest.fixture(scope="session")
def bob():
    """ECDSA keypair (recipient)"""
    return KeyPair.generate("ecdsa")


@pytest.fixture(scope="session")
def carol():
    """ECDSA keypair (second recipient)"""
    return KeyPair.generate("ecdsa")


# ============================================================================
# POOL FIXTURES
# ============================================================================

@pytest.fixture
def genesis_key():
    """Key of the UTXO worth 10 owned by alice"""
    return UTXOKey(GENESIS_TXID, 0)


@pytest.fixture
def second_key():
    """Key of the UTXO worth 5 owned by alice"""
    return UTXOKey(GENESIS_TXID, 1)


@pytest.fixture
def funded_pool(alice, genesis_key, second_key):
    """
    Pool with two UTXOs owned by alice:
    - GENESIS:0 -> 10
    - GENESIS:1 -> 5
    """
    pool = UTXOPool()
    pool.add_utxo(genesis_key, TxOutput(10, alice.public_key))
    pool.add_utxo(second_key, TxOutput(5, alice.public_key))
    return pool


@pytest.fixture
def handler(funded_pool, test_config):
    """TxHandler over the funded pool"""
    return TxHandler(funded_pool, config=test_config)


# ============================================================================
# TRANSACTION FIXTURES
# ============================================================================

@pytest.fixture
def make_tx():
    """
    Factory for signed transactions.

    Usage:
        tx = make_tx([(txid, idx)], [(value, pubkey)], [keypair])
    """
    def _make(inputs, outputs, keypairs, nonce=0):
        tx = Transaction.build(inputs, outputs, nonce=nonce)
        return sign_transaction(tx, keypairs)

    return _make
