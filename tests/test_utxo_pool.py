"""
UTXO Ledger - UTXO Pool Tests
===============================
Unit tests for UTXOPool.
"""

from decimal import Decimal

import pytest

from utxo_ledger.domain.models import UTXOKey, TxOutput
from utxo_ledger.domain.utxo import UTXOPool
from utxo_ledger.errors import UTXONotFoundError


GENESIS_TXID = "00" * 31 + "01"
OTHER_TXID = "00" * 31 + "02"


class TestUTXOPool:
    """Test UTXOPool operations"""

    def test_empty_pool(self):
        pool = UTXOPool()

        assert len(pool) == 0
        assert pool.get_all_utxo() == []
        assert pool.total_value() == Decimal("0")

    def test_add_and_get(self):
        pool = UTXOPool()
        key = UTXOKey(GENESIS_TXID, 0)
        output = TxOutput(10, b"pub")

        pool.add_utxo(key, output)

        assert pool.contains(key)
        assert key in pool
        assert pool.get_txoutput(key) == output

    def test_add_overwrites(self):
        """Adding an existing key replaces the output"""
        pool = UTXOPool()
        key = UTXOKey(GENESIS_TXID, 0)

        pool.add_utxo(key, TxOutput(10, b"pub"))
        pool.add_utxo(key, TxOutput(3, b"pub"))

        assert len(pool) == 1
        assert pool.get_txoutput(key).value == Decimal("3")

    def test_remove(self):
        pool = UTXOPool()
        key = UTXOKey(GENESIS_TXID, 0)
        pool.add_utxo(key, TxOutput(10, b"pub"))

        removed = pool.remove_utxo(key)

        assert removed.value == Decimal("10")
        assert not pool.contains(key)

    def test_remove_absent_raises(self):
        with pytest.raises(UTXONotFoundError) as exc_info:
            UTXOPool().remove_utxo(UTXOKey(GENESIS_TXID, 0))

        assert exc_info.value.code == "UTXO_NOT_FOUND"

    def test_get_absent_raises(self):
        with pytest.raises(UTXONotFoundError):
            UTXOPool().get_txoutput(UTXOKey(GENESIS_TXID, 0))

    def test_all_utxo_sorted(self):
        pool = UTXOPool()
        keys = [UTXOKey(OTHER_TXID, 0), UTXOKey(GENESIS_TXID, 1), UTXOKey(GENESIS_TXID, 0)]
        for key in keys:
            pool.add_utxo(key, TxOutput(1, b"pub"))

        assert pool.get_all_utxo() == sorted(keys)
        assert list(pool) == sorted(keys)

    def test_total_value(self, funded_pool):
        assert funded_pool.total_value() == Decimal("15")
        assert funded_pool.utxo_count() == 2


class TestUTXOPoolCopy:
    """Test copy independence"""

    def test_copy_constructor_independent(self, funded_pool, genesis_key):
        """Mutating the copy does not affect the source"""
        copy = UTXOPool(funded_pool)
        copy.remove_utxo(genesis_key)

        assert funded_pool.contains(genesis_key)
        assert not copy.contains(genesis_key)

    def test_source_mutation_does_not_affect_copy(self, funded_pool, genesis_key):
        copy = funded_pool.copy()
        funded_pool.remove_utxo(genesis_key)

        assert copy.contains(genesis_key)

    def test_copy_equal(self, funded_pool):
        assert funded_pool.copy() == funded_pool

    def test_unhashable(self, funded_pool):
        with pytest.raises(TypeError):
            hash(funded_pool)


class TestUTXOPoolSerialization:
    """Test dict form"""

    def test_dict_roundtrip(self, funded_pool):
        data = funded_pool.to_dict()

        assert len(data["utxos"]) == 2
        assert data["utxos"][0]["txid"] == GENESIS_TXID
        assert data["utxos"][0]["value"] == "10"
        assert UTXOPool.from_dict(data) == funded_pool

    def test_from_empty_dict(self):
        assert len(UTXOPool.from_dict({})) == 0
