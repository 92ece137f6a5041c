"""
UTXO Ledger - Validation Tests
================================
Unit tests for the transaction validation rules.
"""

from decimal import Decimal

import pytest

from utxo_ledger.domain.codec import CanonicalJSONCodec
from utxo_ledger.domain.crypto_core import ECDSAProvider
from utxo_ledger.constants import MAX_VALUE, VALUE_QUANTUM
from utxo_ledger.domain.models import UTXOKey, TxOutput, Transaction
from utxo_ledger.domain.utxo import UTXOPool
from utxo_ledger.domain.validation import TransactionValidator
from utxo_ledger.errors import (
    NegativeOutputError,
    UTXONotInPoolError,
    DoubleSpendError,
    InvalidSignatureError,
    InsufficientFundsError,
    ValidationError,
)


MISSING_TXID = "ff" * 32
LARGE_TXID = "0b" * 32


@pytest.fixture
def validator(funded_pool):
    return TransactionValidator(funded_pool, ECDSAProvider(), CanonicalJSONCodec())


class TestValidTransactions:
    """Transactions that must be accepted"""

    def test_exact_balance(self, validator, make_tx, alice, bob, genesis_key):
        """Inputs equal to outputs is valid"""
        tx = make_tx([(genesis_key.txid, 0)], [(10, bob.public_key)], [alice])

        validator.validate_transaction(tx)
        assert validator.check_transaction(tx) is None

    def test_surplus_allowed(self, validator, make_tx, alice, bob, genesis_key):
        """Inputs greater than outputs is valid (surplus not redistributed)"""
        tx = make_tx([(genesis_key.txid, 0)], [(7, bob.public_key)], [alice])

        assert validator.check_transaction(tx) is None

    def test_zero_value_output(self, validator, make_tx, alice, bob, genesis_key):
        """Zero is not negative"""
        tx = make_tx([(genesis_key.txid, 0)], [(0, bob.public_key)], [alice])

        assert validator.check_transaction(tx) is None

    def test_multiple_inputs(self, validator, make_tx, alice, bob, carol, genesis_key):
        """Two inputs, each signed by its owner, funding two outputs"""
        tx = make_tx(
            [(genesis_key.txid, 0), (genesis_key.txid, 1)],
            [(12, bob.public_key), (3, carol.public_key)],
            [alice, alice],
        )

        assert validator.check_transaction(tx) is None

    def test_empty_transaction(self, validator):
        """No inputs and no outputs: 0 >= 0"""
        assert validator.check_transaction(Transaction()) is None

    def test_fractional_values(self, funded_pool, make_tx, alice, bob):
        """Decimal values sum exactly"""
        funded_pool.add_utxo(UTXOKey(MISSING_TXID, 0), TxOutput(Decimal("0.3"), alice.public_key))
        validator = TransactionValidator(funded_pool, ECDSAProvider(), CanonicalJSONCodec())

        tx = make_tx([(MISSING_TXID, 0)], [(0.1, bob.public_key), (0.2, bob.public_key)], [alice])

        assert validator.check_transaction(tx) is None


class TestOutputRule:
    """Rule 1: no negative outputs"""

    def test_negative_output_rejected(self, validator, make_tx, alice, bob, genesis_key):
        tx = make_tx([(genesis_key.txid, 0)], [(11, bob.public_key), (-1, bob.public_key)], [alice])

        with pytest.raises(NegativeOutputError) as exc_info:
            validator.validate_transaction(tx)

        assert exc_info.value.code == "NEGATIVE_OUTPUT_VALUE"
        assert exc_info.value.details["index"] == 1

    def test_negative_output_checked_first(self, validator, bob):
        """A negative output is reported before a missing input"""
        tx = Transaction.build([(MISSING_TXID, 0)], [(-1, bob.public_key)])

        error = validator.check_transaction(tx)

        assert isinstance(error, NegativeOutputError)


class TestInputExistenceRule:
    """Rule 2: every claimed UTXO is in the pool"""

    def test_missing_utxo(self, validator, make_tx, alice, bob):
        tx = make_tx([(MISSING_TXID, 0)], [(1, bob.public_key)], [alice])

        with pytest.raises(UTXONotInPoolError) as exc_info:
            validator.validate_transaction(tx)

        assert exc_info.value.code == "INPUT_UTXO_NOT_FOUND"

    def test_wrong_index(self, validator, make_tx, alice, bob, genesis_key):
        """Right txid with an index that does not exist"""
        tx = make_tx([(genesis_key.txid, 9)], [(1, bob.public_key)], [alice])

        assert isinstance(validator.check_transaction(tx), UTXONotInPoolError)

    def test_missing_checked_before_signatures(self, validator, bob, genesis_key):
        """Unsigned first input plus missing second input reports the missing one"""
        tx = Transaction.build([(genesis_key.txid, 0), (MISSING_TXID, 0)], [(1, bob.public_key)])

        assert isinstance(validator.check_transaction(tx), UTXONotInPoolError)


class TestDoubleClaimRule:
    """Rule 3: no UTXO claimed twice"""

    def test_duplicate_input(self, validator, make_tx, alice, bob, genesis_key):
        tx = make_tx(
            [(genesis_key.txid, 0), (genesis_key.txid, 0)],
            [(20, bob.public_key)],
            [alice, alice],
        )

        with pytest.raises(DoubleSpendError) as exc_info:
            validator.validate_transaction(tx)

        assert exc_info.value.code == "DUPLICATE_INPUT_UTXO"
        assert exc_info.value.details["input_index"] == 1

    def test_duplicate_even_when_balanced(self, validator, make_tx, alice, bob, genesis_key):
        """Claiming twice is rejected even if outputs fit a single claim"""
        tx = make_tx(
            [(genesis_key.txid, 0), (genesis_key.txid, 0)],
            [(5, bob.public_key)],
            [alice, alice],
        )

        assert isinstance(validator.check_transaction(tx), DoubleSpendError)

    def test_claimed_set_not_shared_between_calls(self, validator, make_tx, alice, bob, genesis_key):
        """Validating the same tx twice gives the same answer"""
        tx = make_tx([(genesis_key.txid, 0)], [(10, bob.public_key)], [alice])

        assert validator.check_transaction(tx) is None
        assert validator.check_transaction(tx) is None


class TestSignatureRule:
    """Rule 4: every input signed by the owner of the claimed output"""

    def test_unsigned_input(self, validator, bob, genesis_key):
        tx = Transaction.build([(genesis_key.txid, 0)], [(1, bob.public_key)])

        with pytest.raises(InvalidSignatureError) as exc_info:
            validator.validate_transaction(tx)

        assert exc_info.value.code == "INPUT_NOT_SIGNED"

    def test_signed_by_wrong_key(self, validator, make_tx, bob, genesis_key):
        """Bob cannot spend alice's output"""
        tx = make_tx([(genesis_key.txid, 0)], [(10, bob.public_key)], [bob])

        with pytest.raises(InvalidSignatureError) as exc_info:
            validator.validate_transaction(tx)

        assert exc_info.value.code == "INVALID_SIGNATURE"

    def test_one_bad_signature_among_many(self, validator, make_tx, alice, bob, genesis_key):
        """A single bad input invalidates the whole transaction"""
        tx = make_tx(
            [(genesis_key.txid, 0), (genesis_key.txid, 1)],
            [(15, bob.public_key)],
            [alice, bob],
        )

        error = validator.check_transaction(tx)

        assert isinstance(error, InvalidSignatureError)
        assert error.details["input_index"] == 1

    def test_tampered_output_breaks_signature(self, validator, make_tx, alice, bob, genesis_key):
        """Changing outputs after signing invalidates the signature"""
        tx = make_tx([(genesis_key.txid, 0)], [(10, bob.public_key)], [alice])
        tampered = Transaction(
            inputs=tx.inputs,
            outputs=[TxOutput(10, alice.public_key)],
        )

        assert isinstance(validator.check_transaction(tampered), InvalidSignatureError)

    def test_signature_swapped_between_inputs(self, validator, make_tx, alice, bob, genesis_key):
        """A signature is bound to its input index"""
        tx = make_tx(
            [(genesis_key.txid, 0), (genesis_key.txid, 1)],
            [(15, bob.public_key)],
            [alice, alice],
        )
        swapped = tx.with_signature(0, tx.get_input(1).signature).with_signature(
            1, tx.get_input(0).signature
        )

        assert isinstance(validator.check_transaction(swapped), InvalidSignatureError)

    def test_garbage_signature(self, validator, bob, genesis_key):
        tx = Transaction.build([(genesis_key.txid, 0)], [(1, bob.public_key)]).with_signature(
            0, b"not a signature"
        )

        assert isinstance(validator.check_transaction(tx), InvalidSignatureError)


class TestBalanceRule:
    """Rule 5: inputs cover outputs"""

    def test_outputs_exceed_inputs(self, validator, make_tx, alice, bob, genesis_key):
        tx = make_tx([(genesis_key.txid, 0)], [(10.01, bob.public_key)], [alice])

        with pytest.raises(InsufficientFundsError) as exc_info:
            validator.validate_transaction(tx)

        assert exc_info.value.code == "INPUTS_LESS_THAN_OUTPUTS"
        assert exc_info.value.details == {"sum_of_inputs": "10", "sum_of_outputs": "10.01"}

    def test_outputs_without_inputs(self, validator, bob):
        """Value cannot be created from nothing"""
        tx = Transaction.build([], [(1, bob.public_key)])

        assert isinstance(validator.check_transaction(tx), InsufficientFundsError)

    def test_sub_quantum_output_cannot_ride_along(self, bob, genesis_key):
        """An output too small to register cannot be added on top of a balanced tx"""
        with pytest.raises(ValidationError) as exc_info:
            Transaction.build(
                [(genesis_key.txid, 0)],
                [(10, bob.public_key), (Decimal("1E-30"), bob.public_key)],
            )

        assert exc_info.value.code == "VALUE_TOO_PRECISE"

    def test_huge_utxo_cannot_enter_pool(self, alice):
        with pytest.raises(ValidationError) as exc_info:
            UTXOPool().add_utxo(UTXOKey(LARGE_TXID, 0), TxOutput(Decimal("1E+28"), alice.public_key))

        assert exc_info.value.code == "VALUE_OUT_OF_RANGE"

    def test_one_quantum_over_at_largest_values(self, make_tx, alice, bob):
        """A one-quantum excess is caught even when every amount is at the maximum"""
        pool = UTXOPool()
        keys = [UTXOKey(LARGE_TXID, i) for i in range(3)]
        for key in keys:
            pool.add_utxo(key, TxOutput(MAX_VALUE, alice.public_key))
        validator = TransactionValidator(pool, ECDSAProvider(), CanonicalJSONCodec())
        inputs = [(key.txid, key.output_index) for key in keys]

        exact = make_tx(inputs, [(MAX_VALUE, bob.public_key)] * 3, [alice] * 3)
        over = make_tx(
            inputs,
            [(MAX_VALUE, bob.public_key)] * 3 + [(VALUE_QUANTUM, bob.public_key)],
            [alice] * 3,
        )

        assert validator.check_transaction(exact) is None
        assert isinstance(validator.check_transaction(over), InsufficientFundsError)


class TestValidationIsPure:
    """Validation never mutates the pool"""

    def test_pool_unchanged(self, funded_pool, validator, make_tx, alice, bob, genesis_key):
        snapshot = funded_pool.copy()

        validator.check_transaction(make_tx([(genesis_key.txid, 0)], [(10, bob.public_key)], [alice]))
        validator.check_transaction(make_tx([(genesis_key.txid, 0)], [(99, bob.public_key)], [alice]))

        assert funded_pool == snapshot
