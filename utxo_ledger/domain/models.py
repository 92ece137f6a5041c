"""
UTXO Ledger - Core Domain Models
==================================
Strutture dati fondamentali del ledger.

Security Level: CRITICAL
Last Updated: 2026-10-18
Version: 1.0.0

Models:
- UTXOKey: Chiave UTXO (txid + index), la "spend reference"
- TxOutput: Output transazione (valore + chiave pubblica destinatario)
- TxInput: Input transazione (riferimento UTXO + firma)
- Transaction: Transazione con input/output ordinati

Tutte le strutture sono immutabili (frozen).
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from decimal import Decimal, Inexact, InvalidOperation, localcontext
from typing import Optional, Tuple, Dict, Any, Iterable, Iterator, Sequence

# Internal imports
from utxo_ledger.constants import (
    ZERO_VALUE,
    VALUE_DECIMALS,
    VALUE_QUANTUM,
    MAX_VALUE,
    VALUE_SUM_PRECISION,
)
from utxo_ledger.errors import ValidationError
from utxo_ledger.domain.codec import DEFAULT_CODEC


# ============================================================================
# HELPERS
# ============================================================================

_HEX_DIGITS = frozenset("0123456789abcdef")


def _validate_txid(txid: str, code: str) -> None:
    # Lunghezza libera (dipende dal codec), ma byte interi
    if (
        not isinstance(txid, str)
        or not txid
        or len(txid) % 2 != 0
        or not set(txid) <= _HEX_DIGITS
    ):
        raise ValidationError(
            "txid must be a non-empty even-length lowercase hex string",
            code=code,
            details={"txid": str(txid)[:16]}
        )


def _validate_index(index: int) -> None:
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise ValidationError(
            f"output_index must be a non-negative integer, got {index!r}",
            code="INVALID_OUTPUT_INDEX"
        )


def to_value(raw: Any) -> Decimal:
    """
    Converte un valore in Decimal esatto.

    Float passano da str() (0.1 -> Decimal("0.1")).
    Ammessi al massimo VALUE_DECIMALS decimali e modulo <= MAX_VALUE.

    Raises:
        ValidationError: Se valore non numerico, NaN, infinito o fuori limiti

    Examples:
        >>> to_value(0.1)
        Decimal('0.1')
        >>> to_value("-5")
        Decimal('-5')
    """
    if isinstance(raw, bool):
        raise ValidationError("Boolean is not a valid value", code="INVALID_VALUE")

    try:
        if isinstance(raw, Decimal):
            value = raw
        elif isinstance(raw, float):
            value = Decimal(str(raw))
        else:
            value = Decimal(raw)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(
            f"Invalid value: {raw!r}",
            code="INVALID_VALUE",
            details={"value": repr(raw)}
        )

    if not value.is_finite():
        raise ValidationError(
            f"Value must be finite, got {value}",
            code="INVALID_VALUE",
            details={"value": str(value)}
        )

    if abs(value) > MAX_VALUE:
        raise ValidationError(
            f"Value out of range: {value} (max {MAX_VALUE})",
            code="VALUE_OUT_OF_RANGE",
            details={"value": str(value), "max_value": str(MAX_VALUE)}
        )

    with localcontext() as ctx:
        ctx.prec = VALUE_SUM_PRECISION
        if value.quantize(VALUE_QUANTUM) != value:
            raise ValidationError(
                f"Value has more than {VALUE_DECIMALS} decimal places: {value}",
                code="VALUE_TOO_PRECISE",
                details={"value": str(value), "max_decimals": VALUE_DECIMALS}
            )

    return value


def sum_values(values: Iterable[Decimal]) -> Decimal:
    """
    Somma esatta di valori.

    Calcolata con VALUE_SUM_PRECISION cifre e trap su Inexact: un
    arrotondamento è un errore, mai un risultato.

    Raises:
        ValidationError: Se la somma non è rappresentabile esattamente
    """
    with localcontext() as ctx:
        ctx.prec = VALUE_SUM_PRECISION
        ctx.traps[Inexact] = True

        total = ZERO_VALUE
        try:
            for value in values:
                total += value
        except Inexact:
            raise ValidationError(
                "Sum of values is not exactly representable",
                code="VALUE_SUM_INEXACT",
                details={"precision": VALUE_SUM_PRECISION}
            )

    return total


# ============================================================================
# UTXO KEY
# ============================================================================

@dataclass(frozen=True, order=True)
class UTXOKey:
    """
    Chiave univoca per identificare un output spendibile.

    UTXO è identificato da:
    - TXID transazione che lo crea
    - Index output nella transazione

    Attributes:
        txid (str): Transaction ID (hex, lunghezza dal codec)
        output_index (int): Indice output (0, 1, 2, ...)

    Examples:
        >>> utxo_key = UTXOKey("ab" * 32, 0)
        >>> utxo_key.output_index
        0
        >>> utxo_key == UTXOKey("ab" * 32, 0)
        True
    """

    txid: str
    output_index: int

    def __post_init__(self):
        """Validazione"""
        _validate_txid(self.txid, "INVALID_UTXO_TXID")
        _validate_index(self.output_index)

    def to_dict(self) -> Dict[str, Any]:
        return {"txid": self.txid, "output_index": self.output_index}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UTXOKey:
        return cls(txid=data["txid"], output_index=data["output_index"])

    def __str__(self) -> str:
        """String representation"""
        return f"{self.txid}:{self.output_index}"

    def __repr__(self) -> str:
        """Repr"""
        return f"UTXOKey({self.txid[:16]}...:{self.output_index})"


# ============================================================================
# TRANSACTION OUTPUT
# ============================================================================

@dataclass(frozen=True)
class TxOutput:
    """
    Output di transazione.

    Attributes:
        value (Decimal): Quantità (coercita a Decimal esatto)
        recipient_key (bytes): Chiave pubblica del destinatario (PEM
            per i provider inclusi, opaca per il ledger)

    Note:
        Valori negativi sono rappresentabili: è il validatore che li
        rifiuta, rendendo invalida l'intera transazione.

    Examples:
        >>> output = TxOutput(value=10, recipient_key=b"pub")
        >>> output.value
        Decimal('10')
    """

    value: Decimal
    recipient_key: bytes

    def __post_init__(self):
        """Validazione post-init"""
        object.__setattr__(self, "value", to_value(self.value))

        if not self.recipient_key or not isinstance(self.recipient_key, bytes):
            raise ValidationError(
                "recipient_key must be non-empty bytes",
                code="INVALID_RECIPIENT_KEY"
            )

    def is_negative(self) -> bool:
        return self.value < ZERO_VALUE

    def to_dict(self) -> Dict[str, Any]:
        """Serializza output in dict."""
        return {
            "value": str(self.value),
            "recipient_key": self.recipient_key.hex(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TxOutput:
        """Deserializza output da dict."""
        return cls(
            value=data["value"],
            recipient_key=bytes.fromhex(data["recipient_key"]),
        )

    def __repr__(self) -> str:
        return f"TxOutput(value={self.value}, recipient_key={self.recipient_key[:12]!r}...)"


# ============================================================================
# TRANSACTION INPUT
# ============================================================================

@dataclass(frozen=True)
class TxInput:
    """
    Input di transazione (riferimento UTXO precedente).

    Attributes:
        prev_txid (str): TXID transazione che ha creato l'output
        output_index (int): Indice output da spendere
        signature (Optional[bytes]): Firma autorizzazione (None se non firmato)

    Examples:
        >>> inp = TxInput(prev_txid="ab" * 32, output_index=0)
        >>> inp.is_signed()
        False
        >>> inp.utxo_key == UTXOKey("ab" * 32, 0)
        True
    """

    prev_txid: str
    output_index: int
    signature: Optional[bytes] = None

    def __post_init__(self):
        """Validazione post-init"""
        _validate_txid(self.prev_txid, "INVALID_PREV_TXID")
        _validate_index(self.output_index)

        if self.signature is not None and not isinstance(self.signature, bytes):
            raise ValidationError(
                "signature must be bytes",
                code="INVALID_SIGNATURE_TYPE"
            )

    @property
    def utxo_key(self) -> UTXOKey:
        """UTXO reclamato da questo input"""
        return UTXOKey(self.prev_txid, self.output_index)

    def is_signed(self) -> bool:
        return self.signature is not None

    def to_dict(self, include_signature: bool = True) -> Dict[str, Any]:
        """Serializza input in dict."""
        data: Dict[str, Any] = {
            "prev_txid": self.prev_txid,
            "output_index": self.output_index,
        }
        if include_signature:
            data["signature"] = self.signature.hex() if self.signature is not None else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TxInput:
        """Deserializza input da dict."""
        signature = None
        if data.get("signature"):
            signature = bytes.fromhex(data["signature"])

        return cls(
            prev_txid=data["prev_txid"],
            output_index=data["output_index"],
            signature=signature,
        )

    def __repr__(self) -> str:
        signed = " [SIGNED]" if self.is_signed() else ""
        return f"TxInput(prev_txid={self.prev_txid[:16]}..., index={self.output_index}{signed})"


# ============================================================================
# TRANSACTION
# ============================================================================

@dataclass(frozen=True)
class Transaction:
    """
    Transazione ledger.

    Rappresenta:
    - Input ordinati (UTXO da spendere)
    - Output ordinati (nuovi UTXO, indice = posizione)
    - Nonce opzionale (per distinguere transazioni altrimenti identiche)

    Identità (TXID) e messaggio da firmare per ogni input sono delegati
    a un TransactionCodec (default: CanonicalJSONCodec).

    Examples:
        >>> tx = Transaction(
        ...     inputs=[TxInput("ab" * 32, 0)],
        ...     outputs=[TxOutput(10, b"pub")],
        ... )
        >>> len(tx.compute_txid())
        64
    """

    inputs: Tuple[TxInput, ...] = ()
    outputs: Tuple[TxOutput, ...] = ()
    nonce: int = 0

    def __post_init__(self):
        """Validazione post-init"""
        object.__setattr__(self, "inputs", tuple(self.inputs))
        object.__setattr__(self, "outputs", tuple(self.outputs))

        for inp in self.inputs:
            if not isinstance(inp, TxInput):
                raise ValidationError(
                    f"inputs must contain TxInput, got {type(inp).__name__}",
                    code="INVALID_INPUT"
                )

        for out in self.outputs:
            if not isinstance(out, TxOutput):
                raise ValidationError(
                    f"outputs must contain TxOutput, got {type(out).__name__}",
                    code="INVALID_OUTPUT"
                )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def num_inputs(self) -> int:
        return len(self.inputs)

    def num_outputs(self) -> int:
        return len(self.outputs)

    def get_input(self, index: int) -> TxInput:
        return self.inputs[index]

    def get_output(self, index: int) -> TxOutput:
        return self.outputs[index]

    def enumerate_outputs(self) -> Iterator[Tuple[int, TxOutput]]:
        """(index, output) nell'ordine dichiarato"""
        return enumerate(self.outputs)

    def total_output_value(self) -> Decimal:
        """Somma valori output (negativi inclusi)"""
        return sum_values(out.value for out in self.outputs)

    # ------------------------------------------------------------------
    # Identity / signing (delegati al codec default)
    # ------------------------------------------------------------------

    def compute_txid(self) -> str:
        """
        Calcola Transaction ID (SHA-256 hex del contenuto, firme incluse).

        Deterministico: stessa tx -> stesso TXID.
        """
        return DEFAULT_CODEC.compute_txid(self)

    def get_raw_data_to_sign(self, index: int) -> bytes:
        """Messaggio firmato dall'input `index` (esclude tutte le firme)."""
        return DEFAULT_CODEC.message_for_input(self, index)

    def with_signature(self, index: int, signature: bytes) -> Transaction:
        """
        Restituisce una copia con la firma dell'input `index` impostata.

        Raises:
            IndexError: Se index fuori range
        """
        inputs = list(self.inputs)
        inputs[index] = replace(inputs[index], signature=signature)
        return replace(self, inputs=tuple(inputs))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self, include_signatures: bool = True) -> Dict[str, Any]:
        """Serializza transaction in dict."""
        return {
            "inputs": [inp.to_dict(include_signature=include_signatures) for inp in self.inputs],
            "outputs": [out.to_dict() for out in self.outputs],
            "nonce": self.nonce,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Transaction:
        """Deserializza transaction da dict."""
        return cls(
            inputs=tuple(TxInput.from_dict(inp) for inp in data.get("inputs", [])),
            outputs=tuple(TxOutput.from_dict(out) for out in data.get("outputs", [])),
            nonce=data.get("nonce", 0),
        )

    @classmethod
    def build(
        cls,
        inputs: Sequence[Tuple[str, int]],
        outputs: Sequence[Tuple[Any, bytes]],
        nonce: int = 0,
    ) -> Transaction:
        """
        Costruisce una transazione non firmata da tuple semplici.

        Examples:
            >>> tx = Transaction.build([("ab" * 32, 0)], [(10, b"pub")])
            >>> tx.num_inputs(), tx.num_outputs()
            (1, 1)
        """
        return cls(
            inputs=tuple(TxInput(txid, index) for txid, index in inputs),
            outputs=tuple(TxOutput(value, key) for value, key in outputs),
            nonce=nonce,
        )

    def __repr__(self) -> str:
        return (
            f"Transaction(txid={self.compute_txid()[:16]}..., "
            f"inputs={len(self.inputs)}, "
            f"outputs={len(self.outputs)})"
        )


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "UTXOKey",
    "TxInput",
    "TxOutput",
    "Transaction",
    "to_value",
    "sum_values",
]
