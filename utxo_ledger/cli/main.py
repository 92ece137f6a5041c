"""
UTXO Ledger - Command Line Interface
======================================
CLI per generare chiavi, firmare, validare e processare epoch da file JSON.

Security Level: MEDIUM
Last Updated: 2026-10-18
Version: 1.0.0

Commands:
- keygen: Genera coppia chiavi (JSON hex)
- sign: Firma gli input di una transazione
- validate: Valida una transazione contro un pool
- epoch: Processa un epoch di transazioni e stampa il pool risultante
- info: Mostra versione e configurazione attiva

Formati file:
- Pool: {"utxos": [{"txid", "output_index", "value", "recipient_key"}]}
- Transazione: {"inputs": [...], "outputs": [...], "nonce": 0}
- Epoch: {"transactions": [<transazione>, ...]}
- Chiave: {"algorithm", "private_key", "public_key"} (PEM in hex)
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

# Internal imports
from utxo_ledger.config import get_settings, validate_config
from utxo_ledger.constants import PROJECT_NAME, SOFTWARE_VERSION, SIGNATURE_ALGORITHMS, format_value
from utxo_ledger.domain.handler import TxHandler
from utxo_ledger.domain.keypairs import KeyPair, sign_transaction
from utxo_ledger.domain.models import Transaction
from utxo_ledger.domain.utxo import UTXOPool
from utxo_ledger.errors import LedgerException, TransactionError, format_validation_error
from utxo_ledger.logging_setup import setup_logging
from utxo_ledger.utils.serialization import load_json_file, dump_json_file


# ============================================================================
# CLI APP
# ============================================================================

app = typer.Typer(
    name="utxo-ledger",
    help="UTXO Ledger - transaction validation and epoch processing",
    add_completion=False
)

console = Console()


# ============================================================================
# HELPERS
# ============================================================================

def _fail(message: str, code: int = 2):
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(code)


def _load_pool(path: Path) -> UTXOPool:
    try:
        return UTXOPool.from_dict(load_json_file(path))
    except (LedgerException, OSError, ValueError, KeyError, TypeError) as e:
        _fail(f"Cannot load pool from {path}: {e}")


def _load_transaction(path: Path) -> Transaction:
    try:
        return Transaction.from_dict(load_json_file(path))
    except (LedgerException, OSError, ValueError, KeyError, TypeError) as e:
        _fail(f"Cannot load transaction from {path}: {e}")


def _load_epoch(path: Path) -> List[Transaction]:
    try:
        data = load_json_file(path)
        return [Transaction.from_dict(tx) for tx in data["transactions"]]
    except (LedgerException, OSError, ValueError, KeyError, TypeError) as e:
        _fail(f"Cannot load epoch from {path}: {e}")


def _load_keypair(path: Path) -> KeyPair:
    try:
        data = load_json_file(path)
        return KeyPair.from_pem(
            bytes.fromhex(data["private_key"]),
            bytes.fromhex(data["public_key"]),
            algorithm=data.get("algorithm", "ecdsa"),
        )
    except (LedgerException, OSError, ValueError, KeyError, TypeError) as e:
        _fail(f"Cannot load key from {path}: {e}")


def _pool_table(pool: UTXOPool, title: str) -> Table:
    table = Table(title=title)
    table.add_column("TXID", style="cyan")
    table.add_column("Index", justify="right")
    table.add_column("Value", justify="right", style="green")

    for key, output in pool.items():
        table.add_row(f"{key.txid[:16]}...", str(key.output_index), format_value(output.value))

    return table


def _acceptance_flags(candidates: List[Transaction], accepted: List[Transaction]) -> List[bool]:
    """Accettati sono una sottosequenza ordinata dei candidati: confronto per valore."""
    flags = []
    remaining = iter(accepted)
    next_accepted = next(remaining, None)

    for tx in candidates:
        is_accepted = next_accepted is not None and tx == next_accepted
        if is_accepted:
            next_accepted = next(remaining, None)
        flags.append(is_accepted)

    return flags


# ============================================================================
# KEY COMMANDS
# ============================================================================

@app.command("keygen")
def keygen(
    algorithm: str = typer.Option(
        "ecdsa",
        "--algorithm",
        "-a",
        help=f"Signature algorithm ({', '.join(SIGNATURE_ALGORITHMS)})"
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "-o",
        help="Write key JSON to file instead of stdout"
    )
):
    """Generate a keypair"""
    if algorithm.lower() not in SIGNATURE_ALGORITHMS:
        _fail(f"Unsupported algorithm: {algorithm}")

    keypair = KeyPair.generate(algorithm.lower())
    data = {
        "algorithm": algorithm.lower(),
        "private_key": keypair.private_key.hex(),
        "public_key": keypair.public_key.hex(),
    }

    if out is not None:
        dump_json_file(data, out)
        console.print(f"[green]Key written to {out}[/green]")
    else:
        console.print_json(data=data)


@app.command("sign")
def sign(
    tx_file: Path = typer.Argument(..., help="Transaction JSON"),
    key_files: List[Path] = typer.Argument(..., help="One key JSON per input, in input order"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Output file (default: overwrite tx_file)")
):
    """Sign every input of a transaction"""
    tx = _load_transaction(tx_file)
    keypairs = [_load_keypair(path) for path in key_files]

    try:
        signed = sign_transaction(tx, keypairs)
    except LedgerException as e:
        _fail(format_validation_error(e))

    target = out or tx_file
    dump_json_file(signed.to_dict(), target)

    console.print(f"[green]Signed {signed.num_inputs()} input(s)[/green] -> {target}")
    console.print(f"TXID: [cyan]{signed.compute_txid()}[/cyan]")


# ============================================================================
# LEDGER COMMANDS
# ============================================================================

@app.command("validate")
def validate(
    pool_file: Path = typer.Argument(..., help="UTXO pool JSON"),
    tx_file: Path = typer.Argument(..., help="Transaction JSON")
):
    """Validate one transaction against a pool"""
    handler = TxHandler(_load_pool(pool_file))
    tx = _load_transaction(tx_file)

    try:
        handler.validate_transaction(tx)
    except TransactionError as e:
        console.print(Panel.fit(
            f"[red]INVALID[/red]\n\n{escape(format_validation_error(e))}",
            title="Validation",
            border_style="red"
        ))
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[green]VALID[/green]\n\nTXID: [cyan]{tx.compute_txid()}[/cyan]",
        title="Validation",
        border_style="green"
    ))


@app.command("epoch")
def epoch(
    pool_file: Path = typer.Argument(..., help="UTXO pool JSON"),
    epoch_file: Path = typer.Argument(..., help="Epoch JSON ({'transactions': [...]})"),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "-o",
        help="Write resulting pool JSON to file"
    )
):
    """Process an epoch and show the accepted transactions"""
    handler = TxHandler(_load_pool(pool_file))
    candidates = _load_epoch(epoch_file)

    accepted = handler.handle_txs(candidates)
    flags = _acceptance_flags(candidates, accepted)

    table = Table(title="Epoch")
    table.add_column("#", justify="right")
    table.add_column("TXID", style="cyan")
    table.add_column("Status")

    for position, (tx, is_accepted) in enumerate(zip(candidates, flags)):
        status = "[green]ACCEPTED[/green]" if is_accepted else "[red]REJECTED[/red]"
        table.add_row(str(position), f"{tx.compute_txid()[:16]}...", status)

    console.print(table)

    resulting_pool = handler.get_utxo_pool()
    console.print(_pool_table(resulting_pool, "Resulting UTXO pool"))
    console.print(f"Accepted {len(accepted)}/{len(candidates)}")

    if out is not None:
        dump_json_file(resulting_pool.to_dict(), out)
        console.print(f"[green]Pool written to {out}[/green]")


# ============================================================================
# INFO
# ============================================================================

@app.command("info")
def info():
    """Show version and active configuration"""
    config = get_settings()
    is_valid, errors = validate_config(config)

    table = Table(title="UTXO Ledger", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Project", PROJECT_NAME)
    table.add_row("Version", SOFTWARE_VERSION)
    table.add_row("Crypto Algorithm", config.crypto_algorithm)
    table.add_row("Audit Trail", "enabled" if config.audit_enabled else "disabled")
    table.add_row("Log Level", config.log_level)
    table.add_row("Log Directory", str(config.log_dir))
    table.add_row("Config", "OK" if is_valid else "[red]INVALID[/red]")

    console.print(table)

    for error in errors:
        console.print(f"[red]{escape(error)}[/red]")


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log to console"
    )
):
    """
    UTXO Ledger CLI

    Valida transazioni e processa epoch contro un pool UTXO su file.
    """
    config = get_settings()
    setup_logging(
        log_level="DEBUG" if verbose else config.log_level,
        log_to_file=config.log_to_file,
        log_dir=config.log_dir,
        log_format=config.log_format,
        log_rotation_mb=config.log_rotation_mb,
        log_retention_days=config.log_retention_days,
        enable_console=verbose,
    )


if __name__ == "__main__":
    app()


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "app",
]
