"""
UTXO Ledger - Logging System
==============================
Sistema logging strutturato JSON per audit e debugging.

Security Level: HIGH
Last Updated: 2026-10-18
Version: 1.0.0

Features:
- Logging JSON strutturato
- Rotation automatica
- Multiple handlers (file, console)
- Context enrichment
- Performance tracking
- Audit trail (transazioni accettate, epoch)
"""

import logging
import logging.handlers
import json
import sys
import time
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime, timezone
import traceback


# ============================================================================
# JSON FORMATTER
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    Formatter per log in formato JSON.

    Output structure:
    {
        "timestamp": "2026-10-18T22:00:00.000000Z",
        "level": "INFO",
        "logger": "utxo_ledger.handler",
        "message": "Epoch processed",
        "extra_data": {...},
        "exception": {...}
    }
    """

    def __init__(
        self,
        include_extra: bool = True,
        include_stack: bool = True
    ):
        super().__init__()
        self.include_extra = include_extra
        self.include_stack = include_stack

    def format(self, record: logging.LogRecord) -> str:
        """
        Formatta LogRecord in JSON.

        Args:
            record: LogRecord da formattare

        Returns:
            str: JSON string
        """
        # Base fields
        log_data = {
            "timestamp": _utc_timestamp(record.created).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Process info
        if record.process:
            log_data["process_id"] = record.process

        # Extra data (custom fields)
        if self.include_extra and hasattr(record, 'extra_data'):
            log_data["extra_data"] = record.extra_data

        # Exception info
        if record.exc_info and self.include_stack:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info)
            }

        return json.dumps(log_data, default=str)


# ============================================================================
# TEXT FORMATTER (Human-Readable)
# ============================================================================

class ColoredTextFormatter(logging.Formatter):
    """
    Formatter colorato per console.

    Colors:
    - DEBUG: Gray
    - INFO: Green
    - WARNING: Yellow
    - ERROR: Red
    - CRITICAL: Bold Red
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[90m',      # Gray
        'INFO': '\033[92m',       # Green
        'WARNING': '\033[93m',    # Yellow
        'ERROR': '\033[91m',      # Red
        'CRITICAL': '\033[1;91m', # Bold Red
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        """Formatta con colori"""
        levelname = record.levelname
        if levelname in self.COLORS:
            levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"

        timestamp = _utc_timestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')

        message = f"{timestamp} [{levelname}] {record.name}: {record.getMessage()}"

        if hasattr(record, 'extra_data'):
            message += f" | {record.extra_data}"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def _utc_timestamp(created: float) -> datetime:
    return datetime.fromtimestamp(created, tz=timezone.utc)


# ============================================================================
# LOGGER CLASS
# ============================================================================

class LedgerLogger:
    """
    Wrapper logger con features avanzate.

    Features:
    - Structured logging (extra_data)
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _log(
        self,
        level: int,
        message: str,
        extra_data: Optional[Dict[str, Any]] = None,
        exc_info=None
    ):
        """Internal log method"""
        self._logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={'extra_data': extra_data} if extra_data else {}
        )

    def debug(self, message: str, extra_data: Optional[Dict] = None):
        """Log DEBUG"""
        self._log(logging.DEBUG, message, extra_data)

    def info(self, message: str, extra_data: Optional[Dict] = None):
        """Log INFO"""
        self._log(logging.INFO, message, extra_data)

    def warning(self, message: str, extra_data: Optional[Dict] = None):
        """Log WARNING"""
        self._log(logging.WARNING, message, extra_data)

    def error(self, message: str, extra_data: Optional[Dict] = None, exc_info=None):
        """Log ERROR"""
        self._log(logging.ERROR, message, extra_data, exc_info)


# ============================================================================
# SETUP FUNCTION
# ============================================================================

def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_dir: Path = Path("./logs"),
    log_format: str = "json",
    log_rotation_mb: int = 10,
    log_retention_days: int = 7,
    enable_console: bool = True,
) -> LedgerLogger:
    """
    Setup logging system completo.

    Args:
        log_level: Level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Salva su file
        log_dir: Directory log files
        log_format: Formato file (json, text)
        log_rotation_mb: MB prima rotation
        log_retention_days: Numero backup mantenuti
        enable_console: Log anche su console (stderr)

    Returns:
        LedgerLogger: Logger root configurato

    Example:
        >>> logger = setup_logging(log_level="DEBUG", log_format="json")
        >>> logger.info("Handler ready", extra_data={"utxos": 3})
    """
    root_logger = logging.getLogger("utxo_ledger")
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Clear existing handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    # ========================================================================
    # FILE HANDLERS (with rotation)
    # ========================================================================

    if log_to_file:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "utxo_ledger.log",
            maxBytes=log_rotation_mb * 1024 * 1024,
            backupCount=log_retention_days,
            encoding='utf-8'
        )
        file_handler.setFormatter(_file_formatter(log_format))
        root_logger.addHandler(file_handler)

        # Separate error log
        error_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "utxo_ledger_errors.log",
            maxBytes=log_rotation_mb * 1024 * 1024,
            backupCount=log_retention_days,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(_file_formatter(log_format))
        root_logger.addHandler(error_handler)

    # ========================================================================
    # CONSOLE HANDLER
    # ========================================================================

    if enable_console:
        # stderr: stdout resta libero per l'output della CLI
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ColoredTextFormatter())
        root_logger.addHandler(console_handler)

    return LedgerLogger(root_logger)


def _file_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JSONFormatter()
    return logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')


# ============================================================================
# CATEGORY LOGGERS
# ============================================================================

def get_logger(category: str) -> LedgerLogger:
    """
    Ottieni logger per categoria specifica.

    Args:
        category: Categoria (utxo, validation, handler, crypto, cli, ...)

    Returns:
        LedgerLogger: Logger per categoria

    Example:
        >>> utxo_logger = get_logger("utxo")
        >>> utxo_logger.debug("UTXO added")
    """
    return LedgerLogger(logging.getLogger(f"utxo_ledger.{category}"))


# ============================================================================
# PERFORMANCE TRACKING
# ============================================================================

class PerformanceLogger:
    """
    Context manager per tracking performance.

    Example:
        >>> logger = get_logger("handler")
        >>> with PerformanceLogger(logger, "handle_txs"):
        ...     handler.handle_txs(candidates)
        # Logs: "handle_txs completed in 0.123ms"
    """

    def __init__(
        self,
        logger: LedgerLogger,
        operation: str,
        threshold_ms: Optional[int] = None
    ):
        self.logger = logger
        self.operation = operation
        self.threshold_ms = threshold_ms
        self.start_time: Optional[float] = None
        self.elapsed_ms: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000

        extra = {
            "operation": self.operation,
            "duration_ms": round(self.elapsed_ms, 2)
        }

        if self.threshold_ms and self.elapsed_ms > self.threshold_ms:
            self.logger.warning(
                f"{self.operation} took {self.elapsed_ms:.2f}ms (threshold: {self.threshold_ms}ms)",
                extra_data=extra
            )
        else:
            self.logger.debug(
                f"{self.operation} completed in {self.elapsed_ms:.2f}ms",
                extra_data=extra
            )


# ============================================================================
# AUDIT LOGGER
# ============================================================================

class AuditLogger:
    """
    Logger specializzato per audit trail.

    Registra (JSON, una riga per evento):
    - Transazioni accettate in un epoch
    - Riepilogo di ogni epoch
    """

    def __init__(self, log_dir: Path = Path("./logs")):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.audit_file = self.log_dir / "audit.log"

        self.logger = logging.getLogger("utxo_ledger.audit")
        self.logger.setLevel(logging.INFO)

        # File handler (no rotation per audit - keep all)
        self._handler = logging.FileHandler(self.audit_file, encoding='utf-8')
        self._handler.setFormatter(JSONFormatter(include_extra=True))

        self.logger.addHandler(self._handler)

    def log_transaction_accepted(
        self,
        txid: str,
        inputs_spent: int,
        outputs_created: int
    ):
        """Log transazione accettata"""
        self.logger.info(
            "Transaction accepted",
            extra={
                'extra_data': {
                    "action": "transaction_accepted",
                    "txid": txid,
                    "inputs_spent": inputs_spent,
                    "outputs_created": outputs_created,
                    "timestamp": datetime.now(timezone.utc).isoformat()
                }
            }
        )

    def log_epoch_processed(self, candidates: int, accepted: int, utxo_count: int):
        """Log riepilogo epoch"""
        self.logger.info(
            "Epoch processed",
            extra={
                'extra_data': {
                    "action": "epoch_processed",
                    "candidates": candidates,
                    "accepted": accepted,
                    "rejected": candidates - accepted,
                    "utxo_count": utxo_count,
                    "timestamp": datetime.now(timezone.utc).isoformat()
                }
            }
        )

    def close(self):
        """Chiudi file handler audit"""
        self.logger.removeHandler(self._handler)
        self._handler.close()

        if _AUDIT_LOGGERS.get(self.log_dir.resolve()) is self:
            del _AUDIT_LOGGERS[self.log_dir.resolve()]


# Un AuditLogger per directory: ogni evento scritto una sola volta
_AUDIT_LOGGERS: Dict[Path, AuditLogger] = {}


def get_audit_logger(log_dir: Path = Path("./logs")) -> AuditLogger:
    """
    AuditLogger condiviso per `log_dir`.

    Handler diversi con la stessa directory ricevono la stessa istanza,
    quindi un solo FileHandler su audit.log.
    """
    key = Path(log_dir).resolve()
    audit_logger = _AUDIT_LOGGERS.get(key)

    if audit_logger is None:
        audit_logger = AuditLogger(key)
        _AUDIT_LOGGERS[key] = audit_logger

    return audit_logger


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "setup_logging",
    "get_logger",
    "LedgerLogger",
    "PerformanceLogger",
    "AuditLogger",
    "get_audit_logger",
    "JSONFormatter",
    "ColoredTextFormatter",
]
