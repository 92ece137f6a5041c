"""
UTXO Ledger - Configuration Management
========================================
Gestione centralizzata configurazione con Pydantic Settings.
Supporta environment variables, file .env, override runtime.

Security Level: HIGH
Last Updated: 2026-10-18
Version: 1.0.0

Features:
- Validazione automatica tipi
- Environment variables con prefisso UTXO_LEDGER_
- File .env support
- Profile preset (dev/default)
"""

import os
from pathlib import Path
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utxo_ledger.constants import (
    SIGNATURE_ALGORITHMS,
    DEFAULT_SIGNATURE_ALGORITHM,
)


# ============================================================================
# MAIN CONFIGURATION CLASS
# ============================================================================

class LedgerSettings(BaseSettings):
    """
    Configurazione principale UTXO Ledger.

    Supporta:
    - Caricamento da environment variables (UTXO_LEDGER_*)
    - Caricamento da file .env
    - Override programmatici
    - Validazione automatica

    Example:
        # Da environment
        export UTXO_LEDGER_CRYPTO_ALGORITHM=ed25519
        export UTXO_LEDGER_LOG_LEVEL=DEBUG

        # Da codice
        config = LedgerSettings(crypto_algorithm="ed25519")
    """

    model_config = SettingsConfigDict(
        env_prefix='UTXO_LEDGER_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # ========================================================================
    # CRYPTO
    # ========================================================================

    crypto_algorithm: str = Field(
        default=DEFAULT_SIGNATURE_ALGORITHM,
        description="Algoritmo firma: ecdsa (secp256k1), ed25519"
    )

    # ========================================================================
    # HANDLER
    # ========================================================================

    slow_epoch_threshold_ms: int = Field(
        default=1000,
        ge=1,
        description="Soglia (ms) oltre la quale un epoch viene loggato come lento"
    )

    audit_enabled: bool = Field(
        default=False,
        description="Scrivi audit trail delle transazioni accettate"
    )

    # ========================================================================
    # LOGGING
    # ========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )

    log_to_file: bool = Field(
        default=False,
        description="Salva log su file"
    )

    log_dir: Path = Field(
        default=Path("./logs"),
        description="Directory log files (e audit trail)"
    )

    log_format: str = Field(
        default="json",
        description="Formato log file: json, text"
    )

    log_rotation_mb: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="MB prima di rotation"
    )

    log_retention_days: int = Field(
        default=7,
        ge=1,
        le=365,
        description="Numero file di backup mantenuti"
    )

    # ========================================================================
    # VALIDATORS
    # ========================================================================

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Valida log level"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log_level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Valida formato log"""
        valid_formats = ['json', 'text']
        v_lower = v.lower()
        if v_lower not in valid_formats:
            raise ValueError(f"Invalid log_format: {v}. Must be one of {valid_formats}")
        return v_lower

    @field_validator('crypto_algorithm')
    @classmethod
    def validate_crypto_algorithm(cls, v: str) -> str:
        """Valida algoritmo crypto"""
        v_lower = v.lower()
        if v_lower not in SIGNATURE_ALGORITHMS:
            raise ValueError(
                f"Invalid crypto_algorithm: {v}. Must be one of {list(SIGNATURE_ALGORITHMS)}"
            )
        return v_lower

    # ========================================================================
    # HELPER METHODS
    # ========================================================================

    def to_dict(self) -> dict:
        """Serializza config"""
        return self.model_dump()

    def to_json(self) -> str:
        """Serializza config in JSON"""
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, json_str: str) -> "LedgerSettings":
        """Carica config da JSON"""
        return cls.model_validate_json(json_str)

    def __repr__(self) -> str:
        return (
            f"LedgerSettings("
            f"crypto_algorithm={self.crypto_algorithm}, "
            f"log_level={self.log_level}, "
            f"audit_enabled={self.audit_enabled})"
        )


# ============================================================================
# SINGLETON INSTANCE
# ============================================================================

_config_instance: Optional[LedgerSettings] = None


@lru_cache(maxsize=1)
def get_settings() -> LedgerSettings:
    """
    Ottieni singleton instance di LedgerSettings.

    Cached (chiamate multiple restituiscono stessa istanza).

    Example:
        >>> config = get_settings()
        >>> config.crypto_algorithm
        'ecdsa'
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = LedgerSettings()

    return _config_instance


def reload_settings() -> LedgerSettings:
    """
    Ricarica settings (invalida cache).

    Usare quando si cambiano environment variables runtime.
    """
    global _config_instance

    get_settings.cache_clear()
    _config_instance = None

    return get_settings()


def override_settings(**kwargs) -> LedgerSettings:
    """
    Crea settings con valori custom (non tocca il singleton).

    Utile per testing.

    Example:
        >>> test_config = override_settings(crypto_algorithm="ed25519")
    """
    return LedgerSettings(**kwargs)


# ============================================================================
# PROFILE PRESETS
# ============================================================================

def get_development_config() -> LedgerSettings:
    """
    Config preset per development.

    Features:
    - Log DEBUG in formato testo
    - Audit trail attivo
    """
    return LedgerSettings(
        log_level="DEBUG",
        log_format="text",
        audit_enabled=True,
    )


# ============================================================================
# CONFIGURATION VALIDATION
# ============================================================================

def validate_config(config: LedgerSettings) -> tuple[bool, list[str]]:
    """
    Valida configurazione completa.

    Returns:
        tuple: (is_valid, errors_list)

    Example:
        >>> is_valid, errors = validate_config(get_settings())
    """
    errors = []

    # Directory log scrivibile se serve
    if config.log_to_file or config.audit_enabled:
        log_dir = config.log_dir
        probe = log_dir if log_dir.exists() else log_dir.parent
        if not os.access(probe, os.W_OK):
            errors.append(f"Directory not writable: {log_dir}")

    return (len(errors) == 0, errors)


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "LedgerSettings",
    "get_settings",
    "reload_settings",
    "override_settings",
    "get_development_config",
    "validate_config",
]
