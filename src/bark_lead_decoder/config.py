#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Configuration management for the Bark Lead Decoder.

This module loads configuration from environment variables, files, and provides
sensible defaults. It also validates configuration values.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

from dotenv import load_dotenv

from bark_lead_decoder.locales import Locale, get_locale, locale_from_dict

# Load environment variables from .env file
load_dotenv()

# Base directories
ROOT_DIR = Path(__file__).parent.parent.parent.absolute()
CONFIG_DIR = ROOT_DIR / "config"
DATA_DIR = ROOT_DIR / "data"
LOGS_DIR = ROOT_DIR / "logs"

# Default file paths
DEFAULT_DB_PATH = DATA_DIR / "contacts.db"
DEFAULT_LOG_PATH = LOGS_DIR / "decoder.log"

# Log levels
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "yes", "1")


@dataclass
class AppConfig:
    """Application configuration."""

    # Database
    db_path: Path = field(
        default_factory=lambda: Path(os.getenv("LEAD_DB_PATH", str(DEFAULT_DB_PATH)))
    )

    # Logging
    log_level: int = field(
        default_factory=lambda: LOG_LEVELS.get(
            os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO
        )
    )
    log_file_path: Path = field(
        default_factory=lambda: Path(os.getenv("LOG_FILE_PATH", str(DEFAULT_LOG_PATH)))
    )

    # Locale
    locale_name: str = field(
        default_factory=lambda: os.getenv("DECODER_LOCALE", "us").lower()
    )
    locale_path: Optional[Path] = field(
        default_factory=lambda: Path(os.environ["DECODER_LOCALE_PATH"])
        if os.getenv("DECODER_LOCALE_PATH") else None
    )

    # Decoding
    lead_source_tag: str = field(
        default_factory=lambda: os.getenv("LEAD_SOURCE_TAG", "bark.com")
    )
    max_services: int = field(
        default_factory=lambda: int(os.getenv("MAX_SERVICES", "10"))
    )
    max_workers: int = field(
        default_factory=lambda: int(os.getenv("DECODER_MAX_WORKERS", "1"))
    )
    processing_timeout_seconds: int = field(
        default_factory=lambda: int(os.getenv("PROCESSING_TIMEOUT_SECONDS", "0"))
    )
    scoped_phone_context: bool = field(
        default_factory=lambda: _env_flag("SCOPED_PHONE_CONTEXT")
    )
    phone_context_window: int = field(
        default_factory=lambda: int(os.getenv("PHONE_CONTEXT_WINDOW", "40"))
    )

    # CRM
    default_user_id: int = field(
        default_factory=lambda: int(os.getenv("DEFAULT_USER_ID", "1"))
    )

    # Debug options
    debug_mode: bool = field(default_factory=lambda: _env_flag("DEBUG_MODE"))

    def validate(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List[str]: List of validation errors, empty if valid
        """
        errors = []

        for path_name, path in [
            ("Database path", self.db_path),
            ("Log file path", self.log_file_path),
        ]:
            if path.is_dir():
                errors.append(f"{path_name} is a directory: {path}")

        if self.locale_path is not None and not self.locale_path.exists():
            errors.append(f"Locale file does not exist: {self.locale_path}")

        try:
            get_locale(self.locale_name)
        except KeyError:
            errors.append(f"Unknown DECODER_LOCALE: {self.locale_name}")

        if self.max_services <= 0:
            errors.append("MAX_SERVICES must be positive")

        if self.max_workers <= 0:
            errors.append("DECODER_MAX_WORKERS must be positive")

        if self.processing_timeout_seconds < 0:
            errors.append("PROCESSING_TIMEOUT_SECONDS must not be negative")

        if self.phone_context_window <= 0:
            errors.append("PHONE_CONTEXT_WINDOW must be positive")

        return errors

    def ensure_directories(self) -> None:
        """Create the database and log directories if missing."""
        for directory in (self.db_path.parent, self.log_file_path.parent):
            directory.mkdir(parents=True, exist_ok=True)

    def load_locale_config(self, path: Path) -> Dict[str, Any]:
        """
        Load a JSON locale definition.

        Args:
            path: Path to the locale file

        Returns:
            Dict: Loaded definition or empty dict if the file doesn't exist
        """
        try:
            if path.exists():
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
            else:
                return {}
        except Exception as e:
            logging.error(f"Error loading locale configuration from {path}: {str(e)}")
            return {}

    def get_locale(self, name: Optional[str] = None) -> Locale:
        """
        Resolve the configured locale.

        A locale file takes precedence; its keys override the built-in locale
        named by ``name``, or by DECODER_LOCALE when no name is given.
        """
        base = get_locale(name or self.locale_name)
        if self.locale_path is None:
            return base

        overrides = self.load_locale_config(self.locale_path)
        if not overrides:
            return base
        return locale_from_dict(overrides, base=base)


# Create a global config instance
config = AppConfig()
