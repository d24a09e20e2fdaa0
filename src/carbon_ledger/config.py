"""
Configuration management for the Carbon Ledger service

Loads an optional JSON config file, then applies CARBON_LEDGER_* environment
overrides on top of sensible defaults.
"""

import json
import logging
import os
import secrets
import sys
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Dict, Any, Optional, List

# List of known weak/default JWT secrets that should be rejected
WEAK_JWT_SECRETS = {
    "your-secret-key-change-in-production",
    "secret",
    "key",
    "password",
    "jwt-secret",
    "secret-key",
    "change-me",
    "default",
    "test",
    "development",
    "dev",
    "demo",
    "example",
    "sample",
}

ENV_PREFIX = "CARBON_LEDGER_"


def _env(name: str) -> Optional[str]:
    return os.getenv(f"{ENV_PREFIX}{name}")


def _env_flag(name: str, default: bool) -> bool:
    raw = _env(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _validate_jwt_secret_key(jwt_secret_key: str) -> None:
    """Validate JWT secret key security and reject weak/default keys.

    Args:
        jwt_secret_key: The JWT secret key to validate

    Raises:
        SystemExit: If the secret key is weak, default, or insecure
    """
    if not jwt_secret_key:
        logging.critical(
            "JWT secret key is empty - this is a critical security vulnerability"
        )
        sys.exit(1)

    if len(jwt_secret_key) < 32:
        logging.critical(
            f"JWT secret key is too short ({len(jwt_secret_key)} chars). "
            f"Minimum 32 characters required for security."
        )
        sys.exit(1)

    if jwt_secret_key.lower() in WEAK_JWT_SECRETS:
        logging.critical(
            f"JWT secret key '{jwt_secret_key}' is a known weak/default secret. "
            f"Set {ENV_PREFIX}JWT_SECRET_KEY environment variable with a secure key."
        )
        sys.exit(1)

    unique_chars = len(set(jwt_secret_key))
    if unique_chars < 8:
        logging.critical(
            f"JWT secret key has too little entropy ({unique_chars} unique chars)."
        )
        sys.exit(1)

    logging.debug(
        f"JWT secret key validation passed ({len(jwt_secret_key)} chars, {unique_chars} unique)"
    )


@dataclass
class DatabaseConfig:
    """Database configuration."""

    url: str = "sqlite:///carbon_ledger.db"
    echo: bool = False
    log_queries: bool = False  # Enable query logging for performance analysis


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    auto_reload: bool = False
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://127.0.0.1:8000", "http://localhost:8000"]
    )


@dataclass
class LedgerConfig:
    """Ledger behaviour settings."""

    # Administrative identity allowed to mint; fixed for the lifetime of a ledger
    admin_principal: str = "admin"
    strict_enumeration: bool = True
    max_page_size: int = 100


@dataclass
class AppConfig:
    """Main application configuration."""

    app_name: str = "Carbon Ledger"
    description: str = "Issuance, custody transfer and retirement of carbon credit tokens"

    # JWT Configuration - secret key will be auto-generated or from environment
    jwt_secret_key: str = ""
    jwt_access_token_expires_minutes: int = 60

    # Request size limits (bytes)
    single_request_limit: int = 16 * 1024
    batch_request_limit: int = 64 * 1024

    # Logging
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"


@dataclass
class CarbonLedgerConfig:
    """Complete configuration for the Carbon Ledger service."""

    app: AppConfig
    server: ServerConfig
    database: DatabaseConfig
    ledger: LedgerConfig

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "app": asdict(self.app),
            "server": asdict(self.server),
            "database": asdict(self.database),
            "ledger": asdict(self.ledger),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CarbonLedgerConfig":
        """Create from dictionary."""
        return cls(
            app=AppConfig(**data.get("app", {})),
            server=ServerConfig(**data.get("server", {})),
            database=DatabaseConfig(**data.get("database", {})),
            ledger=LedgerConfig(**data.get("ledger", {})),
        )


class ConfigManager:
    """Manages configuration loading, saving, and environment overrides."""

    def __init__(self):
        self.config_file: Optional[Path] = None
        self.config: Optional[CarbonLedgerConfig] = None

    def get_config_file_path(self) -> Path:
        """Get the path for the config file."""
        explicit = _env("CONFIG_FILE")
        if explicit:
            return Path(explicit)
        return Path.cwd() / "data" / "config.json"

    def apply_environment(self, config: CarbonLedgerConfig) -> CarbonLedgerConfig:
        """Apply CARBON_LEDGER_* environment overrides in place."""
        if _env("DATABASE_URL"):
            config.database.url = _env("DATABASE_URL")
        if _env("ADMIN"):
            config.ledger.admin_principal = _env("ADMIN").strip()
        if _env("JWT_SECRET_KEY"):
            config.app.jwt_secret_key = _env("JWT_SECRET_KEY")
        if _env("LOG_DIR"):
            config.app.log_dir = _env("LOG_DIR")
        if _env("MAX_PAGE_SIZE"):
            config.ledger.max_page_size = int(_env("MAX_PAGE_SIZE"))

        config.server.debug = _env_flag("DEBUG", config.server.debug)
        config.database.log_queries = _env_flag("LOG_QUERIES", config.database.log_queries)
        config.app.log_to_file = _env_flag("LOG_TO_FILE", config.app.log_to_file)
        config.ledger.strict_enumeration = _env_flag(
            "STRICT_ENUMERATION", config.ledger.strict_enumeration
        )
        if config.server.debug:
            config.app.log_level = "DEBUG"
        return config

    def create_default_config(self) -> CarbonLedgerConfig:
        """Create default configuration with environment overrides applied."""
        config = CarbonLedgerConfig(
            app=AppConfig(),
            server=ServerConfig(),
            database=DatabaseConfig(),
            ledger=LedgerConfig(),
        )
        return self.apply_environment(config)

    def _ensure_jwt_secret(self, config: CarbonLedgerConfig) -> None:
        if not config.app.jwt_secret_key:
            # Tokens signed with a generated key only survive this process
            config.app.jwt_secret_key = secrets.token_urlsafe(64)
            logging.info("Generated new JWT secret key (not from environment)")
        _validate_jwt_secret_key(config.app.jwt_secret_key)

    def load_config(self) -> CarbonLedgerConfig:
        """Load configuration from file or create default, caching the result."""
        if self.config is not None:
            return self.config

        self.config_file = self.get_config_file_path()

        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                config = self.apply_environment(CarbonLedgerConfig.from_dict(data))
                logging.info(f"Loaded configuration from {self.config_file}")
            except (OSError, ValueError, TypeError) as e:
                logging.warning(f"Failed to load config from {self.config_file}: {e}")
                logging.info("Creating default configuration")
                config = self.create_default_config()
        else:
            config = self.create_default_config()

        self._ensure_jwt_secret(config)
        self.config = config
        return self.config

    def save_config(self, config: Optional[CarbonLedgerConfig] = None) -> bool:
        """Save configuration to file (the JWT secret is never written)."""
        if config is None:
            config = self.config

        if config is None:
            logging.error("No configuration to save")
            return False

        try:
            if self.config_file is None:
                self.config_file = self.get_config_file_path()
            self.config_file.parent.mkdir(parents=True, exist_ok=True)

            data = config.to_dict()
            data["app"].pop("jwt_secret_key", None)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

            logging.info(f"Saved configuration to {self.config_file}")
            return True

        except OSError as e:
            logging.error(f"Failed to save config to {self.config_file}: {e}")
            return False

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of warnings/errors."""
        config = self.load_config()
        issues = []

        if not config.ledger.admin_principal:
            issues.append("Administrative principal is empty")
        if config.ledger.max_page_size < 1:
            issues.append(
                f"max_page_size must be positive, got {config.ledger.max_page_size}"
            )

        db_url = config.database.url
        if db_url.startswith("sqlite:///"):
            db_dir = Path(db_url.replace("sqlite:///", "")).parent
            if db_dir.exists() and not os.access(db_dir, os.W_OK):
                issues.append(f"Database directory is not writable: {db_dir}")

        return issues


# Global config manager instance
config_manager = ConfigManager()


def get_config() -> CarbonLedgerConfig:
    """Get the current configuration."""
    return config_manager.load_config()


def validate_startup_config() -> None:
    """Fail fast on configuration problems before serving requests.

    Raises:
        SystemExit: If the configuration is unusable
    """
    issues = config_manager.validate_config()
    for issue in issues:
        logging.critical(f"Configuration problem: {issue}")
    if issues:
        sys.exit(1)
    logging.info("Startup configuration validation completed successfully")
