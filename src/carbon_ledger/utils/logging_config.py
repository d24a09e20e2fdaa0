"""
Centralized logging configuration for the Carbon Ledger.
Provides component-specific loggers, optionally with separate log files.
"""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any

from ..config import get_config

DETAILED_FORMAT = (
    '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s'
)
SIMPLE_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


class ComponentLogger:
    """Manages component-specific logging with separate files."""

    _loggers: Dict[str, logging.Logger] = {}
    _initialized = False
    _log_dir: Optional[Path] = None
    _to_file = False

    # Component definitions with their log levels
    COMPONENTS = {
        'ledger': {'level': logging.INFO, 'file': 'ledger.log'},
        'api': {'level': logging.INFO, 'file': 'api.log'},
        'database': {'level': logging.INFO, 'file': 'database.log'},
        'auth': {'level': logging.INFO, 'file': 'auth.log'},
        'main': {'level': logging.INFO, 'file': 'main.log'},
        'error': {'level': logging.ERROR, 'file': 'errors.log'},  # Centralized error log
    }

    # Module path segment -> component
    MODULE_COMPONENTS = {
        'core': 'ledger',
        'domain': 'ledger',
        'api': 'api',
        'db': 'database',
        'repositories': 'database',
        'auth': 'auth',
    }

    @classmethod
    def initialize(cls, log_dir: Optional[str] = None, debug: Optional[bool] = None) -> None:
        """
        Initialize the logging system with component-specific loggers.

        Args:
            log_dir: Directory for log files. Defaults to config.app.log_dir
            debug: Enable debug logging for all components. Defaults to config.server.debug
        """
        if cls._initialized:
            return

        config = get_config()
        if debug is None:
            debug = config.server.debug
        cls._to_file = config.app.log_to_file

        if cls._to_file:
            base_dir = Path(log_dir) if log_dir else Path(config.app.log_dir)
            session_dir = datetime.now().strftime("%Y%m%d_%H%M%S")
            cls._log_dir = base_dir / session_dir
            cls._log_dir.mkdir(parents=True, exist_ok=True)

        root_level = logging.DEBUG if debug else logging.getLevelName(config.app.log_level)
        if not isinstance(root_level, int):
            root_level = logging.INFO

        unified_handler = None
        if cls._to_file:
            unified_handler = logging.handlers.RotatingFileHandler(
                cls._log_dir / 'unified.log',
                maxBytes=20 * 1024 * 1024,  # 20MB
                backupCount=3,
                encoding='utf-8'
            )
            unified_handler.setLevel(root_level)
            unified_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))

        for component_name, component_config in cls.COMPONENTS.items():
            level = logging.DEBUG if debug else max(component_config['level'], root_level)
            cls._loggers[component_name] = cls._build_logger(
                component_name, level, component_config['file'], unified_handler
            )

        # Mark as initialized before logging to avoid recursion
        cls._initialized = True

        main_logger = cls._loggers['main']
        main_logger.debug(
            f"Logging initialized (debug={debug}, to_file={cls._to_file}, dir={cls._log_dir})"
        )

    @classmethod
    def _build_logger(
        cls,
        component: str,
        level: int,
        file_name: str,
        unified_handler: Optional[logging.Handler],
    ) -> logging.Logger:
        logger = logging.getLogger(f"carbon_ledger.{component}")
        logger.handlers.clear()
        logger.setLevel(level)

        if cls._to_file:
            logger.propagate = False
            file_handler = logging.handlers.RotatingFileHandler(
                cls._log_dir / file_name,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
            logger.addHandler(file_handler)
            if unified_handler is not None:
                logger.addHandler(unified_handler)
            if component in ('error', 'main'):
                console_handler = logging.StreamHandler(sys.stderr)
                console_handler.setLevel(logging.ERROR)
                console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT, datefmt='%H:%M:%S'))
                logger.addHandler(console_handler)
        else:
            # Console mode: let records reach the root logger (and pytest's caplog)
            logger.propagate = True

        return logger

    @classmethod
    def _component_for(cls, name: str) -> str:
        if not name.startswith('carbon_ledger.'):
            return name
        parts = name.split('.')
        if len(parts) >= 2 and parts[1] in cls.MODULE_COMPONENTS:
            return cls.MODULE_COMPONENTS[parts[1]]
        return 'main'

    @classmethod
    def get_logger(cls, component: str) -> logging.Logger:
        """
        Get a logger for a specific component.

        Args:
            component: Component name (ledger, api, database, auth, ...) or a
                      module path like 'carbon_ledger.core.minting'
        """
        if not cls._initialized:
            cls.initialize()

        component = cls._component_for(component)
        if component not in cls._loggers:
            level = cls._loggers['main'].level
            cls._loggers[component] = cls._build_logger(
                component, level, f'{component}.log', None
            )
        return cls._loggers[component]

    @classmethod
    def log_exception(cls, component: str, exc: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Log an exception with context to both component and error logs.

        Args:
            component: Component where the exception occurred
            exc: The exception to log
            context: Additional context information
        """
        component_logger = cls.get_logger(component)
        error_logger = cls.get_logger('error')

        context_str = ""
        if context:
            context_str = " | Context: " + ", ".join(f"{k}={v}" for k, v in context.items())

        component_logger.error(
            f"Exception in {component}: {type(exc).__name__}: {exc}{context_str}", exc_info=exc
        )
        if cls._to_file:
            error_logger.error(f"[{component}] {type(exc).__name__}: {exc}{context_str}", exc_info=exc)

    @classmethod
    def get_log_directory(cls) -> Optional[Path]:
        """Get the current log directory path."""
        return cls._log_dir

    @classmethod
    def reset(cls) -> None:
        """Forget configured loggers so the next call re-reads the configuration."""
        for logger in cls._loggers.values():
            for handler in list(logger.handlers):
                handler.close()
            logger.handlers.clear()
            logger.propagate = True
        cls._loggers = {}
        cls._initialized = False
        cls._log_dir = None
        cls._to_file = False


# Convenience functions
def get_logger(component: str) -> logging.Logger:
    """Get a logger for a specific component."""
    return ComponentLogger.get_logger(component)


def initialize_logging(log_dir: Optional[str] = None, debug: Optional[bool] = None) -> None:
    """Initialize the logging system."""
    ComponentLogger.initialize(log_dir=log_dir, debug=debug)


def log_exception(component: str, exc: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """Log an exception with context."""
    ComponentLogger.log_exception(component, exc, context)


def get_log_directory() -> Optional[Path]:
    """Get the current log directory path."""
    return ComponentLogger.get_log_directory()
