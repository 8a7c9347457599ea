"""Logging based on loguru with null methods for disabled levels.

Every module gets its logger with

    from .logsetup import get_module_logger
    logger = get_module_logger(__file__)

and logs with the loguru level methods (`trace`, `debug`, `info`, `success`,
`warning`, `error`, `critical`, `exception`). Methods of levels below the
effective level of a module are replaced by a no-op, so disabled trace calls
inside the frame walker loop cost a single function call.

The effective level of a module is its entry in `Config.module_log_levels`,
bounded by the global `Config.log_level`. Output goes to the console (with
optional line wrapping) and, if `Config.log_filepath` is set, to a rotating
log file. Changing one of these settings through `Config.set()` reconfigures
all existing loggers.
"""

import pathlib
import sys
import textwrap
from typing import Dict, Any, Callable
from loguru import logger as loguru_logger
from .packagetypes import LogLevel

_LEVEL_PRIORITY = {
    LogLevel.TRACE: 0,
    LogLevel.DEBUG: 1,
    LogLevel.INFO: 2,
    LogLevel.SUCCESS: 3,
    LogLevel.WARNING: 4,
    LogLevel.ERROR: 5,
    LogLevel.CRITICAL: 6,
    LogLevel.NOTSET: 999
}

_MODULE_COLUMN_WIDTH = 12
_DEFAULT_LOG_FILENAME = "mpeak.log"
_FILE_FORMAT = ("{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
                "{extra[module]: <" + str(_MODULE_COLUMN_WIDTH) + "} | {message}")


class OptimizedLogger:
    """Logger wrapper bound to one module with null methods for disabled levels.

    Parameters
    ----------
    module_name : str
        Name of the module this logger represents, used for context binding
    effective_level : LogLevel
        The effective log level for this logger instance
    """

    _LEVEL_METHODS = {
        'trace': LogLevel.TRACE,
        'debug': LogLevel.DEBUG,
        'info': LogLevel.INFO,
        'success': LogLevel.SUCCESS,
        'warning': LogLevel.WARNING,
        'error': LogLevel.ERROR,
        'critical': LogLevel.CRITICAL
    }

    def __init__(self, module_name: str, effective_level: LogLevel):
        self.module_name = module_name
        self.effective_level = effective_level
        self._setup_methods()

    def _null_method(self, *args, **kwargs):
        pass

    def _is_level_enabled(self, level: LogLevel) -> bool:
        if self.effective_level == LogLevel.NOTSET:
            return False
        return _LEVEL_PRIORITY.get(level, 999) >= _LEVEL_PRIORITY.get(self.effective_level, 999)

    def _setup_methods(self):
        for method_name, level in self._LEVEL_METHODS.items():
            if self._is_level_enabled(level):
                setattr(self, method_name, self._create_log_method(method_name))
            else:
                setattr(self, method_name, self._null_method)

    def _create_log_method(self, level_name: str) -> Callable:
        """Bound logging method forwarding to loguru with the module context.

        depth=1 keeps the caller's source location in the log record.
        """
        def log_method(message, *args, **kwargs):
            loguru_method = getattr(loguru_logger.bind(module=self.module_name).opt(depth=1), level_name)
            return loguru_method(message, *args, **kwargs)
        return log_method

    def exception(self, message, *args, **kwargs):
        """Log `message` at ERROR level together with the current traceback."""
        if self._is_level_enabled(LogLevel.ERROR):
            return loguru_logger.bind(module=self.module_name).opt(depth=1).exception(message, *args, **kwargs)

    def update_level(self, new_effective_level: LogLevel):
        self.effective_level = new_effective_level
        self._setup_methods()


class LoggingManager:
    """Class level manager of the loguru handlers and of all module loggers.

    Attributes
    ----------
    _loggers : Dict[str, OptimizedLogger]
        Registry of all logger instances by module name
    _handler_ids : Dict[str, int]
        Loguru handler IDs by handler name ("console", "file", "null")
    _current_config : Dict[str, Any]
        Logging configuration the handlers were built from
    """
    _loggers: Dict[str, OptimizedLogger] = {}
    _handler_ids: Dict[str, int] = {}
    _current_config: Dict[str, Any] = {}
    _initialized = False

    @classmethod
    def _loguru_level_name(cls, log_level: LogLevel) -> str:
        if log_level == LogLevel.NOTSET:
            return "CRITICAL"  # effectively disabled
        return log_level.value

    @classmethod
    def _wrap_console_message(cls, message: str) -> str:
        """Wrap long console messages; continuation lines align with the message column."""
        from .config import Config

        if Config.terminal_log_max_line_length is None:
            return message

        # "YYYY-MM-DD HH:mm:ss.SSS | LEVEL    | module       | "
        prefix_length = 23 + 3 + 8 + 3 + _MODULE_COLUMN_WIDTH + 3
        max_message_length = max(20, Config.terminal_log_max_line_length - prefix_length)

        if len(message) <= max_message_length:
            return message

        wrapped_lines = textwrap.wrap(message, width=max_message_length)
        if len(wrapped_lines) <= 1:
            return message
        indent = " " * prefix_length
        return wrapped_lines[0] + "\n" + "\n".join(indent + line for line in wrapped_lines[1:])

    @classmethod
    def _console_format_function(cls, record) -> str:
        # the returned string is a loguru template: braces of the message are escaped
        wrapped_message = cls._wrap_console_message(record["message"])
        wrapped_message = wrapped_message.replace("{", "{{").replace("}", "}}")
        module = record["extra"].get("module", "unknown")
        return (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            f"<cyan>{module: <{_MODULE_COLUMN_WIDTH}}</cyan> | "
            f"<level>{wrapped_message}</level>\n"
            "{exception}"
        )

    @classmethod
    def _setup_console_handler(cls, log_level: LogLevel):
        def stderr_sink(message):
            # resolved per message: sys.stderr may be replaced after setup
            sys.stderr.write(message)
            sys.stderr.flush()

        cls._handler_ids["console"] = loguru_logger.add(stderr_sink,
                                                        format=cls._console_format_function,
                                                        level=cls._loguru_level_name(log_level),
                                                        colorize=sys.stderr.isatty())

    @classmethod
    def _setup_file_handler(cls, log_filepath: pathlib.Path, log_level: LogLevel):
        """Rotating log file sink; a directory as path gets the file `mpeak.log`.

        A file sink that can not be created is reported on stderr and skipped,
        the console sink stays active.
        """
        log_filepath = pathlib.Path(log_filepath)
        if log_filepath.is_dir():
            log_filepath = log_filepath / _DEFAULT_LOG_FILENAME
        try:
            log_filepath.parent.mkdir(parents=True, exist_ok=True)
            cls._handler_ids["file"] = loguru_logger.add(str(log_filepath),
                                                         format=_FILE_FORMAT,
                                                         level=cls._loguru_level_name(log_level),
                                                         rotation="10 MB",
                                                         retention="1 week",
                                                         compression="zip",
                                                         encoding="utf-8")
        except (OSError, ValueError) as e:
            print(f"mpeak: no log file '{log_filepath}': {e}", file=sys.stderr)

    @classmethod
    def _remove_handlers(cls):
        for handler_id in cls._handler_ids.values():
            try:
                loguru_logger.remove(handler_id)
            except ValueError:
                # handler already removed
                pass
        cls._handler_ids.clear()

    @classmethod
    def configure(cls, force_reconfigure: bool = False):
        """Build the loguru handlers from `Config` and update all module loggers."""
        from .config import Config  # Import here to avoid circular imports

        current_config = {
            'log_level': Config.log_level,
            'log_filepath': Config.log_filepath,
            'module_log_levels': Config.module_log_levels.copy(),
            'terminal_log_max_line_length': Config.terminal_log_max_line_length
        }

        if not force_reconfigure and cls._initialized and cls._current_config == current_config:
            return

        if cls._initialized:
            cls._remove_handlers()
        else:
            # first initialization: drop loguru's default handler
            loguru_logger.remove()

        cls._current_config = current_config

        if Config.log_level == LogLevel.NOTSET:
            handler_id = loguru_logger.add(
                sys.stderr,
                format="",
                level="CRITICAL",
                filter=lambda record: False
            )
            cls._handler_ids["null"] = handler_id
            for logger_instance in cls._loggers.values():
                logger_instance.update_level(LogLevel.NOTSET)
            cls._initialized = True
            return

        cls._setup_console_handler(Config.log_level)

        if Config.log_filepath is not None:
            cls._setup_file_handler(Config.log_filepath, Config.log_level)

        for module_name, logger_instance in cls._loggers.items():
            logger_instance.update_level(Config.get_effective_log_level(module_name))

        cls._initialized = True

    @classmethod
    def reconfigure(cls):
        cls.configure(force_reconfigure=True)

    @classmethod
    def get_logger(cls, module_name: str) -> OptimizedLogger:
        """Get or create the logger of `module_name` with its current effective level."""
        if not cls._initialized:
            cls.configure()

        from .config import Config
        effective_level = Config.get_effective_log_level(module_name)

        if module_name in cls._loggers:
            cls._loggers[module_name].update_level(effective_level)
        else:
            cls._loggers[module_name] = OptimizedLogger(module_name, effective_level)

        return cls._loggers[module_name]


def get_module_logger(module_file: str) -> OptimizedLogger:
    """Logger of the module with file path `module_file` (typically `__file__`).

    The file name without extension is the module name used for module
    specific log levels and shown in the log records.

    Examples
    --------
        >>> from .logsetup import get_module_logger
        >>> logger = get_module_logger(__file__)
        >>> logger.info("Module initialized")
    """
    module_name = pathlib.Path(module_file).stem
    return LoggingManager.get_logger(module_name)
