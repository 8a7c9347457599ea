"""Configuration management with YAML import/export.

All parameters are class variables of `Config`, so they are visible to the IDE
and to static type checkers. Parameters listed in `_CONFIGURABLE_KEYS` can be
changed at runtime through `Config.set()`, which validates every value and
reconfigures logging if a logging parameter changed. Everything else defined
in the class body is immutable at runtime.

Usage Examples
--------------
Runtime modification:
    ```python
    from mpeak.config import Config
    from mpeak.packagetypes import LogLevel, WalkPolicy

    Config.set(log_level=LogLevel.DEBUG, frame_walk_policy=WalkPolicy.LENIENT)
    ```

YAML export and import:
    ```python
    import pathlib

    Config.export_to_yaml(pathlib.Path("mpeak.yaml"))
    Config.import_from_yaml(pathlib.Path("mpeak.yaml"))
    ```

Module-specific log level:
    ```python
    Config.set_module_log_level("frames", LogLevel.TRACE)
    ```
"""

from __future__ import annotations # This has to be the first line of code.
import pathlib
import inspect
import re
import yaml
from datetime import datetime
from typing import Dict, Any
from .packagetypes import LogLevel, WalkPolicy


class Config:
    """Package wide configuration.

    Attributes
    ----------
    log_level : LogLevel
        Global logging level that acts as upper bound for all loggers
    log_filepath : pathlib.Path or None
        File path for log output, None disables file logging
    module_log_levels : Dict[str, LogLevel]
        Module-specific log level overrides
    terminal_log_max_line_length : int or None
        Maximum line length for terminal output, None disables wrapping
    frame_walk_policy : WalkPolicy
        Default handling of invalid frame headers by the frame walker
    max_workers : int or None
        Worker threads for parallel side information decoding, None lets
        `ThreadPoolExecutor` decide
    frame_index_chunk_size : int
        Rows per chunk of a frame index array in zarr
    mix_probability : float
        Probability that the mixer takes a frame from the first stream
    """

    # configurable values
    # -------------------
    _CONFIGURABLE_KEYS = [  "log_level",
                            "log_filepath",
                            "module_log_levels",
                            "terminal_log_max_line_length",
                            "frame_walk_policy",
                            "max_workers",
                            "frame_index_chunk_size",
                            "mix_probability"
                         ]

    log_level: LogLevel = LogLevel.WARNING              # Global logging level (acts as upper bound)
    log_filepath: pathlib.Path|None = None              # Set a path to write logging outputs into a file
    module_log_levels: Dict[str, LogLevel] = {}         # Module-specific log levels
    terminal_log_max_line_length: int|None = 120        # Maximum line length for terminal output (None = no wrapping)
    frame_walk_policy: WalkPolicy = WalkPolicy.STRICT   # Invalid frame header: "strict" raises, "lenient" salvages the rest
    max_workers: int|None = None                        # Threads for parallel side information decoding (None = automatic)
    frame_index_chunk_size: int = 1000                  # Rows per chunk of a frame index array in zarr
    mix_probability: float = 0.5                        # Probability to take a frame of the first file when mixing

    # immutable keys  (can not be changed during runtime; only changeable at this position)
    # --------------
    version = (1,0)                                     # (Major, Minor, Patch) ; Patch is optional
    frame_index_magic_id = "mpeak_mp3_frame_index"
    frame_index_format_version = (1,0)

    @classmethod
    def set_module_log_level(cls, module_name: str, log_level: LogLevel):
        """Set log level for a specific module and reconfigure logging.

        The module level can not be less restrictive than the global level.
        """
        cls.module_log_levels[module_name] = cls._coerce_log_level(log_level)
        from .logsetup import LoggingManager
        LoggingManager.reconfigure()

    @classmethod
    def get_effective_log_level(cls, module_name: str) -> LogLevel:
        """Effective log level of a module; the global level is the upper bound."""
        module_level = cls.module_log_levels.get(module_name, cls.log_level)

        global_priority = cls._get_log_level_priority(cls.log_level)
        module_priority = cls._get_log_level_priority(module_level)

        # the more restrictive level wins
        if global_priority > module_priority:
            return cls.log_level
        return module_level

    @classmethod
    def _get_log_level_priority(cls, log_level: LogLevel) -> int:
        priority_mapping = {
            LogLevel.TRACE: 0,
            LogLevel.DEBUG: 1,
            LogLevel.INFO: 2,
            LogLevel.SUCCESS: 3,
            LogLevel.WARNING: 4,
            LogLevel.ERROR: 5,
            LogLevel.CRITICAL: 6,
            LogLevel.NOTSET: 999  # Most restrictive
        }
        return priority_mapping.get(log_level, 999)

    @classmethod
    def _coerce_log_level(cls, value: Any) -> LogLevel:
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, str):
            try:
                return LogLevel(value.upper())
            except ValueError:
                raise ValueError(
                    f"Invalid log_level: '{value}'. "
                    f"Must be one of: {[lvl.value for lvl in LogLevel]}"
                )
        raise TypeError(f"Log level must be a str or LogLevel, got {type(value).__name__}")

    @classmethod
    def _validated(cls, key: str, value: Any) -> Any:
        """Return `value` converted to the type of `key` or raise TypeError/ValueError."""
        if key == "log_level":
            return cls._coerce_log_level(value)

        if key == "log_filepath":
            if value is None or isinstance(value, pathlib.Path):
                return value
            if isinstance(value, str):
                return pathlib.Path(value)
            raise TypeError(f"Expected {key} to be pathlib.Path, str or None, got {type(value).__name__}")

        if key == "module_log_levels":
            if not isinstance(value, dict):
                raise TypeError(f"Expected {key} to be dict, got {type(value).__name__}")
            return {mod_name: cls._coerce_log_level(mod_level) for mod_name, mod_level in value.items()}

        if key == "terminal_log_max_line_length":
            if value is not None and (not isinstance(value, int) or isinstance(value, bool)):
                raise TypeError(f"Expected {key} to be int or None, got {type(value).__name__}")
            if value is not None and value <= 0:
                raise ValueError(f"Expected {key} to be positive integer or None, got {value}")
            return value

        if key == "frame_walk_policy":
            if isinstance(value, WalkPolicy):
                return value
            if isinstance(value, str):
                return WalkPolicy.from_json(value.lower())
            raise TypeError(f"Expected {key} to be WalkPolicy or str, got {type(value).__name__}")

        if key == "max_workers":
            if value is None:
                return value
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"Expected {key} to be int or None, got {type(value).__name__}")
            if value < 1:
                raise ValueError(f"max_workers must be at least 1, got {value}")
            return value

        if key == "frame_index_chunk_size":
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"Expected {key} to be int, got {type(value).__name__}")
            if value < 1:
                raise ValueError(f"frame_index_chunk_size must be positive, got {value}")
            return value

        if key == "mix_probability":
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise TypeError(f"Expected {key} to be float, got {type(value).__name__}")
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"mix_probability must be between 0.0 and 1.0, got {value}")
            return float(value)

        return value

    @classmethod
    def _serialize_value(cls, value: Any) -> Any:
        """Convert values into YAML-serializable representations."""
        if value is None:
            return None
        elif isinstance(value, pathlib.Path):
            return str(value)
        elif isinstance(value, (LogLevel, WalkPolicy)):
            return value.value
        elif isinstance(value, dict):
            return {k: cls._serialize_value(v) for k, v in value.items()}
        elif isinstance(value, (list, tuple)):
            return [cls._serialize_value(item) for item in value]
        else:
            return value

    @classmethod
    def _extract_inline_comments(cls) -> Dict[str, str]:
        """Inline comments of the configurable class variables, by variable name."""
        try:
            source = inspect.getsource(cls)
        except (OSError, TypeError):
            # no source available (e.g. frozen application)
            return {}

        comments = {}
        pattern = r'^\s*(\w+)\s*[:=].*?#\s*(.+)$'
        for line in source.split('\n'):
            match = re.match(pattern, line.strip())
            if match:
                var_name, comment = match.groups()
                if var_name in cls._CONFIGURABLE_KEYS:
                    comments[var_name] = comment.strip()
        return comments

    @classmethod
    def export_to_yaml(cls, filepath: pathlib.Path, include_metadata: bool = True):
        """Export the configurable parameters to a YAML file.

        Inline comments of the class body are appended to the matching keys.

        Parameters
        ----------
        filepath : pathlib.Path
            Path where the YAML file should be written
        include_metadata : bool, optional
            Whether to write an export time stamp header, by default True
        """
        filepath = pathlib.Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        config_data = {key: cls._serialize_value(getattr(cls, key)) for key in cls._CONFIGURABLE_KEYS}
        comments = cls._extract_inline_comments()

        yaml_lines = []
        if include_metadata:
            yaml_lines.append(f"# mpeak configuration exported on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
            yaml_lines.append("")

        yaml_content = yaml.dump(config_data, default_flow_style=False, sort_keys=False)
        for line in yaml_content.split('\n'):
            key_match = re.match(r'^(\w+):', line)
            if key_match and key_match.group(1) in comments:
                line = f"{line}  # {comments[key_match.group(1)]}"
            yaml_lines.append(line)

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write('\n'.join(yaml_lines))

    @classmethod
    def import_from_yaml(cls, filepath: pathlib.Path):
        """Import configuration from a YAML file.

        Unknown keys are rejected the same way `set()` rejects them.

        Raises
        ------
        FileNotFoundError
            If the YAML file does not exist
        yaml.YAMLError
            If the YAML file can not be parsed
        AttributeError, TypeError, ValueError
            If a key or value does not pass validation
        """
        with open(filepath, 'r', encoding='utf-8') as f:
            yaml_data = yaml.safe_load(f)

        if not yaml_data:
            return
        if not isinstance(yaml_data, dict):
            raise ValueError(f"Configuration file {filepath} must contain a mapping, got {type(yaml_data).__name__}")
        cls.set(**yaml_data)

    @classmethod
    def set(cls, **kwargs):
        """Set configuration parameters with validation.

        Raises
        ------
        AttributeError
            If a parameter name is invalid or immutable
        TypeError
            If a parameter value has an incorrect type
        ValueError
            If a parameter value is out of range

        Examples
        --------
            >>> Config.set(
            ...     log_level=LogLevel.INFO,
            ...     frame_walk_policy="lenient",
            ... )
        """
        from .logsetup import LoggingManager  # Import here to avoid circular imports

        old_logging = cls._logging_snapshot()

        # validate everything first: a failing key leaves the configuration untouched
        validated = {}
        for key, value in kwargs.items():
            if not hasattr(cls, key):
                raise AttributeError(f"Invalid config key: {key}. No such key.")
            if key not in cls._CONFIGURABLE_KEYS:
                raise AttributeError(f"Sorry, value of key '{key}' is immutable.")
            validated[key] = cls._validated(key, value)

        for key, value in validated.items():
            setattr(cls, key, value)

        if cls._logging_snapshot() != old_logging:
            LoggingManager.reconfigure()

    @classmethod
    def _logging_snapshot(cls) -> tuple:
        return (cls.log_level,
                cls.log_filepath,
                dict(cls.module_log_levels),
                cls.terminal_log_max_line_length)
