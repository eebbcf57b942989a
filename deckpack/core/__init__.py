"""Core types: results, exit codes, configuration, project layout."""

from .config import BuildTarget, Config, ConfigError, load_config, load_config_or_default
from .errors import ErrorCode
from .project import Project, ProjectError, detect_root
from .result import Err, Ok, Result

__all__ = [
    # config
    "BuildTarget",
    "Config",
    "ConfigError",
    "load_config",
    "load_config_or_default",
    # errors
    "ErrorCode",
    # project
    "Project",
    "ProjectError",
    "detect_root",
    # result
    "Err",
    "Ok",
    "Result",
]
