# Image Copy Matcher
# A Python tool to copy high-resolution originals matching low-resolution images by filename

from .models import (
    RunOptions, OutcomeKind, CopyPlan, ItemResult, ProgressSnapshot,
    RunSummary, summary_line
)
from .exceptions import (
    ProcessingError, ValidationError, EnumerationError,
    DirectoryNotFoundError, FileOperationError, SettingsError
)
from .path_validator import PathValidator
from .file_scanner import FileScanner
from .indexer import MatchIndex
from .planner import CopyPlanner
from .copier import Copier
from .progress import ProgressReporter, format_eta
from .events import EventChannel, EventDispatcher
from .copy_manager import CopyManager, RunHandle
from .settings import AppSettings, SettingsStore, SettingsLoadResult, SettingsSaveResult
from .logger import ProgressLogger, LogConfig, create_default_logger, get_default_log_file

__all__ = [
    'RunOptions',
    'OutcomeKind',
    'CopyPlan',
    'ItemResult',
    'ProgressSnapshot',
    'RunSummary',
    'summary_line',
    'ProcessingError',
    'ValidationError',
    'EnumerationError',
    'DirectoryNotFoundError',
    'FileOperationError',
    'SettingsError',
    'PathValidator',
    'FileScanner',
    'MatchIndex',
    'CopyPlanner',
    'Copier',
    'ProgressReporter',
    'format_eta',
    'EventChannel',
    'EventDispatcher',
    'CopyManager',
    'RunHandle',
    'AppSettings',
    'SettingsStore',
    'SettingsLoadResult',
    'SettingsSaveResult',
    'ProgressLogger',
    'LogConfig',
    'create_default_logger',
    'get_default_log_file'
]
