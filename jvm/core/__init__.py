"""
jvm 核心模块。

提供版本目录、下载安装、目录状态管理和版本管理功能。
"""

from .interfaces import IVersionCatalog, IVersionManager
from .config_manager import ConfigManager, ConfigValidationError, ConfigSaveError, get_root_dir
from .catalog import VersionCatalog, CatalogEntry, CatalogError, UnknownVersionError, UnsupportedVersionError
from .install_root import InstallRoot, StateError, StateLockedError
from .download_manager import DownloadManager, DownloadManagerError, DownloadError, ExtractionError, InstallationError
from .version_manager import (
    VersionManager,
    VersionManagerError,
    VersionNotInstalledError,
    VersionAlreadyInstalledError,
    SwitchVersionError,
    DeleteVersionError,
)
from . import version_utils

__all__ = [
    "IVersionCatalog", "IVersionManager",
    "ConfigManager", "ConfigValidationError", "ConfigSaveError", "get_root_dir",
    "VersionCatalog", "CatalogEntry", "CatalogError", "UnknownVersionError", "UnsupportedVersionError",
    "InstallRoot", "StateError", "StateLockedError",
    "DownloadManager", "DownloadManagerError", "DownloadError", "ExtractionError", "InstallationError",
    "VersionManager", "VersionManagerError", "VersionNotInstalledError", "VersionAlreadyInstalledError",
    "SwitchVersionError", "DeleteVersionError",
    "version_utils",
]
