"""
版本管理器模块。

提供 JDK 版本的安装、切换、卸载和列出功能。
"""

from pathlib import Path
from typing import Optional, List, Callable

from jvm.utils.logger import get_logger
from jvm.core.config_manager import ConfigManager
from jvm.core.catalog import VersionCatalog
from jvm.core.download_manager import DownloadManager, InstallationError
from jvm.core.install_root import InstallRoot
from jvm.core.interfaces import IVersionManager

logger = get_logger()


class VersionManagerError(Exception):
    """版本管理错误异常。"""

    def __init__(self, label: str, message: str):
        super().__init__(message)
        self.label = label


class VersionNotInstalledError(VersionManagerError):
    """版本未安装。"""

    def __init__(self, label: str):
        super().__init__(label, f"Java {label} is not installed, run 'jvm install {label}' first")


class VersionAlreadyInstalledError(VersionManagerError):
    """版本已安装。"""

    def __init__(self, label: str):
        super().__init__(label, f"Java {label} is already installed")


class SwitchVersionError(VersionManagerError):
    """切换版本错误异常。"""
    pass


class DeleteVersionError(VersionManagerError):
    """删除版本错误异常。"""
    pass


class VersionManager(IVersionManager):
    """
    版本管理器类。

    作为协调者，将版本解析交给 VersionCatalog，下载解压交给 DownloadManager，
    目录状态变更交给 InstallRoot。
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        install_root: InstallRoot,
        catalog: Optional[VersionCatalog] = None,
        download_manager: Optional[DownloadManager] = None,
    ):
        """
        初始化版本管理器。

        参数:
            config_manager: 配置管理器实例
            install_root: 安装根目录
            catalog: 版本目录，默认根据配置创建
            download_manager: 下载管理器，默认根据配置创建
        """
        self.config_manager = config_manager
        self.install_root = install_root
        self.catalog = catalog or VersionCatalog(config_manager.get_catalog_overrides())
        self.download_manager = download_manager or DownloadManager(
            retry_count=config_manager.get_download_retry_count(),
            timeout=config_manager.get_download_timeout(),
        )

    def list_installed(self) -> List[str]:
        """
        列出已安装版本。

        返回:
            installed-versions/ 下的目录名列表，目录不存在时为空
        """
        return self.install_root.installed_dir_names()

    def get_current_version(self) -> Optional[str]:
        """
        获取最近一次 use 记录的版本。

        记录的版本已被卸载时仍返回该版本，因为 current/ 是独立副本。
        """
        return self.config_manager.get_current_version()

    def install(
        self,
        version: str,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> Path:
        """
        下载并安装指定版本。

        参数:
            version: 版本标签
            progress_callback: 下载进度回调函数

        返回:
            安装目录路径

        抛出:
            UnknownVersionError / UnsupportedVersionError: 版本无法解析，不产生任何修改
            VersionAlreadyInstalledError: 版本已安装，不会重新下载
            DownloadError / ExtractionError / InstallationError: 安装失败
        """
        entry = self.catalog.resolve(version)
        if self.install_root.is_installed(entry.label):
            logger.info(f"Java {entry.label} 已安装，跳过")
            raise VersionAlreadyInstalledError(entry.label)

        logger.info(f"开始安装 Java {entry.label}: {entry.url}")
        with self.install_root.lock():
            if self.install_root.is_installed(entry.label):
                raise VersionAlreadyInstalledError(entry.label)

            with self.install_root.scratch_dir() as work_dir:
                archive = self.download_manager.download(entry.url, work_dir, progress_callback)
                extracted = self.download_manager.extract(archive, work_dir / "extracted")
                jdk_dir = self.download_manager.locate_jdk_dir(extracted, entry.label)
                try:
                    target = self.install_root.install_tree(jdk_dir, entry.label)
                except OSError as e:
                    logger.error(f"复制 Java {entry.label} 到安装目录失败: {e}")
                    raise InstallationError(f"failed to install Java {entry.label}: {e}") from e

        logger.info(f"成功安装 Java {entry.label}")
        return target

    def use(self, version: str) -> Path:
        """
        切换到指定版本。

        参数:
            version: 版本标签

        返回:
            current/ 目录路径

        抛出:
            VersionNotInstalledError: 版本未安装，current/ 保持不变
            SwitchVersionError: 复制或重命名失败，current/ 保持原内容
        """
        label = self.catalog.classify(version)
        if not self.install_root.is_installed(label):
            logger.warning(f"Java {label} 未安装")
            raise VersionNotInstalledError(label)

        logger.info(f"正在切换到 Java {label}")
        with self.install_root.lock():
            try:
                current = self.install_root.activate(label)
            except OSError as e:
                logger.error(f"切换到 Java {label} 失败: {e}")
                raise SwitchVersionError(label, f"failed to switch to Java {label}: {e}") from e
            self.config_manager.set_current_version(label)

        logger.info(f"已切换到 Java {label}")
        return current

    def uninstall(self, version: str) -> bool:
        """
        卸载指定版本。

        参数:
            version: 版本标签

        返回:
            删除了安装目录返回 True，版本本来就未安装返回 False
        """
        label = self.catalog.classify(version)
        with self.install_root.lock():
            try:
                removed = self.install_root.remove(label)
            except OSError as e:
                logger.error(f"删除 Java {label} 失败: {e}")
                raise DeleteVersionError(label, f"failed to uninstall Java {label}: {e}") from e

        if removed:
            logger.info(f"已卸载 Java {label}")
        return removed
