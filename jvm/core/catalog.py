"""
版本目录模块。

维护版本标签到 JDK 压缩包下载地址的静态映射。
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from jvm.utils.logger import get_logger
from jvm.core import version_utils
from jvm.core.interfaces import IVersionCatalog

logger = get_logger()

MIN_SUPPORTED_VERSION = 8

DEFAULT_CATALOG: Dict[str, str] = {
    "8": "https://download.java.net/openjdk/jdk8u44/ri/openjdk-8u44-windows-i586.zip",
    "9": "https://download.java.net/java/GA/jdk9/9/binaries/openjdk-9_windows-x64_bin.tar.gz",
    "10": "https://download.java.net/java/GA/jdk10/10/binaries/openjdk-10_windows-x64_bin.tar.gz",
    "11": "https://download.java.net/java/GA/jdk11/9/GPL/openjdk-11.0.2_windows-x64_bin.zip",
    "12": "https://download.java.net/java/GA/jdk12.0.2/e482c34c86bd4bf8b56c0b35558996b9/10/GPL/openjdk-12.0.2_windows-x64_bin.zip",
    "13": "https://download.java.net/java/GA/jdk13.0.2/d4173c853231432d94f001e99d882ca7/8/GPL/openjdk-13.0.2_windows-x64_bin.zip",
    "14": "https://download.java.net/java/GA/jdk14.0.2/205943a0976c4ed48cb16f1043c5c647/12/GPL/openjdk-14.0.2_windows-x64_bin.zip",
    "15": "https://download.java.net/java/GA/jdk15.0.2/0d1cfde4252546c6931946de8db48ee2/7/GPL/openjdk-15.0.2_windows-x64_bin.zip",
    "16": "https://download.java.net/java/GA/jdk16.0.2/d4a915d82b4c4fbb9bde534da945d746/7/GPL/openjdk-16.0.2_windows-x64_bin.zip",
    "17": "https://download.java.net/java/GA/jdk17.0.2/dfd4a8d0985749f896bed50d7138ee7f/8/GPL/openjdk-17.0.2_windows-x64_bin.zip",
    "18": "https://download.java.net/java/GA/jdk18.0.2.1/db379da656dc47308e138f21b33976fa/1/GPL/openjdk-18.0.2.1_windows-x64_bin.zip",
    "19": "https://download.java.net/java/GA/jdk19.0.2/fdb695a9d9064ad6b064dc6df578380c/7/GPL/openjdk-19.0.2_windows-x64_bin.zip",
    "latest": "https://download.java.net/java/GA/jdk20.0.2/6e380f22cbe7469fa75fb448bd903d8e/9/GPL/openjdk-20.0.2_windows-x64_bin.zip",
}


class CatalogError(Exception):
    """版本目录错误异常。"""

    def __init__(self, version: str, message: str):
        super().__init__(message)
        self.version = version


class UnknownVersionError(CatalogError):
    """版本不在目录中。"""

    def __init__(self, version: str):
        super().__init__(version, f"unknown version specified: {version!r}")


class UnsupportedVersionError(CatalogError):
    """版本可识别但不受支持（7 及以下）。"""

    def __init__(self, version: str):
        super().__init__(
            version,
            f"Java {version} is not supported, "
            f"the oldest supported version is {MIN_SUPPORTED_VERSION}",
        )


@dataclass(frozen=True)
class CatalogEntry:
    """目录条目：版本标签和下载地址。"""

    label: str
    url: str


class VersionCatalog(IVersionCatalog):
    """
    版本目录类。

    目录是数据而不是分支逻辑：install、use 和 uninstall 共用同一份映射。
    配置中的条目会覆盖或补充内置条目。
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None):
        """
        初始化版本目录。

        参数:
            overrides: 配置中的版本标签到 URL 映射
        """
        self._entries: Dict[str, str] = dict(DEFAULT_CATALOG)
        for raw_label, url in (overrides or {}).items():
            label = version_utils.normalize_label(raw_label)
            if label is None:
                logger.warning(f"忽略无效的目录条目: {raw_label}")
                continue
            self._entries[label] = url

    def classify(self, version: str) -> str:
        """
        校验版本标签并返回规范化结果，不需要下载地址。

        参数:
            version: 用户输入的版本字符串

        返回:
            规范化后的版本标签

        抛出:
            UnsupportedVersionError: 版本为 7 及以下
            UnknownVersionError: 格式无效或不在目录中
        """
        label = version_utils.normalize_label(version)
        if label is None:
            raise UnknownVersionError(version)
        if version_utils.is_numeric_label(label) and int(label) < MIN_SUPPORTED_VERSION:
            raise UnsupportedVersionError(label)
        if label not in self._entries:
            raise UnknownVersionError(label)
        return label

    def resolve(self, version: str) -> CatalogEntry:
        """
        将版本标签解析为下载地址。

        参数:
            version: 用户输入的版本字符串

        返回:
            CatalogEntry 实例
        """
        label = self.classify(version)
        return CatalogEntry(label=label, url=self._entries[label])

    def labels(self) -> List[str]:
        """返回所有可识别的版本标签，按版本排序。"""
        return version_utils.sort_labels(list(self._entries))
