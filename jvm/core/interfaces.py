"""
核心模块抽象接口定义。

定义 VersionCatalog 和 VersionManager 的抽象接口。
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Callable


class IVersionCatalog(ABC):
    """版本目录抽象接口。"""

    @abstractmethod
    def classify(self, version: str) -> str:
        """校验并规范化版本标签。"""
        pass

    @abstractmethod
    def resolve(self, version: str):
        """将版本标签解析为下载地址。"""
        pass

    @abstractmethod
    def labels(self) -> List[str]:
        """返回所有可识别的版本标签。"""
        pass


class IVersionManager(ABC):
    """版本管理器抽象接口。"""

    @abstractmethod
    def list_installed(self) -> List[str]:
        """列出已安装版本的目录名。"""
        pass

    @abstractmethod
    def install(
        self,
        version: str,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> str:
        """下载并安装指定版本。"""
        pass

    @abstractmethod
    def use(self, version: str) -> str:
        """切换到指定版本。"""
        pass

    @abstractmethod
    def uninstall(self, version: str) -> bool:
        """卸载指定版本。"""
        pass

    @abstractmethod
    def get_current_version(self) -> Optional[str]:
        """获取当前使用的版本。"""
        pass
