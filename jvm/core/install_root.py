"""
安装根目录状态管理模块。

所有对 installed-versions/、current/ 和 tmp/ 的修改都经过 InstallRoot，
并由锁文件串行化。
"""

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

from jvm.utils.logger import get_logger
from jvm.core import version_utils

logger = get_logger()


class StateError(Exception):
    """安装目录状态错误异常。"""
    pass


class StateLockedError(StateError):
    """另一个进程持有锁文件。"""

    def __init__(self, lock_file: Path):
        super().__init__(
            f"another jvm process is modifying {lock_file.parent}; "
            f"if no other process is running, delete {lock_file}"
        )
        self.lock_file = lock_file


class InstallRoot:
    """
    安装根目录。

    布局:
        <root>/installed-versions/open-jdk-<label>/
        <root>/current/
        <root>/tmp/
    """

    INSTALLED_DIR_NAME = "installed-versions"
    CURRENT_DIR_NAME = "current"
    TMP_DIR_NAME = "tmp"
    LOG_DIR_NAME = "logs"
    LOCK_FILE_NAME = ".jvm.lock"

    def __init__(self, root_dir: Path):
        self.root_dir = Path(root_dir)
        self.installed_dir = self.root_dir / self.INSTALLED_DIR_NAME
        self.current_dir = self.root_dir / self.CURRENT_DIR_NAME
        self.tmp_dir = self.root_dir / self.TMP_DIR_NAME
        self.log_dir = self.root_dir / self.LOG_DIR_NAME
        self.lock_file = self.root_dir / self.LOCK_FILE_NAME

    def version_dir(self, label: str) -> Path:
        """返回版本标签对应的安装目录。"""
        return self.installed_dir / version_utils.install_dir_name(label)

    def is_installed(self, label: str) -> bool:
        return self.version_dir(label).is_dir()

    def installed_dir_names(self) -> List[str]:
        """
        列出 installed-versions/ 下的版本目录名。

        目录不存在时返回空列表；暂存目录和不符合命名规则的条目被忽略。

        返回:
            按版本排序的目录名列表
        """
        if not self.installed_dir.is_dir():
            return []

        labels = []
        for entry in self.installed_dir.iterdir():
            if not entry.is_dir():
                continue
            label = version_utils.label_from_dir_name(entry.name)
            if label is not None:
                labels.append(label)

        return [version_utils.install_dir_name(label) for label in version_utils.sort_labels(labels)]

    @contextmanager
    def lock(self) -> Iterator[None]:
        """
        获取排他锁文件，退出时释放。

        抛出:
            StateLockedError: 锁文件已存在
            StateError: 根目录或锁文件无法创建
        """
        try:
            self.root_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StateError(f"cannot create install root {self.root_dir}: {e}") from e
        try:
            fd = os.open(self.lock_file, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            raise StateLockedError(self.lock_file) from None
        except OSError as e:
            raise StateError(f"cannot create lock file {self.lock_file}: {e}") from e

        try:
            os.write(fd, str(os.getpid()).encode("ascii"))
            os.close(fd)
            logger.debug(f"已获取锁 {self.lock_file}")
            yield
        finally:
            try:
                self.lock_file.unlink()
            except FileNotFoundError:
                logger.warning(f"锁文件已被删除: {self.lock_file}")
            logger.debug(f"已释放锁 {self.lock_file}")

    @contextmanager
    def scratch_dir(self) -> Iterator[Path]:
        """
        创建本次调用独占的临时工作目录，退出时只删除该目录。

        返回:
            临时目录路径

        抛出:
            StateError: 临时目录无法创建
        """
        try:
            self.tmp_dir.mkdir(parents=True, exist_ok=True)
            path = Path(tempfile.mkdtemp(prefix=f"{os.getpid()}-", dir=self.tmp_dir))
        except OSError as e:
            raise StateError(f"cannot create scratch directory under {self.tmp_dir}: {e}") from e
        logger.debug(f"创建临时目录 {path}")
        try:
            yield path
        finally:
            shutil.rmtree(path, ignore_errors=True)
            logger.debug(f"已清理临时目录 {path}")

    def install_tree(self, source: Path, label: str) -> Path:
        """
        将解压得到的 JDK 目录复制为正式安装目录。

        先复制到 installed-versions/ 下的暂存目录，完成后重命名，
        因此安装目录要么完整存在，要么不存在。

        参数:
            source: 解压后的 JDK 目录
            label: 版本标签

        返回:
            安装目录路径
        """
        target = self.version_dir(label)
        self.installed_dir.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".staging-{label}-", dir=self.installed_dir))
        try:
            shutil.copytree(source, staging, symlinks=True, dirs_exist_ok=True)
            os.rename(staging, target)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        logger.info(f"已安装到 {target}")
        return target

    def activate(self, label: str) -> Path:
        """
        用指定版本替换 current/ 的内容。

        新内容先完整复制到兄弟目录，再通过重命名换入；复制失败时 current/ 保持不变。

        参数:
            label: 已安装的版本标签

        返回:
            current/ 目录路径
        """
        source = self.version_dir(label)
        self.root_dir.mkdir(parents=True, exist_ok=True)
        fresh = Path(tempfile.mkdtemp(prefix=".current-new-", dir=self.root_dir))
        try:
            shutil.copytree(source, fresh, symlinks=True, dirs_exist_ok=True)
        except BaseException:
            shutil.rmtree(fresh, ignore_errors=True)
            raise

        retired = None
        if self.current_dir.exists():
            retired = Path(tempfile.mkdtemp(prefix=".current-old-", dir=self.root_dir))
            os.rmdir(retired)
            os.rename(self.current_dir, retired)

        try:
            os.rename(fresh, self.current_dir)
        except OSError:
            if retired is not None:
                os.rename(retired, self.current_dir)
            shutil.rmtree(fresh, ignore_errors=True)
            raise

        if retired is not None:
            shutil.rmtree(retired, ignore_errors=True)
        logger.info(f"current/ 已切换到 {source.name}")
        return self.current_dir

    def remove(self, label: str) -> bool:
        """
        删除指定版本的安装目录。

        参数:
            label: 版本标签

        返回:
            删除了目录返回 True，目录不存在返回 False
        """
        target = self.version_dir(label)
        if not target.exists():
            logger.info(f"{target} 不存在，无需删除")
            return False
        shutil.rmtree(target)
        logger.info(f"已删除 {target}")
        return True
