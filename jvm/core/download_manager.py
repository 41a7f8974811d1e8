"""
下载管理模块。

提供 JDK 压缩包的下载、解压和 JDK 目录定位功能。
"""

import os
import tarfile
import zipfile
from pathlib import Path
from typing import Optional, Callable
from urllib.parse import unquote, urlparse

import requests

from jvm.utils.logger import get_logger
from jvm.utils.retry import RetryHandler
from jvm.utils.input_validator import InputValidator, InputValidationError

logger = get_logger()

CHUNK_SIZE = 8192
TAR_SUFFIXES = (".tar.gz", ".tgz", ".tar")
EXTRACT_HINT = (
    "the archive may be corrupt or in a format this Python build cannot read; "
    "delete it and retry, or upgrade Python if the problem persists"
)


class DownloadManagerError(Exception):
    """下载管理错误异常。"""
    pass


class DownloadError(DownloadManagerError):
    """下载错误异常。"""

    def __init__(self, url: str, reason: str):
        super().__init__(f"failed to download {url}: {reason}")
        self.url = url


class ExtractionError(DownloadManagerError):
    """解压错误异常。"""

    def __init__(self, archive: Path, reason: str):
        super().__init__(f"failed to extract {archive.name}: {reason} (hint: {EXTRACT_HINT})")
        self.archive = archive


class InstallationError(DownloadManagerError):
    """安装错误异常。"""
    pass


def archive_name_from_url(url: str) -> str:
    """
    从下载 URL 中提取压缩包文件名。

    参数:
        url: 下载 URL

    返回:
        文件名，无法提取时返回 "jdk-archive"
    """
    name = os.path.basename(unquote(urlparse(url).path))
    return name or "jdk-archive"


class DownloadManager:
    """
    下载管理器类。

    负责压缩包的下载与解压，不涉及安装目录状态。
    """

    def __init__(
        self,
        retry_count: int = 0,
        timeout: int = 300,
        session: Optional[requests.Session] = None,
    ):
        """
        初始化下载管理器。

        参数:
            retry_count: 下载失败后的重试次数
            timeout: 单次请求超时时间（秒）
            session: 可选的 requests 会话
        """
        self.retry_handler = RetryHandler(max_retries=retry_count)
        self.timeout = timeout
        self.session = session or requests.Session()

    def download(
        self,
        url: str,
        dest_dir: Path,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> Path:
        """
        下载压缩包到指定目录。

        参数:
            url: 下载 URL
            dest_dir: 目标目录
            progress_callback: 下载进度回调函数 (已下载字节, 总字节)

        返回:
            下载得到的文件路径

        抛出:
            DownloadError: 网络错误、HTTP 错误或写入失败
        """
        archive_path = Path(dest_dir) / archive_name_from_url(url)
        logger.info(f"正在从 {url} 下载")

        def _do_download() -> requests.Response:
            response = self.session.get(url, stream=True, timeout=self.timeout, allow_redirects=True)
            response.raise_for_status()
            return response

        try:
            response = self.retry_handler.execute(_do_download)
            total_size = int(response.headers.get("content-length", 0))
            downloaded = 0
            with response, open(archive_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        downloaded += len(chunk)
                        if progress_callback:
                            progress_callback(downloaded, total_size)
        except requests.exceptions.RequestException as e:
            logger.error(f"下载 {url} 失败: {e}")
            raise DownloadError(url, str(e)) from e
        except OSError as e:
            logger.error(f"写入 {archive_path} 失败: {e}")
            raise DownloadError(url, str(e)) from e

        if total_size and downloaded != total_size:
            raise DownloadError(url, f"incomplete download ({downloaded} of {total_size} bytes)")

        logger.info(f"下载完成: {archive_path} ({downloaded} 字节)")
        return archive_path

    def extract(self, archive_path: Path, target_dir: Path) -> Path:
        """
        解压压缩包，防止路径遍历漏洞。

        参数:
            archive_path: 压缩包路径
            target_dir: 解压目标目录

        返回:
            解压目标目录

        抛出:
            ExtractionError: 压缩包损坏、格式不支持或包含非法路径
        """
        archive_path = Path(archive_path)
        target_dir = Path(target_dir)
        target_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"正在解压 {archive_path.name} 到 {target_dir}")

        try:
            if zipfile.is_zipfile(archive_path):
                self._extract_zip(archive_path, target_dir)
            elif archive_path.name.endswith(TAR_SUFFIXES) or tarfile.is_tarfile(archive_path):
                self._extract_tar(archive_path, target_dir)
            else:
                raise ExtractionError(archive_path, "unrecognised archive format")
        except ExtractionError:
            raise
        except InputValidationError as e:
            raise ExtractionError(archive_path, str(e)) from e
        except (zipfile.BadZipFile, tarfile.TarError, EOFError, OSError) as e:
            logger.error(f"解压 {archive_path} 失败: {e}")
            raise ExtractionError(archive_path, str(e)) from e

        return target_dir

    def _extract_zip(self, archive_path: Path, target_dir: Path) -> None:
        with zipfile.ZipFile(archive_path, "r") as zf:
            for name in zf.namelist():
                InputValidator.safe_join_path(str(target_dir), name)
            zf.extractall(target_dir)

    def _extract_tar(self, archive_path: Path, target_dir: Path) -> None:
        with tarfile.open(archive_path, "r:*") as tf:
            for member in tf.getmembers():
                InputValidator.safe_join_path(str(target_dir), member.name)
            tf.extractall(target_dir, filter="data")

    def locate_jdk_dir(self, extracted_dir: Path, label: str) -> Path:
        """
        在解压目录中定位 JDK 顶层目录。

        只有一个顶层目录时直接使用；有多个时选择名称包含版本标签的目录；
        压缩包没有顶层目录（解压目录下直接是 bin/）时返回解压目录本身。

        参数:
            extracted_dir: 解压目录
            label: 版本标签

        返回:
            JDK 目录路径

        抛出:
            ExtractionError: 无法确定 JDK 目录
        """
        extracted_dir = Path(extracted_dir)
        entries = [p for p in extracted_dir.iterdir() if not p.name.startswith(".")]
        directories = [p for p in entries if p.is_dir()]

        if not entries:
            raise ExtractionError(extracted_dir, "archive is empty")

        if len(entries) == 1 and directories:
            return directories[0]

        matches = [p for p in directories if label in p.name]
        if len(matches) == 1:
            return matches[0]

        if (extracted_dir / "bin").is_dir():
            return extracted_dir

        raise ExtractionError(
            extracted_dir,
            f"cannot identify the JDK directory for {label} among: "
            f"{', '.join(sorted(p.name for p in directories))}",
        )
