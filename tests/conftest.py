from __future__ import annotations

import io
import logging
import tarfile
import zipfile
from pathlib import Path
from typing import Callable

import pytest
import requests

from jvm.core.catalog import DEFAULT_CATALOG
from jvm.core.config_manager import ConfigManager
from jvm.core.download_manager import DownloadManager
from jvm.core.install_root import InstallRoot
from jvm.core.version_manager import VersionManager
from jvm.utils.logger import setup_logger

JDK_FILES = {
    "bin/java": b"#!/bin/sh\necho openjdk\n",
    "lib/modules": b"\x00\x01\x02modules",
    "release": b'JAVA_VERSION="17.0.2"\n',
}


def build_zip(top: str | None, files: dict[str, bytes] | None = None) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in (files or JDK_FILES).items():
            zf.writestr(f"{top}/{name}" if top else name, data)
    return buffer.getvalue()


def build_tar_gz(top: str, files: dict[str, bytes] | None = None) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
        for name, data in (files or JDK_FILES).items():
            info = tarfile.TarInfo(f"{top}/{name}")
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def jdk_dir_name(label: str) -> str:
    return "jdk-20.0.2" if label == "latest" else f"jdk-{label}.0.2"


class FakeResponse:
    def __init__(self, payload: bytes, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.headers = {"content-length": str(len(payload))}

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Client Error", response=self)

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self._payload), chunk_size):
            yield self._payload[start:start + chunk_size]

    def close(self) -> None:
        pass

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class FakeSession:
    """Serves archives by URL; unknown URLs get 404, exception values are raised."""

    def __init__(self, routes: dict[str, object] | None = None) -> None:
        self.routes: dict[str, object] = dict(routes or {})
        self.calls: list[str] = []

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.calls.append(url)
        result = self.routes.get(url)
        if isinstance(result, Exception):
            raise result
        if isinstance(result, FakeResponse):
            return result
        if result is None:
            return FakeResponse(b"", status_code=404)
        return FakeResponse(result)


@pytest.fixture(autouse=True)
def _reset_logging():
    setup_logger(console_level=logging.CRITICAL)
    yield
    setup_logger(console_level=logging.CRITICAL)


@pytest.fixture
def jvm_root(tmp_path: Path) -> Path:
    return tmp_path / ".jvm"


@pytest.fixture
def jdk_session() -> FakeSession:
    """A session serving a well-formed JDK archive for every catalog URL."""
    routes = {}
    for label, url in DEFAULT_CATALOG.items():
        if url.endswith(".zip"):
            routes[url] = build_zip(jdk_dir_name(label))
        else:
            routes[url] = build_tar_gz(jdk_dir_name(label))
    return FakeSession(routes)


@pytest.fixture
def make_manager(jvm_root: Path) -> Callable[[FakeSession], VersionManager]:
    def _make(session: FakeSession) -> VersionManager:
        return VersionManager(
            ConfigManager(jvm_root),
            InstallRoot(jvm_root),
            download_manager=DownloadManager(session=session),
        )

    return _make


def snapshot(directory: Path) -> dict[str, bytes]:
    return {
        str(path.relative_to(directory)).replace("\\", "/"): path.read_bytes()
        for path in sorted(directory.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def snapshot_dir() -> Callable[[Path], dict[str, bytes]]:
    return snapshot


@pytest.fixture
def fake_response_cls() -> type[FakeResponse]:
    return FakeResponse


@pytest.fixture
def fake_session_cls() -> type[FakeSession]:
    return FakeSession


@pytest.fixture
def archive_builders():
    return build_zip, build_tar_gz
