"""
jvm 命令行接口模块。
"""

import argparse
import logging
import sys
from typing import Optional, Tuple

from jvm import __version__
from jvm.core.catalog import CatalogError
from jvm.core.config_manager import ConfigManager, ConfigSaveError, get_root_dir
from jvm.core.download_manager import DownloadManagerError
from jvm.core.install_root import InstallRoot, StateError
from jvm.core.version_manager import (
    VersionManager,
    VersionManagerError,
    VersionNotInstalledError,
    VersionAlreadyInstalledError,
)
from jvm.core import version_utils
from jvm.utils.logger import get_logger, setup_logger

logger = get_logger()

COMMANDS = ("list", "install", "use", "uninstall")
OPTIONS_WITH_VALUE = ("--root",)
PREFIX = "jvm:"

FATAL_ERRORS = (DownloadManagerError, StateError, ConfigSaveError, VersionManagerError)


def echo(message: str) -> None:
    """输出提示信息到标准输出。"""
    print(f"{PREFIX} {message}")


def fail(message: str) -> int:
    """
    输出致命错误到标准错误。

    返回:
        退出码 1
    """
    print(f"{PREFIX} error: {message}", file=sys.stderr)
    return 1


def create_parser() -> argparse.ArgumentParser:
    """
    创建并配置命令行参数解析器。

    返回:
        配置好的 ArgumentParser 实例
    """
    parser = argparse.ArgumentParser(
        prog="jvm",
        description="jvm - Java version manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  jvm list                list installed versions
  jvm install 17          download and install Java 17
  jvm use latest          switch to the latest build
  jvm uninstall 11        remove Java 11
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="enable debug output",
    )

    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="install root (default: $JVM_ROOT or ~/.jvm)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
    )

    subparsers.add_parser(
        "list",
        help="list installed versions",
    )

    for name, help_text in (
        ("install", "download and install a version"),
        ("use", "switch current/ to an installed version"),
        ("uninstall", "remove an installed version"),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument(
            "version",
            help="version label: 8..19 or latest",
        )

    return parser


def print_usage(parser: argparse.ArgumentParser) -> None:
    """打印用法和可用命令。"""
    parser.print_usage(sys.stdout)
    echo(f"valid commands: {', '.join(COMMANDS)}")


def first_command(argv: list[str]) -> Optional[str]:
    """
    找出参数列表中的第一个位置参数（即命令名）。

    参数:
        argv: 命令行参数

    返回:
        命令名，没有位置参数时返回 None
    """
    skip_next = False
    for token in argv:
        if skip_next:
            skip_next = False
            continue
        if token in OPTIONS_WITH_VALUE:
            skip_next = True
            continue
        if token.startswith("-"):
            continue
        return token
    return None


def _get_managers(args: argparse.Namespace) -> Tuple[InstallRoot, VersionManager]:
    """
    获取管理器实例。

    返回:
        InstallRoot 和 VersionManager 组成的元组
    """
    root_dir = get_root_dir(args.root)
    install_root = InstallRoot(root_dir)
    config_manager = ConfigManager(root_dir)
    version_manager = VersionManager(config_manager, install_root)
    return install_root, version_manager


def _attach_file_log(install_root: InstallRoot, console_level: int) -> None:
    """
    为本次调用挂载轮转日志文件，目录无法创建时仅输出到控制台。
    """
    try:
        setup_logger(level=logging.DEBUG, console_level=console_level, log_dir=install_root.log_dir)
    except OSError as e:
        setup_logger(console_level=console_level)
        logger.warning(f"无法写入日志目录 {install_root.log_dir}: {e}")


def run_cli(args: argparse.Namespace) -> int:
    """
    运行命令行接口。

    被拒绝的版本和 list 命令只输出到控制台，不会在根目录下写入任何文件。

    参数:
        args: 解析后的命令行参数

    返回:
        退出码（0 表示成功）
    """
    install_root, version_manager = _get_managers(args)
    console_level = logging.DEBUG if args.verbose else logging.WARNING
    setup_logger(console_level=console_level)

    command_handlers = {
        "list": handle_list,
        "install": handle_install,
        "use": handle_use,
        "uninstall": handle_uninstall,
    }

    handler = command_handlers.get(args.command)
    if handler is None:
        print_usage(create_parser())
        return 1

    try:
        if args.command != "list":
            version_manager.catalog.classify(args.version)
            _attach_file_log(install_root, console_level)
        logger.debug(f"执行命令 {args.command}，根目录 {install_root.root_dir}")
        return handler(args, version_manager)
    except CatalogError as e:
        echo(str(e))
        return 0
    except FATAL_ERRORS as e:
        logger.error(f"命令 {args.command} 失败: {e}")
        return fail(str(e))


def handle_list(args: argparse.Namespace, version_manager: VersionManager) -> int:
    """
    处理 list 命令：列出已安装的版本，当前版本以 * 标记。
    """
    names = version_manager.list_installed()
    if not names:
        echo("no versions installed")
        return 0

    current = version_manager.get_current_version()
    current_name = version_utils.install_dir_name(current) if current else None
    for name in names:
        marker = "*" if name == current_name else " "
        print(f"{marker} {name}")
    return 0


def _label(version: str) -> str:
    return version_utils.normalize_label(version) or version


def handle_install(args: argparse.Namespace, version_manager: VersionManager) -> int:
    """
    处理 install 命令：下载并安装指定版本。
    """
    progress_shown = False

    def progress(downloaded: int, total: int):
        nonlocal progress_shown
        progress_shown = True
        if total > 0:
            percent = min(100, int(downloaded / total * 100))
            bar_len = 40
            filled = int(bar_len * percent / 100)
            bar = "=" * filled + "-" * (bar_len - filled)
            print(f"\r[{bar}] {percent}% ({downloaded}/{total} bytes)", end="", flush=True)
        else:
            print(f"\r{downloaded} bytes", end="", flush=True)

    try:
        target = version_manager.install(args.version, progress)
    except VersionAlreadyInstalledError as e:
        echo(str(e))
        return 0
    finally:
        if progress_shown:
            print()

    echo(f"Java {_label(args.version)} installed to {target}")
    return 0


def handle_use(args: argparse.Namespace, version_manager: VersionManager) -> int:
    """
    处理 use 命令：切换到指定版本。
    """
    try:
        current = version_manager.use(args.version)
    except VersionNotInstalledError as e:
        echo(str(e))
        return 0

    echo(f"now using Java {_label(args.version)} ({current})")
    return 0


def handle_uninstall(args: argparse.Namespace, version_manager: VersionManager) -> int:
    """
    处理 uninstall 命令：卸载指定版本。
    """
    label = _label(args.version)
    if version_manager.uninstall(args.version):
        echo(f"Java {label} uninstalled")
    else:
        echo(f"Java {label} is not installed")
    return 0
