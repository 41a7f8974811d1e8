"""
配置管理器模块。

提供应用程序配置的加载、保存和验证功能。
"""

import copy
import json
import os
from pathlib import Path
from typing import Any

from jvm.utils.logger import get_logger
from jvm.utils.input_validator import InputValidator, InputValidationError

logger = get_logger()

ROOT_ENV_VAR = "JVM_ROOT"
DEFAULT_ROOT_NAME = ".jvm"


class ConfigValidationError(Exception):
    """配置验证错误异常。"""
    pass


class ConfigSaveError(Exception):
    """配置保存错误异常。"""
    pass


def get_root_dir(root: str | os.PathLike | None = None) -> Path:
    """
    获取安装根目录路径。

    优先级: 显式参数 > 环境变量 JVM_ROOT > ~/.jvm

    参数:
        root: 显式指定的根目录

    返回:
        根目录的 Path 对象
    """
    if root:
        return Path(root).expanduser()
    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root:
        return Path(env_root).expanduser()
    return Path.home() / DEFAULT_ROOT_NAME


def _atomic_save_json(file_path: Path, data: Any, indent: int = 2) -> None:
    """
    原子保存 JSON 数据到文件，防止写入中断导致文件损坏。

    参数:
        file_path: 目标文件路径
        data: 要保存的数据
        indent: JSON 缩进
    """
    temp_path = file_path.with_suffix(file_path.suffix + ".tmp")

    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        os.replace(temp_path, file_path)
    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


class ConfigManager:
    """
    配置管理器类。

    配置文件为 <root>/config.json，延迟加载；文件不存在时使用内置默认配置，
    直到首次保存前不会写入任何文件。
    """

    CONFIG_FILE_NAME = "config.json"

    SETTINGS_FIELDS = {
        "download_retry_count": int,
        "download_timeout": int,
        "catalog": dict,
    }

    def __init__(self, root_dir: Path):
        """
        初始化配置管理器。

        参数:
            root_dir: 安装根目录
        """
        self.root_dir = Path(root_dir)
        self.config_file = self.root_dir / self.CONFIG_FILE_NAME
        self._config: dict[str, Any] = {}

    def _get_builtin_default_config(self) -> dict[str, Any]:
        """获取内置默认配置。"""
        return {
            "settings": {
                "download_retry_count": 0,
                "download_timeout": 300,
                "catalog": {},
            },
            "current_version": None,
        }

    def load_config(self) -> dict[str, Any]:
        """
        加载配置文件。

        文件缺失、损坏或验证失败时使用默认配置。

        返回:
            配置字典
        """
        if not self.config_file.exists():
            logger.debug(f"配置文件不存在，使用默认配置: {self.config_file}")
            self._config = self._get_builtin_default_config()
            return self._config

        try:
            logger.debug(f"从文件加载配置: {self.config_file}")
            with open(self.config_file, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            self._config = self._merge_defaults(loaded)
            self.validate_config(self._config)
            logger.debug("配置加载成功")
        except (IOError, OSError, json.JSONDecodeError) as e:
            logger.error(f"加载配置文件失败，使用默认配置: {e}")
            self._config = self._get_builtin_default_config()
        except ConfigValidationError as e:
            logger.error(f"配置验证失败，使用默认配置: {e}")
            self._config = self._get_builtin_default_config()
        return self._config

    def _merge_defaults(self, loaded: Any) -> dict[str, Any]:
        """
        为旧版本配置补全缺失字段。
        """
        if not isinstance(loaded, dict):
            raise ConfigValidationError("config root must be a JSON object")

        config = self._get_builtin_default_config()
        settings = loaded.get("settings", {})
        if not isinstance(settings, dict):
            raise ConfigValidationError("'settings' must be an object")
        config["settings"].update(settings)
        config["current_version"] = loaded.get("current_version")
        return config

    def save_config(self, config: dict[str, Any] | None = None) -> None:
        """
        保存配置到文件。

        参数:
            config: 要保存的配置字典，如果为 None 则保存当前配置
        """
        if config is not None:
            self._config = config

        self.validate_config(self._config)

        try:
            self.root_dir.mkdir(parents=True, exist_ok=True)
            logger.debug(f"保存配置到 {self.config_file}")
            _atomic_save_json(self.config_file, self._config, indent=2)
        except (IOError, OSError) as e:
            logger.error(f"保存配置失败: {e}")
            raise ConfigSaveError(f"cannot save configuration to {self.config_file}: {e}") from e

    def validate_config(self, config: dict[str, Any]) -> bool:
        """
        验证配置的有效性。

        参数:
            config: 要验证的配置字典

        返回:
            验证通过返回 True

        抛出:
            ConfigValidationError: 配置验证失败时抛出
        """
        settings = config.get("settings")
        if not isinstance(settings, dict):
            raise ConfigValidationError("missing required field: settings")

        for field, expected_type in self.SETTINGS_FIELDS.items():
            if field not in settings:
                raise ConfigValidationError(f"missing required field: settings.{field}")
            value = settings[field]
            if not isinstance(value, expected_type) or isinstance(value, bool):
                raise ConfigValidationError(
                    f"field 'settings.{field}' must be {expected_type.__name__}, "
                    f"got {type(value).__name__}"
                )

        if settings["download_retry_count"] < 0:
            raise ConfigValidationError("settings.download_retry_count must not be negative")
        if settings["download_timeout"] <= 0:
            raise ConfigValidationError("settings.download_timeout must be positive")

        for label, url in settings["catalog"].items():
            if not isinstance(url, str):
                raise ConfigValidationError(f"catalog entry {label!r} must be a URL string")
            try:
                InputValidator.validate_url(url)
            except InputValidationError as e:
                raise ConfigValidationError(f"catalog entry {label!r}: {e}") from e

        current = config.get("current_version")
        if current is not None and not isinstance(current, str):
            raise ConfigValidationError("current_version must be a string or null")

        return True

    @property
    def config(self) -> dict[str, Any]:
        """
        获取配置字典（延迟加载）。
        """
        if not self._config:
            self.load_config()
        return self._config

    def get_config(self) -> dict[str, Any]:
        """返回配置字典的副本。"""
        return copy.deepcopy(self.config)

    def get_settings(self) -> dict[str, Any]:
        return self.config["settings"]

    def get_download_retry_count(self) -> int:
        return self.get_settings()["download_retry_count"]

    def get_download_timeout(self) -> int:
        return self.get_settings()["download_timeout"]

    def get_catalog_overrides(self) -> dict[str, str]:
        """
        获取配置中的版本目录覆盖项。

        返回:
            版本标签到下载 URL 的映射
        """
        return dict(self.get_settings()["catalog"])

    def get_current_version(self) -> str | None:
        return self.config.get("current_version")

    def set_current_version(self, version: str | None) -> None:
        """
        记录当前使用的版本并保存配置。

        参数:
            version: 版本标签，None 表示清除
        """
        self.config["current_version"] = version
        self.save_config()
