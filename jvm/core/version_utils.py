"""
版本工具模块。

提供版本标签的规范化、目录名转换和排序等工具函数。
"""

import re
from typing import List, Optional

LATEST = "latest"
INSTALL_DIR_PREFIX = "open-jdk-"

_NUMERIC_PATTERN = re.compile(r'^\d+$')


def normalize_label(version: str) -> Optional[str]:
    """
    规范化版本标签。

    参数:
        version: 用户输入的版本字符串

    返回:
        "latest" 或规范化后的整数字符串（"017" -> "17"），格式无效返回 None
    """
    if version is None:
        return None
    value = version.strip()
    if value.lower() == LATEST:
        return LATEST
    if _NUMERIC_PATTERN.match(value):
        return str(int(value))
    return None


def is_numeric_label(label: str) -> bool:
    return bool(_NUMERIC_PATTERN.match(label))


def install_dir_name(label: str) -> str:
    """返回版本标签对应的安装目录名。"""
    return f"{INSTALL_DIR_PREFIX}{label}"


def label_from_dir_name(name: str) -> Optional[str]:
    """
    从安装目录名中提取版本标签。

    参数:
        name: 目录名，如 open-jdk-17

    返回:
        版本标签，目录名不符合命名规则时返回 None
    """
    if not name.startswith(INSTALL_DIR_PREFIX):
        return None
    label = name[len(INSTALL_DIR_PREFIX):]
    return label or None


def _sort_key(label: str) -> tuple:
    """
    数字版本按数值排序，latest 排在最后，其余按字母排在中间。
    """
    if is_numeric_label(label):
        return (0, int(label), "")
    if label == LATEST:
        return (2, 0, "")
    return (1, 0, label)


def sort_labels(labels: List[str]) -> List[str]:
    """
    按版本号升序排列版本标签。

    参数:
        labels: 版本标签列表

    返回:
        排序后的列表
    """
    return sorted(labels, key=_sort_key)
