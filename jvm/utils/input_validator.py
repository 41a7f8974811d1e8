"""
输入验证模块。

提供用户输入的验证和 sanitization 功能。
"""

import os
import re


class InputValidationError(Exception):
    """输入验证错误异常。"""
    pass


class InputValidator:
    """
    输入验证器类。

    提供 URL 和路径的验证功能。
    """

    URL_PATTERN = re.compile(
        r'^https?://'
        r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+'
        r'(?:[A-Z]{2,63}|[A-Z0-9-]{2,})'
        r'|localhost|\d{1,3}(?:\.\d{1,3}){3})'
        r'(?::\d+)?'
        r'(?:/?|[/?]\S+)$',
        re.IGNORECASE
    )

    @classmethod
    def validate_url(cls, url: str) -> bool:
        """
        验证 URL 的有效性。

        参数:
            url: URL 字符串

        返回:
            验证通过返回 True，否则抛出 InputValidationError
        """
        if not url or not cls.URL_PATTERN.match(url.strip()):
            raise InputValidationError(f"invalid URL: {url!r}")
        return True

    @classmethod
    def safe_join_path(cls, base_path: str, *paths: str) -> str:
        """
        安全连接路径，防止路径遍历。

        参数:
            base_path: 基础路径
            *paths: 要连接的路径部分

        返回:
            安全连接后的路径

        抛出:
            InputValidationError: 如果结果路径位于 base_path 外部
        """
        base = os.path.abspath(base_path)
        joined = os.path.abspath(os.path.join(base, *paths))
        if joined != base and not joined.startswith(base + os.sep):
            raise InputValidationError(f"path escapes {base}: {os.path.join(*paths)}")
        return joined
