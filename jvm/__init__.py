"""
jvm - Java 版本管理器。

下载 JDK 压缩包，按版本安装到 installed-versions/，并将当前版本复制到 current/。
"""

__version__ = "0.1.0"
