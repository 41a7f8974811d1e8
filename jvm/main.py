"""
jvm 应用程序主入口点。
"""

import sys
from typing import Optional

from jvm.cli import COMMANDS, create_parser, first_command, print_usage, run_cli


def main(args: Optional[list[str]] = None) -> int:
    """
    应用程序主入口点。

    没有命令或命令未知时打印用法并返回 1。

    参数:
        args: 命令行参数。如果为 None，将使用 sys.argv[1:]。

    返回:
        退出码（0 表示成功，非零表示错误）。
    """
    argv = sys.argv[1:] if args is None else list(args)
    parser = create_parser()

    command = first_command(argv)
    if command is not None and command not in COMMANDS:
        print(f"jvm: unknown command: {command}")
        print_usage(parser)
        return 1

    parsed_args = parser.parse_args(argv)

    if parsed_args.command is None:
        print_usage(parser)
        return 1

    return run_cli(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
