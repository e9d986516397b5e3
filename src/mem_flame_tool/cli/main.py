"""
CLI主模块
"""

import argparse
import logging
import sys
from typing import List, Optional

from .commands import FlameCommand

DESCRIPTION = "mem-flame-tool: 将 Java 内存分配事件转换为火焰图折叠栈数据"


def build_parser() -> argparse.ArgumentParser:
    """构建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        prog='mem-flame-tool',
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例用法:
  # 先用 jfr 导出 JSON，再生成 mem-info-1234.txt
  jfr print --json --events jdk.ObjectAllocationInNewTLAB,jdk.ObjectAllocationOutsideTLAB app-1234.jfr > app-1234.json
  mem-flame-tool app-1234.json

  # 只保留包含 com.example 或 org.acme 的调用栈
  mem-flame-tool app-1234.json com.example,org.acme

  # 同时输出 Excel 表格到 reports 目录
  mem-flame-tool app-1234.json --output-format txt,xlsx --output-dir reports

  # 生成火焰图
  flamegraph.pl --countname=bytes mem-info-1234.txt > mem-1234.svg
        """
    )
    parser.add_argument('file', help='jfr print --json 导出的 recording 文件 (支持 .json.gz)')
    parser.add_argument('includes', nargs='?', default='',
                        help='逗号分隔的包含过滤条件，调用栈中包含任一子串才保留，如 "com.foo,org.bar"')
    parser.add_argument('--output-dir', default='.', help='输出目录 (默认: 当前目录)')
    parser.add_argument('--output-format', default='txt',
                        help='输出格式，逗号分隔: txt, csv, json, xlsx (默认: txt)')
    parser.add_argument('--max-workers', type=int, default=None,
                        help='worker 线程数 (默认: CPU核心数的两倍)')
    parser.add_argument('--queue-size', type=int, default=None,
                        help='排队任务上限，队列满时由读取线程直接处理 (默认: CPU核心数的两倍)')
    parser.add_argument('--timeout-hours', type=float, default=24.0,
                        help='等待所有任务完成的最长小时数 (默认: 24)')
    parser.add_argument('-v', '--verbose', action='store_true', help='输出调试日志')
    return parser


def parse_arguments(argv: Optional[List[str]] = None):
    """解析命令行参数"""
    return build_parser().parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """主函数"""
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        parser = build_parser()
        print(DESCRIPTION)
        print()
        parser.print_usage()
        return 1

    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    command = FlameCommand()
    return command.run(args)


if __name__ == "__main__":
    sys.exit(main())
