"""
火焰图数据生成命令模块
"""

import time
import logging
import threading

from ..validators import parse_include_patterns, parse_output_formats, validate_file, validate_positive
from ...analyzer import IncludeFilter, generate_flame_report
from ...analyzer.pool import CancellationToken
from ...exceptions import InvalidArgumentError, MemFlameError, RunCancelledError

logger = logging.getLogger(__name__)


class FlameCommand:
    """火焰图数据生成命令处理器"""

    def __init__(self):
        self.token = CancellationToken()

    def run(self, args) -> int:
        """运行单个文件分析"""
        print(f"=== 内存分配分析 ===")
        print(f"输入文件: {args.file}")
        print(f"包含过滤: {args.includes if args.includes else '无'}")
        print(f"输出格式: {args.output_format}")
        print(f"输出目录: {args.output_dir}")
        print()

        try:
            output_formats = parse_output_formats(args.output_format)
            max_workers = validate_positive(args.max_workers, '--max-workers')
            validate_positive(args.timeout_hours, '--timeout-hours')
            if args.timeout_hours * 3600 > threading.TIMEOUT_MAX:
                raise InvalidArgumentError(f"--timeout-hours 过大: {args.timeout_hours}")
            if args.queue_size is not None and args.queue_size < 0:
                raise ValueError(f"--queue-size 不能为负数: {args.queue_size}")
        except ValueError as e:
            print(f"错误: 参数验证失败 - {e}")
            return 1

        if not validate_file(args.file):
            return 1

        include_filter = IncludeFilter(parse_include_patterns(args.includes))
        if include_filter:
            print(f"包含模式: {sorted(include_filter.patterns)}")

        try:
            start_time = time.time()
            result = generate_flame_report(
                args.file,
                include_filter=include_filter,
                output_dir=args.output_dir,
                output_formats=output_formats,
                max_workers=max_workers,
                queue_size=args.queue_size,
                timeout=args.timeout_hours * 3600,
                token=self.token,
            )
        except (KeyboardInterrupt, RunCancelledError):
            self.token.cancel()
            print("\n已取消")
            return 130
        except (MemFlameError, OSError) as e:
            logger.error(f"运行失败: {e}", exc_info=logger.isEnabledFor(logging.DEBUG))
            print(f"错误: {e}")
            return 1

        stats = result.stats
        logger.debug(f"运行统计: {stats.as_dict()}")
        print(f"\n读取事件: {stats.events_read}, 计入: {stats.events_accepted}, "
              f"过滤: {stats.events_filtered}, 跳过: {stats.events_skipped}")
        print(f"总分配字节数: {result.total_bytes}")
        print(f"分析完成，总耗时: {time.time() - start_time:.2f} 秒")

        print("\n生成的文件:")
        for file_path in result.files:
            print(f"  {file_path}")
        return 0
