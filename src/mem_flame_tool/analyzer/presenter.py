"""
报告生成
"""

import json
import os
import stat
import tempfile
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Mapping, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ('txt', 'csv', 'json', 'xlsx')

ReportRow = Tuple[str, int]


def render(table: Mapping[str, int]) -> List[ReportRow]:
    """
    按总字节数降序排列，总数相同时按折叠栈字符串升序，保证输出可重现

    Args:
        table: 冻结后的聚合表

    Returns:
        List[ReportRow]: (折叠栈, 总字节数) 列表
    """
    return sorted(table.items(), key=lambda item: (-item[1], item[0]))


def format_row(row: ReportRow) -> str:
    key, total = row
    return f"{key} {total}"


def _output_file_mode(target: Path) -> int:
    """目标已存在时沿用其权限，否则按 umask 取默认权限（与直接 open 创建一致）"""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


@contextmanager
def _atomic_path(target: Path) -> Iterator[Path]:
    """
    在目标目录下创建临时文件，写入成功后用 os.replace 替换目标文件
    """
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=target.suffix)
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        yield tmp_path
        os.chmod(tmp_path, _output_file_mode(target))
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def _write_txt(rows: Sequence[ReportRow], path: Path) -> None:
    with open(path, 'w', encoding='utf-8', newline='\n') as f:
        for row in rows:
            f.write(format_row(row))
            f.write('\n')


def _write_json(rows: Sequence[ReportRow], path: Path) -> None:
    data = [{'stack': key, 'bytes': total} for key, total in rows]
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def _to_dataframe(rows: Sequence[ReportRow]):
    import pandas as pd

    df = pd.DataFrame(list(rows), columns=['stack', 'bytes'])
    total = int(df['bytes'].sum()) if not df.empty else 0
    df['percent'] = (df['bytes'] / total * 100).round(2) if total else 0.0
    df['depth'] = df['stack'].str.count(';')
    return df


def _write_csv(rows: Sequence[ReportRow], path: Path) -> None:
    _to_dataframe(rows).to_csv(path, index=False)


def _write_xlsx(rows: Sequence[ReportRow], path: Path) -> None:
    _to_dataframe(rows).to_excel(path, index=False, sheet_name='allocations', engine='openpyxl')


_WRITERS = {
    'txt': _write_txt,
    'csv': _write_csv,
    'json': _write_json,
    'xlsx': _write_xlsx,
}


def write_report(rows: Sequence[ReportRow], output_dir: Union[str, Path], base_name: str,
                 output_formats: Sequence[str] = ('txt',)) -> List[Path]:
    """
    生成输出文件

    Args:
        rows: render 的结果
        output_dir: 输出目录
        base_name: 基础文件名，如 mem-info-1234
        output_formats: 输出格式列表，支持 txt, csv, json, xlsx

    Returns:
        List[Path]: 生成的文件路径列表
    """
    for output_format in output_formats:
        if output_format not in _WRITERS:
            raise ValueError(f"不支持的输出格式: {output_format}。支持的格式: {', '.join(SUPPORTED_FORMATS)}")

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    if not rows:
        logger.warning("没有数据可供展示，将生成空报告")

    files = []
    for output_format in output_formats:
        target = output_path / f"{base_name}.{output_format}"
        with _atomic_path(target) as tmp_path:
            _WRITERS[output_format](rows, tmp_path)
        files.append(target)
        print(f"生成 {output_format.upper()} 文件: {target}")
    return files
