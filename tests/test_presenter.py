import json
import os
import stat
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import pandas as pd

from mem_flame_tool.analyzer.presenter import format_row, render, write_report


class TestRender(unittest.TestCase):
    def test_descending_by_total(self):
        rows = render({'java;A:.a;int': 16, 'java;B:.b;int': 350, 'java;C:.c;int': 100})
        self.assertEqual([total for _, total in rows], [350, 100, 16])

    def test_ties_broken_by_key(self):
        rows = render({'java;Z:.z;int': 8, 'java;A:.a;int': 8, 'java;M:.m;int': 8, 'java;X:.x;int': 9})
        self.assertEqual([key for key, _ in rows],
                         ['java;X:.x;int', 'java;A:.a;int', 'java;M:.m;int', 'java;Z:.z;int'])

    def test_empty_table(self):
        self.assertEqual(render({}), [])

    def test_format_row(self):
        self.assertEqual(format_row(('java;A:.a;int', 350)), 'java;A:.a;int 350')


class TestWriteReport(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.rows = [('java;A:.a;B:.b;int', 350), ('java;A:.a;byte[]', 16)]

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_txt_output(self):
        files = write_report(self.rows, self.temp_dir.name, 'mem-info-7')
        self.assertEqual(files, [Path(self.temp_dir.name) / 'mem-info-7.txt'])
        with open(files[0], 'rb') as f:
            content = f.read()
        self.assertEqual(content, b'java;A:.a;B:.b;int 350\njava;A:.a;byte[] 16\n')

    def test_replaces_existing_file_without_leftovers(self):
        target = Path(self.temp_dir.name) / 'mem-info-7.txt'
        target.write_text('old content that is longer than the new report\n' * 10)
        write_report(self.rows[:1], self.temp_dir.name, 'mem-info-7')
        self.assertEqual(target.read_text(), 'java;A:.a;B:.b;int 350\n')
        self.assertEqual(os.listdir(self.temp_dir.name), ['mem-info-7.txt'])

    def test_failed_write_keeps_previous_file(self):
        target = Path(self.temp_dir.name) / 'mem-info-7.txt'
        target.write_text('previous\n')
        with mock.patch('mem_flame_tool.analyzer.presenter.format_row', side_effect=OSError('disk full')):
            with self.assertRaises(OSError):
                write_report(self.rows, self.temp_dir.name, 'mem-info-7')
        self.assertEqual(target.read_text(), 'previous\n')
        self.assertEqual(os.listdir(self.temp_dir.name), ['mem-info-7.txt'])

    @unittest.skipUnless(os.name == 'posix', '需要 POSIX 文件权限')
    def test_new_file_honours_umask(self):
        old_umask = os.umask(0o022)
        try:
            files = write_report(self.rows, self.temp_dir.name, 'mem-info-1', ['txt', 'json'])
        finally:
            os.umask(old_umask)
        for path in files:
            self.assertEqual(stat.S_IMODE(path.stat().st_mode), 0o644)

    @unittest.skipUnless(os.name == 'posix', '需要 POSIX 文件权限')
    def test_existing_file_keeps_mode(self):
        target = Path(self.temp_dir.name) / 'mem-info-1.txt'
        target.write_text('previous\n')
        os.chmod(target, 0o640)
        write_report(self.rows, self.temp_dir.name, 'mem-info-1')
        self.assertEqual(stat.S_IMODE(target.stat().st_mode), 0o640)
        self.assertEqual(target.read_text(), 'java;A:.a;B:.b;int 350\njava;A:.a;byte[] 16\n')

    def test_tabular_outputs(self):
        files = write_report(self.rows, self.temp_dir.name, 'mem-info-1', ['txt', 'csv', 'json', 'xlsx'])
        self.assertEqual([f.suffix for f in files], ['.txt', '.csv', '.json', '.xlsx'])

        with open(files[2], encoding='utf-8') as f:
            data = json.load(f)
        self.assertEqual(data[0], {'stack': 'java;A:.a;B:.b;int', 'bytes': 350})

        df = pd.read_csv(files[1])
        self.assertEqual(list(df['bytes']), [350, 16])
        self.assertEqual(list(df['depth']), [3, 2])
        self.assertAlmostEqual(df['percent'].sum(), 100.0, places=1)

        self.assertTrue(files[3].exists())

    def test_unknown_format(self):
        with self.assertRaises(ValueError):
            write_report(self.rows, self.temp_dir.name, 'mem-info-1', ['svg'])

    def test_empty_report(self):
        files = write_report([], self.temp_dir.name, 'mem-info-0', ['txt', 'csv'])
        self.assertEqual(files[0].read_text(), '')


if __name__ == '__main__':
    unittest.main()
