import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from mem_flame_tool.cli.main import main
from mem_flame_tool.cli.validators import parse_include_patterns, parse_output_formats
from mem_flame_tool.exceptions import InvalidArgumentError
from mem_flame_tool.models import ALLOCATION_IN_NEW_TLAB


def run_cli(argv):
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        code = main(argv)
    return code, buffer.getvalue()


class TestValidators(unittest.TestCase):
    def test_parse_include_patterns(self):
        self.assertEqual(parse_include_patterns('com.foo, org.bar,,'), ['com.foo', 'org.bar'])
        self.assertEqual(parse_include_patterns(''), [])
        self.assertEqual(parse_include_patterns(None), [])

    def test_parse_output_formats(self):
        self.assertEqual(parse_output_formats('txt'), ['txt'])
        self.assertEqual(parse_output_formats('XLSX, txt,xlsx'), ['xlsx', 'txt'])
        with self.assertRaises(InvalidArgumentError):
            parse_output_formats('svg')
        with self.assertRaises(InvalidArgumentError):
            parse_output_formats(' , ')


class TestMain(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.output_dir = os.path.join(self.temp_dir.name, 'out')
        events = [
            {
                "type": ALLOCATION_IN_NEW_TLAB,
                "values": {
                    "objectClass": {"name": object_class},
                    "allocationSize": size,
                    "stackTrace": {"frames": [{"method": {"type": {"name": type_name}, "name": "run"}}]},
                },
            }
            for type_name, object_class, size in [
                ("com/foo/Worker", "[C", 48),
                ("org/bar/Worker", "[C", 64),
            ]
        ]
        self.input_file = os.path.join(self.temp_dir.name, 'app-99.json')
        with open(self.input_file, 'w', encoding='utf-8') as f:
            json.dump({"recording": {"events": events}}, f)

    def tearDown(self):
        self.temp_dir.cleanup()

    def _read_report(self, name='mem-info-99.txt'):
        with open(os.path.join(self.output_dir, name), encoding='utf-8') as f:
            return f.read().splitlines()

    def test_no_arguments_prints_usage(self):
        code, output = run_cli([])
        self.assertEqual(code, 1)
        self.assertIn('usage', output)

    def test_single_argument(self):
        code, _ = run_cli([self.input_file, '--output-dir', self.output_dir])
        self.assertEqual(code, 0)
        self.assertEqual(self._read_report(), [
            'java;org/bar/Worker:.run;char[] 64',
            'java;com/foo/Worker:.run;char[] 48',
        ])

    def test_include_argument(self):
        code, _ = run_cli([self.input_file, 'com.foo,net.none', '--output-dir', self.output_dir,
                           '--max-workers', '2', '--queue-size', '0'])
        self.assertEqual(code, 0)
        self.assertEqual(self._read_report(), ['java;com/foo/Worker:.run;char[] 48'])

    def test_extra_output_formats(self):
        code, _ = run_cli([self.input_file, '--output-dir', self.output_dir, '--output-format', 'txt,json'])
        self.assertEqual(code, 0)
        self.assertTrue(os.path.exists(os.path.join(self.output_dir, 'mem-info-99.json')))

    def test_run_statistics_logged(self):
        with self.assertLogs('mem_flame_tool.cli.commands.flame', level='DEBUG') as logs:
            code, _ = run_cli([self.input_file, '--output-dir', self.output_dir, '-v'])
        self.assertEqual(code, 0)
        self.assertTrue(any("'events_accepted': 2" in line for line in logs.output))

    def test_missing_file(self):
        code, output = run_cli([os.path.join(self.temp_dir.name, 'none-1.json'), '--output-dir', self.output_dir])
        self.assertEqual(code, 1)
        self.assertIn('文件不存在', output)

    def test_unparseable_process_id(self):
        bad_input = os.path.join(self.temp_dir.name, 'app-latest.json')
        os.rename(self.input_file, bad_input)
        code, _ = run_cli([bad_input, '--output-dir', self.output_dir])
        self.assertEqual(code, 1)
        self.assertFalse(os.path.exists(self.output_dir))

    def test_invalid_options(self):
        for extra in (['--output-format', 'svg'], ['--max-workers', '0'], ['--queue-size', '-1'],
                      ['--timeout-hours', '0'], ['--timeout-hours', '1e9']):
            code, _ = run_cli([self.input_file, '--output-dir', self.output_dir] + extra)
            self.assertEqual(code, 1, extra)


if __name__ == '__main__':
    unittest.main()
