import contextlib
import io
import json
import logging
import tempfile
import unittest
from pathlib import Path

from foldercompare.core.models import ExtensionPair
from foldercompare.main import (
    EXIT_DIFFERENT,
    EXIT_ERROR,
    EXIT_IDENTICAL,
    build_options,
    build_parser,
    main,
)

from tests.fixtures import make_tree


class MainTest(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        self.base = Path(self._tmpdir.name)
        self.left = self.base / 'left'
        self.right = self.base / 'right'

        root_logger = logging.getLogger()
        saved = (root_logger.level, list(root_logger.handlers))

        def restore():
            root_logger.setLevel(saved[0])
            root_logger.handlers[:] = saved[1]

        self.addCleanup(restore)

    def run_main(self, *args):
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = main([str(self.left), str(self.right), *args])
        return code, stdout.getvalue().splitlines(), stderr.getvalue()

    def test_identical_folders(self):
        make_tree(self.left, {'a.txt': 'x', 'sub': {'b.txt': 'y'}})
        make_tree(self.right, {'a.txt': 'x', 'sub': {'b.txt': 'y'}})
        code, lines, _ = self.run_main()
        self.assertEqual(EXIT_IDENTICAL, code)
        self.assertEqual([], lines)

    def test_show_identical(self):
        make_tree(self.left, {'a.txt': 'x'})
        make_tree(self.right, {'a.txt': 'x'})
        code, lines, _ = self.run_main('--show-identical')
        self.assertEqual(EXIT_IDENTICAL, code)
        self.assertEqual(['= a.txt'], lines)

    def test_differences(self):
        make_tree(self.left, {'a.txt': 'x', 'b.txt': 'only left'})
        make_tree(self.right, {'a.txt': 'y', 'c.txt': 'only right'})
        code, lines, _ = self.run_main()
        self.assertEqual(EXIT_DIFFERENT, code)
        self.assertEqual(['M a.txt', '< b.txt', '> c.txt'], lines)

    def test_normalization_flags(self):
        make_tree(self.left, {'a.txt': 'x \r\n'})
        make_tree(self.right, {'a.txt': 'x\n'})
        self.assertEqual(EXIT_DIFFERENT, self.run_main()[0])
        self.assertEqual(EXIT_IDENTICAL, self.run_main('--ignore-white-spaces', '--ignore-line-ending')[0])

    def test_extension_pairs_and_filters(self):
        make_tree(self.left, {'index.js': 'a', 'debug.log': '1'})
        make_tree(self.right, {'index.ts': 'b'})
        code, lines, _ = self.run_main('--ignore-extension', 'js', 'ts', '--exclude', '*.log', '--no-content')
        self.assertEqual(EXIT_IDENTICAL, code)
        self.assertEqual([], lines)

    def test_hash_choice(self):
        make_tree(self.left, {'a.txt': 'same', 'b.txt': 'left'})
        make_tree(self.right, {'a.txt': 'same', 'b.txt': 'rite'})
        for algorithm in ('sha256', 'xxh64', 'md5'):
            with self.subTest(algorithm=algorithm):
                code, lines, _ = self.run_main('--hash', algorithm)
                self.assertEqual(EXIT_DIFFERENT, code)
                self.assertEqual(['M b.txt'], lines)

    def test_missing_folder(self):
        make_tree(self.left, {})
        code, lines, stderr = self.run_main()
        self.assertEqual(EXIT_ERROR, code)
        self.assertEqual([], lines)
        self.assertIn('IO', stderr)

    def test_invalid_settings_file(self):
        make_tree(self.left, {})
        make_tree(self.right, {})
        settings = self.base / 'settings.json'
        settings.write_text('{not json', encoding='utf-8')
        code, _, stderr = self.run_main('--settings', str(settings))
        self.assertEqual(EXIT_ERROR, code)
        self.assertIn('Invalid settings file', stderr)

    def test_invalid_filter(self):
        make_tree(self.left, {})
        make_tree(self.right, {})
        code, _, stderr = self.run_main('--include', '[abc')
        self.assertEqual(EXIT_ERROR, code)
        self.assertIn('FILTER_SYNTAX', stderr)

    def test_log_file(self):
        make_tree(self.left, {})
        make_tree(self.right, {})
        log_file = self.base / 'logs' / 'compare.log'
        self.run_main('--log-level', 'INFO', '--log-file', str(log_file))
        logging.getLogger().handlers[-1].close()
        self.assertIn('CompareSession - Comparing', log_file.read_text(encoding='utf-8'))


class BuildOptionsTest(unittest.TestCase):
    def test_command_line_overrides_settings(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            settings = Path(tmpdir) / 'settings.json'
            settings.write_text(json.dumps({
                'compareFolders.ignoreWhiteSpaces': True,
                'compareFolders.excludeFilter': ['*.tmp'],
            }), encoding='utf-8')

            args = build_parser().parse_args([
                'l', 'r', '--settings', str(settings), '--case-sensitive',
                '--ignore-extension', 'js', 'ts', '--exclude', '*.log',
            ])
            options = build_options(args)

        self.assertTrue(options.ignore_white_spaces)
        self.assertFalse(options.ignore_file_name_case)
        self.assertEqual((ExtensionPair('js', 'ts'),), options.ignore_extension)
        self.assertEqual(('*.log',), options.exclude_filter)
        self.assertTrue(options.compare_content)

    def test_defaults_without_flags(self):
        options = build_options(build_parser().parse_args(['l', 'r']))
        self.assertTrue(options.compare_content)
        self.assertTrue(options.ignore_file_name_case)
        self.assertFalse(options.show_identical)
