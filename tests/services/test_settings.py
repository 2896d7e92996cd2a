import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from foldercompare.core.errors import ConfigurationError
from foldercompare.core.models import CompareOptions, ExtensionPair
from foldercompare.services.settings import SettingsManager


class SettingsManagerTest(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        self.path = Path(self._tmpdir.name) / 'settings.json'

    def write(self, data):
        self.path.write_text(data if isinstance(data, str) else json.dumps(data), encoding='utf-8')

    def test_missing_file_gives_defaults(self):
        self.assertEqual(CompareOptions(), SettingsManager(self.path).load())

    def test_prefixed_keys(self):
        self.write({
            'compareFolders.ignoreWhiteSpaces': True,
            'compareFolders.excludeFilter': ['*.log'],
            'editor.fontSize': 14,
        })
        options = SettingsManager(self.path).load()
        self.assertTrue(options.ignore_white_spaces)
        self.assertEqual(('*.log',), options.exclude_filter)

    def test_nested_section(self):
        self.write({'compareFolders': {'ignoreExtension': [['js', 'ts']], 'showIdentical': True}})
        options = SettingsManager(self.path).options
        self.assertEqual((ExtensionPair('js', 'ts'),), options.ignore_extension)
        self.assertTrue(options.show_identical)

    def test_invalid_json(self):
        self.write('{"compareFolders.showIdentical": tru')
        with self.assertLogs(level='ERROR'):
            with self.assertRaises(ConfigurationError):
                SettingsManager(self.path).load()

    def test_not_an_object(self):
        self.write([1, 2])
        with self.assertRaises(ConfigurationError):
            SettingsManager(self.path).load()

    def test_wrong_value_type(self):
        self.write({'compareFolders.ignoreEmptyLines': 'true'})
        with self.assertRaises(ConfigurationError):
            SettingsManager(self.path).load()

    def test_save_and_reload(self):
        options = CompareOptions(ignore_line_ending=True, ignore_extension=(ExtensionPair('js', 'ts'),))
        self.assertTrue(SettingsManager(self.path).save(options))

        data = json.loads(self.path.read_text(encoding='utf-8'))
        self.assertTrue(data['compareFolders.ignoreLineEnding'])
        self.assertEqual(options, SettingsManager(self.path).load())

    def test_save_without_options(self):
        self.assertFalse(SettingsManager(self.path).save())
        self.assertFalse(self.path.exists())

    def test_observers(self):
        manager = SettingsManager(self.path)
        seen = []
        manager.add_observer(seen.append)
        manager.save(CompareOptions(show_identical=True))
        manager.remove_observer(seen.append)
        manager.reset()
        self.assertEqual([CompareOptions(show_identical=True)], seen)
        self.assertEqual(CompareOptions(), manager.options)

    @unittest.skipIf(os.name == 'nt', 'XDG paths are not used on Windows')
    def test_default_path(self):
        with mock.patch.dict(os.environ, {'XDG_CONFIG_HOME': '/tmp/config-home'}):
            self.assertEqual(
                Path('/tmp/config-home/foldercompare/settings.json'),
                SettingsManager().settings_path,
            )
