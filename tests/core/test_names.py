import unittest
from itertools import product
from pathlib import Path

from foldercompare.core.errors import ConfigurationError
from foldercompare.core.folder.names import NameMatcher, paired_by_extension, validate_extension_pairs
from foldercompare.core.models import CompareOptions, Entry, EntryKind, ExtensionPair


def _entry(name, kind=EntryKind.FILE):
    return Entry(path=Path('/root') / name, name=name, kind=kind, relative_path=name)


class NameMatcherTest(unittest.TestCase):
    def test_case_is_folded_by_default(self):
        matcher = NameMatcher()
        self.assertTrue(matcher.matches('Foo.TXT', 'foo.txt'))
        self.assertTrue(matcher.matches('STRASSE', 'strasse'))
        self.assertTrue(matcher.matches('Ärger.txt', 'äRGER.TXT'))
        self.assertFalse(matcher.matches('foo.txt', 'bar.txt'))

    def test_case_folding_is_per_character(self):
        matcher = NameMatcher()
        self.assertFalse(matcher.matches('straße.txt', 'STRASSE.txt'))
        self.assertFalse(matcher.matches('ﬁle.txt', 'FILE.txt'))

    def test_case_sensitive(self):
        matcher = NameMatcher(CompareOptions(ignore_file_name_case=False))
        self.assertFalse(matcher.matches('Foo.TXT', 'foo.txt'))
        self.assertTrue(matcher.matches('foo.txt', 'foo.txt'))

    def test_extension_pair(self):
        matcher = NameMatcher(CompareOptions(ignore_extension=(ExtensionPair('js', 'ts'),)))
        self.assertTrue(matcher.matches('index.js', 'index.ts'))
        self.assertTrue(matcher.matches('index.ts', 'index.js'))
        self.assertTrue(matcher.matches('Index.JS', 'index.ts'))
        self.assertFalse(matcher.matches('index.js', 'main.ts'))
        self.assertFalse(matcher.matches('index.js', 'index.py'))
        self.assertFalse(matcher.matches('index', 'index.ts'))

    def test_extension_pair_respects_case_setting(self):
        options = CompareOptions(ignore_file_name_case=False, ignore_extension=(ExtensionPair('js', 'ts'),))
        matcher = NameMatcher(options)
        self.assertTrue(matcher.matches('index.js', 'index.ts'))
        self.assertFalse(matcher.matches('index.JS', 'index.ts'))

    def test_matching_is_symmetric(self):
        names = ['a.js', 'A.ts', 'a.TS', 'b.js', '.bashrc', '.BASHRC', 'a', 'a.tar.gz', 'A.tar.js']
        for ignore_case in (True, False):
            options = CompareOptions(
                ignore_file_name_case=ignore_case,
                ignore_extension=(ExtensionPair('js', 'ts'), ExtensionPair('gz', 'tgz')),
            )
            matcher = NameMatcher(options)
            for a, b in product(names, repeat=2):
                with self.subTest(a=a, b=b, ignore_case=ignore_case):
                    self.assertEqual(matcher.matches(a, b), matcher.matches(b, a))

    def test_file_never_matches_directory(self):
        matcher = NameMatcher()
        self.assertFalse(matcher.matches_entry(_entry('src'), _entry('src', EntryKind.DIRECTORY)))
        self.assertTrue(matcher.matches_entry(
            _entry('src', EntryKind.DIRECTORY), _entry('SRC', EntryKind.DIRECTORY)))

    def test_first_match_wins(self):
        matcher = NameMatcher()
        candidates = [_entry('README.md'), _entry('readme.md'), _entry('Readme.md')]
        self.assertIs(candidates[0], matcher.first_match(_entry('readme.MD'), candidates))
        self.assertIsNone(matcher.first_match(_entry('other.md'), candidates))

    def test_invalid_pairs_rejected_on_construction(self):
        with self.assertRaises(ConfigurationError):
            NameMatcher(CompareOptions(ignore_extension=(ExtensionPair('js', 'ts'), ExtensionPair('ts', 'tsx'))))


class ValidateExtensionPairsTest(unittest.TestCase):
    def test_partner_map(self):
        partners = validate_extension_pairs([ExtensionPair('js', 'ts'), ExtensionPair('htm', 'html')])
        self.assertEqual({'js': 'ts', 'ts': 'js', 'htm': 'html', 'html': 'htm'}, partners)

    def test_duplicate_extension(self):
        with self.assertRaises(ConfigurationError):
            validate_extension_pairs([ExtensionPair('js', 'ts'), ExtensionPair('mjs', 'js')])

    def test_duplicate_after_case_folding(self):
        pairs = [ExtensionPair('js', 'ts'), ExtensionPair('JS', 'jsx')]
        with self.assertRaises(ConfigurationError):
            validate_extension_pairs(pairs, ignore_case=True)
        self.assertEqual(4, len(validate_extension_pairs(pairs, ignore_case=False)))

    def test_self_pair(self):
        with self.assertRaises(ConfigurationError):
            validate_extension_pairs([ExtensionPair('js', 'js')])


class PairedByExtensionTest(unittest.TestCase):
    def test_paired(self):
        options = CompareOptions(ignore_extension=(ExtensionPair('js', 'ts'),))
        self.assertTrue(paired_by_extension('/l/index.js', '/r/index.ts', options))
        self.assertFalse(paired_by_extension('/l/index.js', '/r/index.js', options))
        self.assertFalse(paired_by_extension('/l/index.js', '/r/index.ts', CompareOptions()))

    def test_invalid_pairs_are_not_paired(self):
        options = CompareOptions(ignore_extension=(ExtensionPair('js', 'ts'), ExtensionPair('js', 'jsx')))
        with self.assertLogs(level='WARNING'):
            self.assertFalse(paired_by_extension('/l/index.js', '/r/index.ts', options))


class NameIndexTest(unittest.TestCase):
    def test_pop_match_agrees_with_first_match(self):
        names = ['a.js', 'A.ts', 'a.TS', 'a.js', 'b.js', '.bashrc', '.BASHRC', 'a', 'a.', 'a.tar.gz', 'A.tgz']
        entries = [_entry(name) for name in names] + [_entry('a.js', EntryKind.DIRECTORY)]
        for ignore_case, pairs in product((True, False), ((), (ExtensionPair('js', 'ts'), ExtensionPair('gz', 'tgz')))):
            matcher = NameMatcher(CompareOptions(ignore_file_name_case=ignore_case, ignore_extension=pairs))
            index = matcher.index(entries)
            unmatched = list(entries)
            for entry in entries:
                with self.subTest(name=entry.name, kind=entry.kind, ignore_case=ignore_case, pairs=pairs):
                    expected = matcher.first_match(entry, unmatched)
                    self.assertIs(expected, index.pop_match(entry))
                    if expected is not None:
                        unmatched.remove(expected)
            self.assertEqual(unmatched, index.remaining())

    def test_first_candidate_in_listing_order_wins(self):
        matcher = NameMatcher(CompareOptions(ignore_extension=(ExtensionPair('js', 'ts'),)))
        candidates = [_entry('index.ts'), _entry('INDEX.js'), _entry('index.js')]
        index = matcher.index(candidates)
        self.assertIs(candidates[0], index.pop_match(_entry('index.js')))
        self.assertIs(candidates[1], index.pop_match(_entry('index.js')))
        self.assertIs(candidates[2], index.pop_match(_entry('index.js')))
        self.assertIsNone(index.pop_match(_entry('index.js')))
        self.assertEqual([], index.remaining())
