from hackpl.lib.exceptions import NotPacked, PatternNotFound

from ... import SampleIssue, hackpl
from .. import TestUnitBase


class TestHPXtract(TestUnitBase):

    def test_all_issues(self):
        for issue in range(1, 5):
            sample = SampleIssue(issue)
            articles = sample.packed() | self.load(str(issue)) | [bytes]
            self.assertEqual(articles, sample.articles)

    def test_issue_by_name(self):
        sample = SampleIssue(2)
        self.assertEqual(sample.packed() | self.load('I002') | [bytes], sample.articles)

    def test_unicode_conversion(self):
        sample = SampleIssue(1)
        articles = sample.packed() | self.load('1', '-u') | [bytes]
        self.assertEqual(articles, [a.decode('cp852').encode('utf8') for a in sample.articles])
        self.assertIn('ą'.encode('utf8'), articles[0])
        self.assertIn('ł'.encode('utf8'), articles[0])

    def test_maximum_size(self):
        sample = SampleIssue(4)
        articles = sample.packed() | self.load('4', '-m', '0x10') | [bytes]
        self.assertEqual(articles, [a[:0x10] for a in sample.articles])

    def test_unpacked_input(self):
        sample = SampleIssue(3)
        articles = sample.unpacked.render() | self.load('3', '--unpacked') | [bytes]
        self.assertEqual(articles, sample.articles)

    def test_unpacked_input_requires_switch(self):
        sample = SampleIssue(3)
        with self.assertRaises(NotPacked):
            sample.unpacked.render() | self.load('3') | [bytes]

    def test_unpacked_input_without_articles(self):
        sample = SampleIssue(3, articles=[B'\x90'])
        data = bytearray(sample.unpacked.render())
        data = data.replace(B'\x50\x57\xB8', B'\x50\x56\xB8')
        with self.assertRaises(PatternNotFound):
            data | self.load('3', '-x') | bytes

    def test_invalid_issue(self):
        with self.assertRaises(ValueError):
            self.load('5')

    def test_code_interface(self):
        sample = SampleIssue(2)
        self.assertEqual(sample.packed() | hackpl.hpxtract(2) | [bytes], sample.articles)
        self.assertEqual(sample.packed() | hackpl.hpxtract('2', max_size=4) | [bytes], [a[:4] for a in sample.articles])

    def test_unicode_as_strings(self):
        sample = SampleIssue(1)
        articles = sample.packed() | hackpl.hpxtract(1, unicode=True) | [str]
        self.assertEqual(articles, [a.decode('cp852') for a in sample.articles])
