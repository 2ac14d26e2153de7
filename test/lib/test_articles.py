from hackpl.lib.articles import DECRYPT_CALL, ArticleRange, MaskedPattern, find_article_ranges
from hackpl.lib.exceptions import PatternNotFound

from .. import TestBase, article_call


class TestMaskedPattern(TestBase):

    def test_wildcards(self):
        pattern = MaskedPattern(B'\xAA\x00\xBB', B'\x00\xFF')
        self.assertEqual(pattern.findall(B'--\xAA\x12\xBB--\xAA\x34\xBB\xAA\x12\xBB'), [
            B'\xAA\x12\xBB',
            B'\xAA\x34\xBB',
        ])
        self.assertEqual(pattern.findall(B'\xAB\x12\xBB'), [])
        self.assertEqual(len(pattern), 3)

    def test_wildcard_matches_newlines(self):
        pattern = MaskedPattern(B'\xAA\x00', B'\x00')
        self.assertEqual(pattern.findall(B'\xAA\n'), [B'\xAA\n'])

    def test_partial_mask(self):
        pattern = MaskedPattern(B'\x01\x50', B'\xF0')
        self.assertEqual(pattern.findall(B'\x01\x5F\x01\x60\x01\x50'), [B'\x01\x5F', B'\x01\x50'])

    def test_first_byte_is_literal(self):
        pattern = MaskedPattern(B'.*', B'\x00')
        self.assertEqual(pattern.findall(B'ab.c'), [B'.c'])

    def test_invalid_mask_length(self):
        self.assertRaises(ValueError, MaskedPattern, B'\x01\x02', B'\xFF\xFF')
        self.assertRaises(ValueError, MaskedPattern, B'', B'')


class TestArticleRanges(TestBase):

    def test_decrypt_call_pattern(self):
        self.assertEqual(len(DECRYPT_CALL), 15)
        self.assertEqual(len(DECRYPT_CALL.findall(article_call(0x1234, 0x5678))), 1)

    def test_ranges(self):
        body = B'\x90' * 7 + article_call(0x0123, 0x0400) + B'\xCC' + article_call(0x0200, 0x0010)
        self.assertEqual(find_article_ranges(body), [
            ArticleRange(0x1230, 0x0400),
            ArticleRange(0x2000, 0x0010),
        ])

    def test_duplicate_calls_are_reported_once(self):
        call = article_call(0x0042, 0x0100)
        ranges = find_article_ranges(call + B'\x90\x90' + call)
        self.assertEqual(ranges, [ArticleRange(0x420, 0x100)])
        self.assertEqual(ranges[0].end, 0x520)
        self.assertEqual(str(ranges[0]), '0x420:0x100')

    def test_no_articles(self):
        self.assertRaises(PatternNotFound, find_article_ranges, B'\xB8\x00\x00\x50\x57' * 10)
