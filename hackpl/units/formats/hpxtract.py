#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

from hackpl.lib.decoder import extract_articles, unpack
from hackpl.lib.environment import environment
from hackpl.lib.mz import MZExecutable
from hackpl.lib.types import Param
from hackpl.units.formats import Arg, Issue, Unit

ARTICLE_CODEPAGE = 'cp852'


class hpxtract(Unit):
    """
    Extracts the articles from an issue of the zine. The input is the packed executable as it was
    distributed; it is unpacked first, then every article is located and decrypted. Each article
    is emitted as a separate chunk. The articles are encoded in code page 852 unless they are
    converted with the unicode switch.
    """
    def __init__(
        self,
        issue: Param[int, Arg('issue', type=Issue.Get, metavar='issue', help=(
            'The number of the issue, which selects password and key derivation.'))],
        unicode: Param[bool, Arg.Switch('-u', help=(
            'Convert the articles from code page 852 to UTF-8. The environment variable '
            'HACKPL_CODEPAGE can specify a different source code page.'))] = False,
        max_size: Param[int, Arg.Number('-m', metavar='N', help=(
            'Decrypt at most {varname} bytes of each article.'))] = None,
        unpacked: Param[bool, Arg.Switch('-x', help=(
            'The input is an executable that was already unpacked with hpunpack.'))] = False,
    ):
        pass

    def process(self, data: bytearray):
        issue = Issue.Get(self.args.issue)
        if self.args.unpacked:
            executable = MZExecutable.Parse(data)
        else:
            executable = unpack(data)
        articles = extract_articles(executable, issue, max_size=self.args.max_size)
        self.log_info(F'extracted {len(articles)} articles from issue {issue.value}')
        codepage = environment.codepage.value or ARTICLE_CODEPAGE
        for article in articles:
            if self.args.unicode:
                article = article.decode(codepage, 'replace').encode(self.codec)
            yield article
