#!/usr/bin/env python3
from __future__ import annotations

import re
import os
import setuptools
import pathlib

__prefix__ = os.getenv('HACKPL_PREFIX') or ''
__minver__ = '3.10'
__author__ = 'The hackpl authors'
__slogan__ = 'Unpacker and article decryptor for the H@CKPL DOS zine.'
__topics__ = [
    'Development Status :: 3 - Alpha',
    'Operating System :: OS Independent',
    'Programming Language :: Python :: 3 :: Only',
    'Topic :: Security :: Cryptography',
    'Topic :: System :: Archiving :: Compression',
    'Topic :: Utilities',
]

__units__ = {
    'hpunpack': 'hackpl.units.formats.hpunpack',
    'hpxtract': 'hackpl.units.formats.hpxtract',
    'hpcrypt': 'hackpl.units.crypto.hpcrypt',
}


def get_config():
    here = pathlib.Path(__file__).parent.absolute()

    def get_version():
        with open(here / 'hackpl' / '__init__.py', 'r', encoding='UTF8') as init:
            return re.search(R'''^__version__\s*=\s*['"]([^'"]+)['"]''', init.read(), re.MULTILINE)[1]

    def get_setup_readme(filename: str | pathlib.Path | None = None):
        if filename is None:
            filename = here.joinpath('README.md')
        with open(filename, 'r', encoding='UTF8') as README:
            return README.read()

    console_scripts = [
        F'{__prefix__}{name}={path}:{name}.run' for name, path in __units__.items()
    ]

    return dict(
        name='hackpl',
        version=get_version(),
        long_description=get_setup_readme(),
        author=__author__,
        description=__slogan__,
        long_description_content_type='text/markdown',
        python_requires=F'>={__minver__}',
        classifiers=__topics__,
        packages=setuptools.find_packages(include=('hackpl*',)),
        install_requires=['numpy'],
        extras_require={'test': ['pytest', 'pyflakes', 'pycodestyle', 'flake8']},
        entry_points={'console_scripts': console_scripts},
    )


if __name__ == '__main__':
    setuptools.setup(**get_config())
