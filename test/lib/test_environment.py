import logging
import os

from unittest import mock

from hackpl.lib.environment import EVLog, EVStr, LogLevel, logger

from .. import TestBase


class TestEnvironment(TestBase):

    def test_verbosity_levels(self):
        self.assertEqual(LogLevel.FromVerbosity(-1), LogLevel.DETACHED)
        self.assertEqual(LogLevel.FromVerbosity(0), LogLevel.WARNING)
        self.assertEqual(LogLevel.FromVerbosity(1), LogLevel.INFO)
        self.assertEqual(LogLevel.FromVerbosity(2), LogLevel.DEBUG)
        self.assertEqual(LogLevel.FromVerbosity(9), LogLevel.DEBUG)
        self.assertEqual(LogLevel.INFO.verbosity, 1)
        self.assertEqual(LogLevel.DETACHED.verbosity, -1)

    def test_environment_variables(self):
        with mock.patch.dict(os.environ, {'HACKPL_VERBOSITY': '2', 'HACKPL_CODEPAGE': ' cp437 '}):
            self.assertEqual(EVLog('VERBOSITY').value, LogLevel.DEBUG)
            self.assertEqual(EVStr('CODEPAGE').value, 'cp437')
        with mock.patch.dict(os.environ, {'HACKPL_VERBOSITY': 'DETACHED'}):
            self.assertEqual(EVLog('VERBOSITY').value, LogLevel.DETACHED)
        with mock.patch.dict(os.environ, {'HACKPL_VERBOSITY': 'LOUD'}):
            self.assertIsNone(EVLog('VERBOSITY').value)
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertIsNone(EVStr('CODEPAGE').value)

    def test_logger(self):
        log = logger('hackpl.test')
        self.assertFalse(log.propagate)
        self.assertIs(logger('hackpl.test'), log)
        self.assertEqual(len(log.handlers), 1)
        self.assertIsInstance(log, logging.Logger)
