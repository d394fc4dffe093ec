#
#  machoman | tests
#  test_log.py
#
#
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2022.
#
import os
import sys
import unittest
from io import BytesIO

scriptdir = os.path.dirname(os.path.realpath(__file__))
sys.path[:0] = [f'{scriptdir}/../src', scriptdir]

from machoman.exceptions import InvalidMagicException
from machoman.header import MachOHeader
from machoman.log import log, LogLevel, print_err


class LogTestCase(unittest.TestCase):
    def setUp(self):
        self.out = []
        self.err = []
        self.log_level = log.LOG_LEVEL
        log.LOG_FUNC = self.out.append
        log.LOG_ERR = self.err.append

    def tearDown(self):
        log.LOG_FUNC = print
        log.LOG_ERR = print_err
        log.LOG_LEVEL = self.log_level

    def test_level_filters(self):
        log.LOG_LEVEL = LogLevel.WARN
        log.debug('hidden')
        log.warn('shown')
        log.error('also shown')
        self.assertEqual(self.out, [])
        self.assertEqual(len(self.err), 2)

    def test_none_silences_errors(self):
        log.LOG_LEVEL = LogLevel.NONE
        log.error('hidden')
        self.assertEqual(self.err, [])

    def test_debug_levels_go_to_log_func(self):
        log.LOG_LEVEL = LogLevel.DEBUG_TOO_MUCH
        log.debug('a')
        log.debug_more('b')
        log.debug_tm('c')
        self.assertEqual([line.split(' - ')[0] for line in self.out], ['DEBUG', 'DEBUG-2', 'DEBUG-3'])
        self.assertEqual(self.err, [])

    def test_prefix_names_the_caller(self):
        log.LOG_LEVEL = LogLevel.ERROR
        with self.assertRaises(InvalidMagicException):
            MachOHeader.from_stream(BytesIO(b'\x00' * 32))
        self.assertEqual(len(self.err), 1)
        self.assertTrue(self.err[0].startswith('ERROR - machoman.header:L#'))
        self.assertIn(':MachOHeader:from_stream() - Bad Magic: 0x0', self.err[0])

    def test_prefix_for_method(self):
        log.LOG_LEVEL = LogLevel.WARN
        log.warn('x')
        self.assertIn('machoman.test_log:L#', self.err[0])
        self.assertIn(':LogTestCase:test_prefix_for_method() - x', self.err[0])


if __name__ == '__main__':
    unittest.main()
