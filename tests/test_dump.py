#
#  machoman | tests
#  test_dump.py
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
import contextlib
import io
import json
import os
import sys
import tempfile
import unittest

scriptdir = os.path.dirname(os.path.realpath(__file__))
sys.path[:0] = [f'{scriptdir}/../src', scriptdir]

from machoman import dump
from machoman.log import log, LogLevel, print_err

import synth

error_buffer = ""


def error_remap(msg):
    global error_buffer
    error_buffer += msg + '\n'


class ScratchFile:
    def __init__(self, data):
        self.dir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.dir.name, 'image')
        with open(self.path, 'wb') as fp:
            fp.write(data)

    def __enter__(self):
        return self.path

    def __exit__(self, *args):
        self.dir.cleanup()


class DumpTestCase(unittest.TestCase):
    def setUp(self):
        global error_buffer
        error_buffer = ""
        log.LOG_ERR = error_remap
        self.log_level = log.LOG_LEVEL

    def tearDown(self):
        log.LOG_ERR = print_err
        log.LOG_LEVEL = self.log_level

    def run_main(self, *argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            status = dump.main(list(argv))
        return status, out.getvalue()

    def test_dump_full(self):
        image = synth.image([synth.uuid_command(bytes(range(16))), synth.symtab_command(0x100, 1, 0x200, 0x10)])
        with ScratchFile(image) as path:
            status, out = self.run_main(path, '--no-color')
        self.assertEqual(status, 0)
        data = json.loads(out)
        self.assertEqual(data['file'], path)
        self.assertEqual(data['header']['ncmds'], 2)
        self.assertEqual([c['type'] for c in data['load_commands']], ['uuid_command', 'symtab_command'])
        self.assertEqual(data['load_commands'][1]['stroff'], 0x200)

    def test_header_only(self):
        image = synth.image([synth.uuid_command(bytes(16), byte_order="big")], is64=False, byte_order="big")
        with ScratchFile(image) as path:
            status, out = self.run_main('--header-only', '--no-color', path)
        self.assertEqual(status, 0)
        data = json.loads(out)
        self.assertNotIn('load_commands', data)
        self.assertEqual(data['magic'], 'MH_CIGAM')
        self.assertEqual(data['byte_order'], 'big')

    def test_dump_big_endian_32(self):
        image = synth.image([synth.uuid_command(bytes(range(16)), byte_order="big")], is64=False, byte_order="big")
        with ScratchFile(image) as path:
            status, out = self.run_main('--no-color', path)
        self.assertEqual(status, 0)
        command = json.loads(out)['load_commands'][0]
        self.assertEqual(command['type'], 'uuid_command')
        self.assertEqual(command['cmdsize'], 24)
        self.assertEqual(command['uuid'], bytes(range(16)).hex())

    def test_bad_file_sets_status(self):
        with ScratchFile(b'not a mach-o at all') as path:
            status, out = self.run_main(path, '--no-color')
        self.assertEqual(status, 1)
        self.assertEqual(out, '')
        self.assertIn('Invalid magic number', error_buffer)

    def test_missing_file(self):
        status, _ = self.run_main(os.path.join(scriptdir, 'no-such-image'), '--no-color')
        self.assertEqual(status, 1)
        self.assertIn('no-such-image', error_buffer)

    def test_good_files_still_dumped_after_a_bad_one(self):
        with ScratchFile(b'\x00' * 32) as bad, ScratchFile(synth.image([])) as good:
            status, out = self.run_main(bad, good, '--no-color')
        self.assertEqual(status, 1)
        self.assertEqual(json.loads(out)['file'], good)

    def test_lenient_flag(self):
        sections = [synth.section_64('__text', '__TEXT', 0, 1, 0), synth.section_64('__const', '__TEXT', 1, 1, 1)]
        seg = synth.segment_64('__TEXT', sections, cmdsize=synth.SEGMENT_64_SIZE)
        image = synth.image([seg[:synth.SEGMENT_64_SIZE]]) + seg[synth.SEGMENT_64_SIZE:]
        with ScratchFile(image) as path:
            strict_status, _ = self.run_main(path, '--no-color')
            lenient_status, out = self.run_main(path, '--no-color', '--lenient')
        self.assertEqual(strict_status, 1)
        self.assertEqual(lenient_status, 0)
        self.assertEqual(len(json.loads(out)['load_commands'][0]['sections']), 2)

    def test_verbosity(self):
        with ScratchFile(synth.image([])) as path:
            self.run_main(path, '--no-color', '-vv')
        self.assertEqual(log.LOG_LEVEL, LogLevel.INFO)

    def test_highlight(self):
        self.assertIn('\x1b[', dump.highlight_json('{"a": 1}'))


if __name__ == '__main__':
    unittest.main()
