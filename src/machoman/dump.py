#
#  machoman | machoman
#  dump.py
#
#  machoman-dump: print the decoded structure of one or more Mach-O files as JSON
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2022.
#

import json
import sys
from argparse import ArgumentParser

from pygments import highlight
from pygments.formatters.terminal import TerminalFormatter
from pygments.lexers.data import JsonLexer

from machoman import load_macho_path
from machoman.exceptions import MachOException
from machoman.log import log, LogLevel

VERBOSITY = [LogLevel.ERROR, LogLevel.WARN, LogLevel.INFO, LogLevel.DEBUG, LogLevel.DEBUG_MORE,
             LogLevel.DEBUG_TOO_MUCH]


def highlight_json(text):
    return highlight(text, JsonLexer(), TerminalFormatter())


def dump(path, header_only=False, strict=True, color=False):
    macho = load_macho_path(path, strict=strict)
    data = macho.header.serialize() if header_only else macho.serialize()
    text = json.dumps({'file': str(path), **data}, indent=2)
    return highlight_json(text) if color else text + '\n'


def main(argv=None):
    parser = ArgumentParser(prog='machoman-dump', description='Print the header and load commands of Mach-O files')
    parser.add_argument('files', nargs='+', help='thin Mach-O files to decode')
    parser.add_argument('-v', dest='verbosity', action='count', default=0,
                        help='more logging; repeat for more')
    parser.add_argument('--header-only', action='store_true', help='only print the mach header')
    parser.add_argument('--lenient', action='store_true',
                        help='read section/tool records even when their count overruns the load command')
    parser.add_argument('--no-color', action='store_true', help='never syntax highlight the output')

    args = parser.parse_args(argv)

    log.LOG_LEVEL = VERBOSITY[min(args.verbosity, len(VERBOSITY) - 1)]
    color = sys.stdout.isatty() and not args.no_color

    status = 0
    for path in args.files:
        try:
            sys.stdout.write(dump(path, header_only=args.header_only, strict=not args.lenient, color=color))
        except MachOException as ex:
            log.error(f'{path}: {ex}')
            status = 1

    return status


if __name__ == '__main__':
    sys.exit(main())
