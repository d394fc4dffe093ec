#
#  machoman | machoman
#  macho.py
#
#  The decoded container: a header and its load commands, in file order.
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2021.
#

from typing import BinaryIO, Tuple

from machoman.constants import LOAD_COMMAND
from machoman.extractor import Extractor
from machoman.header import MachOHeader
from machoman.load_commands import LoadCommand, load_command_from_stream
from machoman.log import log


class MachO:
    """
    A decoded thin Mach-O.

    Built in one go by from_stream(); nothing on it changes afterwards.
    """

    @classmethod
    def from_stream(cls, fp: BinaryIO, strict=True) -> 'MachO':
        """
        Decode the header at the current position of `fp`, then exactly `ncmds` load commands.

        The first failure aborts the decode; no partially decoded MachO is ever returned.

        :param fp: Seekable binary stream positioned at the magic
        :param strict: Passed through to load_command_from_stream()
        :return: MachO
        """
        header = MachOHeader.from_stream(fp)
        extractor = Extractor(fp, header.byte_order)

        load_commands = []
        for i in range(header.ncmds):
            log.debug_more(f'Load command {i}/{header.ncmds} at {hex(extractor.tell())}')
            load_commands.append(load_command_from_stream(extractor, header.is64, strict=strict))

        return cls(header, load_commands)

    def __init__(self, header: MachOHeader, load_commands):
        self.header = header
        self.load_commands: Tuple[LoadCommand, ...] = tuple(load_commands)

    def commands_of_type(self, cmd: LOAD_COMMAND):
        return [command for command in self.load_commands if command.cmd == cmd]

    @property
    def segments(self):
        return [command for command in self.load_commands
                if command.cmd in (LOAD_COMMAND.SEGMENT, LOAD_COMMAND.SEGMENT_64)]

    def __eq__(self, other):
        if not isinstance(other, MachO):
            return False
        return self.header == other.header and self.load_commands == other.load_commands

    def __str__(self):
        return f'{self.header}\n' + '\n'.join(str(command) for command in self.load_commands)

    def serialize(self):
        return {
            'header': self.header.serialize(),
            'load_commands': [command.serialize() for command in self.load_commands]
        }
