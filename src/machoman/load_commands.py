#
#  machoman | machoman
#  load_commands.py
#
#  Load command decoding. One call decodes one command and leaves the stream at the next one, whether or not
#    the command's tag is one we understand.
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2022.
#

from typing import Union

from machoman.constants import LOAD_COMMAND
from machoman.exceptions import InvalidLoadCommandSizeException, SectionCountOverflowException, \
    MalformedMachOException
from machoman.extractor import Extractor
from machoman.log import log
from machoman.macho_structs import *
from machoman.structs import Struct, decode_fixed_str


class UnknownLoadCommand:
    """
    A load command whose tag has no decoder. The payload is kept verbatim so the command can be written back out
        byte for byte.
    """

    def __init__(self, cmd: int, cmdsize: int, data: bytes, byte_order="little"):
        self.cmd = cmd
        self.cmdsize = cmdsize
        self.data = bytes(data)
        self.byte_order = byte_order
        self.off = 0

    @property
    def type_name(self):
        return self.__class__.__name__

    @property
    def raw(self) -> bytes:
        return self.cmd.to_bytes(4, self.byte_order) + self.cmdsize.to_bytes(4, self.byte_order) + self.data

    def __eq__(self, other):
        if not isinstance(other, UnknownLoadCommand):
            return False
        return (self.cmd, self.cmdsize, self.data) == (other.cmd, other.cmdsize, other.data)

    def __str__(self):
        return f'{self.__class__.__name__}(cmd={hex(self.cmd)}, cmdsize={hex(self.cmdsize)}, data={self.data.hex()})'

    def __repr__(self):
        return str(self)

    def serialize(self):
        return {
            'type': self.__class__.__name__,
            'cmd': self.cmd,
            'cmdsize': self.cmdsize,
            'data': self.data.hex()
        }


LoadCommand = Union[Struct, UnknownLoadCommand]


LOAD_COMMAND_MAP = {
    LOAD_COMMAND.SEGMENT: segment_command,
    LOAD_COMMAND.SEGMENT_64: segment_command_64,
    LOAD_COMMAND.UUID: uuid_command,
    LOAD_COMMAND.SYMTAB: symtab_command,
    LOAD_COMMAND.DYSYMTAB: dysymtab_command,
    LOAD_COMMAND.TWOLEVEL_HINTS: twolevel_hints_command,
    LOAD_COMMAND.DYLD_INFO: dyld_info_command,
    LOAD_COMMAND.DYLD_INFO_ONLY: dyld_info_command,
    LOAD_COMMAND.CODE_SIGNATURE: linkedit_data_command,
    LOAD_COMMAND.SEGMENT_SPLIT_INFO: linkedit_data_command,
    LOAD_COMMAND.FUNCTION_STARTS: linkedit_data_command,
    LOAD_COMMAND.DATA_IN_CODE: linkedit_data_command,
    LOAD_COMMAND.DYLIB_CODE_SIGN_DRS: linkedit_data_command,
    LOAD_COMMAND.LINKER_OPTIMIZATION_HINT: linkedit_data_command,
    LOAD_COMMAND.DYLD_EXPORTS_TRIE: linkedit_data_command,
    LOAD_COMMAND.DYLD_CHAINED_FIXUPS: linkedit_data_command,
    LOAD_COMMAND.LOAD_DYLIB: dylib_command,
    LOAD_COMMAND.ID_DYLIB: dylib_command,
    LOAD_COMMAND.LOAD_WEAK_DYLIB: dylib_command,
    LOAD_COMMAND.REEXPORT_DYLIB: dylib_command,
    LOAD_COMMAND.LAZY_LOAD_DYLIB: dylib_command,
    LOAD_COMMAND.LOAD_UPWARD_DYLIB: dylib_command,
    LOAD_COMMAND.LOAD_DYLINKER: dylinker_command,
    LOAD_COMMAND.ID_DYLINKER: dylinker_command,
    LOAD_COMMAND.DYLD_ENVIRONMENT: dylinker_command,
    LOAD_COMMAND.RPATH: rpath_command,
    LOAD_COMMAND.MAIN: entry_point_command,
    LOAD_COMMAND.SOURCE_VERSION: source_version_command,
    LOAD_COMMAND.VERSION_MIN_MACOSX: version_min_command,
    LOAD_COMMAND.VERSION_MIN_IPHONEOS: version_min_command,
    LOAD_COMMAND.VERSION_MIN_TVOS: version_min_command,
    LOAD_COMMAND.VERSION_MIN_WATCHOS: version_min_command,
    LOAD_COMMAND.BUILD_VERSION: build_version_command,
    LOAD_COMMAND.ENCRYPTION_INFO: encryption_info_command,
    LOAD_COMMAND.ENCRYPTION_INFO_64: encryption_info_command_64
}


def check_cmdsize(cmdsize: int, is64: bool):
    """
    :raises InvalidLoadCommandSizeException: cmdsize is under 8, or not a multiple of the pointer size
    """
    alignment = 8 if is64 else 4
    if cmdsize < load_command.size() or cmdsize % alignment != 0:
        log.error(f'Bad load command size {hex(cmdsize)} ({"64" if is64 else "32"} bit)')
        raise InvalidLoadCommandSizeException(cmdsize)


def _check_trailing_count(command: Struct, count: int, record_type, strict: bool):
    # The count field is only trusted as far as the command's own cmdsize can back it up.
    # With no records there is nothing to read past the fixed fields; the final seek handles a short cmdsize.
    needed = command.size() + count * record_type.size()
    if count == 0 or needed <= command.cmdsize:
        return
    if strict:
        log.error(f'{command.type_name} at {hex(command.off)} claims {count} {record_type.__name__} records '
                  f'({needed} bytes) but cmdsize is {command.cmdsize}')
        raise SectionCountOverflowException(count, command.cmdsize)
    log.warn(f'{command.type_name} at {hex(command.off)} reads {needed - command.cmdsize} bytes past its cmdsize')


def _load_sections(extractor: Extractor, command, strict: bool):
    section_type = section_64 if isinstance(command, segment_command_64) else section
    _check_trailing_count(command, command.nsects, section_type, strict)
    for _ in range(command.nsects):
        sect = extractor.read_struct(section_type)
        log.debug_more(str(sect))
        command.sections.append(sect)


def _load_build_tools(extractor: Extractor, command: build_version_command, strict: bool):
    _check_trailing_count(command, command.ntools, build_tool_version, strict)
    for _ in range(command.ntools):
        command.tools.append(extractor.read_struct(build_tool_version))


def _read_lc_str(extractor: Extractor, command: Struct, str_offset: int, strict: bool) -> str:
    # lc_str offsets are relative to the start of the command, and the string can't leave the command
    if not command.size() <= str_offset < command.cmdsize:
        if strict:
            log.error(f'{command.type_name} at {hex(command.off)} has string offset {hex(str_offset)} outside '
                      f'of its {command.cmdsize} bytes')
            raise MalformedMachOException(f'String offset {str_offset} outside load command of size {command.cmdsize}')
        log.warn(f'{command.type_name} at {hex(command.off)} has out of bounds string offset {hex(str_offset)}')
        return ""
    extractor.seek(command.off + str_offset)
    return decode_fixed_str(extractor.read_bytes(command.cmdsize - str_offset))


def _load_dylib_name(extractor: Extractor, command: dylib_command, strict: bool):
    command.name = _read_lc_str(extractor, command, command.dylib.name, strict)


def _load_dylinker_name(extractor: Extractor, command: dylinker_command, strict: bool):
    command.name = _read_lc_str(extractor, command, command.name_offset, strict)


def _load_rpath(extractor: Extractor, command: rpath_command, strict: bool):
    command.path = _read_lc_str(extractor, command, command.path_offset, strict)


# Anything in a command past its fixed fields
TRAILING_DATA_LOADERS = {
    segment_command: _load_sections,
    segment_command_64: _load_sections,
    build_version_command: _load_build_tools,
    dylib_command: _load_dylib_name,
    dylinker_command: _load_dylinker_name,
    rpath_command: _load_rpath
}


def load_command_from_stream(extractor: Extractor, is64: bool, strict=True) -> LoadCommand:
    """
    Decode the load command at the current position of `extractor`'s stream.

    Whatever happens inside the command, on success the stream is left at (start + cmdsize). The declared cmdsize
        always wins over the number of bytes a decoder consumed.

    :param extractor: Extractor in the header's byte order
    :param is64: Whether the image is 64 bit; decides cmdsize alignment
    :param strict: Reject commands whose record counts overrun cmdsize instead of reading past them
    :return: A Struct from LOAD_COMMAND_MAP, or an UnknownLoadCommand
    :raises InvalidLoadCommandSizeException:
    :raises MachOIOException:
    """
    start = extractor.tell()

    lc_raw = extractor.read_bytes(load_command.size())
    lc = Struct.create_with_bytes(load_command, lc_raw, extractor.byte_order)
    check_cmdsize(lc.cmdsize, is64)

    struct_type = LOAD_COMMAND_MAP.get(lc.cmd)

    if struct_type is None:
        log.debug(f'No decoder for load command {LOAD_COMMAND(lc.cmd).name} ({hex(lc.cmd)}) at {hex(start)}, '
                  f'keeping {lc.cmdsize - 8} raw bytes')
        command = UnknownLoadCommand(lc.cmd, lc.cmdsize, extractor.read_bytes(lc.cmdsize - 8), extractor.byte_order)
        command.off = start
    else:
        command = extractor.read_struct(struct_type, prefix=lc_raw)
        loader = TRAILING_DATA_LOADERS.get(struct_type)
        if loader is not None:
            loader(extractor, command, strict)
        log.debug_more(f'{LOAD_COMMAND(lc.cmd).name} at {hex(start)}: {command}')

    extractor.seek(start + lc.cmdsize)
    return command
