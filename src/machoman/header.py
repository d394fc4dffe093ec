#
#  machoman | machoman
#  header.py
#
#  This file contains the Mach-O header decoder.
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2021.
#

from typing import BinaryIO, List, Union

from machoman.constants import (Magic, MH_FLAGS, MH_FILETYPE, CPUType, FallbackIntEnum,
                                decode_cpu_subtype)
from machoman.exceptions import InvalidMagicException
from machoman.extractor import Extractor
from machoman.log import log
from machoman.macho_structs import mach_header, mach_header_64


class MachOHeader:
    """
    This class represents the Mach-O Header

    Bit width and byte order come from the magic, and are fixed once the header has been decoded.
    """

    @classmethod
    def from_stream(cls, fp: BinaryIO) -> 'MachOHeader':
        """
        Decode a header at the current position of `fp`, leaving `fp` at the first load command.

        :param fp: Seekable binary stream positioned at the first byte of a Mach-O
        :return: MachOHeader
        :raises InvalidMagicException: The magic isn't a thin Mach-O magic
        :raises MachOIOException: The stream failed or ended early
        """
        # the four magics are distinguishable in either byte order, so the first read is always little-endian
        magic_raw = Extractor.little_endian(fp).read_bytes(4)
        magic_value = int.from_bytes(magic_raw, "little")

        try:
            magic = Magic(magic_value)
        except ValueError:
            log.error(f'Bad Magic: {hex(magic_value)}')
            raise InvalidMagicException(magic_value) from None

        extractor = Extractor(fp, magic.byte_order)
        struct_type = mach_header_64 if magic.is64 else mach_header
        header = extractor.read_struct(struct_type, prefix=magic_raw)

        image_header = cls(magic, header)
        log.debug(str(image_header))
        return image_header

    def __init__(self, magic: Magic, header: Union[mach_header, mach_header_64]):
        self.magic = magic
        self.is64 = magic.is64
        self.byte_order = magic.byte_order
        self.dyld_header = header

        self.cpu_type = CPUType(header.cpu_type)
        self.cpu_subtype: FallbackIntEnum = decode_cpu_subtype(self.cpu_type, header.cpu_subtype)
        self.filetype = MH_FILETYPE(header.filetype)
        self.ncmds = header.ncmds
        self.sizeofcmds = header.sizeofcmds
        self.flags = header.flags

    @property
    def flag_list(self) -> List[MH_FLAGS]:
        return [flag for flag in MH_FLAGS if self.flags & flag.value]

    def __eq__(self, other):
        if not isinstance(other, MachOHeader):
            return False
        return self.magic == other.magic and self.dyld_header == other.dyld_header

    def __str__(self):
        return f'MachO Header - 64 bit: {self.is64} | Byte Order: {self.byte_order} | ' \
               f'CPU: {self.cpu_type.name} ({self.cpu_subtype.name}) | File Type: {self.filetype.name} | ' \
               f'Flags: {hex(self.flags)} | Load Cmd Count: {self.ncmds}'

    def serialize(self):
        return {
            'magic': self.magic.name,
            'is_64_bit': self.is64,
            'byte_order': self.byte_order,
            'cpu_type': self.cpu_type.name,
            'cpu_type_raw': int(self.cpu_type),
            'cpu_subtype': self.cpu_subtype.name,
            'cpu_subtype_raw': int(self.cpu_subtype),
            'filetype': self.filetype.name,
            'filetype_raw': int(self.filetype),
            'ncmds': self.ncmds,
            'sizeofcmds': self.sizeofcmds,
            'flags': self.flags,
            'flag_names': [flag.name for flag in self.flag_list]
        }
