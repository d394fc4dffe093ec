#
#  machoman | machoman
#  extractor.py
#
#  Byte order aware reads off a seekable stream. Every decoder downstream of the header goes through one of these,
#    so none of them have to care about endianness.
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2022.
#

import os
from typing import BinaryIO, Type

from machoman.exceptions import MachOIOException
from machoman.log import log
from machoman.structs import Struct


class Extractor:
    """
    Reads fixed width unsigned ints, raw bytes, and whole Structs from `fp` in a single byte order.

    The byte order is picked once, when the Extractor is made, and applies to every read. There is no buffering here;
        position semantics (including after a failed read) are exactly those of `fp`.
    """

    def __init__(self, fp: BinaryIO, byte_order="little"):
        if byte_order not in ("little", "big"):
            raise ValueError(f'Bad byte order {byte_order!r}')
        self.fp = fp
        self.byte_order = byte_order

    @classmethod
    def little_endian(cls, fp: BinaryIO) -> 'Extractor':
        return cls(fp, "little")

    @classmethod
    def big_endian(cls, fp: BinaryIO) -> 'Extractor':
        return cls(fp, "big")

    def tell(self) -> int:
        try:
            return self.fp.tell()
        except OSError as ex:
            raise MachOIOException(f'tell() failed: {ex}') from ex

    def seek(self, offset: int, whence=os.SEEK_SET) -> int:
        try:
            return self.fp.seek(offset, whence)
        except (OSError, ValueError) as ex:
            raise MachOIOException(f'seek({offset}, {whence}) failed: {ex}') from ex

    def read_bytes(self, count: int) -> bytes:
        """
        Read exactly `count` bytes

        :raises MachOIOException: on any OS error, or if the stream ends first
        """
        try:
            data = self.fp.read(count)
        except OSError as ex:
            raise MachOIOException(f'read of {count} bytes failed: {ex}') from ex
        if data is None or len(data) != count:
            got = 0 if data is None else len(data)
            raise MachOIOException(f'Short read: wanted {count} bytes, got {got}')
        return bytes(data)

    def read_uint(self, width: int) -> int:
        """
        :param width: Width in bytes
        """
        value = int.from_bytes(self.read_bytes(width), self.byte_order)
        log.debug_tm(f'u{width * 8} {hex(value)}')
        return value

    def read_uint8(self) -> int:
        return self.read_uint(1)

    def read_uint16(self) -> int:
        return self.read_uint(2)

    def read_uint32(self) -> int:
        return self.read_uint(4)

    def read_uint64(self) -> int:
        return self.read_uint(8)

    def read_uint128(self) -> int:
        return self.read_uint(16)

    def read_struct(self, struct_type: Type[Struct], prefix: bytes = b'') -> Struct:
        """
        Decode a `struct_type` at the current position.

        :param struct_type: Struct subclass to decode
        :param prefix: Leading bytes of the struct that have already been consumed from the stream
        :return: struct_type instance, with .off set to where it starts in the stream
        """
        off = self.tell() - len(prefix)
        data = prefix + self.read_bytes(struct_type.size() - len(prefix))
        struct = Struct.create_with_bytes(struct_type, data, self.byte_order)
        struct.off = off
        return struct
