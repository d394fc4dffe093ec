#
#  machoman | machoman
#  __init__.py
#
#  Outward facing API
#
#  Some of these functions are only one line long, but the point is to standardize an outward facing API that allows
#   me to refactor and change things internally without breaking others' scripts.
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2021.
#

from io import BytesIO
from typing import BinaryIO, Union
import os

from .constants import *
from .exceptions import *
from .extractor import Extractor
from .header import MachOHeader
from .load_commands import UnknownLoadCommand, LOAD_COMMAND_MAP, load_command_from_stream
from .log import log, LogLevel
from .macho import MachO
from .macho_structs import *


def load_macho(fp: BinaryIO, strict=True) -> MachO:
    """
    Decode a thin Mach-O from a seekable binary stream, starting at its current position.

    File should be opened with 'rb'. The stream is not closed.

    :param fp: BinaryIO object
    :param strict: Reject segments (and build versions) whose record counts don't fit in their own cmdsize.
                    Disable to read the records anyway, like older tools do.
    :return: MachO
    :raises MachOException:
    """
    return MachO.from_stream(fp, strict=strict)


def load_macho_bytes(data: Union[bytes, bytearray], strict=True) -> MachO:
    return load_macho(BytesIO(bytes(data)), strict=strict)


def load_macho_path(path: Union[str, os.PathLike], strict=True) -> MachO:
    """
    :raises MachOIOException: the file can't be opened, or any of the errors load_macho() raises
    """
    try:
        fp = open(path, 'rb')
    except OSError as ex:
        raise MachOIOException(f'Couldn\'t open {path}: {ex}') from ex
    with fp:
        return load_macho(fp, strict=strict)
