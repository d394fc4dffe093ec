#
#  machoman | machoman
#  exceptions.py
#
#  Every error a decode can end in. All of them are fatal to the decode that raised them.
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2021.
#


class MachOException(Exception):
    """
    Base class for everything machoman raises
    """


class MachOIOException(MachOException):
    """
    A read or seek on the underlying stream failed, or came up short.

    The original OSError, if any, is chained as __cause__
    """


class InvalidMagicException(MachOException):
    """
    The first 4 bytes aren't one of the four thin Mach-O magics
    """

    def __init__(self, magic: int):
        super().__init__(f'Invalid magic number: {hex(magic)}')
        self.magic = magic


class MalformedMachOException(MachOException):
    """
    The file is a Mach-O, but some structure inside it can't be decoded
    """


class InvalidLoadCommandSizeException(MalformedMachOException):
    """
    A load command declared a cmdsize below 8 or not aligned to the pointer size.

    Nothing after it can be located, so the whole decode is abandoned.
    """

    def __init__(self, cmdsize: int, message=None):
        super().__init__(message or f'Invalid load command size: {cmdsize}')
        self.cmdsize = cmdsize


class SectionCountOverflowException(InvalidLoadCommandSizeException):
    """
    A segment's nsects (or a build version's ntools) describes more trailing records than its cmdsize can hold
    """

    def __init__(self, count: int, cmdsize: int):
        super().__init__(cmdsize, f'{count} trailing records do not fit in load command of size {cmdsize}')
        self.count = count


class InvalidFixedStringException(MalformedMachOException):
    """
    A 16 byte name slot holds bytes that aren't text (value is the bytes),
        or a name can't be stored in one (value is the str)
    """

    def __init__(self, value):
        super().__init__(f'Bad string: {value!r}')
        self.value = value
