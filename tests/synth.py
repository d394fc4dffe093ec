#
#  machoman | tests
#  synth.py
#
#  Builds small synthetic Mach-O images byte by byte, so tests don't depend on real binaries.
#  Deliberately doesn't use machoman, so a bug there can't hide in here.
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2022.
#

LC_SEGMENT = 0x1
LC_SYMTAB = 0x2
LC_SEGMENT_64 = 0x19
LC_UUID = 0x1B
LC_RPATH = 0x8000001C
LC_DYLD_INFO = 0x22
LC_DYLD_INFO_ONLY = 0x80000022
LC_LOAD_DYLIB = 0xC
LC_FUNCTION_STARTS = 0x26
LC_BUILD_VERSION = 0x32

SEGMENT_SIZE = 56
SEGMENT_64_SIZE = 72
SECTION_SIZE = 68
SECTION_64_SIZE = 80


def u32(value, byte_order="little"):
    return value.to_bytes(4, byte_order)


def u64(value, byte_order="little"):
    return value.to_bytes(8, byte_order)


def name16(name):
    if isinstance(name, str):
        name = name.encode('ascii')
    return name + b'\x00' * (16 - len(name))


def pad(data, alignment):
    while len(data) % alignment != 0:
        data += b'\x00'
    return data


def header(is64=True, byte_order="little", cpu_type=0x0100000C, cpu_subtype=0, filetype=2, ncmds=0,
           sizeofcmds=0, flags=0x00200085):
    data = u32(0xFEEDFACF if is64 else 0xFEEDFACE, byte_order)
    for value in [cpu_type, cpu_subtype, filetype, ncmds, sizeofcmds, flags]:
        data += u32(value, byte_order)
    if is64:
        data += u32(0, byte_order)
    return data


def command(cmd, payload, byte_order="little", cmdsize=None):
    """A load command; cmdsize defaults to 8 + len(payload)"""
    if cmdsize is None:
        cmdsize = 8 + len(payload)
    return u32(cmd, byte_order) + u32(cmdsize, byte_order) + payload


def uuid_command(uuid_bytes, byte_order="little"):
    return command(LC_UUID, uuid_bytes, byte_order)


def symtab_command(symoff, nsyms, stroff, strsize, byte_order="little", cmdsize=None):
    payload = b''.join(u32(v, byte_order) for v in [symoff, nsyms, stroff, strsize])
    return command(LC_SYMTAB, payload, byte_order, cmdsize)


def dyld_info_command(values, only=True, byte_order="little"):
    assert len(values) == 10
    payload = b''.join(u32(v, byte_order) for v in values)
    return command(LC_DYLD_INFO_ONLY if only else LC_DYLD_INFO, payload, byte_order)


def section_64(sectname, segname, addr, size, offset, align=4, flags=0x80000400, byte_order="little"):
    data = name16(sectname) + name16(segname) + u64(addr, byte_order) + u64(size, byte_order)
    for value in [offset, align, 0, 0, flags, 0, 0, 0]:
        data += u32(value, byte_order)
    assert len(data) == SECTION_64_SIZE
    return data


def section(sectname, segname, addr, size, offset, align=2, flags=0x80000400, byte_order="little"):
    data = name16(sectname) + name16(segname)
    for value in [addr, size, offset, align, 0, 0, flags, 0, 0]:
        data += u32(value, byte_order)
    assert len(data) == SECTION_SIZE
    return data


def segment_64(segname, sections, vmaddr=0x100000000, vmsize=0x4000, fileoff=0, filesize=0x4000, maxprot=5,
               initprot=5, flags=0, nsects=None, cmdsize=None, byte_order="little"):
    if nsects is None:
        nsects = len(sections)
    if cmdsize is None:
        cmdsize = SEGMENT_64_SIZE + SECTION_64_SIZE * len(sections)
    data = u32(LC_SEGMENT_64, byte_order) + u32(cmdsize, byte_order) + name16(segname)
    for value in [vmaddr, vmsize, fileoff, filesize]:
        data += u64(value, byte_order)
    for value in [maxprot, initprot, nsects, flags]:
        data += u32(value, byte_order)
    return data + b''.join(sections)


def segment(segname, sections, vmaddr=0x1000, vmsize=0x1000, fileoff=0, filesize=0x1000, maxprot=5,
            initprot=5, flags=0, nsects=None, cmdsize=None, byte_order="little"):
    if nsects is None:
        nsects = len(sections)
    if cmdsize is None:
        cmdsize = SEGMENT_SIZE + SECTION_SIZE * len(sections)
    data = u32(LC_SEGMENT, byte_order) + u32(cmdsize, byte_order) + name16(segname)
    for value in [vmaddr, vmsize, fileoff, filesize, maxprot, initprot, nsects, flags]:
        data += u32(value, byte_order)
    return data + b''.join(sections)


def lc_str_command(cmd, fixed_fields, string, alignment=8, byte_order="little", str_offset=None):
    """
    A command carrying an lc_str: `fixed_fields` are the u32s after the string offset, the string follows them
    """
    fixed_size = 8 + 4 + 4 * len(fixed_fields)
    if str_offset is None:
        str_offset = fixed_size
    payload = u32(str_offset, byte_order) + b''.join(u32(v, byte_order) for v in fixed_fields)
    # 8 is a multiple of either alignment, so padding the payload pads the whole command
    payload = pad(payload + string.encode('utf-8') + b'\x00', alignment)
    return command(cmd, payload, byte_order)


def image(commands, is64=True, byte_order="little", **kwargs):
    body = b''.join(commands)
    return header(is64, byte_order, ncmds=len(commands), sizeofcmds=len(body), **kwargs) + body
