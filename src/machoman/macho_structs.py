#
#  machoman | machoman
#  macho_structs.py
#
#  On-disk record layouts from <mach-o/loader.h>, declared as field tables for the Struct engine.
#
#  the __init__ defs here are unnecessary and only required for my IDE (pycharm) to recognize and autocomplete
#   the struct attributes
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2021.
#
import uuid

from machoman.structs import *


class mach_header(Struct):
    FIELDS = {
        'magic': uint32_t,
        'cpu_type': uint32_t,
        'cpu_subtype': uint32_t,
        'filetype': uint32_t,
        'ncmds': uint32_t,
        'sizeofcmds': uint32_t,
        'flags': uint32_t
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.magic = 0
        self.cpu_type = 0
        self.cpu_subtype = 0
        self.filetype = 0
        self.ncmds = 0
        self.sizeofcmds = 0
        self.flags = 0


class mach_header_64(Struct):
    FIELDS = {
        'magic': uint32_t,
        'cpu_type': uint32_t,
        'cpu_subtype': uint32_t,
        'filetype': uint32_t,
        'ncmds': uint32_t,
        'sizeofcmds': uint32_t,
        'flags': uint32_t,
        'reserved': uint32_t
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.magic = 0
        self.cpu_type = 0
        self.cpu_subtype = 0
        self.filetype = 0
        self.ncmds = 0
        self.sizeofcmds = 0
        self.flags = 0
        self.reserved = 0


class load_command(Struct):
    """
    The 8 bytes every load command starts with
    """
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.cmd = 0
        self.cmdsize = 0


class segment_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'segname': char_t[16],
        'vmaddr': uint32_t,
        'vmsize': uint32_t,
        'fileoff': uint32_t,
        'filesize': uint32_t,
        'maxprot': uint32_t,
        'initprot': uint32_t,
        'nsects': uint32_t,
        'flags': uint32_t
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.cmd = 0
        self.cmdsize = 0
        self.segname = ""
        self.vmaddr = 0
        self.vmsize = 0
        self.fileoff = 0
        self.filesize = 0
        self.maxprot = 0
        self.initprot = 0
        self.nsects = 0
        self.flags = 0
        self.sections = []

    def __eq__(self, other):
        return super().__eq__(other) and self.sections == other.sections

    def serialize(self):
        struct_dict = super().serialize()
        struct_dict['sections'] = [sect.serialize() for sect in self.sections]
        return struct_dict


class segment_command_64(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'segname': char_t[16],
        'vmaddr': uint64_t,
        'vmsize': uint64_t,
        'fileoff': uint64_t,
        'filesize': uint64_t,
        'maxprot': uint32_t,
        'initprot': uint32_t,
        'nsects': uint32_t,
        'flags': uint32_t
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.cmd = 0
        self.cmdsize = 0
        self.segname = ""
        self.vmaddr = 0
        self.vmsize = 0
        self.fileoff = 0
        self.filesize = 0
        self.maxprot = 0
        self.initprot = 0
        self.nsects = 0
        self.flags = 0
        self.sections = []

    def __eq__(self, other):
        return super().__eq__(other) and self.sections == other.sections

    def serialize(self):
        struct_dict = super().serialize()
        struct_dict['sections'] = [sect.serialize() for sect in self.sections]
        return struct_dict


class section(Struct):
    FIELDS = {
        'sectname': char_t[16],
        'segname': char_t[16],
        'addr': uint32_t,
        'size': uint32_t,
        'offset': uint32_t,
        'align': uint32_t,
        'reloff': uint32_t,
        'nreloc': uint32_t,
        'flags': uint32_t,
        'reserved1': uint32_t,
        'reserved2': uint32_t
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.sectname = ""
        self.segname = ""
        self.addr = 0
        self.size = 0
        self.offset = 0
        self.align = 0
        self.reloff = 0
        self.nreloc = 0
        self.flags = 0
        self.reserved1 = 0
        self.reserved2 = 0


class section_64(Struct):
    FIELDS = {
        'sectname': char_t[16],
        'segname': char_t[16],
        'addr': uint64_t,
        'size': uint64_t,
        'offset': uint32_t,
        'align': uint32_t,
        'reloff': uint32_t,
        'nreloc': uint32_t,
        'flags': uint32_t,
        'reserved1': uint32_t,
        'reserved2': uint32_t,
        'reserved3': uint32_t
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.sectname = ""
        self.segname = ""
        self.addr = 0
        self.size = 0
        self.offset = 0
        self.align = 0
        self.reloff = 0
        self.nreloc = 0
        self.flags = 0
        self.reserved1 = 0
        self.reserved2 = 0
        self.reserved3 = 0


class symtab_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'symoff': uint32_t,
        'nsyms': uint32_t,
        'stroff': uint32_t,
        'strsize': uint32_t
    }


class dysymtab_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'ilocalsym': uint32_t,
        'nlocalsym': uint32_t,
        'iextdefsym': uint32_t,
        'nextdefsym': uint32_t,
        'iundefsym': uint32_t,
        'nundefsym': uint32_t,
        'tocoff': uint32_t,
        'ntoc': uint32_t,
        'modtaboff': uint32_t,
        'nmodtab': uint32_t,
        'extrefsymoff': uint32_t,
        'nextrefsyms': uint32_t,
        'indirectsymoff': uint32_t,
        'nindirectsyms': uint32_t,
        'extreloff': uint32_t,
        'nextrel': uint32_t,
        'locreloff': uint32_t,
        'nlocrel': uint32_t
    }


class twolevel_hints_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'offset': uint32_t,
        'nhints': uint32_t
    }


class dyld_info_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'rebase_off': uint32_t,
        'rebase_size': uint32_t,
        'bind_off': uint32_t,
        'bind_size': uint32_t,
        'weak_bind_off': uint32_t,
        'weak_bind_size': uint32_t,
        'lazy_bind_off': uint32_t,
        'lazy_bind_size': uint32_t,
        'export_off': uint32_t,
        'export_size': uint32_t
    }


class linkedit_data_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'dataoff': uint32_t,
        'datasize': uint32_t
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.cmd = 0
        self.cmdsize = 0
        self.dataoff = 0
        self.datasize = 0


class uuid_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'uuid': bytes_t[16]
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.cmd = 0
        self.cmdsize = 0
        self.uuid = bytes(16)

    @property
    def uuid_str(self) -> str:
        """The UUID in the usual 8-4-4-4-12 form; the 16 bytes are stored in on-disk order"""
        return str(uuid.UUID(bytes=bytes(self.uuid))).upper()


class dylib(Struct):
    FIELDS = {
        'name': uint32_t,
        'timestamp': uint32_t,
        'current_version': uint32_t,
        'compatibility_version': uint32_t
    }


class dylib_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'dylib': dylib
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.cmd = 0
        self.cmdsize = 0
        self.dylib = None
        # lc_str payload, filled in by the load command decoder
        self.name = ""

    def serialize(self):
        struct_dict = super().serialize()
        struct_dict['name'] = self.name
        return struct_dict


class dylinker_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'name_offset': uint32_t
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.cmd = 0
        self.cmdsize = 0
        self.name_offset = 0
        self.name = ""

    def serialize(self):
        struct_dict = super().serialize()
        struct_dict['name'] = self.name
        return struct_dict


class rpath_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'path_offset': uint32_t
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.cmd = 0
        self.cmdsize = 0
        self.path_offset = 0
        self.path = ""

    def serialize(self):
        struct_dict = super().serialize()
        struct_dict['path'] = self.path
        return struct_dict


class entry_point_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'entryoff': uint64_t,
        'stacksize': uint64_t
    }


class source_version_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'version': uint64_t
    }


class version_min_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'version': uint32_t,
        'sdk': uint32_t
    }


class build_tool_version(Struct):
    FIELDS = {
        'tool': uint32_t,
        'version': uint32_t
    }


class build_version_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'platform': uint32_t,
        'minos': uint32_t,
        'sdk': uint32_t,
        'ntools': uint32_t
    }

    def __init__(self, byte_order="little"):
        super().__init__(byte_order=byte_order)
        self.cmd = 0
        self.cmdsize = 0
        self.platform = 0
        self.minos = 0
        self.sdk = 0
        self.ntools = 0
        self.tools = []

    def __eq__(self, other):
        return super().__eq__(other) and self.tools == other.tools

    def serialize(self):
        struct_dict = super().serialize()
        struct_dict['tools'] = [tool.serialize() for tool in self.tools]
        return struct_dict


class encryption_info_command(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'cryptoff': uint32_t,
        'cryptsize': uint32_t,
        'cryptid': uint32_t
    }


class encryption_info_command_64(Struct):
    FIELDS = {
        'cmd': uint32_t,
        'cmdsize': uint32_t,
        'cryptoff': uint32_t,
        'cryptsize': uint32_t,
        'cryptid': uint32_t,
        'pad': uint32_t
    }
