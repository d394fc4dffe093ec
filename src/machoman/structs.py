#
#  machoman | machoman
#  structs.py
#
#  Custom Struct implementation reflecting behavior of named tuples while also handling behind-the-scenes
#    packing/unpacking
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2022.
#

from machoman.exceptions import InvalidFixedStringException

# Field sizes double as type tags; the high half says how to interpret the bytes, the low half is the width.
type_mask = 0xffff0000
size_mask = 0xffff

type_uint = 0
type_str = 0x20000
type_bytes = 0x30000

uint8_t = 1
uint16_t = 2
uint32_t = 4
uint64_t = 8
uint128_t = 16

# char_t[16] is a 16 byte, NUL padded name slot. bytes_t[16] is 16 opaque bytes.
char_t = [type_str | i for i in range(65)]
bytes_t = [type_bytes | i for i in range(65)]


def decode_fixed_str(data: bytes) -> str:
    """
    Decode a NUL padded fixed-width name slot.

    Everything past the first NUL is ignored.

    :param data: Raw bytes of the slot
    :return: The name
    :raises InvalidFixedStringException: The bytes before the first NUL are not valid text
    """
    data = bytes(data).split(b'\x00', 1)[0]
    try:
        return data.decode('utf-8')
    except UnicodeDecodeError as ex:
        raise InvalidFixedStringException(data) from ex


def encode_fixed_str(name: str, width: int = 16) -> bytes:
    """
    Encode a name into a NUL padded fixed-width slot.

    :param name: Name to encode
    :param width: Width of the slot
    :return: `width` bytes
    :raises InvalidFixedStringException: The name is longer than the slot or isn't pure ASCII
    """
    try:
        data = name.encode('ascii')
    except UnicodeEncodeError as ex:
        raise InvalidFixedStringException(name) from ex
    if len(data) > width:
        raise InvalidFixedStringException(name)
    return data + b'\x00' * (width - len(data))


def _bytes_to_hex(data) -> str:
    return bytes(data).hex()


# noinspection PyUnresolvedReferences
class Struct:
    """
    Custom namedtuple-esque Struct representation. Can be unpacked from bytes or manually created with existing
        field values

    Subclasses declare their layout in a `FIELDS` dict of field name -> field size/type, in on-disk order.
    That table is the only thing a record type needs; decoding and encoding are driven from it.

    Fields are exposed as attributes, and the byte representation (in the byte order the struct was created with)
        is available via the .raw attribute

    """

    FIELDS = {}

    @classmethod
    def size(cls):
        if '_SIZE' not in cls.__dict__:
            size = 0
            for value in cls.FIELDS.values():
                if isinstance(value, int):
                    size += value & size_mask
                elif issubclass(value, Struct):
                    if value == cls:
                        raise AssertionError(f"Recursive type definition on {cls.__name__}")
                    size += value.size()
                else:
                    raise AssertionError(f"Bad field type {value} on {cls.__name__}")
            cls._SIZE = size
        return cls._SIZE

    # noinspection PyProtectedMember
    @staticmethod
    def create_with_bytes(struct_class, raw, byte_order="little"):
        """
        Unpack a struct from raw bytes

        :param struct_class: Struct subclass
        :param raw: Bytes
        :param byte_order: Little/Big Endian Struct Unpacking
        :return: struct_class Instance
        """
        instance: Struct = struct_class(byte_order)
        current_off = 0
        raw = bytes(raw)

        if len(raw) < struct_class.size():
            raise AssertionError(f"{struct_class.__name__} needs {struct_class.size()} bytes, got {len(raw)}")

        for field in instance._fields:
            value = instance._field_sizes[field]

            if isinstance(value, int):
                field_type = type_mask & value
                size = size_mask & value

                data = raw[current_off:current_off + size]

                if field_type == type_str:
                    field_value = decode_fixed_str(data)

                elif field_type == type_bytes:
                    field_value = data

                else:
                    field_value = int.from_bytes(data, byte_order)

            else:
                size = value.size()
                data = raw[current_off:current_off + size]
                field_value = Struct.create_with_bytes(value, data, byte_order)

            setattr(instance, field, field_value)
            current_off += size

        instance.post_init()
        return instance

    @staticmethod
    def create_with_values(struct_class, values, byte_order="little"):
        """
        Pack/Create a struct given field values

        :param byte_order:
        :param struct_class: Struct subclass
        :param values: List of values
        :return: struct_class Instance
        """

        instance: Struct = struct_class(byte_order)

        # noinspection PyProtectedMember
        for i, field in enumerate(instance._fields):
            setattr(instance, field, values[i])

        instance.post_init()
        return instance

    @property
    def type_name(self):
        return self.__class__.__name__

    @property
    def raw(self) -> bytes:
        raw = bytearray()
        for field in self._fields:
            size = self._field_sizes[field]

            field_dat = getattr(self, field)

            if isinstance(field_dat, Struct):
                data = field_dat.raw
            elif isinstance(field_dat, str):
                data = encode_fixed_str(field_dat, size & size_mask)
            elif isinstance(field_dat, (bytes, bytearray)):
                data = bytes(field_dat)
                if len(data) != size & size_mask:
                    raise AssertionError(f"{field} must be {size & size_mask} bytes, got {len(data)}")
            else:
                data = int(field_dat).to_bytes(size & size_mask, byteorder=self.byte_order)

            raw += data

        return bytes(raw)

    def __eq__(self, other):
        if self.__class__ is not other.__class__:
            return False
        for field in self._fields:
            if getattr(self, field) != getattr(other, field):
                return False
        return True

    def __ne__(self, other):
        return not self.__eq__(other)

    def __repr__(self):
        return str(self)

    def __str__(self):
        text = f'{self.__class__.__name__}('
        for field in self._fields:
            attr = getattr(self, field)
            if isinstance(attr, str):
                field_item = repr(attr)
            elif isinstance(attr, (bytes, bytearray)):
                field_item = _bytes_to_hex(attr)
            elif isinstance(attr, int):
                field_item = hex(attr)
            else:
                field_item = str(attr)
            text += f'{field}={field_item}, '
        return text[:-2] + ')'

    def serialize(self):
        struct_dict = {'type': self.__class__.__name__}

        for field in self._fields:
            attr = getattr(self, field)
            if isinstance(attr, (bytes, bytearray)):
                field_item = _bytes_to_hex(attr)
            elif isinstance(attr, Struct):
                field_item = attr.serialize()
            else:
                field_item = int(attr) if isinstance(attr, int) else attr
            struct_dict[field] = field_item

        return struct_dict

    def __init__(self, byte_order="little"):
        if not self.__class__.FIELDS:
            raise AssertionError(
                "Do not use the bare Struct class; it must be implemented in an actual type; Missing FIELDS")

        self._fields = list(self.__class__.FIELDS.keys())
        self._field_sizes = dict(self.__class__.FIELDS)
        self.byte_order = byte_order

        # stream offset this struct was read from, if it was read from one
        self.off = 0

    def post_init(self):
        """stub for subclasses. gets called once all fields are loaded"""
        pass
