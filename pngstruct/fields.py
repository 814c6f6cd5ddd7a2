"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable without need for relayouting.
"""
import logging
import struct

from .meta import FieldBase, Endianess
from .properties import Dependency
from .streams import Stream
from .exceptions import (
    PNGStructException,
    BadSignatureException,
    TruncatedFileException,
)


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, *args, name=None, father=None, default=None, offset=None,
                 endianess=Endianess.LITTLE_ENDIAN, is_magic=False):
        super().__init__()
        self.logger = logging.getLogger(self.__class__.__module__)
        self.name = name
        self.father = father
        self.default = default
        self.offset = offset
        self.endianess = endianess
        self.is_magic = is_magic

        self.init()

    def init(self):
        self._value = self.value_from_default()

    def value_from_default(self):
        return self.default

    def __str__(self):
        return str(self.value)

    def _get_value(self):
        return self._value

    def _set_value(self, value) -> None:
        self._value = value

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    def _get_size(self) -> int:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_size() not implemented")

    size = property(
        fget=lambda self: self._get_size(),
    )

    def _get_raw(self) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}._get_raw() not implemented")

    raw = property(
        fget=lambda self: self._get_raw(),
    )

    def read(self, stream: Stream, size: int) -> bytes:
        '''Read exactly "size" bytes from the stream or complain'''
        offset = stream.tell()
        data = stream.read(size)

        if len(data) != size:
            raise TruncatedFileException(offset=offset, needed=size, available=len(data))

        return data

    def check_magic(self, value, offset):
        if self.is_magic and value != self.default:
            self.logger.warning('the magic doesn\'t correspond')
            raise BadSignatureException(offset=offset, expected=self.default, actual=value)

    def relayout(self, offset=0):
        self.logger.debug("relayouting %s", self.__class__.__name__)
        self.offset = offset

        return self.size

    def _update_value(self):
        '''This is used to update the binary value before packing'''
        pass

    def pack(self, stream=None, relayout=True):
        '''The pack-ing writes the raw representation at the actual position of the stream,
        after giving the field the chance to update its value from the other ones.'''
        if relayout:
            self.relayout()

        stream = Stream(b'') if stream is None else stream

        self._update_value()
        stream.write(self.raw)

        return stream.getvalue()

    def unpack(self, stream):
        raise NotImplementedError('you need to implement this in the subclass')


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.
    """

    def __init__(self, format, default=0, **kw):
        self.format = format
        super().__init__(default=default, **kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, hex(self.value))

    def get_format(self):
        return '%s%s' % ('<' if self.endianess == Endianess.LITTLE_ENDIAN else '>', self.format)

    def _pack_struct(self, value) -> bytes:
        try:
            return struct.pack(self.get_format(), value)
        except struct.error as e:
            self.logger.error(e)
            raise ValueError(f'{value!r} cannot be represented with format \'{self.get_format()}\'') from e

    def _set_value(self, value) -> None:
        self._pack_struct(value)
        super()._set_value(value)

    def _get_size(self):
        return struct.calcsize(self.get_format())

    def _get_raw(self) -> bytes:
        return self._pack_struct(self.value)

    def unpack(self, stream):
        raw = self.read(stream, self.size)
        self._value = struct.unpack(self.get_format(), raw)[0]


class StringField(Field):
    """Represent a contiguous chunk of bytes.

    The length can be fixed or a Dependency: in the latter case setting a new value
    updates the field it depends on."""

    def __init__(self, n=None, **kw):
        if n is None and kw.get('default') is None:
            raise ValueError("StringField must have 'n' or 'default' indicated!")

        self._length = n if n is not None else len(kw['default'])

        super().__init__(**kw)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, repr(self.value))

    def __len__(self):
        return self.length

    @property
    def length(self) -> int:
        if not isinstance(self._length, Dependency):
            return self._length

        if self.father is None:
            return len(self.__dict__.get('_value', b''))

        return self._length.resolve(self)

    def value_from_default(self):
        return b'\x00' * self.length if self.default is None else self.default

    def _get_size(self):
        return self.length

    def _set_value(self, value) -> None:
        value = bytes(value)
        length = len(value)

        if isinstance(self._length, Dependency):
            if self.father is not None:
                self._length.resolve_and_set(self, length)
        elif length != self._length:
            raise ValueError(f'you are trying to set a value with the wrong size (that is {self._length} bytes)')

        super()._set_value(value)

    def _get_raw(self):
        return self.value

    def unpack(self, stream):
        offset = stream.tell()

        if self.is_magic:
            data = stream.read(self.length)
            self.check_magic(data, offset)
        else:
            data = self.read(stream, self.length)

        self._value = data


class ArrayField(Field):
    '''Un/Pack an array of Chunks.

    The elements are read one after the other until the stream is exhausted.

    This class must behave like a list in python, obviously cannot implement all the methods
    since, for example, slicing what should mean?
    '''

    def __init__(self, field_cls, **kw):
        self.field_cls = field_cls
        super().__init__(**kw)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.value!r})>'

    def __getitem__(self, item):
        return self.value[item]

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def value_from_default(self):
        return []

    def clear(self):
        self.value.clear()

    def _get_raw(self):
        return b''.join([element.raw for element in self.value])

    def _get_size(self):
        size = 0
        for element in self.value:
            size += element.size

        return size

    def relayout(self, offset=0):
        super().relayout(offset=offset)
        size = 0
        for field in self.value:
            size += field.relayout(offset=offset + size)

        return size

    def instance_element(self):
        return self.field_cls(father=self)  # pass the father so that we don't lose the hierarchy

    def unpack_element(self, element, stream):
        element.unpack(stream)

    def unpack(self, stream):
        elements = []

        while not stream.is_exhausted():
            offset = stream.tell()
            element = self.instance_element()

            self.logger.debug('unpacking element %d of \'%s\' at offset 0x%x' % (len(elements), self.name, offset))

            try:
                self.unpack_element(element, stream)
            except PNGStructException as e:
                e.chain.append('[%d]' % len(elements))
                if e.offset is None:
                    e.offset = offset
                raise

            elements.append(element)

        # only now we know that all the elements are fine
        self._value = elements

    def pack(self, stream=None, relayout=True):
        if relayout:
            self.relayout()

        stream = Stream(b'') if stream is None else stream

        for element in self.value:
            stream.seek(element.offset)
            element.pack(stream=stream, relayout=False)

        return stream.getvalue()

    def append(self, element):
        element.father = self
        self.value.append(element)

    def pop(self, index=-1):
        element = self.value.pop(index)
        element.father = None

        return element
