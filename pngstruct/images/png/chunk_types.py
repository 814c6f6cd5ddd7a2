'''
# Chunk types

A chunk type is a sequence of four ASCII letters: the case of each letter,
i.e. the fifth bit of the byte, carries a property of the chunk

 1. ancillary bit: uppercase means critical
 2. private bit: uppercase means public
 3. reserved bit: must be uppercase in conforming files
 4. safe-to-copy bit: lowercase means safe to copy

See <http://www.libpng.org/pub/png/spec/1.2/PNG-Structure.html#Chunk-naming-conventions>.
'''
import string

from bitstring import Bits

from ... import fields
from ...exceptions import (
    InvalidLengthException,
    InvalidTypeCodeException,
)


LETTERS = frozenset(string.ascii_letters.encode('ascii'))


class ChunkType(object):
    '''Immutable four bytes identifier of a chunk.

    A non-conforming reserved bit doesn't prevent the creation, it's
    reported by is_valid().'''
    SIZE = 4
    # bits are numbered from the most significant one, 0x20 is the third
    CASE_BIT = 2

    def __init__(self, raw: bytes):
        raw = bytes(raw)

        if len(raw) != self.SIZE:
            raise InvalidLengthException(expected=self.SIZE, actual=len(raw))

        if not all(_ in LETTERS for _ in raw):
            raise InvalidTypeCodeException(value=raw)

        self._raw = raw
        self._bits = Bits(raw)

    @classmethod
    def from_bytes(cls, raw: bytes) -> "ChunkType":
        return cls(raw)

    @classmethod
    def from_text(cls, text: str) -> "ChunkType":
        if len(text) != cls.SIZE:
            raise InvalidLengthException(expected=cls.SIZE, actual=len(text))

        try:
            raw = text.encode('ascii')
        except UnicodeEncodeError as e:
            raise InvalidTypeCodeException(value=text) from e

        return cls.from_bytes(raw)

    @classmethod
    def cast(cls, value) -> "ChunkType":
        '''Accept a ChunkType, its text or its bytes'''
        if isinstance(value, cls):
            return value

        if isinstance(value, str):
            return cls.from_text(value)

        return cls.from_bytes(value)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self})>'

    def __str__(self):
        return self._raw.decode('ascii')

    def __bytes__(self):
        return self._raw

    def __eq__(self, other):
        if not isinstance(other, ChunkType):
            return NotImplemented

        return self._raw == other._raw

    def __hash__(self):
        return hash(self._raw)

    @property
    def raw(self) -> bytes:
        return self._raw

    def _is_lowercase(self, position: int) -> bool:
        return self._bits[position * 8 + self.CASE_BIT]

    @property
    def is_critical(self) -> bool:
        return not self._is_lowercase(0)

    @property
    def is_public(self) -> bool:
        return not self._is_lowercase(1)

    @property
    def is_reserved_bit_valid(self) -> bool:
        return not self._is_lowercase(2)

    @property
    def is_safe_to_copy(self) -> bool:
        return self._is_lowercase(3)

    def is_valid(self) -> bool:
        return all(_ in LETTERS for _ in self._raw) and self.is_reserved_bit_valid


class ChunkTypeField(fields.Field):
    '''Field containing a ChunkType, validated when unpacked.'''

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.value)

    def _get_size(self):
        return ChunkType.SIZE

    def _set_value(self, value) -> None:
        super()._set_value(ChunkType.cast(value) if value is not None else None)

    def _get_raw(self) -> bytes:
        if self.value is None:
            raise ValueError(f'the field \'{self.name}\' has no chunk type set')

        return self.value.raw

    def unpack(self, stream):
        offset = stream.tell()
        raw = self.read(stream, self.size)

        try:
            self._value = ChunkType.from_bytes(raw)
        except InvalidTypeCodeException as e:
            e.offset = offset
            raise
