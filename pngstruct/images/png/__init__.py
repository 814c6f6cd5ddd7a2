'''
# Portable Network Graphics

Format created to replace patent-emcumbered GIF files.

The specification is at <http://www.libpng.org/pub/png/spec/1.2/PNG-Contents.html> and
is available a full test-suite with a lot of PNG images covering all
the possible cases at <http://www.schaik.com/pngsuite/>.

Here we only care about the container: a signature followed by chunks, each one
protected by its own CRC. The content of the chunks is kept as raw bytes.
'''
import struct
from typing import Optional

from ...core import Chunk
from ... import fields
from ...meta import Endianess
from ...properties import Dependency
from ...common import crc
from ...exceptions import (
    ChecksumMismatchException,
    ChunkNotFoundException,
    InvalidTextException,
    MalformedChunkException,
    TruncatedFileException,
)
from .chunk_types import ChunkType, ChunkTypeField


PNG_SIGNATURE = b'\x89\x50\x4e\x47\x0d\x0a\x1a\x0a'


class PNGHeader(Chunk):
    magic = fields.StringField(8, default=PNG_SIGNATURE, is_magic=True)


class PNGChunk(Chunk):
    '''This is the main data structure of the format: the 4 fields represent
    a chunk into the file. Each field is intended big-endian.

    The crc field is network-byte-order CRC-32 computed over the chunk type and chunk data, but not the length.

    # Critical chunks

     1. IHDR: contains image's width, height, bit depth, color type, compression method, filter method and interlace method
     2. PLTE: contains the palette data
     3. IDAT: contains the actual image data (compressed)
     4. IEND: is the terminator chunk

    A new chunk is built passing its type and data, the length and the crc are
    derived from them

        chunk = PNGChunk(type='RuSt', data=b'a secret message')
    '''
    # length + type + crc
    OVERHEAD = 12

    length = fields.StructField('I', endianess=Endianess.BIG_ENDIAN)  # big endian
    type   = ChunkTypeField()
    data   = fields.StringField(Dependency('.length'))
    crc    = crc.CRCField(['type', 'data'], endianess=Endianess.BIG_ENDIAN)  # network byte order

    @classmethod
    def from_bytes(cls, raw: bytes) -> "PNGChunk":
        '''Build a chunk from exactly the bytes of one chunk, nothing more nothing less.'''
        raw = bytes(raw)
        declared = struct.unpack('>I', raw[:4])[0] if len(raw) >= 4 else None

        if len(raw) < cls.OVERHEAD or declared + cls.OVERHEAD != len(raw):
            raise MalformedChunkException(offset=0, declared=declared, actual=len(raw))

        return cls(raw)

    @property
    def chunk_type(self) -> ChunkType:
        return self.type.value

    def calculate_crc(self) -> int:
        return self.crc.calculate()

    def data_as_string(self) -> str:
        try:
            return self.data.value.decode('utf-8')
        except UnicodeDecodeError as e:
            raise InvalidTextException(chunk_type=str(self.chunk_type)) from e

    def __str__(self):
        chunk_type = self.chunk_type
        return '%s length=%d crc=0x%08x %s %s %s' % (
            chunk_type,
            self.length.value,
            self.crc.value,
            'critical' if chunk_type.is_critical else 'ancillary',
            'public' if chunk_type.is_public else 'private',
            'safe-to-copy' if chunk_type.is_safe_to_copy else 'unsafe-to-copy',
        )

    def unpack(self, stream):
        '''Before reading the fields we check that the declared length fits into the
        data left, this way a truncated file is reported as such.'''
        offset = stream.tell()
        available = stream.remaining()

        if available < self.OVERHEAD:
            raise TruncatedFileException(offset=offset, needed=self.OVERHEAD, available=available)

        length = struct.unpack('>I', stream.peek(4))[0]

        if length + self.OVERHEAD > available:
            raise TruncatedFileException(offset=offset, needed=length + self.OVERHEAD, available=available)

        super().unpack(stream)

    def _update_value(self):
        '''The length and the crc are always derived from the data.'''
        self.length.value = len(self.data.value)
        super()._update_value()

    def validate(self):
        calculated = self.calculate_crc()

        if calculated != self.crc.value:
            self.logger.error('chunk \'%s\' has crc 0x%08x instead of 0x%08x' % (
                self.chunk_type, self.crc.value, calculated))
            raise ChecksumMismatchException(
                chunk_type=str(self.chunk_type),
                expected=calculated,
                actual=self.crc.value,
            )


class PNGFile(Chunk):
    '''The signature followed by all the chunks up to the end of the data.

    The order of the chunks is preserved, nothing is enforced about it.'''
    header = PNGHeader()
    chunks = fields.ArrayField(PNGChunk)

    @classmethod
    def from_bytes(cls, data: bytes) -> "PNGFile":
        return cls(data)

    @classmethod
    def from_chunks(cls, chunks) -> "PNGFile":
        png = cls()

        for chunk in chunks:
            png.append_chunk(chunk)

        return png

    def __len__(self):
        return len(self.chunks)

    def __iter__(self):
        return iter(self.chunks)

    def __str__(self):
        return '\n'.join(['[%02d] %s' % (idx, chunk) for idx, chunk in enumerate(self.chunks)])

    def append_chunk(self, chunk: PNGChunk):
        if not chunk.chunk_type.is_valid():
            self.logger.warning('appending chunk \'%s\' with non-conforming reserved bit' % chunk.chunk_type)

        self.chunks.append(chunk)

    def chunk_by_type(self, chunk_type) -> Optional[PNGChunk]:
        '''Return the first chunk with the given type (as text, bytes or ChunkType)'''
        chunk_type = ChunkType.cast(chunk_type)

        for chunk in self.chunks:
            if chunk.chunk_type == chunk_type:
                return chunk

        return None

    def remove_first_chunk(self, chunk_type) -> PNGChunk:
        chunk_type = ChunkType.cast(chunk_type)

        for idx, chunk in enumerate(self.chunks):
            if chunk.chunk_type == chunk_type:
                self.logger.debug('removing chunk \'%s\' at index %d' % (chunk_type, idx))
                return self.chunks.pop(idx)

        raise ChunkNotFoundException(chunk_type=str(chunk_type))
