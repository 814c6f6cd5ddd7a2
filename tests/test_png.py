import logging
import struct

import pytest

from pngstruct.exceptions import (
    BadSignatureException,
    ChecksumMismatchException,
    ChunkNotFoundException,
    InvalidTextException,
    InvalidTypeCodeException,
    MalformedChunkException,
    TruncatedFileException,
)
from pngstruct.images.png import PNGHeader, PNGChunk, PNGFile, PNG_SIGNATURE
from pngstruct.images.png.chunk_types import ChunkType


def test_header():
    """Check header is right"""
    png_header = PNGHeader()

    assert png_header.magic.value == b'\x89PNG\x0d\x0a\x1a\x0a'
    assert png_header.pack() == PNG_SIGNATURE


def test_new_chunk(secret, secret_chunk_bytes):
    chunk = PNGChunk(type=ChunkType.from_text('RuSt'), data=secret.encode())

    assert chunk.length.value == 42
    assert chunk.crc.value == 2882656334
    assert chunk.size == 42 + 12
    assert chunk.pack() == secret_chunk_bytes


def test_chunk_from_bytes(secret, secret_chunk_bytes):
    chunk = PNGChunk.from_bytes(secret_chunk_bytes)

    assert chunk.length.value == 42
    assert str(chunk.chunk_type) == 'RuSt'
    assert chunk.data_as_string() == secret
    assert chunk.crc.value == 2882656334
    assert chunk.pack() == secret_chunk_bytes


def test_chunk_construction_round_trip():
    for chunk_type, data in [
        ('IEND', b''),
        ('tEXt', b'Comment\x00hello'),
        ('ruSt', bytes(range(256))),
    ]:
        chunk = PNGChunk(type=chunk_type, data=data)
        parsed = PNGChunk.from_bytes(chunk.pack())

        assert parsed.chunk_type == chunk.chunk_type
        assert parsed.data.value == data
        assert parsed.crc.value == chunk.crc.value
        assert parsed == chunk


def test_empty_chunk():
    chunk = PNGChunk(type='IEND')

    assert chunk.pack() == b'\x00\x00\x00\x00IEND\xae\x42\x60\x82'


def test_invalid_chunk_crc(raw_chunk, secret):
    data = raw_chunk(b'RuSt', secret.encode(), crc=2882656333)

    with pytest.raises(ChecksumMismatchException) as e:
        PNGChunk.from_bytes(data)

    assert e.value.chunk_type == 'RuSt'
    assert e.value.expected == 2882656334
    assert e.value.actual == 2882656333


def test_corrupted_chunk_is_rejected(secret_chunk_bytes):
    """Changing a single byte of the type or the data must break the crc"""
    for idx in range(4, len(secret_chunk_bytes) - 4):
        corrupted = bytearray(secret_chunk_bytes)
        # flipping the case keeps the type made of letters
        corrupted[idx] ^= 0x20 if idx < 8 else 0xff

        with pytest.raises(ChecksumMismatchException):
            PNGChunk.from_bytes(bytes(corrupted))


@pytest.mark.parametrize('cut', [1, 4, 42])
def test_malformed_chunk(secret_chunk_bytes, cut):
    with pytest.raises(MalformedChunkException) as e:
        PNGChunk.from_bytes(secret_chunk_bytes[:-cut])

    assert e.value.declared == 42
    assert e.value.actual == len(secret_chunk_bytes) - cut


def test_malformed_chunk_too_short():
    with pytest.raises(MalformedChunkException):
        PNGChunk.from_bytes(b'\x00\x00\x00\x00IEND')

    with pytest.raises(MalformedChunkException):
        PNGChunk.from_bytes(b'')

    # a chunk with trailing data is not a chunk
    with pytest.raises(MalformedChunkException):
        PNGChunk.from_bytes(b'\x00\x00\x00\x00IEND\xae\x42\x60\x82\x00')


def test_chunk_invalid_type(raw_chunk):
    with pytest.raises(InvalidTypeCodeException) as e:
        PNGChunk.from_bytes(raw_chunk(b'Ru1t', b'data'))

    assert e.value.offset == 4
    assert e.value.chain == ['type']


def test_chunk_data_not_text():
    chunk = PNGChunk(type='ruSt', data=b'\xff\xfe\x00')

    with pytest.raises(InvalidTextException) as e:
        chunk.data_as_string()

    assert e.value.chunk_type == 'ruSt'


def test_chunk_str(secret_chunk_bytes):
    chunk = PNGChunk.from_bytes(secret_chunk_bytes)

    assert str(chunk) == 'RuSt length=42 crc=0xabd1d84e critical private safe-to-copy'


def test_png_file(secret, secret_png_bytes):
    png = PNGFile.from_bytes(secret_png_bytes)

    assert png.header.magic.value == PNG_SIGNATURE
    assert len(png) == 1
    assert png.chunks[0].offset == 8

    chunk = png.chunk_by_type('RuSt')

    assert chunk is not None
    assert chunk.data_as_string() == secret
    assert png.pack() == secret_png_bytes


def test_png_file_only_signature():
    png = PNGFile(PNG_SIGNATURE)

    assert len(png) == 0
    assert png.pack() == PNG_SIGNATURE


def test_png_file_from_pillow(png_bytes):
    """Check unpacking a real PNG file is fine"""
    png = PNGFile(png_bytes)

    chunk_types = [str(_.chunk_type) for _ in png]

    assert chunk_types[0] == 'IHDR'
    assert 'IDAT' in chunk_types
    assert chunk_types[-1] == 'IEND'
    assert png.chunk_by_type('IDAT').chunk_type.is_critical
    assert png.chunk_by_type('IHDR').length.value == 13

    assert png.pack() == png_bytes


@pytest.mark.parametrize('signature', [
    b'\x00' * 8,
    b'\x89PNG\x0d\x0a\x1a\x00',
    b'GIF89a\x00\x00',
])
def test_bad_signature(signature, secret_chunk_bytes):
    with pytest.raises(BadSignatureException) as e:
        PNGFile(signature + secret_chunk_bytes)

    assert e.value.expected == PNG_SIGNATURE
    assert e.value.actual == signature
    assert e.value.path == 'header.magic'


def test_short_signature():
    with pytest.raises(BadSignatureException):
        PNGFile(b'\x89PNG')

    with pytest.raises(BadSignatureException):
        PNGFile(b'')


def test_png_file_checksum_altered(secret_png_bytes):
    for idx in range(len(secret_png_bytes) - 4, len(secret_png_bytes)):
        corrupted = bytearray(secret_png_bytes)
        corrupted[idx] ^= 0x01

        with pytest.raises(ChecksumMismatchException) as e:
            PNGFile(bytes(corrupted))

        assert e.value.path == 'chunks[0]'
        assert e.value.offset == 8


def test_png_file_truncated(secret_png_bytes):
    with pytest.raises(TruncatedFileException) as e:
        PNGFile(secret_png_bytes[:-1])

    assert e.value.offset == 8
    assert e.value.needed == 54
    assert e.value.available == 53
    assert e.value.path == 'chunks[0]'


def test_png_file_leftover(secret_png_bytes):
    with pytest.raises(TruncatedFileException) as e:
        PNGFile(secret_png_bytes + b'\x00' * 5)

    assert e.value.offset == len(secret_png_bytes)
    assert e.value.path == 'chunks[1]'


def test_png_file_invalid_type(raw_chunk, secret_png_bytes):
    with pytest.raises(InvalidTypeCodeException) as e:
        PNGFile(secret_png_bytes + raw_chunk(b'Ru1t', b'data'))

    assert e.value.offset == len(secret_png_bytes) + 4
    assert e.value.path == 'chunks[1].type'


def test_png_file_from_chunks(secret):
    chunks = [
        PNGChunk(type='IHDR', data=b'\x00' * 13),
        PNGChunk(type='ruSt', data=secret.encode()),
        PNGChunk(type='IEND'),
    ]

    png = PNGFile.from_chunks(chunks)
    data = png.pack()

    assert data.startswith(PNG_SIGNATURE)
    assert len(data) == 8 + sum(_.size for _ in chunks)

    parsed = PNGFile(data)

    assert parsed == png
    assert [str(_.chunk_type) for _ in parsed] == ['IHDR', 'ruSt', 'IEND']
    assert parsed.pack() == data


def test_append_and_find(secret_png_bytes):
    png = PNGFile(secret_png_bytes)
    chunk = PNGChunk(type='teSt', data=b'appended')

    png.append_chunk(chunk)

    assert len(png) == 2
    assert png.chunks[-1] is chunk
    assert png.chunk_by_type(chunk.chunk_type) == chunk
    assert png.chunk_by_type('nOne') is None

    # the new chunk is in the file
    assert PNGFile(png.pack()).chunk_by_type('teSt').data.value == b'appended'


def test_append_non_conforming_chunk(secret_png_bytes, caplog):
    png = PNGFile(secret_png_bytes)

    with caplog.at_level(logging.WARNING):
        png.append_chunk(PNGChunk(type='Rust', data=b'still here'))

    assert 'non-conforming' in caplog.text
    assert png.chunk_by_type('Rust').data.value == b'still here'


def test_remove_first_chunk_with_duplicates(secret_png_bytes):
    png = PNGFile(secret_png_bytes)
    first = PNGChunk(type='ruSt', data=b'first')
    second = PNGChunk(type='ruSt', data=b'second')
    png.append_chunk(first)
    png.append_chunk(PNGChunk(type='IEND'))
    png.append_chunk(second)

    removed = png.remove_first_chunk('ruSt')

    assert removed == first
    assert png.chunk_by_type('ruSt') == second
    assert [str(_.chunk_type) for _ in png] == ['RuSt', 'IEND', 'ruSt']

    png.remove_first_chunk(ChunkType.from_text('ruSt'))

    assert png.chunk_by_type('ruSt') is None
    assert [str(_.chunk_type) for _ in png] == ['RuSt', 'IEND']


def test_remove_missing_chunk(secret_png_bytes):
    png = PNGFile(secret_png_bytes)

    with pytest.raises(ChunkNotFoundException) as e:
        png.remove_first_chunk('nOne')

    assert e.value.chunk_type == 'nOne'
    assert len(png) == 1
    assert png.pack() == secret_png_bytes


def test_png_file_str(secret_png_bytes):
    png = PNGFile(secret_png_bytes)

    assert str(png) == '[00] RuSt length=42 crc=0xabd1d84e critical private safe-to-copy'


def test_length_is_big_endian(secret_chunk_bytes):
    assert struct.unpack('>I', secret_chunk_bytes[:4])[0] == 42
    assert PNGChunk.from_bytes(secret_chunk_bytes).length.raw == b'\x00\x00\x00\x2a'


def test_png_file_from_bytearray(secret_png_bytes):
    png = PNGFile(bytearray(secret_png_bytes))

    assert png.pack() == secret_png_bytes

    with pytest.raises(ValueError):
        PNGFile('not/a/buffer.png')


def test_new_chunk_length_follows_data():
    chunk = PNGChunk(type='ruSt', data=b'abc', length=10, crc=0)

    assert chunk.length.value == 3
    assert chunk.crc.value == chunk.calculate_crc()
    assert PNGChunk.from_bytes(chunk.pack()) == chunk


def test_chunk_lookup_by_bytes(secret_png_bytes):
    png = PNGFile(secret_png_bytes)
    chunk = PNGChunk(type='ruSt', data=b'by bytes')
    png.append_chunk(chunk)

    assert png.chunk_by_type(b'ruSt') is chunk
    assert png.remove_first_chunk(bytearray(b'ruSt')) is chunk
    assert png.chunk_by_type(b'ruSt') is None


def test_exception_arguments():
    e = ChunkNotFoundException(chunk_type='nOne')

    assert e.args == ("chunk type 'nOne' not found",)
    assert 'nOne' in repr(e)
