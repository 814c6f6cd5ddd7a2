import io
import pathlib
import struct
import zlib

import pytest
from PIL import Image


@pytest.fixture
def test_root_dir():
    return pathlib.Path(__file__).parent


@pytest.fixture
def signature():
    return b'\x89PNG\x0d\x0a\x1a\x0a'


@pytest.fixture
def secret():
    return 'This is where your secret message will be!'


@pytest.fixture
def raw_chunk():
    """Build the bytes of a chunk by hand, with the right CRC unless told otherwise."""
    def _raw_chunk(chunk_type: bytes, data: bytes, crc=None):
        if crc is None:
            crc = zlib.crc32(chunk_type + data)

        return struct.pack('>I', len(data)) + chunk_type + data + struct.pack('>I', crc)

    return _raw_chunk


@pytest.fixture
def secret_chunk_bytes(raw_chunk, secret):
    return raw_chunk(b'RuSt', secret.encode(), crc=2882656334)


@pytest.fixture
def secret_png_bytes(signature, secret_chunk_bytes):
    return signature + secret_chunk_bytes


@pytest.fixture
def png_bytes():
    """A real image, as written by Pillow"""
    image = Image.new('RGB', (5, 5), color='red')
    buffer = io.BytesIO()
    image.save(buffer, format='PNG')

    return buffer.getvalue()


@pytest.fixture
def png_path(tmp_path, png_bytes):
    path = tmp_path / 'red.png'
    path.write_bytes(png_bytes)

    return path
