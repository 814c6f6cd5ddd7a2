'''
Operations to hide text messages into the chunks of a PNG file.

The file is read completely, modified in memory and written back only when
the new content has been serialized, so that an error never leaves a
half-written file around.
'''
import logging
from typing import List, Tuple

from . import PNGFile, PNGChunk
from .chunk_types import ChunkType
from ...exceptions import ChunkNotFoundException


logger = logging.getLogger(__name__)


def load(path) -> PNGFile:
    with open(path, 'rb') as f:
        data = f.read()

    logger.debug(f'read {len(data)} bytes from {path}')

    return PNGFile.from_bytes(data)


def save(png: PNGFile, path) -> None:
    data = png.pack()

    with open(path, 'wb') as f:
        f.write(data)

    logger.debug(f'written {len(data)} bytes to {path}')


def encode(path, chunk_type: str, message: str, output=None) -> PNGChunk:
    '''Append a chunk containing the message, by default the file is overwritten.'''
    png = load(path)
    chunk = PNGChunk(type=ChunkType.from_text(chunk_type), data=message.encode('utf-8'))

    png.append_chunk(chunk)
    save(png, output if output is not None else path)

    return chunk


def decode(path, chunk_type: str) -> str:
    '''Return the message contained into the first chunk of the given type.'''
    png = load(path)
    chunk = png.chunk_by_type(ChunkType.from_text(chunk_type))

    if chunk is None:
        raise ChunkNotFoundException(chunk_type=chunk_type)

    return chunk.data_as_string()


def remove(path, chunk_type: str) -> PNGChunk:
    '''Remove the first chunk of the given type rewriting the file.'''
    png = load(path)
    chunk = png.remove_first_chunk(ChunkType.from_text(chunk_type))

    save(png, path)

    return chunk


def summarize(path) -> List[Tuple[str, int]]:
    '''The type and the data length of each chunk, in order.'''
    png = load(path)

    return [(str(chunk.chunk_type), chunk.length.value) for chunk in png.chunks]
