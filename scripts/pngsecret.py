#!/usr/bin/env python3
'''
Hide messages into PNG files

 $ pngsecret.py encode -f image.png -c ruSt -m 'the secret'
 $ pngsecret.py decode -f image.png -c ruSt
 $ pngsecret.py remove -f image.png -c ruSt
 $ pngsecret.py print -f image.png

Set the environment variable DEBUG to see what's going on.
'''
import argparse
import logging
import os
import sys

from pngstruct.exceptions import PNGStructException, InvalidTextException
from pngstruct.images.png.utils import (
    encode,
    decode,
    remove,
    summarize,
)


logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logging.getLogger().setLevel(level=logging.INFO if 'DEBUG' not in os.environ else logging.DEBUG)


def get_parser():
    parser = argparse.ArgumentParser(description='Hide messages into PNG files')
    subparsers = parser.add_subparsers(dest='command', required=True)

    parser_encode = subparsers.add_parser('encode', help='Encode a message into a PNG file')
    parser_encode.add_argument('-f', '--file', required=True, help='Path to the PNG file')
    parser_encode.add_argument('-c', '--chunk-type', required=True, help='Chunk type (4 letters)')
    parser_encode.add_argument('-m', '--message', required=True, help='Message to encode')
    parser_encode.add_argument('-o', '--output', help='Output file path (the input file is overwritten otherwise)')

    parser_decode = subparsers.add_parser('decode', help='Decode a message from a PNG file')
    parser_decode.add_argument('-f', '--file', required=True, help='Path to the PNG file')
    parser_decode.add_argument('-c', '--chunk-type', required=True, help='Chunk type to look for')

    parser_remove = subparsers.add_parser('remove', help='Remove a chunk from a PNG file')
    parser_remove.add_argument('-f', '--file', required=True, help='Path to the PNG file')
    parser_remove.add_argument('-c', '--chunk-type', required=True, help='Chunk type to remove')

    parser_print = subparsers.add_parser('print', help='Print all chunks in a PNG file')
    parser_print.add_argument('-f', '--file', required=True, help='Path to the PNG file')

    return parser


def main(argv):
    args = get_parser().parse_args(argv)

    if args.command == 'encode':
        encode(args.file, args.chunk_type, args.message, output=args.output)
        print(f'Message encoded successfully to {args.output or args.file}')
    elif args.command == 'decode':
        print(f'Decoded message: {decode(args.file, args.chunk_type)}')
    elif args.command == 'remove':
        chunk = remove(args.file, args.chunk_type)
        print(f'Removed chunk \'{args.chunk_type}\' from {args.file}')
        try:
            print(f'Removed chunk contained: {chunk.data_as_string()}')
        except InvalidTextException:
            print(f'Removed chunk: {chunk}')
    elif args.command == 'print':
        for idx, (chunk_type, length) in enumerate(summarize(args.file)):
            print(f'[{idx:02d}] {chunk_type} {length}')


if __name__ == '__main__':
    try:
        main(sys.argv[1:])
    except (PNGStructException, OSError) as e:
        logger.debug('failed', exc_info=True)
        print(f'error: {e}', file=sys.stderr)
        sys.exit(1)
