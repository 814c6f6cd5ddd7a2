class PNGStructException(Exception):
    '''Base class to extend in order to throw exception in pngstruct.

    The argument named "chain" represents the fields walked while the exception
    was bubbling up (innermost first), "offset" is the position into the stream
    where the problem was found, if known.
    '''
    message = 'unknown error'

    def __init__(self, chain=None, offset=None, **details):
        self.chain = chain if chain is not None else []
        self.offset = offset
        for name, value in details.items():
            setattr(self, name, value)

        super().__init__(self.describe())

    def describe(self):
        return self.message.format(**self.__dict__)

    @property
    def path(self):
        '''The chain rendered like an attribute access, e.g. "chunks[1].type"'''
        path = ''
        for component in reversed(self.chain):
            if path and not component.startswith('['):
                path += '.'
            path += component

        return path

    def __str__(self):
        msg = self.describe()

        if self.offset is not None:
            msg += ' at offset 0x%x' % self.offset

        if self.chain:
            msg += ' (%s)' % self.path

        return msg


class UnpackException(PNGStructException):
    message = 'unable to unpack data'


class BadSignatureException(UnpackException):
    message = 'bad signature: expected {expected!r}, found {actual!r}'


class MalformedChunkException(UnpackException):
    message = 'malformed chunk of {actual} bytes (declared data length: {declared})'


class TruncatedFileException(UnpackException):
    message = 'truncated data: needed {needed} bytes but only {available} are available'


class ChecksumMismatchException(UnpackException):
    message = 'checksum mismatch for chunk \'{chunk_type}\': expected 0x{expected:08x}, found 0x{actual:08x}'


class InvalidLengthException(PNGStructException, ValueError):
    message = 'invalid length: expected {expected} but got {actual}'


class InvalidTypeCodeException(PNGStructException, ValueError):
    message = 'invalid chunk type {value!r}: only ASCII letters are allowed'


class ChunkNotFoundException(PNGStructException, LookupError):
    message = 'chunk type \'{chunk_type}\' not found'


class InvalidTextException(PNGStructException, ValueError):
    message = 'the data of chunk \'{chunk_type}\' is not valid UTF-8 text'
