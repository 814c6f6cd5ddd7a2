import io
import logging


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around an in-memory buffer to
    uniform its properties: the chunks only need to seek(), read()
    and know how much data is left.

    Reading from disk is a matter for the caller: here we only accept
    bytes-like objects.'''
    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.obj = obj
        self.history = []

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, None)

        if init_method is None:
            raise ValueError('\'%s\' is the wrong kind of object to stream from' % self._type.__name__)

        init_method()

        self.end = self._find_end()

    def __getattr__(self, name):
        return getattr(self.obj, name)

    def __repr__(self):
        return '<%s(%s, %d bytes)>' % (self.__class__.__name__, self._type.__name__, self.end)

    def init_bytes(self):
        '''We think these are raw bytes'''
        logger.debug('streaming %d bytes' % len(self.obj))
        self.obj = io.BytesIO(self.obj)

    def init_bytearray(self):
        self.obj = io.BytesIO(bytes(self.obj))

    def _find_end(self):
        position = self.obj.tell()
        end = self.obj.seek(0, io.SEEK_END)
        self.obj.seek(position)

        return end

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset)

    def remaining(self):
        '''Number of bytes between the cursor and the end of the data'''
        return max(self.end - self.obj.tell(), 0)

    def is_exhausted(self):
        return self.remaining() == 0

    def peek(self, n):
        '''Read n bytes without moving the cursor'''
        self.save()
        try:
            return self.obj.read(n)
        finally:
            self.restore()

    def write(self, data):
        written = self.obj.write(data)
        self.end = max(self.end, self.obj.tell())

        return written

    def getvalue(self):
        return self.obj.getvalue()

    # TODO: create contextmanager
    def save(self):
        self.history.append(self.obj.tell())

    def restore(self):
        old_seek = self.history.pop()
        self.obj.seek(old_seek)
