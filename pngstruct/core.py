"""
Core module for the abstraction of a file format

"""
from typing import Tuple, List

from .fields import Field
from .meta import MetaChunk
from .streams import Stream
from .exceptions import PNGStructException
from .properties import get_root_from_chunk


class Chunk(Field, metaclass=MetaChunk):
    """
    Together with Field is the main class that defines a format: its main attributes
    are offset and size that identify a Chunk.

    A Chunk can contain sub-chunks: an instance of a Chunk subclass declared in the
    body of another one is used as a field.

    If some data is passed with the constructor it's unpacked right away, otherwise
    the fields take their defaults, overridden by the keyword arguments
    named as the fields.
    """

    def __init__(self, source=None, father=None, **values):
        super().__init__(father=father)

        for field_name, value in values.items():
            if field_name not in self._meta.fields:
                raise AttributeError(f'{self.__class__.__name__} has no field named \'{field_name}\'')
            setattr(self, field_name, value)

        if values:
            self._update_value()

        if source is not None:
            stream = source if isinstance(source, Stream) else Stream(source)
            self.logger.debug('unpacking \'%s\' from %r' % (self.__class__.__name__, stream))
            self.unpack(stream)
        else:
            self.relayout()

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, getattr(self, _)) for _ in self.get_ordered_fields_name()]

    def __repr__(self):
        msg = []
        for field_name, field in self.get_fields():
            msg.append('%s=%s' % (field_name, repr(field)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __str__(self):
        msg = ''
        for field_name, field in self.get_fields():
            msg += '%s: %s\n' % (field_name, repr(field))
        return msg

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return NotImplemented

        return self.raw == other.raw

    __hash__ = None

    def init(self):
        for _, field in self.get_fields():
            field.init()

    def _get_value(self):
        return self

    @property
    def root(self):
        '''Obtain the final father of this chunk'''
        return get_root_from_chunk(self)

    @property
    def isRoot(self):
        return self.root is self

    def _get_size(self):
        '''the size parameter MUST not be set but MUST be derived from the subchunks'''
        size = 0
        for _, field in self.get_fields():
            size += field.size

        return size

    def _get_raw(self):
        value = b''
        for field_name, field_instance in self.get_fields():
            field_raw = field_instance.raw
            self.logger.debug("field '{}' raw={}".format(field_name, field_raw))
            value += field_raw

        return value

    def relayout(self, offset=0):
        '''This method triggers the chunk's children to reset the offsets
        in order to pack correctly.

        In practice it's like packing() but it's only interested in the sizes
        of the chunks.'''
        self.offset = offset

        size = 0
        for field_name, field_instance in self.get_fields():
            self.logger.debug('relayouting %s.%s' % (self.__class__.__name__, field_name))
            size += field_instance.relayout(offset=offset + size)

        return size

    def _update_value(self):
        '''Let the fields derived from the others (like checksums) catch up.'''
        for _, field in self.get_fields():
            field._update_value()

    def pack(self, stream=None, relayout=True):
        '''
        This method creates a raw data encoding of the class instance:
        if we are the root father we relayout so that each field knows
        where it will be written.
        '''
        if relayout:
            self.relayout()

        stream = Stream(b'') if stream is None else stream

        for field_name, field_instance in self.get_fields():
            self.logger.debug('packing %s.%s' % (self.__class__.__name__, field_name))

            if field_instance.offset is None:
                raise AttributeError(f'offset for field named "{field_name}" {field_instance!r} is not defined!')

            stream.seek(field_instance.offset)

            self.logger.debug('field %s set at offset %08x' % (field_name, field_instance.offset))
            field_instance.pack(stream=stream, relayout=False)  # we hope someone triggered the relayout before

        return stream.getvalue()

    def validate(self):
        '''Called after all the fields are unpacked; raise to reject the data.'''
        pass

    def unpack(self, stream):
        '''This is one of the main APIs to take care of: its aim is to take a binary
        data and transform in the representation given by the class this method
        is implemented.

        The fields are unpacked in order starting from the actual position of the
        stream; any exception is fatal and gets the name of the field appended
        to its chain so that the caller knows where the problem was.
        '''
        self.offset = stream.tell()

        for field_name, field in self.get_fields():
            self.logger.debug('unpacking %s.%s' % (self.__class__.__name__, field_name))

            offset = stream.tell()
            self.logger.debug('offset at %d' % offset)

            try:
                field.unpack(stream)
            except PNGStructException as e:
                e.chain.append(field_name)
                raise

            field.offset = offset

        self.validate()
