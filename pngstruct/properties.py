import logging
from typing import List


def get_root_from_chunk(instance):
    return get_instance_from_chunk(instance, condition=lambda x: x.father is None)


def get_instance_from_chunk(instance, condition):
    while not condition(instance):
        instance = instance.father

    return instance


class Dependency:
    '''This makes the relation between fields possible.

    In practice this class allows to write something like

        class Simple(Chunk):
            length = fields.StructField('I')
            data = fields.StringField(Dependency('.length'))

    and have the (internal) length of the string contained in the field named 'data'
    strictly connected to the field named 'length': while unpacking the length is
    read from the sibling, while setting a new value the sibling is updated.

    The expression is resolved like a python module path: a leading '.' means
    we start from the father of the field, otherwise we start from the root chunk.
    '''
    def __init__(self, expression):
        self.expression = expression
        self.logger = logging.getLogger(__name__)

    def __repr__(self):
        return f'<{self.__class__.__name__}({self.expression})>'

    def _split(self) -> List[str]:
        # '.length'.split(".") -> ['', 'length']
        return self.expression.split('.')

    def resolve_field(self, instance):
        fields_path = self._split()

        if fields_path[0] == '':  # we have a relative dependency
            field = instance.father
            fields_path = fields_path[1:]
            self.logger.debug(' resolve from father: \'%s\'' % field.__class__.__name__)
        else:
            field = get_root_from_chunk(instance)
            self.logger.debug(' resolve from root: \'%s\'' % field.__class__.__name__)

        for component_name in fields_path:
            field = getattr(field, component_name)

        return field

    def resolve(self, instance):
        '''With this method we resolve the attribute with respect to the instance
        passed as argument.'''
        value = self.resolve_field(instance).value

        self.logger.debug(' resolved \'%s\' with value %s' % (self.expression, value))

        return value

    def resolve_and_set(self, instance, value):
        '''Write back the value into the field we depend on.'''
        real_field = self.resolve_field(instance)
        real_field.value = value
