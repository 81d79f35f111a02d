""":mod:`sqlalchemy_imagevariants.schema` --- Variant field shapes
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Field shapes describe which fields a sub-record has to carry,
and of which SQLAlchemy types.  They are what
:meth:`~sqlalchemy_imagevariants.processor.Processor.create_field_schema()`
returns, and :class:`~sqlalchemy_imagevariants.entity.Variant` declares
its columns from them.

"""
import collections

from sqlalchemy.types import Integer, String

__all__ = ('IMAGE_FIELD_NAMES', 'file_field_schema', 'image_field_schema',
           'variant_field_schema')


#: (:class:`tuple`) The names of fields :func:`image_field_schema()`
#: adds to the generic file fields.
IMAGE_FIELD_NAMES = 'format', 'depth', 'width', 'height'


def file_field_schema():
    """The generic file attachment fields: ``name``, ``path``, ``size``,
    ``type`` (mimetype) and ``url``.

    :returns: field names to SQLAlchemy types
    :rtype: :class:`collections.OrderedDict`

    """
    return collections.OrderedDict([
        ('name', String(255)),
        ('path', String(1024)),
        ('size', Integer()),
        ('type', String(255)),
        ('url', String(1024)),
    ])


def image_field_schema():
    """The fields only images have: ``format``, ``depth``, ``width``
    and ``height``.

    :returns: field names to SQLAlchemy types
    :rtype: :class:`collections.OrderedDict`

    """
    return collections.OrderedDict([
        ('format', String(32)),
        ('depth', Integer()),
        ('width', Integer()),
        ('height', Integer()),
    ])


def variant_field_schema():
    """The whole field shape of a variant sub-record, that is
    :func:`file_field_schema()` followed by :func:`image_field_schema()`.

    :returns: field names to SQLAlchemy types
    :rtype: :class:`collections.OrderedDict`

    """
    schema = file_field_schema()
    schema.update(image_field_schema())
    return schema
