""":mod:`sqlalchemy_imagevariants.entity` --- Variant entities
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

This module provides a short way to record variants onto
object-relationally mapped entity classes.

For example, imagine there's a fictional entity named :class:`User`
and its profile picture has some variants.  So there should be
a variant entity that subclasses :class:`Variant` mixin::

    class UserPictureVariant(Base, Variant):
        '''Variants of user's profile picture.'''

        user_id = Column(Integer, ForeignKey('user.id'), primary_key=True)

        __tablename__ = 'user_picture_variant'

You have to also inherit your own :func:`declarative_base()
<sqlalchemy.orm.declarative_base>` class (``Base`` in the example).

These :class:`Variant` subclasses can be related to their 'parent'
entity using :func:`variant_attachment()` function.  It's a specialized
version of SQLAlchemy's built-in :func:`~sqlalchemy.orm.relationship()`
function, so you can pass the same options as
:func:`~sqlalchemy.orm.relationship()` takes::

    class User(Base):
        '''Users have their profile picture.'''

        id = Column(Integer, primary_key=True)
        picture = variant_attachment('UserPictureVariant')

        __tablename__ = 'user'

The attribute is a dictionary of transform names to variants, so it
can be the model of :meth:`Processor.process()
<sqlalchemy_imagevariants.processor.Processor.process>`::

    user = User()
    populate_variants(user.picture, UserPictureVariant, processor)
    processor.process(attachment, store, user.picture)
    with session.begin():
        session.add(user)

"""
import html

from sqlalchemy import Column
from sqlalchemy.orm import relationship
from sqlalchemy.orm.collections import attribute_mapped_collection
from sqlalchemy.types import String

from .schema import variant_field_schema

__all__ = 'Variant', 'populate_variants', 'variant_attachment'


_fields = variant_field_schema()


def variant_attachment(*args, **kwargs):
    r"""The helper function, decorates raw
    :func:`~sqlalchemy.orm.relationship()` function, specialized for
    relationships between :class:`Variant` subtypes.

    It takes the same parameters as :func:`~sqlalchemy.orm.relationship()`.
    Variants are collected into a dictionary keyed by their
    :attr:`~Variant.transform` names.

    :param \*args: the same arguments as
                   :func:`~sqlalchemy.orm.relationship()`
    :param \*\*kwargs: the same keyword arguments as
                       :func:`~sqlalchemy.orm.relationship()`
    :returns: the relationship property
    :rtype: :class:`sqlalchemy.orm.properties.RelationshipProperty`

    """
    kwargs.setdefault('collection_class',
                      attribute_mapped_collection('transform'))
    kwargs.setdefault('cascade', 'all, delete-orphan')
    return relationship(*args, **kwargs)


def populate_variants(collection, cls, processor):
    """Fills the ``collection`` with an empty ``cls`` instance for each
    transform of the ``processor`` which has no variant yet.

    :param collection: the dictionary made by :func:`variant_attachment()`
    :type collection: :class:`collections.abc.MutableMapping`
    :param cls: the variant entity class
    :type cls: :class:`type`
    :param processor: the processor to take transform names from
    :type processor: :class:`~sqlalchemy_imagevariants.processor.Processor`
    :returns: the same ``collection``

    """
    for name in processor.transforms:
        if name not in collection:
            collection[name] = cls(transform=name)
    return collection


class Variant(object):
    """A variant derived from an attachment by a transform.

    Note that it implements :meth:`__html__()` method, a de facto
    standard special method for HTML templating.  So you can simply use
    it in HTML templates like:

    .. sourcecode:: jinja

       {{ user.picture['thumbnail'] }}

    """

    #: (:class:`str`) The transform name e.g. ``'thumbnail'``.
    transform = Column('transform', String(100), primary_key=True)

    #: (:class:`str`) The original filename of the attachment.
    name = Column('name', _fields['name'])

    #: (:class:`str`) The path of the file, if the store keeps one.
    path = Column('path', _fields['path'])

    #: (:class:`numbers.Integral`) The size of the file in bytes.
    size = Column('size', _fields['size'])

    #: (:class:`str`) The mimetype e.g. ``'image/png'``.
    type = Column('type', _fields['type'])

    #: (:class:`str`) The url of the stored file.
    url = Column('url', _fields['url'])

    #: (:class:`str`) The image format e.g. ``'PNG'``.
    format = Column('format', _fields['format'])

    #: (:class:`numbers.Integral`) The color depth in bits.
    depth = Column('depth', _fields['depth'])

    #: (:class:`numbers.Integral`) The width in pixels.
    width = Column('width', _fields['width'])

    #: (:class:`numbers.Integral`) The height in pixels.
    height = Column('height', _fields['height'])

    def __html__(self):
        if not self.url:
            return ''
        return '<img src="{0}" width="{1}" height="{2}">'.format(
            html.escape(self.url), self.width, self.height
        )

    def __repr__(self):
        return '<{0.__name__} {1!r} {2!r}>'.format(
            type(self), self.transform, self.url
        )
