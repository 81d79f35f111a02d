""":mod:`sqlalchemy_imagevariants.store` --- Variant storage backend interface
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

This module declares a common interface for physically agnostic storage
backends.  Whatever a way to implement a storage, it needs only common
operations of the interface: putting files, deleting files, and finding
urls.  Consumers (e.g.
:class:`~sqlalchemy_imagevariants.processor.Processor`) use the higher
level :meth:`Store.save()` and :meth:`Store.remove()` methods instead.

Modules that implement the storage interface inside
:mod:`sqlalchemy_imagevariants.stores` package might help to implement
a new storage backend.

"""
import collections
import numbers
import os.path
import posixpath
from urllib import parse as urlparse

from .record import get_field

__all__ = 'Blob', 'Store'


#: (:class:`type`) The file to save, which consists of ``path``,
#: ``size`` (in bytes) and ``type`` (mimetype) e.g.
#: ``Blob('/tmp/0a1b.png', 1024, 'image/png')``.
Blob = collections.namedtuple('Blob', 'path size type')


class Store(object):
    """The interface of variant storage backends.  Every storage
    backend implementation has to implement this.

    """

    def put_file(self, file, key, size, mimetype):
        """Puts the ``file`` of the variant.

        :param file: the variant file to put
        :type file: file-like object, :class:`file`
        :param key: the key of the file, unique in the store
                    e.g. ``'0f3a9c21be6d4a7e8c10.png'``
        :type key: :class:`str`
        :param size: the size of the file in bytes
        :type size: :class:`numbers.Integral`
        :param mimetype: the mimetype of the file e.g. ``'image/png'``
        :type mimetype: :class:`str`

        .. note::

           This is an abstract method which has to be implemented
           (overridden) by subclasses.

           It's not for consumers but implementations, so consumers
           should use :meth:`save()` method instead of this.

        """
        raise NotImplementedError('put_file() has to be implemented')

    def delete_file(self, key):
        """Deletes the file of the given ``key``.
        It doesn't raise any exception even if there's no such file.

        :param key: the key of the file to delete
        :type key: :class:`str`

        .. note::

           This is an abstract method which has to be implemented
           (overridden) by subclasses.

           It's not for consumers but implementations, so consumers
           should use :meth:`remove()` method instead of this.

        """
        raise NotImplementedError('delete_file() has to be implemented')

    def get_file(self, key):
        """Gets the file-like object of the given ``key``.

        :param key: the key of the file to find
        :type key: :class:`str`
        :returns: the file
        :rtype: file-like object, :class:`file`
        :raise IOError: when such file doesn't exist

        .. note::

           This is an abstract method which has to be implemented
           (overridden) by subclasses.

        """
        raise NotImplementedError('get_file() has to be implemented')

    def get_url(self, key):
        """Gets the url of the file of the given ``key``.

        :param key: the key of the file to find
        :type key: :class:`str`
        :returns: the url locating the file
        :rtype: :class:`str`

        .. note::

           This is an abstract method which has to be implemented
           (overridden) by subclasses.

        """
        raise NotImplementedError('get_url() has to be implemented')

    def get_key(self, url):
        """Finds the key of the file from its ``url``.  It takes the
        last segment of the url path by default, but can be overridden
        if keys are not flat.

        :param url: the url of the file
        :type url: :class:`str`
        :returns: the key of the file
        :rtype: :class:`str`

        """
        path = urlparse.urlparse(url).path
        return urlparse.unquote(posixpath.basename(path))

    def save(self, blob):
        """Saves the file of the given ``blob`` and returns its url.
        ::

            url = store.save(Blob(path, os.stat(path).st_size, 'image/png'))

        :param blob: the file to save
        :type blob: :class:`Blob`
        :returns: the url of the saved file
        :rtype: :class:`str`

        """
        if not isinstance(blob, Blob):
            raise TypeError('blob must be a sqlalchemy_imagevariants.store.'
                            'Blob instance, not ' + repr(blob))
        elif not isinstance(blob.size, numbers.Integral):
            raise TypeError('blob.size must be integer, not ' +
                            repr(blob.size))
        key = os.path.basename(blob.path)
        with open(blob.path, 'rb') as f:
            self.put_file(f, key, blob.size, blob.type)
        return self.get_url(key)

    def remove(self, record):
        """Removes the file of the given variant ``record``.

        :param record: the variant sub-record which has its ``url``
        :raise ValueError: when the ``record`` has no url

        """
        url = get_field(record, 'url')
        if not url:
            raise ValueError('{0!r} has no url; there is nothing to '
                             'remove'.format(record))
        self.delete_file(self.get_key(url))

    def open(self, key):
        """Opens the file-like object of the given ``key``.
        It is a context manager::

            with store.open(key) as f:
                data = f.read()

        :param key: the key of the file
        :type key: :class:`str`
        :returns: the file-like object
        :raise IOError: when such file doesn't exist

        """
        f = self.get_file(key)
        if not callable(getattr(f, 'read', None)):
            raise TypeError(
                '{0!r}.get_file() must return file-like object which '
                'has read() method, not {1!r}'.format(self, f)
            )
        return f
