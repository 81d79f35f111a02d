""":mod:`sqlalchemy_imagevariants.stores.fs` --- Filesystem-backed storage
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

It stores variant files into the filesystem of the specified path,
and its urls are based on the hard-coded base url::

    store = FileSystemStore('/var/www/variants', 'https://cdn.example.com/v/')

"""
import os
import os.path
import shutil

from ..store import Store

__all__ = 'FileSystemStore',


class FileSystemStore(Store):
    """Filesystem-backed storage implementation with hard-coded URL
    routing.

    :param path: file system path of the directory to store files
    :type path: :class:`str`
    :param base_url: the url prefix of stored files.  a trailing slash
                     is appended if it's missing
    :type base_url: :class:`str`

    """

    def __init__(self, path, base_url):
        if not base_url.endswith('/'):
            base_url += '/'
        self.path = path
        self.base_url = base_url

    def get_path(self, key):
        if not key or os.path.basename(key) != key:
            raise ValueError('key must be a plain filename, not ' + repr(key))
        return os.path.join(self.path, key)

    def put_file(self, file, key, size, mimetype):
        path = self.get_path(key)
        os.makedirs(self.path, exist_ok=True)
        with open(path, 'wb') as dst:
            shutil.copyfileobj(file, dst)

    def delete_file(self, key):
        try:
            os.remove(self.get_path(key))
        except (IOError, OSError):
            pass

    def get_file(self, key):
        return open(self.get_path(key), 'rb')

    def get_url(self, key):
        return self.base_url + key

    def get_key(self, url):
        if url.startswith(self.base_url):
            return url[len(self.base_url):]
        return super(FileSystemStore, self).get_key(url)

    def __repr__(self):
        return '{0.__module__}.{0.__name__}({1!r}, {2!r})'.format(
            type(self), self.path, self.base_url
        )
