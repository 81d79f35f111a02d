""":mod:`sqlalchemy_imagevariants.processor` --- Variant processor
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

:class:`Processor` derives named variants from an attachment.
It's configured once with named transforms::

    processor = Processor({
        'thumbnail': {'resize': '120x120', 'format': 'png'},
        'large': {'resize': ['1024x1024>'], 'quality': 85},
    }, tmp_dir='/var/tmp/variants')

And then processes attachments into a model which has a sub-record
for each transform name::

    processor.process(Attachment(upload_path, 'photo.jpg'),
                      store, user.variants)
    print(user.variants['thumbnail'].url)

All transforms run concurrently, each in its own thread.  If any of
them fails, :meth:`~Processor.process()` raises the first error
observed, and other transforms are not cancelled.  Sub-records are
written only by transforms that completely succeeded; files already
saved into the store by them are not removed back.

"""
import collections
import collections.abc
import concurrent.futures
import functools
import inspect
import logging
import os
import os.path
import tempfile

from .engine import MagickEngine
from .errors import (ConfigurationError, StorageError,
                     UnsupportedFormatError)
from .record import get_field, get_record
from .schema import variant_field_schema
from .transform import FORMAT_KEY, TransformUnit, allocate_temp_path

__all__ = 'OPTION_ALIASES', 'SUPPORTED_FORMATS', 'Attachment', 'Processor'


#: (:class:`typing.AbstractSet`\ [:class:`str`]) The default set of
#: source formats a :class:`Processor` accepts.
SUPPORTED_FORMATS = frozenset(['JPEG', 'PNG', 'GIF', 'TIFF'])

#: (:class:`typing.Mapping`\ [:class:`str`, :class:`str`]) camelCase
#: option names :meth:`Processor.from_options()` understands, to their
#: keyword argument names.
OPTION_ALIASES = {
    'tmpDir': 'tmp_dir',
    'imageMagick': 'image_magick',
    'maxWorkers': 'max_workers',
    'removeTempFiles': 'remove_temp_files',
}

#: (:class:`type`) The uploaded source file, which consists of ``path``
#: (where the file is) and ``name`` (the original filename).
Attachment = collections.namedtuple('Attachment', 'path name')


class Processor(object):
    r"""Derives variants of attachments.

    :param transforms: transform names to their convert options.
                       see also :mod:`sqlalchemy_imagevariants.transform`
    :type transforms: :class:`collections.abc.Mapping`
    :param tmp_dir: the directory to write converted files into.
                    the system temporary directory by default.
                    it's created if it doesn't exist
    :type tmp_dir: :class:`str`
    :param formats: source formats to accept.
                    :const:`SUPPORTED_FORMATS` by default
    :type formats: :class:`typing.Iterable`\ [:class:`str`]
    :param image_magick: whether to invoke ImageMagick instead of
                         GraphicsMagick.  it affects only the default
                         ``engine``
    :type image_magick: :class:`bool`
    :param engine: the conversion engine.
                   :class:`~sqlalchemy_imagevariants.engine.MagickEngine`
                   by default
    :type engine: :class:`~sqlalchemy_imagevariants.engine.Engine`
    :param sniffer: the mimetype detector which has ``from_file()``
                    method.  :class:`magic.Magic` by default
    :param max_workers: the maximum number of threads to run transforms.
                        as many as transforms by default
    :type max_workers: :class:`numbers.Integral`
    :param remove_temp_files: whether to delete converted files from
                              ``tmp_dir`` after they are saved (or failed).
                              :const:`False` by default
    :type remove_temp_files: :class:`bool`
    :raise sqlalchemy_imagevariants.errors.ConfigurationError:
       when options are missing or malformed

    """

    logger = logging.getLogger(__name__ + '.Processor')

    def __init__(self, transforms=None, tmp_dir=None, formats=None,
                 image_magick=False, engine=None, sniffer=None,
                 max_workers=None, remove_temp_files=False):
        if not isinstance(transforms, collections.abc.Mapping):
            raise ConfigurationError(
                'transforms must be a mapping of transform names to their '
                'options, not ' + repr(transforms)
            )
        self.transforms = collections.OrderedDict()
        for name, transform in transforms.items():
            if not isinstance(transform, collections.abc.Mapping):
                raise ConfigurationError(
                    'transform {0!r} must be a mapping of options, '
                    'not {1!r}'.format(name, transform)
                )
            self.transforms[name] = collections.OrderedDict(transform)
        if formats is None:
            formats = SUPPORTED_FORMATS
        elif isinstance(formats, str):
            raise ConfigurationError('formats must be a collection of '
                                     'format names, not a string: ' +
                                     repr(formats))
        formats = list(formats)
        for format_ in formats:
            if not isinstance(format_, str):
                raise ConfigurationError('format names must be strings, '
                                         'not ' + repr(format_))
        if max_workers is not None and (not isinstance(max_workers, int) or
                                        max_workers < 1):
            raise ConfigurationError('max_workers must be a natural number, '
                                     'not ' + repr(max_workers))
        if tmp_dir is None:
            tmp_dir = tempfile.gettempdir()
        os.makedirs(tmp_dir, exist_ok=True)
        self.tmp_dir = tmp_dir
        self.formats = frozenset(f.upper() for f in formats)
        self.image_magick = bool(image_magick)
        self.max_workers = max_workers
        self.remove_temp_files = bool(remove_temp_files)
        if engine is None:
            engine = MagickEngine(self.image_magick)
        if sniffer is None:
            import magic
            sniffer = magic.Magic(mime=True)
        self.engine = engine
        self.sniffer = sniffer

    @classmethod
    def from_options(cls, options, **kwargs):
        r"""Creates a processor from the plain ``options`` mapping, e.g.
        loaded from a configuration file::

            Processor.from_options({
                'transforms': {'thumbnail': {'resize': '120x120'}},
                'tmpDir': '/var/tmp/variants',
                'imageMagick': True,
            })

        Option names can be either camelCase (see :const:`OPTION_ALIASES`)
        or the same to keyword arguments of :class:`Processor`.

        :param options: the options
        :type options: :class:`collections.abc.Mapping`
        :param \*\*kwargs: keyword arguments which override ``options``
                           e.g. ``engine``
        :returns: a new processor
        :rtype: :class:`Processor`
        :raise sqlalchemy_imagevariants.errors.ConfigurationError:
           when options are missing or unknown

        """
        if not isinstance(options, collections.abc.Mapping):
            raise ConfigurationError('some options are required, not ' +
                                     repr(options))
        params = {}
        for key, value in options.items():
            params[OPTION_ALIASES.get(key, key)] = value
        if params.get('transforms') is None:
            raise ConfigurationError('some transforms are required')
        params.update(kwargs)
        allowed = inspect.signature(cls).parameters
        unknown = sorted(set(params).difference(allowed))
        if unknown:
            raise ConfigurationError('unknown options: ' + ', '.join(unknown))
        return cls(**params)

    def create_field_schema(self):
        """Declares the fields the model has to carry for each
        transform.  See also :mod:`sqlalchemy_imagevariants.schema`.

        :returns: transform names to their field names to
                  SQLAlchemy types
        :rtype: :class:`collections.OrderedDict`

        """
        return collections.OrderedDict(
            (name, variant_field_schema()) for name in self.transforms
        )

    def get_extension(self, transform, attachment, attributes):
        """Determines the extension of the output file of the ``transform``.
        It's the ``format`` of the transform if present, or the extension
        of the source file otherwise.  When the source file has no
        extension, the extension of its original name or the identified
        format is used instead.

        """
        extension = transform.get(FORMAT_KEY)
        if not extension:
            extension = os.path.splitext(attachment.path)[1]
        if not extension and attachment.name:
            extension = os.path.splitext(attachment.name)[1]
        if not extension:
            extension = attributes.format.lower()
        return extension

    def process(self, attachment, store, model):
        """Derives every variant of the ``attachment``, saves them
        into the ``store``, and records them onto the ``model``.

        :param attachment: the source file which has ``path`` and ``name``
        :type attachment: :class:`Attachment`
        :param store: the store to save variants into
        :type store: :class:`~sqlalchemy_imagevariants.store.Store`
        :param model: the model which has a sub-record for each transform
                      name.  see also :mod:`sqlalchemy_imagevariants.record`
        :raise sqlalchemy_imagevariants.errors.UnsupportedFormatError:
           when the attachment is not an image of allowed formats.
           no transform is run in this case
        :raise sqlalchemy_imagevariants.errors.ProcessingError:
           the first error raised by transforms

        """
        try:
            attributes = self.engine.identify(attachment.path)
        except Exception as e:
            raise UnsupportedFormatError(
                'unsupported file type; failed to identify {0!r}: '
                '{1}'.format(attachment.name, e)
            )
        if not attributes or attributes.format not in self.formats:
            raise UnsupportedFormatError(
                'unsupported file type {0!r} of {1!r}; it must be one of '
                '{2}'.format(attributes and attributes.format,
                             attachment.name,
                             ', '.join(sorted(self.formats)))
            )
        units = []
        for name, transform in self.transforms.items():
            extension = self.get_extension(transform, attachment, attributes)
            unit = TransformUnit(
                name, transform, attachment,
                allocate_temp_path(self.tmp_dir, extension),
                get_record(model, name), store, self.engine, self.sniffer,
                remove_temp_file=self.remove_temp_files
            )
            units.append(unit)
        self.logger.debug('process(%r): %r', attachment, units)
        self.run_concurrently([unit.run for unit in units])

    def remove(self, store, model):
        """Removes stored variants of the ``model`` from the ``store``.
        Sub-records without url are skipped.

        :param store: the store which contains variants
        :type store: :class:`~sqlalchemy_imagevariants.store.Store`
        :param model: the model which has a sub-record for each transform
                      name
        :raise sqlalchemy_imagevariants.errors.StorageError:
           the first error raised by the ``store``

        """
        tasks = []
        for name in self.transforms:
            record = get_record(model, name)
            if not get_field(record, 'url'):
                continue
            tasks.append(functools.partial(self.remove_record,
                                           store, name, record))
        self.logger.debug('remove(): %d stored variant(s)', len(tasks))
        self.run_concurrently(tasks)

    def remove_record(self, store, name, record):
        try:
            store.remove(record)
        except Exception as e:
            raise StorageError(
                'failed to remove the variant {0!r}: {1}'.format(name, e),
                transform=name
            )

    def will_overwrite(self, model):
        """Whether processing would overwrite variants already stored
        for the ``model``.

        .. note::

           It reflects only the sub-record of the *last* transform in
           the configured order, not any of them.

        :param model: the model which has a sub-record for each transform
                      name
        :rtype: :class:`bool`

        """
        result = False
        for name in self.transforms:
            result = bool(get_field(get_record(model, name), 'url'))
        return result

    def run_concurrently(self, tasks):
        r"""Calls every function of ``tasks`` in its own thread, and
        waits for them.  When any of them raises an exception it
        immediately reraises the exception without waiting for the rest.

        :param tasks: functions that take no arguments
        :type tasks: :class:`typing.Sequence`\ [:class:`typing.Callable`]

        """
        if not tasks:
            return
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=self.max_workers or len(tasks)
        )
        try:
            futures = [executor.submit(task) for task in tasks]
            for future in concurrent.futures.as_completed(futures):
                error = future.exception()
                if error is not None:
                    self.logger.debug('failed: %s', error)
                    raise error
        finally:
            executor.shutdown(wait=False)

    def __repr__(self):
        return '{0.__module__}.{0.__name__}({1!r}, tmp_dir={2!r})'.format(
            type(self), list(self.transforms), self.tmp_dir
        )
