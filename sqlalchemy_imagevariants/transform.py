""":mod:`sqlalchemy_imagevariants.transform` --- Transform units
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

A transform is a declarative mapping of :program:`convert` options,
for example::

    thumbnail = OrderedDict([
        ('resize', '120x120^'),
        ('gravity', 'center'),
        ('extent', '120x120'),
        ('format', 'png'),
    ])

Every key becomes a dash-prefixed option followed by its value
(or values, if it's a list).  The reserved ``format`` key is not
an option but the extension of the output file.

:class:`TransformUnit` runs a single transform from start to end:
it converts the source, identifies the output, reads its size, sniffs
its mimetype, saves it into the store, and then finally records
the results onto its sub-record.

"""
import binascii
import collections
import contextlib
import logging
import os
import os.path

from .errors import (ConversionError, InspectionError, SniffError, StatError,
                     StorageError)
from .record import set_fields
from .store import Blob

__all__ = ('FORMAT_KEY', 'TEMP_NAME_LENGTH', 'TransformUnit',
           'allocate_temp_path', 'build_convert_args', 'random_string')


#: (:class:`str`) The reserved transform key for the output extension.
FORMAT_KEY = 'format'

#: (:class:`numbers.Integral`) The length of random temporary filenames.
TEMP_NAME_LENGTH = 20


def build_convert_args(transform):
    """Converts the ``transform`` mapping into the list of
    command line arguments for :program:`convert`::

        >>> build_convert_args(OrderedDict([
        ...     ('resize', '50%'),
        ...     ('set', ['comment', 'resized']),
        ...     ('format', 'png'),
        ... ]))
        ['-resize', '50%', '-set', 'comment', 'resized']

    :param transform: option names to a value or a list of values.
                      the order of keys is preserved
    :type transform: :class:`collections.abc.Mapping`
    :returns: the command line arguments
    :rtype: :class:`list`

    """
    args = []
    for option, value in transform.items():
        if option == FORMAT_KEY:
            continue
        args.append('-' + option)
        if isinstance(value, (list, tuple)):
            args.extend(str(v) for v in value)
        else:
            args.append(str(value))
    return args


def random_string(length):
    """Generates a random string of lowercase hexadecimal digits.

    :param length: the length of the string
    :type length: :class:`numbers.Integral`
    :rtype: :class:`str`

    """
    digest = binascii.hexlify(os.urandom((length + 1) // 2))
    return digest.decode('ascii')[:length]


def allocate_temp_path(tmp_dir, extension):
    """Makes a new temporary file path in ``tmp_dir``.  The filename
    is random, so concurrent transforms never collide.

    :param tmp_dir: the directory of temporary files
    :type tmp_dir: :class:`str`
    :param extension: the extension of the file.  a leading dot is
                      prepended if it's missing e.g. ``'png'``
    :type extension: :class:`str`
    :returns: the temporary file path
    :rtype: :class:`str`

    """
    if not extension.startswith('.'):
        extension = '.' + extension
    return os.path.join(tmp_dir, random_string(TEMP_NAME_LENGTH) + extension)


class TransformUnit(object):
    """A single transform applied to an attachment.  Call :meth:`run()`
    to execute it.

    :param name: the transform name e.g. ``'thumbnail'``
    :type name: :class:`str`
    :param transform: the convert options
    :type transform: :class:`collections.abc.Mapping`
    :param attachment: the source file which has ``path`` and ``name``
    :param output_path: the temporary path to write the converted file
    :type output_path: :class:`str`
    :param record: the sub-record to write results onto
    :param store: the store to save the converted file into
    :type store: :class:`~sqlalchemy_imagevariants.store.Store`
    :param engine: the conversion engine
    :type engine: :class:`~sqlalchemy_imagevariants.engine.Engine`
    :param sniffer: the mimetype detector which has ``from_file()``
                    method e.g. :class:`magic.Magic`
    :param remove_temp_file: whether to delete ``output_path`` after
                             it's done.  :const:`False` by default
    :type remove_temp_file: :class:`bool`

    """

    logger = logging.getLogger(__name__ + '.TransformUnit')

    #: (:class:`collections.abc.Sequence`) States a unit goes through.
    STATES = ('pending', 'converting', 'inspecting', 'stating', 'sniffing',
              'storing', 'committed', 'failed')

    def __init__(self, name, transform, attachment, output_path, record,
                 store, engine, sniffer, remove_temp_file=False):
        self.name = name
        self.transform = transform
        self.attachment = attachment
        self.output_path = output_path
        self.record = record
        self.store = store
        self.engine = engine
        self.sniffer = sniffer
        self.remove_temp_file = remove_temp_file
        self.state = 'pending'

    @contextlib.contextmanager
    def stage(self, state, error_type):
        self.state = state
        self.logger.debug('%s: %s %s', self.name, state, self.output_path)
        try:
            yield
        except Exception as e:
            self.state = 'failed'
            raise error_type(
                'transform {0!r} failed while {1}: {2}'.format(
                    self.name, state, e
                ),
                transform=self.name
            )

    def run(self):
        """Runs the transform.  The sub-record is updated only if every
        step succeeds.

        :raise sqlalchemy_imagevariants.errors.ProcessingError:
           when any step fails

        """
        try:
            with self.stage('converting', ConversionError):
                args = build_convert_args(self.transform)
                self.engine.convert(self.attachment.path, args,
                                    self.output_path)
            with self.stage('inspecting', InspectionError):
                attributes = self.engine.identify(self.output_path)
            with self.stage('stating', StatError):
                size = os.stat(self.output_path).st_size
            with self.stage('sniffing', SniffError):
                mimetype = self.sniffer.from_file(self.output_path)
                if isinstance(mimetype, bytes):
                    mimetype = mimetype.decode('ascii')
            with self.stage('storing', StorageError):
                url = self.store.save(Blob(self.output_path, size, mimetype))
                self.commit(attributes, size, mimetype, url)
        finally:
            if self.remove_temp_file:
                self.remove_output()

    def commit(self, attributes, size, mimetype, url):
        """Records the results onto the sub-record.  The sub-record is
        left untouched if any field cannot be written.

        """
        set_fields(self.record, collections.OrderedDict([
            ('format', attributes.format),
            ('depth', attributes.depth),
            ('width', attributes.width),
            ('height', attributes.height),
            ('size', size),
            ('url', url),
            ('name', self.attachment.name),
            ('type', mimetype),
        ]))
        self.state = 'committed'
        self.logger.debug('%s: committed %s', self.name, url)

    def remove_output(self):
        try:
            os.remove(self.output_path)
        except (IOError, OSError):
            pass

    def __repr__(self):
        return '<{0.__module__}.{0.__name__} {1!r} {2}>'.format(
            type(self), self.name, self.state
        )
