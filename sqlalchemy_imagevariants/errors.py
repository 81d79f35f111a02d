""":mod:`sqlalchemy_imagevariants.errors` --- Exceptions
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

Every failure while deriving or removing variants is raised as
a :exc:`ProcessingError`.  Errors which happen inside a single
transform carry the name of the transform so that callers can tell
which variant failed::

    try:
        processor.process(attachment, store, user.variants)
    except ConversionError as e:
        print(e.transform, e)

The original exception (e.g. :exc:`~subprocess.CalledProcessError`)
is available as :attr:`~BaseException.__context__`.

"""
__all__ = ('ConfigurationError', 'ConversionError', 'EngineError',
           'InspectionError', 'ProcessingError', 'SniffError', 'StatError',
           'StorageError', 'UnsupportedFormatError')


class ConfigurationError(TypeError):
    """Raised by :class:`~sqlalchemy_imagevariants.processor.Processor`
    when it's constructed with missing or malformed options.

    """


class EngineError(Exception):
    """Raised by an engine (see :mod:`sqlalchemy_imagevariants.engine`)
    when it fails to identify or convert an image.

    """


class ProcessingError(Exception):
    """The base exception of every runtime failure.

    :param message: the error message
    :type message: :class:`str`
    :param transform: the name of the transform which failed.
                      :const:`None` if it's not specific to a transform
    :type transform: :class:`str`

    """

    def __init__(self, message, transform=None):
        super(ProcessingError, self).__init__(message)
        self.transform = transform


class UnsupportedFormatError(ProcessingError):
    """The source file couldn't be identified, or its format is not
    one of the allowed formats.

    """


class ConversionError(ProcessingError):
    """The conversion program failed."""


class InspectionError(ProcessingError):
    """The converted output file couldn't be identified."""


class StatError(ProcessingError):
    """The size of the converted output file couldn't be read."""


class SniffError(ProcessingError):
    """The MIME type of the converted output file couldn't be detected."""


class StorageError(ProcessingError):
    """The store failed to save or remove a variant."""
