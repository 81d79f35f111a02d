""":mod:`sqlalchemy_imagevariants.engine` --- Image conversion engines
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

An engine does two things on behalf of
:class:`~sqlalchemy_imagevariants.processor.Processor`: identifying
image files (format, depth and size), and converting a source image
into a new file with a list of command line options.

:class:`MagickEngine` is the default implementation.  It identifies
images with Wand_ and converts them by invoking the :program:`convert`
program of GraphicsMagick_ (``gm convert``) or ImageMagick_.

.. _Wand: http://docs.wand-py.org/
.. _GraphicsMagick: http://www.graphicsmagick.org/
.. _ImageMagick: https://imagemagick.org/

"""
import collections
import logging
import subprocess

from .errors import EngineError

__all__ = 'Engine', 'EngineError', 'ImageAttributes', 'MagickEngine'


class ImageAttributes(collections.namedtuple('ImageAttributes',
                                             'format depth width height')):
    """Identified attributes of an image file.

    .. attribute:: format

       (:class:`str`) The format name in upper case e.g. ``'JPEG'``.

    .. attribute:: depth

       (:class:`numbers.Integral`) The color depth in bits e.g. ``8``.

    .. attribute:: width

       (:class:`numbers.Integral`) The width in pixels.

    .. attribute:: height

       (:class:`numbers.Integral`) The height in pixels.

    """

    __slots__ = ()

    @property
    def size(self):
        """(:class:`tuple`) The pair of (:attr:`width`, :attr:`height`)."""
        return self.width, self.height


class Engine(object):
    """The interface of image conversion engines."""

    def identify(self, path):
        """Identifies the image file of the given ``path``.

        :param path: the path of the image file
        :type path: :class:`str`
        :returns: the attributes of the image
        :rtype: :class:`ImageAttributes`
        :raise EngineError: when it's not readable as an image

        .. note::

           This is an abstract method which has to be implemented
           (overridden) by subclasses.

        """
        raise NotImplementedError('identify() has to be implemented')

    def convert(self, path, args, output_path):
        """Converts the image file of the given ``path`` with the
        command line ``args``, and then writes the result into
        ``output_path``.

        :param path: the path of the source image file
        :type path: :class:`str`
        :param args: the command line options e.g.
                     ``['-resize', '100x100']``
        :type args: :class:`typing.Sequence`\\ [:class:`str`]
        :param output_path: the path to write the converted image.
                            its extension determines the output format
        :type output_path: :class:`str`
        :raise EngineError: when the conversion fails

        .. note::

           This is an abstract method which has to be implemented
           (overridden) by subclasses.

        """
        raise NotImplementedError('convert() has to be implemented')


class MagickEngine(Engine):
    """The engine which invokes GraphicsMagick or ImageMagick.

    :param image_magick: :const:`True` to invoke ImageMagick's
                         :program:`convert` instead of GraphicsMagick's
                         ``gm convert``.  default is :const:`False`
    :type image_magick: :class:`bool`

    """

    logger = logging.getLogger(__name__ + '.MagickEngine')

    def __init__(self, image_magick=False):
        self.image_magick = bool(image_magick)

    def command(self, name):
        """Makes the command prefix of the given program ``name``
        e.g. ``['gm', 'convert']``.

        """
        if self.image_magick:
            return [name]
        return ['gm', name]

    def identify(self, path):
        from wand.exceptions import WandException
        from wand.image import Image as WandImage
        try:
            with WandImage(filename=path) as image:
                width, height = image.size
                return ImageAttributes(image.format, image.depth,
                                       width, height)
        except (WandException, IOError, OSError) as e:
            raise EngineError(
                'failed to identify {0!r}: {1}'.format(path, e)
            )

    def convert(self, path, args, output_path):
        program = self.command('convert')
        command = program + [path] + [str(arg) for arg in args]
        command.append(output_path)
        self.logger.debug('command = %r', command)
        try:
            process = subprocess.run(command,
                                     stdout=subprocess.PIPE,
                                     stderr=subprocess.PIPE)
        except (IOError, OSError) as e:
            raise EngineError('failed to execute {0!r}: {1}'.format(
                command[0], e
            ))
        if process.returncode != 0:
            stderr = process.stderr.decode('utf-8', 'replace').strip()
            raise EngineError('{0} exited with {1}: {2}'.format(
                ' '.join(program),
                process.returncode,
                stderr
            ))

    def __repr__(self):
        return '{0.__module__}.{0.__name__}(image_magick={1!r})'.format(
            type(self), self.image_magick
        )
