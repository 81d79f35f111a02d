import io
import os.path
import threading

from pytest import fixture
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from sqlalchemy_imagevariants.engine import (Engine, EngineError,
                                             ImageAttributes)
from sqlalchemy_imagevariants.processor import Attachment
from sqlalchemy_imagevariants.store import Store


Base = declarative_base()
Session = sessionmaker()

SOURCE_ATTRIBUTES = ImageAttributes('JPEG', 8, 640, 480)

MIMETYPES = {
    '.gif': 'image/gif',
    '.jpeg': 'image/jpeg',
    '.jpg': 'image/jpeg',
    '.png': 'image/png',
    '.tiff': 'image/tiff',
}


class FakeEngine(Engine):
    """Pretends to convert images.  Options of transforms control it:

    - ``resize``: ``'WxH'`` of the output
    - ``fail``: ``'convert'`` or ``'identify'`` makes the step fail

    """

    def __init__(self, source=SOURCE_ATTRIBUTES):
        self.source = source
        self.converted = {}
        self.calls = []
        self.lock = threading.Lock()

    def identify(self, path):
        with self.lock:
            self.calls.append(('identify', path))
            attributes = self.converted.get(path, self.source)
        if attributes is None:
            raise EngineError('not an image: ' + path)
        return attributes

    def convert(self, path, args, output_path):
        options = dict(zip(args[::2], args[1::2]))
        with self.lock:
            self.calls.append(('convert', path, list(args), output_path))
        if options.get('-fail') == 'convert':
            raise EngineError('convert: unable to open image')
        width, height = options.get('-resize', '640x480').split('x')
        with open(output_path, 'wb') as f:
            f.write(b'converted ' + ' '.join(args).encode('utf-8'))
        if options.get('-fail') == 'identify':
            attributes = None
        else:
            format_ = os.path.splitext(output_path)[1][1:].upper()
            attributes = ImageAttributes(format_, 8, int(width), int(height))
        with self.lock:
            self.converted[output_path] = attributes


class FakeSniffer(object):
    """Detects mimetypes from extensions, as python-magic would from
    the content.

    """

    def from_file(self, path):
        extension = os.path.splitext(path)[1]
        try:
            return MIMETYPES[extension]
        except KeyError:
            raise IOError('cannot detect the type of ' + path)


class MemoryStore(Store):
    """Keeps files in memory.  Saving files of ``fail_types`` fails."""

    def __init__(self):
        self.files = {}
        self.removed = []
        self.fail_types = set()
        self.lock = threading.Lock()

    def put_file(self, file, key, size, mimetype):
        if mimetype in self.fail_types:
            raise IOError('failed to upload ' + key)
        data = file.read()
        assert len(data) == size
        with self.lock:
            self.files[key] = data, mimetype

    def delete_file(self, key):
        with self.lock:
            self.removed.append(key)
            self.files.pop(key, None)

    def get_file(self, key):
        return io.BytesIO(self.files[key][0])

    def get_url(self, key):
        return 'http://mock/variants/' + key


@fixture
def fx_engine():
    return FakeEngine()


@fixture
def fx_sniffer():
    return FakeSniffer()


@fixture
def fx_store():
    return MemoryStore()


@fixture
def fx_attachment(tmpdir):
    path = tmpdir.join('upload.jpg')
    path.write_binary(b'\xff\xd8\xff\xe0 fake jpeg')
    return Attachment(path.strpath, 'photo.jpg')


@fixture
def fx_session():
    engine = create_engine('sqlite://',
                           connect_args={'check_same_thread': False},
                           poolclass=StaticPool)
    metadata = Base.metadata
    metadata.drop_all(bind=engine)
    metadata.create_all(bind=engine)
    session = Session(bind=engine)
    yield session
    session.close()
    metadata.drop_all(bind=engine)
    engine.dispose()
