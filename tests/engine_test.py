import subprocess

from pytest import importorskip, raises

from sqlalchemy_imagevariants.engine import (Engine, EngineError,
                                             ImageAttributes, MagickEngine)


class CompletedProcess(object):

    def __init__(self, returncode, stderr=b''):
        self.returncode = returncode
        self.stdout = b''
        self.stderr = stderr


def test_engine_interface():
    engine = Engine()
    with raises(NotImplementedError):
        engine.identify('a.png')
    with raises(NotImplementedError):
        engine.convert('a.png', [], 'b.png')


def test_image_attributes():
    attributes = ImageAttributes('PNG', 8, 120, 90)
    assert attributes.size == (120, 90)
    assert attributes.format == 'PNG'
    assert attributes.depth == 8


def test_command():
    assert MagickEngine().command('convert') == ['gm', 'convert']
    assert MagickEngine(image_magick=True).command('convert') == ['convert']


def test_convert_graphicsmagick(monkeypatch):
    commands = []

    def run(command, **kwargs):
        commands.append(command)
        return CompletedProcess(0)
    monkeypatch.setattr(subprocess, 'run', run)
    MagickEngine().convert('in.jpg', ['-resize', '50%', '-quality', 80],
                           'out.png')
    assert commands == [
        ['gm', 'convert', 'in.jpg', '-resize', '50%', '-quality', '80',
         'out.png']
    ]


def test_convert_imagemagick(monkeypatch):
    commands = []

    def run(command, **kwargs):
        commands.append(command)
        return CompletedProcess(0)
    monkeypatch.setattr(subprocess, 'run', run)
    MagickEngine(image_magick=True).convert('in.jpg', [], 'out.jpg')
    assert commands == [['convert', 'in.jpg', 'out.jpg']]


def test_convert_failure(monkeypatch):
    def run(command, **kwargs):
        return CompletedProcess(1, b'convert: unrecognized option `-foo\'.')
    monkeypatch.setattr(subprocess, 'run', run)
    with raises(EngineError) as excinfo:
        MagickEngine().convert('in.jpg', ['-foo', 'bar'], 'out.jpg')
    assert 'unrecognized option' in str(excinfo.value)
    assert 'gm convert exited with 1' in str(excinfo.value)


def test_convert_missing_program(monkeypatch):
    def run(command, **kwargs):
        raise OSError(2, 'No such file or directory')
    monkeypatch.setattr(subprocess, 'run', run)
    with raises(EngineError):
        MagickEngine().convert('in.jpg', [], 'out.jpg')


def test_identify(tmpdir):
    color = importorskip('wand.color')
    image = importorskip('wand.image')
    path = tmpdir.join('red.png').strpath
    with image.Image(width=12, height=7,
                     background=color.Color('red')) as img:
        img.format = 'png'
        img.save(filename=path)
    attributes = MagickEngine().identify(path)
    assert attributes.format == 'PNG'
    assert attributes.size == (12, 7)
    assert attributes.depth in (8, 16)


def test_identify_missing_file(tmpdir):
    importorskip('wand.image')
    path = tmpdir.join('missing.png').strpath
    with raises(EngineError):
        MagickEngine().identify(path)
