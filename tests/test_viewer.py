import os

import numpy as np
import pytest
from PIL import Image

from huhconv import huh
from huhconv.errors import SourceNotFound, SizeMismatch
from huhconv.huh import PixelGrid
from huhconv.pipeline import Pipeline
from huhconv.viewer import Viewer


class RecordingRenderer:
    def __init__(self, fail=False):
        self.fail = fail
        self.rendered = []

    def render(self, path, options=None):
        with Image.open(path) as image:
            self.rendered.append((path, image.size))
        if self.fail:
            raise RuntimeError('terminal went away')


class ScriptedTerminal:
    """ Stands in for RawTerminal, returning the scripted keys one per poll """

    def __init__(self, keys, tty=True):
        self.keys = list(keys)
        self.is_tty = tty
        self.entered = False
        self.exited = False
        self.polls = 0

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, *exc):
        self.exited = True
        return False

    def poll_key(self, timeout):
        self.polls += 1
        if not self.keys:
            raise KeyboardInterrupt()
        return self.keys.pop(0)


def scripted(keys, tty=True):
    terminal = ScriptedTerminal(keys, tty)

    def factory():
        return terminal

    return terminal, factory


@pytest.fixture
def huh_file(tmp_path):
    path = tmp_path / 'picture.huh'
    path.write_bytes(huh.encode(PixelGrid(np.full((4, 6, 3), 200, dtype=np.uint8))))
    return path


def make_viewer(renderer, factory=None, interactive=False):
    config = Viewer.Config(poll_interval=1, interactive=interactive)
    pipeline = Pipeline(Pipeline.Config(show_progress=False))
    if factory is None:
        return Viewer(config, pipeline, renderer)
    return Viewer(config, pipeline, renderer, factory)


def test_huh_goes_through_a_temporary_png(huh_file):
    renderer = RecordingRenderer()
    make_viewer(renderer).view(huh_file)

    (path, size), = renderer.rendered
    assert path.endswith('.png')
    assert size == (6, 4)
    assert not os.path.exists(path)


def test_temporary_file_removed_when_rendering_fails(huh_file):
    renderer = RecordingRenderer(fail=True)
    with pytest.raises(RuntimeError):
        make_viewer(renderer).view(huh_file)

    (path, _), = renderer.rendered
    assert not os.path.exists(path)


def test_invalid_huh_is_not_rendered(tmp_path):
    broken = tmp_path / 'broken.huh'
    broken.write_bytes(huh.encode(PixelGrid.blank(3, 3))[:-3])

    renderer = RecordingRenderer()
    with pytest.raises(SizeMismatch):
        make_viewer(renderer).view(broken)
    assert renderer.rendered == []


def test_other_formats_are_rendered_directly(tmp_path):
    path = tmp_path / 'plain.png'
    Image.new('RGB', (3, 2), (1, 2, 3)).save(path)

    renderer = RecordingRenderer()
    make_viewer(renderer).view(path)

    assert renderer.rendered == [(str(path), (3, 2))]


def test_missing_file(tmp_path):
    with pytest.raises(SourceNotFound):
        make_viewer(RecordingRenderer()).view(tmp_path / 'nothing.huh')


@pytest.mark.parametrize('quit_key', ['q', 'Q', '\x03'])
def test_waits_for_quit_key(huh_file, quit_key):
    terminal, factory = scripted([None, 'x', quit_key, 'never read'])
    make_viewer(RecordingRenderer(), factory, interactive=True).view(huh_file)

    assert terminal.polls == 3
    assert terminal.entered and terminal.exited


def test_terminal_released_on_interrupt(huh_file):
    terminal, factory = scripted([None])
    with pytest.raises(KeyboardInterrupt):
        make_viewer(RecordingRenderer(), factory, interactive=True).view(huh_file)
    assert terminal.exited


def test_no_wait_without_terminal(huh_file):
    terminal, factory = scripted([], tty=False)
    make_viewer(RecordingRenderer(), factory, interactive=True).view(huh_file)
    assert terminal.polls == 0
