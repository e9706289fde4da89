import os

import pytest

from image_store.infrastructure.storage.local_storage import LocalBlobStore
from image_store.exceptions import InvalidName, IOFailure, NotFound, PathTaken


PATH = "/uploads/images/gallery/2026-10-Oct/first-image.png"


def test_write_creates_parents_and_reads_back(tmp_path):
    store = LocalBlobStore(str(tmp_path))
    store.write(PATH, b"abc")
    assert store.exists(PATH)
    assert store.read(PATH) == b"abc"
    assert (tmp_path / "uploads" / "images" / "gallery" / "2026-10-Oct" / "first-image.png").read_bytes() == b"abc"


def test_write_overwrites_existing_content(tmp_path):
    store = LocalBlobStore(str(tmp_path))
    store.write(PATH, b"first version")
    store.write(PATH, b"v2")
    assert store.read(PATH) == b"v2"


def test_write_leaves_no_temp_files(tmp_path):
    store = LocalBlobStore(str(tmp_path))
    store.write(PATH, b"abc")
    store.create(PATH + ".copy", b"abc")
    names = os.listdir(os.path.dirname(store.absolute_path(PATH)))
    assert sorted(names) == ["first-image.png", "first-image.png.copy"]


def test_create_refuses_existing_path(tmp_path):
    store = LocalBlobStore(str(tmp_path))
    store.create(PATH, b"one")
    with pytest.raises(PathTaken):
        store.create(PATH, b"two")
    assert store.read(PATH) == b"one"


def test_path_taken_is_an_io_failure():
    assert issubclass(PathTaken, IOFailure)


def test_read_missing_raises_not_found(tmp_path):
    store = LocalBlobStore(str(tmp_path))
    with pytest.raises(NotFound):
        store.read(PATH)


def test_delete_is_idempotent(tmp_path):
    store = LocalBlobStore(str(tmp_path))
    store.write(PATH, b"abc")
    store.delete(PATH)
    assert not store.exists(PATH)
    store.delete(PATH)


def test_paths_cannot_escape_root(tmp_path):
    store = LocalBlobStore(str(tmp_path / "public"))
    with pytest.raises(InvalidName):
        store.write("/../outside.png", b"x")
    with pytest.raises(InvalidName):
        store.exists("/")


def test_write_failure_surfaces_as_io_failure(tmp_path):
    store = LocalBlobStore(str(tmp_path))
    # a regular file where a parent directory is expected
    (tmp_path / "uploads").write_bytes(b"not a directory")
    with pytest.raises(IOFailure):
        store.write(PATH, b"abc")
