"""
Image store tests: validation, naming, deletion and lookup on a real
temporary upload folder.
"""

import io
import os

import pytest

from hackerblog.core import (
    ImageStore, ImageUpload, InvalidMediaError, NotFoundError,
    PayloadTooLargeError, StorageUnavailableError,
)


@pytest.fixture
def store(tmp_dir):
    return ImageStore(os.path.join(tmp_dir, "uploads"), max_size=1024).open()


def upload(name="photo.png", content=b"\x89PNG-data", mimetype="image/png"):
    return ImageUpload(io.BytesIO(content), name, mimetype)


def test_store_writes_file_under_upload_folder(store):
    ref = store.store(upload(content=b"pixels"))

    assert ref.startswith("/uploads/")
    assert ref.endswith(".png")
    with open(store.resolve(ref), "rb") as f:
        assert f.read() == b"pixels"


@pytest.mark.parametrize("name,mimetype", [
    ("photo.jpeg", "image/jpeg"),
    ("photo.JPG", "image/jpeg"),
    ("anim.gif", "image/gif"),
    ("modern.webp", "image/webp"),
])
def test_store_accepts_allowed_types(store, name, mimetype):
    ref = store.store(upload(name=name, mimetype=mimetype))
    assert ref.endswith(os.path.splitext(name)[1].lower())
    assert store.exists(ref)


@pytest.mark.parametrize("name,mimetype", [
    ("notes.txt", "text/plain"),
    ("notes.txt", "image/png"),
    ("photo.png", "text/plain"),
    ("photo", "image/png"),
    ("script.svg", "image/svg+xml"),
])
def test_store_rejects_non_images(store, name, mimetype):
    with pytest.raises(InvalidMediaError):
        store.store(upload(name=name, mimetype=mimetype))
    assert os.listdir(store.upload_folder) == []


def test_store_rejects_oversized_payload_and_cleans_up(store):
    with pytest.raises(PayloadTooLargeError):
        store.store(upload(content=b"\x00" * 2048))
    assert os.listdir(store.upload_folder) == []


def test_payload_at_limit_is_accepted(store):
    ref = store.store(upload(content=b"\x00" * 1024))
    assert os.path.getsize(store.resolve(ref)) == 1024


def test_same_original_name_gets_distinct_artifacts(store):
    first = store.store(upload(name="same.png"))
    second = store.store(upload(name="same.png"))

    assert first != second
    assert store.exists(first) and store.exists(second)


def test_write_failure_surfaces_as_storage_unavailable(store):
    class BrokenStream:
        def read(self, size):
            raise OSError("device not ready")

    with pytest.raises(StorageUnavailableError):
        store.store(ImageUpload(BrokenStream(), "photo.png", "image/png"))
    assert os.listdir(store.upload_folder) == []


def test_delete_is_idempotent(store):
    ref = store.store(upload())

    assert store.delete(ref) is True
    assert store.delete(ref) is False
    assert not store.exists(ref)


def test_delete_ignores_unmanaged_reference(store):
    assert store.delete("https://cdn.example.com/photo.png") is False
    assert store.delete("/uploads/../outside.png") is False


def test_is_managed_only_for_upload_folder_names(store):
    assert store.is_managed("/uploads/photo.png")
    assert not store.is_managed("/static/photo.png")
    assert not store.is_managed("/uploads/../outside.png")
    assert not store.is_managed(None)


def test_delete_permission_error_is_storage_unavailable(store, monkeypatch):
    ref = store.store(upload())

    def refuse(*args, **kwargs):
        raise PermissionError("read-only filesystem")

    # Scoped to delete, fixture teardown still needs os.unlink
    with monkeypatch.context() as m:
        m.setattr(os, "unlink", refuse)
        with pytest.raises(StorageUnavailableError):
            store.delete(ref)

    assert store.exists(ref)


@pytest.mark.parametrize("ref", [
    "/uploads/../secrets.db",
    "/uploads/nested/photo.png",
    "/static/photo.png",
    "/uploads/",
    "/uploads/missing.png",
])
def test_resolve_rejects_unknown_references(store, ref):
    with pytest.raises(NotFoundError):
        store.resolve(ref)


def test_list_artifacts_newest_first(store):
    older = store.store(upload(name="a.png"))
    newer = store.store(upload(name="b.png"))
    os.utime(store.resolve(older), (1_000_000, 1_000_000))
    os.utime(store.resolve(newer), (2_000_000, 2_000_000))
    with open(os.path.join(store.upload_folder, "readme.txt"), "w") as f:
        f.write("not an image")

    assert store.list_artifacts() == [newer, older]
