import io
import re

import pytest
from fastapi import UploadFile

from instalike.core.exceptions import ValidationError
from instalike.core.storage import ImageStorage


@pytest.fixture
def storage(tmp_path):
    return ImageStorage(str(tmp_path / "images"), max_size=1024)


def test_directory_created(storage):
    assert storage.directory.is_dir()


def test_extension_check_is_case_insensitive(storage):
    assert storage.validate_extension("Photo.JPG") == ".jpg"
    with pytest.raises(ValidationError):
        storage.validate_extension("script.sh")
    with pytest.raises(ValidationError):
        storage.validate_extension("no_extension")


def test_generated_names_keep_extension(storage):
    name = storage.generate_filename(".gif")
    assert re.fullmatch(r"\d+-\d{9}\.gif", name)


def test_save_and_delete(storage):
    reference = storage.save(UploadFile(file=io.BytesIO(b"abc"), filename="a.png"))

    assert reference.startswith("/uploads/")
    path = storage.path_for(reference)
    assert path.read_bytes() == b"abc"
    assert storage.delete(reference) is True
    assert not path.exists()
    assert storage.delete(reference) is False


def test_save_rejects_oversize(storage):
    with pytest.raises(ValidationError):
        storage.save(UploadFile(file=io.BytesIO(b"x" * 1025), filename="big.png"))
    assert list(storage.directory.iterdir()) == []


def test_save_accepts_exact_limit(storage):
    reference = storage.save(UploadFile(file=io.BytesIO(b"x" * 1024), filename="edge.jpeg"))
    assert storage.path_for(reference).stat().st_size == 1024


def test_path_for_rejects_foreign_references(storage):
    assert storage.path_for("/elsewhere/a.png") is None
    assert storage.path_for("/uploads/../secret.png") is None
    assert storage.path_for("/uploads/") is None
    assert storage.delete(None) is False
