from pathlib import Path

import pytest

from staffline.config import get_settings
from staffline.core.errors import NotFoundError, ValidationError
from staffline.core.storage import LicenseStore


def _store(tmp_path: Path, **overrides) -> LicenseStore:
    settings = get_settings().model_copy(update={"upload_dir": tmp_path, **overrides})
    return LicenseStore(settings)


def test_save_writes_file_under_generated_name(tmp_path: Path) -> None:
    store = _store(tmp_path)
    stored = store.save("Scan.PNG", b"\x89PNG data")
    assert stored.filename.startswith("license_")
    assert stored.filename.endswith(".png")
    assert stored.url == f"/api/uploads/{stored.filename}"
    assert store.path_for(stored.filename).read_bytes() == b"\x89PNG data"


@pytest.mark.parametrize("name,content", [("notes.txt", b"x"), ("license.pdf", b"")])
def test_save_rejects_bad_uploads(tmp_path: Path, name: str, content: bytes) -> None:
    with pytest.raises(ValidationError):
        _store(tmp_path).save(name, content)


def test_save_enforces_size_limit(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        _store(tmp_path, max_upload_bytes=4).save("license.pdf", b"%PDF-1.4")


def test_path_for_refuses_traversal_and_missing_files(tmp_path: Path) -> None:
    store = _store(tmp_path)
    with pytest.raises(NotFoundError):
        store.path_for("../staffline.db")
    with pytest.raises(NotFoundError):
        store.path_for("missing.pdf")
