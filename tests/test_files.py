import json

import pytest

from exam_wallet.core.errors import ValidationError
from exam_wallet.core.files import (
    SUPPORTED_IMAGE_TYPES,
    ProcessedFile,
    UploadedFile,
    format_file_size,
    guess_media_type,
    load_file,
    validate_file,
)
from exam_wallet.core.subscriptions import SubscriptionMarkers, load_markers, save_markers


@pytest.mark.parametrize("num_bytes,expected", [
    (0, "0 Bytes"),
    (500, "500 Bytes"),
    (1024, "1 KB"),
    (1536, "1.5 KB"),
    (5 * 1024 * 1024, "5 MB"),
])
def test_format_file_size(num_bytes, expected) -> None:
    assert format_file_size(num_bytes) == expected


@pytest.mark.parametrize("name,expected", [
    ("photo.JPG", "image/jpeg"),
    ("scan.webp", "image/webp"),
    ("cv.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
    ("blob", "application/octet-stream"),
])
def test_guess_media_type(name, expected) -> None:
    assert guess_media_type(name) == expected


class TestValidateFile:
    def test_accepts_supported_file(self) -> None:
        validate_file(UploadedFile(b"x", "application/pdf", "a.pdf"))

    def test_rejects_type(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported file type"):
            validate_file(UploadedFile(b"x", "application/pdf", "a.pdf"), SUPPORTED_IMAGE_TYPES)

    def test_rejects_size(self) -> None:
        with pytest.raises(ValidationError, match="Maximum size is 0.0MB"):
            validate_file(UploadedFile(b"xx", "image/png", "a.png"), max_size=1)


class TestFileValues:
    def test_name_parts(self) -> None:
        file = UploadedFile(b"", "image/png", "my.scan.png")

        assert file.stem == "my.scan"
        assert file.extension == ".png"
        assert UploadedFile(b"", "image/png", ".hidden").extension == ""

    def test_write_into_directory(self, tmp_path) -> None:
        written = ProcessedFile(b"data", "image/png", "out.png").write_to(tmp_path)

        assert written == tmp_path / "out.png"
        assert load_file(written).content == b"data"
        assert load_file(written).media_type == "image/png"


class TestSubscriptionMarkers:
    def test_round_trip(self, tmp_path) -> None:
        path = tmp_path / "nested" / "subs.json"

        save_markers({"b", "a"}, path)

        assert json.loads(path.read_text()) == {"version": "1.0", "subscribed_exams": ["a", "b"]}
        assert load_markers(path) == {"a", "b"}

    def test_missing_or_corrupt_file(self, tmp_path) -> None:
        path = tmp_path / "subs.json"
        assert load_markers(path) == set()

        path.write_text("{not json")
        assert load_markers(path) == set()

    def test_add_and_discard_report_changes(self, tmp_path) -> None:
        markers = SubscriptionMarkers(tmp_path / "subs.json")

        assert markers.add("e1") is True
        assert markers.add("e1") is False
        assert markers.discard("e2") is False
        assert markers.discard("e1") is True
        assert len(markers) == 0
        assert load_markers(tmp_path / "subs.json") == set()
