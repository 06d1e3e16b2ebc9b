import pytest

from fileshare.file_utils import (
    SHARE_ID_ALPHABET,
    format_file_size,
    generate_share_id,
    get_file_category,
    is_allowed_filename,
)


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1536, "1.5 KB"),
        (2048, "2 KB"),
        (1024 * 1024, "1 MB"),
        (100 * 1024 * 1024, "100 MB"),
        (5 * 1024 ** 5, "5120 TB"),
    ],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


@pytest.mark.parametrize(
    "name, allowed",
    [("photo.PNG", True), ("report.pdf", True), ("data.csv", True), ("setup.exe", False), ("README", False), ("", False)],
)
def test_is_allowed_filename(name, allowed):
    assert is_allowed_filename(name) is allowed


def test_get_file_category():
    assert get_file_category("image/png") == "Image"
    assert get_file_category("application/pdf") == "Document"
    assert get_file_category("application/zip") == "Archive"
    assert get_file_category("video/mp4") == "Video"
    assert get_file_category("audio/ogg") == "Audio"
    assert get_file_category("application/x-unknown") == "Other"


def test_generate_share_id():
    share_id = generate_share_id()
    assert len(share_id) == 10
    assert set(share_id) <= set(SHARE_ID_ALPHABET)
    assert len(generate_share_id(21)) == 21
    assert len({generate_share_id() for _ in range(200)}) == 200
