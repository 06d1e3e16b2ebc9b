"""Upload policy and presentation helpers shared by the HTTP handlers."""

import os
import secrets
import string

ALLOWED_EXTENSIONS = {
    ".jpg", ".jpeg", ".png", ".gif", ".pdf",
    ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".zip", ".rar", ".txt", ".csv",
}

SUPPORTED_FILE_TYPES = {
    "Image": {"image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml"},
    "Document": {
        "application/pdf",
        "text/plain",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    },
    "Archive": {"application/zip", "application/x-rar-compressed", "application/x-7z-compressed"},
    "Video": {"video/mp4", "video/webm", "video/quicktime"},
    "Audio": {"audio/mpeg", "audio/wav", "audio/ogg"},
}

SHARE_ID_ALPHABET = string.ascii_letters + string.digits + "_-"
SHARE_ID_LENGTH = 10


def is_allowed_filename(filename: str) -> bool:
    return os.path.splitext(filename or "")[1].lower() in ALLOWED_EXTENSIONS


def get_file_category(mime_type: str) -> str:
    for category, types in SUPPORTED_FILE_TYPES.items():
        if mime_type in types:
            return category
    return "Other"


def format_file_size(size: int) -> str:
    """Human readable size, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    # 2.00 -> 2, 1.50 -> 1.5
    return f"{value:.2f}".rstrip("0").rstrip(".") + f" {units[i]}"


def generate_share_id(size: int = SHARE_ID_LENGTH) -> str:
    return "".join(secrets.choice(SHARE_ID_ALPHABET) for _ in range(size))
