"""
File content validation utilities.

Validates uploads beyond their extension and declared content type: the
leading bytes must match the claimed format, and executables or archives
are rejected even when renamed.
"""
import os
from typing import Iterable, Optional, Tuple

import structlog

logger = structlog.get_logger()

# Magic bytes for file types we always REJECT
DANGEROUS_MAGIC_BYTES = {
    b"MZ": "Windows executable",
    b"\x7fELF": "Linux executable",
    b"\xcf\xfa\xed\xfe": "Mach-O executable",
    b"#!": "script",
    b"PK\x03\x04": "ZIP archive (could contain executables)",
    b"Rar!": "RAR archive",
    b"\x1f\x8b": "GZIP archive",
    b"7z\xbc\xaf\x27\x1c": "7-Zip archive",
}

# Accepted formats: extension -> (mime type, magic prefixes)
ALLOWED_SIGNATURES: dict[str, tuple[str, tuple[bytes, ...]]] = {
    "jpg": ("image/jpeg", (b"\xff\xd8\xff",)),
    "jpeg": ("image/jpeg", (b"\xff\xd8\xff",)),
    "png": ("image/png", (b"\x89PNG\r\n\x1a\n",)),
    "gif": ("image/gif", (b"GIF87a", b"GIF89a")),
    "webp": ("image/webp", (b"RIFF",)),
    "pdf": ("application/pdf", (b"%PDF",)),
}

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp"})
DOCUMENT_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "pdf"})


def file_extension(filename: Optional[str]) -> str:
    """Lower-case extension without the dot, or an empty string."""
    if not filename:
        return ""
    return os.path.splitext(filename)[1].lstrip(".").lower()


def detect_dangerous_content(content: bytes) -> Tuple[bool, str]:
    """
    Check if content appears to be a dangerous file type.

    Args:
        content: Raw file bytes

    Returns:
        Tuple of (is_dangerous, reason)
    """
    for magic, file_type in DANGEROUS_MAGIC_BYTES.items():
        if content.startswith(magic):
            return True, f"File appears to be {file_type}"
    return False, ""


def matches_signature(content: bytes, extension: str) -> bool:
    _, prefixes = ALLOWED_SIGNATURES[extension]
    if not any(content.startswith(prefix) for prefix in prefixes):
        return False
    if extension == "webp":
        return content[8:12] == b"WEBP"
    return True


def validate_upload(
    filename: Optional[str],
    content: bytes,
    allowed_extensions: Iterable[str],
    max_size: int,
) -> Tuple[bool, str, str]:
    """
    Full validation for an uploaded file.

    Checks:
    1. Extension is in `allowed_extensions`
    2. Size is within `max_size` and the file is not empty
    3. Not a dangerous file type (magic bytes)
    4. Content matches the extension's signature

    Returns:
        Tuple of (is_valid, error_message, mime_type)
    """
    allowed = set(allowed_extensions)
    extension = file_extension(filename)

    if extension not in allowed or extension not in ALLOWED_SIGNATURES:
        return False, f"File type not allowed. Allowed types: {', '.join(sorted(allowed))}", ""

    if not content:
        return False, "File is empty", ""

    if len(content) > max_size:
        return False, f"File too large. Maximum size is {max_size // (1024 * 1024)}MB", ""

    is_dangerous, reason = detect_dangerous_content(content)
    if is_dangerous:
        logger.warning("Rejected dangerous file upload", reason=reason, filename=filename)
        return False, reason, ""

    if not matches_signature(content, extension):
        logger.warning("Rejected mismatched file upload", extension=extension, filename=filename)
        return False, "File content does not match its extension", ""

    return True, "", ALLOWED_SIGNATURES[extension][0]
