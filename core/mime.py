# core/mime.py
"""
Content-type detection for files about to be uploaded.

Sniffs the file contents with libmagic first and falls back to the file
extension when libmagic cannot tell.
"""
import mimetypes
import magic

from core.config import logger as core_logger

logger = core_logger.getChild("Mime")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def detect_mime_type(path: str) -> str:
    """Returns the MIME type of the file at `path`, never raising for a readable file."""
    try:
        detected = magic.from_file(path, mime=True)
        # libmagic answers octet-stream / empty when it cannot classify the bytes
        if detected and detected not in (DEFAULT_CONTENT_TYPE, "application/x-empty", "inode/x-empty"):
            return detected
    except Exception as e:
        logger.debug(f"libmagic could not classify '{path}': {e}")

    guessed, _ = mimetypes.guess_type(path)
    if guessed:
        return guessed
    return DEFAULT_CONTENT_TYPE
