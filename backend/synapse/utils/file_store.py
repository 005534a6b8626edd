"""Local file store for uploads and attachment text extraction.

Uploaded files are written to ``settings.upload_dir`` as
``<ms-timestamp>-<sanitized name>`` and addressed by the URL
``<upload_url_prefix>/<file>``. Chat attachments are read back through the same
convention and merged into the message sent to the assistant.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from pathlib import Path

import openpyxl
import structlog

from synapse.config import settings
from synapse.schemas.chat import AttachedFile

logger = structlog.get_logger()

TEXT_EXTENSIONS = frozenset({
    "txt", "md", "json", "csv", "log", "js", "ts", "html", "css", "xml", "yaml", "yml",
})
SPREADSHEET_EXTENSIONS = frozenset({"xlsx", "xlsm"})

_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9.-]")


class AttachmentNotFoundError(FileNotFoundError):
    """The attachment URL does not resolve to a stored file."""


@dataclass
class StoredFile:
    name: str        # original filename
    filename: str    # name on disk
    path: Path
    url: str


def upload_root() -> Path:
    return Path(settings.upload_dir).resolve()


def sanitize_filename(name: str) -> str:
    return _UNSAFE_CHARS_RE.sub("_", name)


def save_upload(content: bytes, original_name: str) -> StoredFile:
    """Write uploaded bytes to the store and return where they landed."""
    root = upload_root()
    root.mkdir(parents=True, exist_ok=True)

    filename = f"{int(time.time() * 1000)}-{sanitize_filename(original_name)}"
    path = root / filename
    path.write_bytes(content)

    url = f"{settings.upload_url_prefix.rstrip('/')}/{filename}"
    logger.info("upload_saved", name=original_name, path=str(path), size=len(content))
    return StoredFile(name=original_name, filename=filename, path=path, url=url)


def resolve_upload_path(url: str) -> Path:
    """Map a store URL back to a path inside the upload directory.

    Raises:
        AttachmentNotFoundError: the URL is outside the store or the file is missing.
    """
    prefix = settings.upload_url_prefix.rstrip("/") + "/"
    relative = url[len(prefix):] if url.startswith(prefix) else url.lstrip("/")

    root = upload_root()
    path = (root / relative).resolve()
    if root not in path.parents or not path.is_file():
        raise AttachmentNotFoundError(url)
    return path


def file_extension(name: str) -> str:
    return name.rsplit(".", 1)[-1].lower() if "." in name else ""


def _decode(content: bytes) -> str:
    for encoding in ("utf-8-sig", "utf-8"):
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    return content.decode("latin-1")


def _spreadsheet_text(path: Path) -> str:
    wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        lines = []
        for ws in wb.worksheets:
            lines.append(f"# Sheet: {ws.title}")
            for row in ws.iter_rows(values_only=True):
                if any(cell is not None for cell in row):
                    lines.append(",".join("" if cell is None else str(cell) for cell in row))
        return "\n".join(lines)
    finally:
        wb.close()


def read_attachment(name: str, url: str, mime_type: str | None = None) -> str:
    """Return the text of an attachment, or a placeholder when it is not text."""
    path = resolve_upload_path(url)
    ext = file_extension(name)

    if ext == "pdf":
        return (
            f"[PDF file attached: {name} - Content cannot be extracted automatically. "
            "Please describe the content or paste relevant text.]"
        )
    if ext in TEXT_EXTENSIONS:
        return _decode(path.read_bytes())
    if ext in SPREADSHEET_EXTENSIONS:
        return _spreadsheet_text(path)
    return (
        f"[File attached: {name} ({mime_type or 'unknown type'}) - Content cannot be "
        "extracted automatically. Please describe the content or paste relevant text.]"
    )


def enhance_message(message: str, attachments: list[AttachedFile]) -> str:
    """Append each attachment as a delimited block; failures become notes."""
    enhanced = message
    for attachment in attachments:
        try:
            content = read_attachment(attachment.name, attachment.url, attachment.mime_type)
        except AttachmentNotFoundError:
            logger.warning("attachment_not_found", name=attachment.name, url=attachment.url)
            enhanced += (
                f"\n\n[Note: File {attachment.name} was not found at the expected location. "
                "Please try uploading again.]"
            )
            continue
        except Exception as e:
            logger.warning("attachment_read_error", name=attachment.name, error=str(e))
            enhanced += f"\n\n[Note: Could not read attached file: {attachment.name} - {e}]"
            continue

        enhanced += f"\n\n--- Attached File: {attachment.name} ---\n{content}\n--- End of File ---"
    return enhanced
