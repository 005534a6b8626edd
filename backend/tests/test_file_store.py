"""Upload store and attachment reading tests."""

import openpyxl
import pytest

from synapse.schemas.chat import AttachedFile
from synapse.utils.file_store import (
    AttachmentNotFoundError,
    enhance_message,
    read_attachment,
    resolve_upload_path,
    sanitize_filename,
    save_upload,
)


def test_sanitize_filename():
    assert sanitize_filename("my report (final).csv") == "my_report__final_.csv"


def test_save_upload_writes_under_upload_dir(upload_dir):
    stored = save_upload(b"hello", "notes 1.txt")
    assert stored.path.parent == upload_dir.resolve()
    assert stored.filename.endswith("-notes_1.txt")
    assert stored.url == f"/uploads/{stored.filename}"
    assert stored.path.read_bytes() == b"hello"


def test_resolve_rejects_missing_and_traversal(upload_dir):
    with pytest.raises(AttachmentNotFoundError):
        resolve_upload_path("/uploads/nope.txt")
    with pytest.raises(AttachmentNotFoundError):
        resolve_upload_path("/uploads/../secret.txt")


def test_read_text_attachment(upload_dir):
    stored = save_upload("col1,col2\n1,2\n".encode(), "data.csv")
    assert read_attachment("data.csv", stored.url) == "col1,col2\n1,2\n"


def test_read_spreadsheet_attachment(upload_dir):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Budget"
    ws.append(["item", "cost"])
    ws.append(["rent", 1200])
    path = upload_dir / "budget.xlsx"
    wb.save(path)

    text = read_attachment("budget.xlsx", "/uploads/budget.xlsx")
    assert text == "# Sheet: Budget\nitem,cost\nrent,1200"


def test_pdf_and_binary_placeholders(upload_dir):
    pdf = save_upload(b"%PDF-1.4", "paper.pdf")
    assert read_attachment("paper.pdf", pdf.url).startswith("[PDF file attached: paper.pdf")

    image = save_upload(b"\x89PNG", "diagram.png")
    placeholder = read_attachment("diagram.png", image.url, "image/png")
    assert placeholder.startswith("[File attached: diagram.png (image/png)")


def test_enhance_message_appends_blocks_and_notes(upload_dir):
    stored = save_upload(b"line one", "log.txt")
    enhanced = enhance_message(
        "Please look at this",
        [
            AttachedFile(name="log.txt", url=stored.url, mime_type="text/plain"),
            AttachedFile(name="gone.txt", url="/uploads/gone.txt", mime_type="text/plain"),
        ],
    )
    assert enhanced == (
        "Please look at this"
        "\n\n--- Attached File: log.txt ---\nline one\n--- End of File ---"
        "\n\n[Note: File gone.txt was not found at the expected location. Please try uploading again.]"
    )
