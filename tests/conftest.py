"""Shared fixtures: a small Thai dictionary and in-memory EPUB archives."""

import io
import zipfile
from collections.abc import Callable

import pytest

from src.wordbreak.dictionary import DictionaryIndex

WORDS = "ภาษา\nไทย\nสวัสดี\nครับ\n"

CHAPTER_XHTML = (
    '<?xml version="1.0" encoding="utf-8"?>\n'
    '<html xmlns="http://www.w3.org/1999/xhtml">'
    "<head><title>Chapter</title></head>"
    "<body><p>สวัสดีครับ</p><pre>ภาษาไทย</pre><!-- ภาษาไทย --></body>"
    "</html>"
)

# Unclosed <br> makes this HTML rather than XML
CHAPTER_HTML = "<html><body><p>ภาษาไทย<br></p></body></html>"

# (name, payload, compress_type); a payload of None marks a directory entry
ArchiveEntry = tuple[str, bytes | None, int]


def _build_archive(entries: list[ArchiveEntry]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, payload, compress_type in entries:
            info = zipfile.ZipInfo(name, date_time=(2020, 5, 17, 10, 30, 0))
            info.compress_type = compress_type
            if payload is None:
                info.external_attr = 0x10
                payload = b""
            zf.writestr(info, payload)
    return buffer.getvalue()


@pytest.fixture
def word_list() -> str:
    return WORDS


@pytest.fixture
def index() -> DictionaryIndex:
    return DictionaryIndex.from_word_list(WORDS)


@pytest.fixture
def build_archive() -> Callable[[list[ArchiveEntry]], bytes]:
    return _build_archive


@pytest.fixture
def epub_bytes() -> bytes:
    """A small EPUB with mimetype deliberately not in first position."""
    return _build_archive(
        [
            ("META-INF/container.xml", b"<container/>", zipfile.ZIP_DEFLATED),
            ("mimetype", b"application/epub+zip", zipfile.ZIP_DEFLATED),
            ("OEBPS/", None, zipfile.ZIP_STORED),
            ("OEBPS/ch1.xhtml", CHAPTER_XHTML.encode("utf-8"), zipfile.ZIP_DEFLATED),
            ("OEBPS/ch2.html", CHAPTER_HTML.encode("utf-8"), zipfile.ZIP_DEFLATED),
            ("OEBPS/broken.xhtml", b"<p>\xff\xfe</p>", zipfile.ZIP_DEFLATED),
            ("OEBPS/style.css", "p { color: red; } /* ไทย */".encode("utf-8"), zipfile.ZIP_DEFLATED),
        ]
    )
