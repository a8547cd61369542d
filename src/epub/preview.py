"""Inspection output for rewritten markup members."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from src.epub.archive import ZipArchiveReader
from src.epub.classifier import DEFAULT_MARKUP_EXTENSIONS, is_markup_member
from src.epub.errors import MarkupParseError, MemberReadError
from src.epub.markup import decode_markup
from src.util.fs_util import FSUtil
from src.wordbreak.break_inserter import ZERO_WIDTH_SPACE

logger = logging.getLogger(__name__)

VISIBLE_MARKER = '<span class="zwsp-marker">-</span>'


def mark_breaks_visible(content: str, marker: str = VISIBLE_MARKER) -> str:
    """Replace every zero-width space with a visible marker."""
    return content.replace(ZERO_WIDTH_SPACE, marker)


def collect_original_markup(
    data: bytes,
    markup_extensions: frozenset[str] = DEFAULT_MARKUP_EXTENSIONS,
) -> dict[str, str]:
    """Read the untouched text of every markup member of an archive.

    Members that cannot be read or decoded are left out.

    Raises:
        ArchiveOpenError: If ``data`` is not a readable archive.
    """
    originals: dict[str, str] = {}
    with ZipArchiveReader(data) as reader:
        for member in reader.members:
            if member.is_directory or not is_markup_member(member.name, markup_extensions):
                continue
            try:
                originals[member.name] = decode_markup(member.read())
            except (MemberReadError, MarkupParseError) as exc:
                logger.warning("No original preview for %s: %s", member.name, exc)
    return originals


def preview_path(preview_dir: Path, member_name: str) -> Path:
    """Map a member name to a file below ``preview_dir``.

    Absolute paths and parent references in the member name are dropped.
    """
    parts = [part for part in PurePosixPath(member_name).parts if part not in ("/", "..", ".")]
    if not parts:
        raise ValueError(f"Member name has no usable path: {member_name!r}")
    return preview_dir.joinpath(*parts)


def write_previews(preview_dir: Path, contents: dict[str, str], *, show_markers: bool) -> list[Path]:
    """Write one preview file per member.

    Args:
        preview_dir: Output directory.
        contents: Member name -> markup text.
        show_markers: Replace zero-width spaces with visible markers.

    Returns:
        Paths written, in member order.
    """
    FSUtil.ensure_directory_exists(preview_dir)
    written: list[Path] = []
    for name, content in contents.items():
        path = preview_path(preview_dir, name)
        FSUtil.write_text_file(path, mark_breaks_visible(content) if show_markers else content, create_parents=True)
        written.append(path)
    logger.info("Wrote %d preview file(s) to %s", len(written), preview_dir)
    return written
