"""Member and element classification over normalized name sets."""

from collections.abc import Iterable

DEFAULT_MARKUP_EXTENSIONS: frozenset[str] = frozenset({".xhtml", ".html", ".htm"})
DEFAULT_SKIP_TAGS: frozenset[str] = frozenset({"code", "pre", "script", "style", "kbd", "samp"})

# Elements that may not contain <wbr/>; text there gets zero-width spaces in WBR mode
TEXT_ONLY_ELEMENTS: frozenset[str] = frozenset({"head", "title"})


def normalize_tag_names(names: Iterable[str]) -> frozenset[str]:
    """Lower-case and trim element names, dropping empty entries."""
    return frozenset(name.strip().lower() for name in names if name.strip())


def normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    """Lower-case extensions and make sure each starts with a dot."""
    normalized: set[str] = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return frozenset(normalized)


def parse_tag_list(value: str) -> frozenset[str]:
    """Parse a comma-separated list of element names."""
    return normalize_tag_names(value.split(","))


def is_markup_member(name: str, markup_extensions: frozenset[str]) -> bool:
    """Check if an archive member holds markup, by its file extension."""
    lower = name.lower()
    return any(lower.endswith(ext) for ext in markup_extensions)


def is_skipped_element(tag_name: str | None, skip_tags: frozenset[str]) -> bool:
    """Check if text directly inside ``tag_name`` must be left untouched.

    The comparison is case-insensitive and ignores a namespace prefix.
    """
    if not tag_name:
        return False
    local_name = tag_name.rsplit(":", 1)[-1].lower()
    return local_name in skip_tags or tag_name.lower() in skip_tags
