"""Prefix-tree dictionary index for longest-match lookups.

The trie is stored as an arena: node ``n`` is described by ``_children[n]``
(code point -> child node index) and ``_terminal[n]`` (a word ends here).
Node 0 is the root.
"""

import logging

logger = logging.getLogger(__name__)

_ROOT = 0


class DictionaryIndex:
    """Word list index answering "longest known word starting at i".

    Example:
        >>> index = DictionaryIndex.from_word_list("กา\\nกาน\\n")
        >>> index.longest_match_end("กานา", 0)
        2
    """

    def __init__(self) -> None:
        self._children: list[dict[str, int]] = [{}]
        self._terminal: list[bool] = [False]
        self._word_count = 0
        self.max_word_length = 0

    @classmethod
    def from_word_list(cls, text: str) -> "DictionaryIndex":
        """Build an index from newline-delimited words.

        Lines are trimmed; blank lines are ignored.

        Args:
            text: Word list contents.

        Returns:
            Populated DictionaryIndex.
        """
        index = cls()
        for line in text.splitlines():
            word = line.strip()
            if word:
                index.insert(word)
        logger.info("Dictionary index built: %d words, max length %d", len(index), index.max_word_length)
        return index

    def insert(self, word: str) -> None:
        """Add a word. Empty strings are ignored."""
        if not word:
            return

        node = _ROOT
        for ch in word:
            child = self._children[node].get(ch)
            if child is None:
                child = len(self._children)
                self._children.append({})
                self._terminal.append(False)
                self._children[node][ch] = child
            node = child

        if not self._terminal[node]:
            self._terminal[node] = True
            self._word_count += 1

        if len(word) > self.max_word_length:
            self.max_word_length = len(word)

    def longest_match_end(self, text: str, start: int) -> int | None:
        """Find the end of the longest dictionary word beginning at ``start``.

        At most ``max_word_length`` characters past ``start`` are examined.

        Args:
            text: Text to scan.
            start: Index of the first character of the candidate word.

        Returns:
            Inclusive index of the last character of the longest match,
            or None if no word starts at ``start``.
        """
        end: int | None = None
        node = _ROOT
        limit = min(len(text), start + self.max_word_length)

        pos = start
        while pos < limit:
            child = self._children[node].get(text[pos])
            if child is None:
                break
            node = child
            if self._terminal[node]:
                end = pos
            pos += 1

        return end

    def __len__(self) -> int:
        return self._word_count

    def __contains__(self, word: object) -> bool:
        if not isinstance(word, str) or not word:
            return False
        node = _ROOT
        for ch in word:
            child = self._children[node].get(ch)
            if child is None:
                return False
            node = child
        return self._terminal[node]
