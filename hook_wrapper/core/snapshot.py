"""Environment snapshot decoding and encoding.

A snapshot is the environment of a process at one instant, as written to a
dump file by the wrapper script. POSIX shells dump with ``export -p``, which
produces one ``declare -x NAME="value"`` statement per variable (or
``export NAME=...`` in POSIX mode). Quoted values may span several lines, so
the decoder keeps track of quote state across lines. Windows dumps with
``SET``, which produces plain ``NAME=value`` lines.

Decoding is pure text parsing: no shell is ever invoked, and lines that
cannot be parsed are skipped rather than failing the whole decode.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterator, Mapping, MutableMapping
from pathlib import Path

from hook_wrapper.core.errors import SnapshotReadError
from hook_wrapper.core.platform import Platform, current_platform

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

_POSIX_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# `declare -x`, `declare -rx`, `declare -ix` ... or plain `export`
_POSIX_DECLARATION_RE = re.compile(
    r"^(?:declare\s+-[A-Za-z]*x[A-Za-z]*|export)\s+([A-Za-z_][A-Za-z0-9_]*)(?:=(.*))?$",
    re.DOTALL,
)

# Characters a backslash escapes inside double quotes
_DOUBLE_QUOTE_ESCAPABLE = frozenset('$`"\\\n')

_ANSI_C_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "a": "\a",
    "b": "\b",
    "e": "\x1b",
    "E": "\x1b",
    "f": "\f",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "?": "?",
}

_HEX_DIGITS_RE = re.compile(r"[0-9a-fA-F]{1,2}")
_OCTAL_DIGITS_RE = re.compile(r"[0-7]{1,3}")


# =============================================================================
# Data Model
# =============================================================================


class EnvironmentSnapshot(MutableMapping[str, str]):
    """Mapping of environment variable name to value.

    Names are case-sensitive on POSIX and case-insensitive on Windows. When
    names are case-insensitive the first spelling seen is kept, and later
    assignments only replace the value.
    """

    def __init__(
        self,
        values: Mapping[str, str] | None = None,
        *,
        case_sensitive: bool = True,
    ) -> None:
        self.case_sensitive = case_sensitive
        self._entries: dict[str, tuple[str, str]] = {}
        if values:
            for name, value in values.items():
                self[name] = value

    @classmethod
    def for_platform(
        cls,
        platform: Platform,
        values: Mapping[str, str] | None = None,
    ) -> EnvironmentSnapshot:
        """Create a snapshot using the platform's name case rules."""
        return cls(values, case_sensitive=platform is Platform.POSIX)

    def _key(self, name: str) -> str:
        return name if self.case_sensitive else name.upper()

    def __getitem__(self, name: str) -> str:
        return self._entries[self._key(name)][1]

    def __setitem__(self, name: str, value: str) -> None:
        key = self._key(name)
        existing = self._entries.get(key)
        self._entries[key] = (existing[0] if existing else name, value)

    def __delitem__(self, name: str) -> None:
        del self._entries[self._key(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._entries

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        # Values omitted
        return f"EnvironmentSnapshot({len(self)} variables, case_sensitive={self.case_sensitive})"

    def to_dict(self) -> dict[str, str]:
        """Convert to a plain dictionary."""
        return dict(self._entries.values())


# =============================================================================
# Shell word unquoting
# =============================================================================


def _decode_ansi_c_escape(text: str, start: int) -> tuple[str | int, int]:
    """Decode one escape of a ``$'...'`` string.

    Octal and hex escapes stand for raw bytes, not code points: bash
    writes each byte of a multi-byte character as its own escape.

    Args:
        text: Full text being scanned.
        start: Index of the character after the backslash.

    Returns:
        Tuple of (decoded text or byte value, number of characters
        consumed after the backslash).
    """
    ch = text[start]
    if ch in _ANSI_C_ESCAPES:
        return _ANSI_C_ESCAPES[ch], 1
    if ch == "x":
        match = _HEX_DIGITS_RE.match(text, start + 1)
        if match:
            return int(match.group(), 16), 1 + len(match.group())
    match = _OCTAL_DIGITS_RE.match(text, start)
    if match:
        return int(match.group(), 8) & 0xFF, len(match.group())
    return "\\" + ch, 1


def _unquote_shell_word(word: str) -> tuple[str, bool]:
    """Unquote a single shell word as printed by ``export -p``.

    Handles double quotes, single quotes, ``$'...'`` strings and
    backslash escapes, in any concatenation.

    Args:
        word: Raw word text, possibly spanning several lines.

    Returns:
        Tuple of (value, complete). ``complete`` is False while a quote is
        still open, meaning the word continues on the next line.

    Raises:
        ValueError: If the word contains unquoted whitespace.
    """
    out: list[str] = []
    # Pending byte escapes of a $'...' string
    raw = bytearray()
    quote: str | None = None
    i = 0
    n = len(word)

    while i < n:
        ch = word[i]

        if quote is None:
            if ch == "\\":
                if i + 1 >= n:
                    return "", False
                if word[i + 1] != "\n":
                    out.append(word[i + 1])
                i += 2
                continue
            if ch == "$" and word.startswith("$'", i):
                quote = "$'"
                i += 2
                continue
            if ch in ("'", '"'):
                quote = ch
            elif ch.isspace():
                raise ValueError("unquoted whitespace in value")
            else:
                out.append(ch)
            i += 1

        elif quote == "'":
            if ch == "'":
                quote = None
            else:
                out.append(ch)
            i += 1

        elif quote == '"':
            if ch == "\\" and i + 1 < n and word[i + 1] in _DOUBLE_QUOTE_ESCAPABLE:
                if word[i + 1] != "\n":
                    out.append(word[i + 1])
                i += 2
                continue
            if ch == '"':
                quote = None
            else:
                out.append(ch)
            i += 1

        else:
            if ch == "\\" and i + 1 < n:
                decoded, consumed = _decode_ansi_c_escape(word, i + 1)
                i += 1 + consumed
                if isinstance(decoded, int):
                    raw.append(decoded)
                    continue
                ch = decoded
            else:
                i += 1
                if ch == "'":
                    quote = None
                    ch = ""
            if raw:
                # Decoded as os.environ decodes the process environment
                out.append(os.fsdecode(bytes(raw)))
                raw.clear()
            out.append(ch)

    if raw:
        out.append(os.fsdecode(bytes(raw)))
    return "".join(out), quote is None


def _parse_posix_declaration(statement: str) -> tuple[str, str] | None:
    """Parse one (possibly multi-line) export statement.

    Returns:
        Tuple of (name, value), or None if a quote is still open.

    Raises:
        ValueError: If the statement is malformed.
    """
    match = _POSIX_DECLARATION_RE.match(statement)
    if not match:
        raise ValueError("not an export statement")

    name, raw_value = match.group(1), match.group(2)
    if raw_value is None:
        # Exported but never assigned
        return name, ""

    value, complete = _unquote_shell_word(raw_value)
    if not complete:
        return None
    return name, value


# =============================================================================
# Decoding
# =============================================================================


def _decode_posix(text: str) -> EnvironmentSnapshot:
    snapshot = EnvironmentSnapshot.for_platform(Platform.POSIX)
    pending: list[str] = []
    skipped = 0

    for line in text.split("\n"):
        if pending:
            pending.append(line)
        elif _POSIX_DECLARATION_RE.match(line):
            pending = [line]
        else:
            if line.strip():
                skipped += 1
            continue

        try:
            parsed = _parse_posix_declaration("\n".join(pending))
        except ValueError:
            skipped += 1
            pending = []
            continue

        if parsed is None:
            continue

        pending = []
        name, value = parsed
        snapshot[name] = value

    if pending:
        logger.debug(f"Dropped unterminated declaration spanning {len(pending)} line(s)")
    if skipped:
        logger.debug(f"Skipped {skipped} malformed snapshot line(s)")
    return snapshot


def _decode_windows(text: str) -> EnvironmentSnapshot:
    snapshot = EnvironmentSnapshot.for_platform(Platform.WINDOWS)
    skipped = 0

    for line in text.split("\n"):
        if not line:
            continue
        # Names such as "=C:" start with "=", so search after the first character
        separator = line.find("=", 1)
        if separator < 0:
            skipped += 1
            continue
        snapshot[line[:separator]] = line[separator + 1 :]

    if skipped:
        logger.debug(f"Skipped {skipped} malformed snapshot line(s)")
    return snapshot


def decode_snapshot(text: str, platform: Platform | None = None) -> EnvironmentSnapshot:
    """Decode an environment dump into a snapshot.

    Args:
        text: Raw dump text.
        platform: Dump dialect (defaults to the current platform).

    Returns:
        Decoded EnvironmentSnapshot. Malformed lines are skipped.
    """
    platform = platform or current_platform()
    text = text.replace("\r\n", "\n")
    if platform is Platform.WINDOWS:
        return _decode_windows(text)
    return _decode_posix(text)


def read_snapshot_file(path: str | Path, platform: Platform | None = None) -> EnvironmentSnapshot:
    """Read and decode an environment dump file.

    Args:
        path: Path to the dump file.
        platform: Dump dialect (defaults to the current platform).

    Returns:
        Decoded EnvironmentSnapshot (empty if the file is empty).

    Raises:
        SnapshotReadError: If the file cannot be opened or read.
    """
    try:
        with open(path, encoding="utf-8", errors="surrogateescape", newline="") as f:
            text = f.read()
    except OSError as e:
        raise SnapshotReadError(str(path), e.strerror or str(e)) from e

    return decode_snapshot(text, platform)


# =============================================================================
# Encoding
# =============================================================================


def _quote_posix_value(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$").replace("`", "\\`")
    )
    return f'"{escaped}"'


def encode_snapshot(snapshot: Mapping[str, str], platform: Platform | None = None) -> str:
    """Encode a snapshot in the platform's native dump format.

    Variables are written sorted by name, as ``export -p`` and ``SET`` do.

    Args:
        snapshot: Variables to encode.
        platform: Dump dialect (defaults to the current platform).

    Returns:
        Dump text ending in a newline (empty string for an empty snapshot).

    Raises:
        ValueError: If a name or value cannot be represented in the format.
    """
    platform = platform or current_platform()
    lines: list[str] = []

    for name in sorted(snapshot):
        value = snapshot[name]
        if platform is Platform.WINDOWS:
            if not name or "=" in name[1:] or "\n" in name or "\n" in value or "\r" in value:
                raise ValueError(f"Cannot encode variable {name!r} for Windows")
            lines.append(f"{name}={value}")
        else:
            if not _POSIX_NAME_RE.match(name):
                raise ValueError(f"Invalid POSIX variable name: {name!r}")
            lines.append(f"declare -x {name}={_quote_posix_value(value)}")

    if not lines:
        return ""
    return "\n".join(lines) + "\n"
