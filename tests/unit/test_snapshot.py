"""Unit tests for hook_wrapper.core.snapshot.

Tests cover:
1. EnvironmentSnapshot - case rules per platform, repr hides values
2. POSIX decoding - bash `export -p`, POSIX-mode `export`, multi-line values
3. Windows decoding - `SET` output
4. Encoding - native formats, round trips, unrepresentable input
5. read_snapshot_file - missing, empty and non-UTF-8 dumps
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from hook_wrapper.core.errors import SnapshotReadError
from hook_wrapper.core.platform import Platform
from hook_wrapper.core.snapshot import (
    EnvironmentSnapshot,
    decode_snapshot,
    encode_snapshot,
    read_snapshot_file,
)

# =============================================================================
# EnvironmentSnapshot
# =============================================================================


@pytest.mark.unit
class TestEnvironmentSnapshot:
    """Test the snapshot mapping."""

    def test_posix_names_are_case_sensitive(self) -> None:
        snapshot = EnvironmentSnapshot.for_platform(Platform.POSIX, {"Path": "a", "PATH": "b"})
        assert len(snapshot) == 2
        assert snapshot["Path"] == "a"
        assert snapshot["PATH"] == "b"
        assert "path" not in snapshot

    def test_windows_names_are_case_insensitive(self) -> None:
        snapshot = EnvironmentSnapshot.for_platform(Platform.WINDOWS)
        snapshot["Path"] = "C:\\Windows"
        snapshot["PATH"] = "C:\\bin"

        assert len(snapshot) == 1
        assert snapshot["path"] == "C:\\bin"
        assert "pAtH" in snapshot
        # First spelling is kept
        assert list(snapshot) == ["Path"]

    def test_delete(self) -> None:
        snapshot = EnvironmentSnapshot.for_platform(Platform.WINDOWS, {"Temp": "x"})
        del snapshot["TEMP"]
        assert "Temp" not in snapshot
        assert len(snapshot) == 0

    def test_equality_with_dict(self) -> None:
        snapshot = EnvironmentSnapshot({"A": "1", "B": "2"})
        assert snapshot == {"A": "1", "B": "2"}
        assert snapshot.to_dict() == {"A": "1", "B": "2"}

    def test_repr_hides_values(self) -> None:
        snapshot = EnvironmentSnapshot({"SECRET_TOKEN": "hunter2"})
        assert "hunter2" not in repr(snapshot)
        assert "1 variables" in repr(snapshot)


# =============================================================================
# POSIX decoding
# =============================================================================


@pytest.mark.unit
class TestDecodePosix:
    """Test decoding of `export -p` output."""

    def test_bash_declarations(self) -> None:
        text = 'declare -x HOME="/root"\ndeclare -x PATH="/usr/bin:/bin"\n'
        snapshot = decode_snapshot(text, Platform.POSIX)
        assert snapshot == {"HOME": "/root", "PATH": "/usr/bin:/bin"}

    def test_empty_text(self) -> None:
        assert len(decode_snapshot("", Platform.POSIX)) == 0

    def test_multi_line_value(self) -> None:
        text = 'declare -x CERT="-----BEGIN-----\nabc\n-----END-----"\ndeclare -x NEXT="1"\n'
        snapshot = decode_snapshot(text, Platform.POSIX)
        assert snapshot["CERT"] == "-----BEGIN-----\nabc\n-----END-----"
        assert snapshot["NEXT"] == "1"

    def test_declaration_inside_multi_line_value(self) -> None:
        text = (
            'declare -x A="first\n'
            'declare -x B=\\"inner\\"\n'
            'end"\n'
            'declare -x C="c"\n'
        )
        snapshot = decode_snapshot(text, Platform.POSIX)
        assert snapshot["A"] == 'first\ndeclare -x B="inner"\nend'
        assert "B" not in snapshot
        assert snapshot["C"] == "c"

    def test_double_quote_escapes(self) -> None:
        text = r'declare -x Q="say \"hi\" \$HOME \`cmd\` back\\slash"'
        snapshot = decode_snapshot(text, Platform.POSIX)
        assert snapshot["Q"] == 'say "hi" $HOME `cmd` back\\slash'

    def test_other_backslashes_are_literal(self) -> None:
        text = r'declare -x WIN="C:\temp\new"'
        snapshot = decode_snapshot(text, Platform.POSIX)
        assert snapshot["WIN"] == "C:\\temp\\new"

    def test_exported_without_value(self) -> None:
        snapshot = decode_snapshot("declare -x OLDPWD\n", Platform.POSIX)
        assert snapshot["OLDPWD"] == ""

    def test_declare_with_extra_attributes(self) -> None:
        text = 'declare -rx READONLY="r"\ndeclare -ix COUNT="3"\n'
        snapshot = decode_snapshot(text, Platform.POSIX)
        assert snapshot == {"READONLY": "r", "COUNT": "3"}

    def test_posix_mode_export_statements(self) -> None:
        text = "export PLAIN=value\nexport SPACED='a b'\nexport DQ=\"x y\"\n"
        snapshot = decode_snapshot(text, Platform.POSIX)
        assert snapshot == {"PLAIN": "value", "SPACED": "a b", "DQ": "x y"}

    def test_concatenated_single_quotes(self) -> None:
        # dash prints embedded quotes as 'it'\''s'
        snapshot = decode_snapshot("export A='it'\\''s'\n", Platform.POSIX)
        assert snapshot["A"] == "it's"

    def test_ansi_c_quoting(self) -> None:
        text = "declare -x TAB=$'a\\tb'\ndeclare -x HEX=$'\\x41\\101'\n"
        snapshot = decode_snapshot(text, Platform.POSIX)
        assert snapshot["TAB"] == "a\tb"
        assert snapshot["HEX"] == "AA"

    def test_ansi_c_byte_escapes_are_utf8(self) -> None:
        # bash under LANG=C prints non-ASCII bytes as escapes
        text = "declare -x D=$'\\303\\251'\ndeclare -x G=$'caf\\xc3\\xa9 ok'\n"
        snapshot = decode_snapshot(text, Platform.POSIX)
        assert snapshot["D"] == "é"
        assert snapshot["G"] == "café ok"

    def test_ansi_c_invalid_bytes_round_trip(self) -> None:
        snapshot = decode_snapshot("declare -x RAW=$'\\xfe'\n", Platform.POSIX)
        assert os.fsencode(snapshot["RAW"]) == b"\xfe"

    def test_ansi_c_bytes_mixed_with_escapes(self) -> None:
        text = "declare -x M=$'\\303\\251\\n\\303\\251'\n"
        assert decode_snapshot(text, Platform.POSIX)["M"] == "é\né"

    def test_last_declaration_wins(self) -> None:
        text = 'declare -x A="1"\ndeclare -x A="2"\n'
        assert decode_snapshot(text, Platform.POSIX)["A"] == "2"

    def test_malformed_lines_are_skipped(self) -> None:
        text = (
            "garbage output from a hook\n"
            'declare -x OK="1"\n'
            "export bad name\n"
            "export UNQUOTED=has space\n"
            "declare -x 9INVALID=\"x\"\n"
        )
        snapshot = decode_snapshot(text, Platform.POSIX)
        assert snapshot == {"OK": "1"}

    def test_unterminated_value_is_dropped(self) -> None:
        text = 'declare -x KEEP="yes"\ndeclare -x OPEN="never\nclosed\n'
        snapshot = decode_snapshot(text, Platform.POSIX)
        assert snapshot == {"KEEP": "yes"}

    def test_crlf_line_endings(self) -> None:
        text = 'declare -x A="1"\r\ndeclare -x B="2"\r\n'
        assert decode_snapshot(text, Platform.POSIX) == {"A": "1", "B": "2"}

    def test_whitespace_preserved(self) -> None:
        text = 'declare -x PAD="  padded  "\n'
        assert decode_snapshot(text, Platform.POSIX)["PAD"] == "  padded  "


# =============================================================================
# Windows decoding
# =============================================================================


@pytest.mark.unit
class TestDecodeWindows:
    """Test decoding of `SET` output."""

    def test_name_value_lines(self) -> None:
        text = "ALLUSERSPROFILE=C:\\ProgramData\r\nPath=C:\\Windows;C:\\bin\r\n"
        snapshot = decode_snapshot(text, Platform.WINDOWS)
        assert snapshot["ALLUSERSPROFILE"] == "C:\\ProgramData"
        assert snapshot["PATH"] == "C:\\Windows;C:\\bin"
        assert snapshot.case_sensitive is False

    def test_value_may_contain_equals(self) -> None:
        snapshot = decode_snapshot("OPTS=a=b=c\n", Platform.WINDOWS)
        assert snapshot["OPTS"] == "a=b=c"

    def test_drive_variables(self) -> None:
        snapshot = decode_snapshot("=C:=C:\\work\n", Platform.WINDOWS)
        assert snapshot["=C:"] == "C:\\work"

    def test_lines_without_separator_are_skipped(self) -> None:
        snapshot = decode_snapshot("Environment variable X not defined\nA=1\n", Platform.WINDOWS)
        assert snapshot == {"A": "1"}

    def test_no_quoting(self) -> None:
        snapshot = decode_snapshot('MSG="quoted"\n', Platform.WINDOWS)
        assert snapshot["MSG"] == '"quoted"'


# =============================================================================
# Encoding
# =============================================================================


@pytest.mark.unit
class TestEncode:
    """Test encoding into native dump formats."""

    def test_posix_format(self) -> None:
        text = encode_snapshot({"B": "2", "A": 'say "$hi"'}, Platform.POSIX)
        assert text == 'declare -x A="say \\"\\$hi\\""\ndeclare -x B="2"\n'

    def test_windows_format(self) -> None:
        text = encode_snapshot({"Path": "C:\\bin", "A": "1"}, Platform.WINDOWS)
        assert text == "A=1\nPath=C:\\bin\n"

    def test_empty_snapshot(self) -> None:
        assert encode_snapshot({}, Platform.POSIX) == ""

    def test_posix_round_trip(self) -> None:
        original = {
            "PATH": "/usr/bin:/extra",
            "QUOTES": 'a "double" and \'single\'',
            "DOLLAR": "$HOME and ${USER}",
            "TICKS": "`uname`",
            "BACKSLASH": "C:\\path\\",
            "MULTI": "line1\nline2\n",
            "EMPTY": "",
            "UNICODE": "caf\u00e9 \u2603",
        }
        decoded = decode_snapshot(encode_snapshot(original, Platform.POSIX), Platform.POSIX)
        assert decoded == original

    def test_windows_round_trip(self) -> None:
        original = {"Path": "C:\\Windows;C:\\bin", "OPTS": "a=b", "EMPTY": ""}
        decoded = decode_snapshot(encode_snapshot(original, Platform.WINDOWS), Platform.WINDOWS)
        assert decoded == original

    def test_posix_rejects_invalid_name(self) -> None:
        with pytest.raises(ValueError):
            encode_snapshot({"NOT VALID": "x"}, Platform.POSIX)

    def test_windows_rejects_newlines(self) -> None:
        with pytest.raises(ValueError):
            encode_snapshot({"A": "line1\nline2"}, Platform.WINDOWS)


# =============================================================================
# read_snapshot_file
# =============================================================================


@pytest.mark.unit
class TestReadSnapshotFile:
    """Test reading dump files from disk."""

    def test_reads_and_decodes(self, tmp_path: Path) -> None:
        dump = tmp_path / "env-before"
        dump.write_text('declare -x A="1"\n', encoding="utf-8")
        assert read_snapshot_file(dump, Platform.POSIX) == {"A": "1"}

    def test_empty_file_is_empty_snapshot(self, tmp_path: Path) -> None:
        dump = tmp_path / "env-after"
        dump.write_bytes(b"")
        assert len(read_snapshot_file(dump, Platform.POSIX)) == 0

    def test_invalid_utf8_round_trips(self, tmp_path: Path) -> None:
        dump = tmp_path / "env-after"
        dump.write_bytes(b'declare -x A="\xff"\ndeclare -x B="\xfe"\n')
        snapshot = read_snapshot_file(dump, Platform.POSIX)

        assert os.fsencode(snapshot["A"]) == b"\xff"
        assert os.fsencode(snapshot["B"]) == b"\xfe"
        assert snapshot["A"] != snapshot["B"]

    def test_non_ascii_value(self, tmp_path: Path) -> None:
        dump = tmp_path / "env-after"
        dump.write_bytes('declare -x GREETING="caf\u00e9"\n'.encode())
        assert read_snapshot_file(dump, Platform.POSIX)["GREETING"] == "caf\u00e9"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        missing = tmp_path / "private-dir" / "env-after"
        with pytest.raises(SnapshotReadError) as exc_info:
            read_snapshot_file(missing, Platform.POSIX)

        assert exc_info.value.path == str(missing)
        assert "env-after" in str(exc_info.value)
        assert "private-dir" not in str(exc_info.value)
