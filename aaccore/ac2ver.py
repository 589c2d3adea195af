"""Extract the package version from the AC_INIT macro of a configure.ac file."""

from __future__ import annotations

import re
import sys
from collections.abc import Iterable

_KEEP = "._-"


def clean_string(text: str) -> str:
    """Keep only ASCII letters, digits and the characters ``._-`` of ``text``."""
    return "".join(
        ch for ch in text if (ch.isascii() and ch.isalnum()) or ch in _KEEP
    )


def _pattern(lib_name: str) -> re.Pattern[str]:
    parts = []
    for ch in f"AC_INIT ( {lib_name} , ":
        parts.append(r"\s*" if ch.isspace() else re.escape(ch))
    return re.compile("".join(parts) + r"\s*(\S+)")


def parse_version(lines: Iterable[str], lib_name: str) -> str | None:
    """Return the cleaned version given to ``AC_INIT`` for ``lib_name``, or None."""
    pattern = _pattern(lib_name)
    for line in lines:
        match = pattern.match(line.lstrip())
        if match:
            version = clean_string(match.group(1))
            if version:
                return version
    return None


def main(argv: list[str] | None = None) -> int:
    """Print a ``#define PACKAGE_VERSION`` line for the given library and file."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 2 or not args[0] or not args[1]:
        print("AC2VER\n", file=sys.stderr)
        print("Usage: ac2ver <lib_name> <path/to/configure.ac>\n", file=sys.stderr)
        return 1

    lib_name, file_name = args
    try:
        with open(file_name, encoding="utf-8", errors="replace") as handle:
            version = parse_version(handle, lib_name)
    except OSError:
        print(f"Error: Failed to open input file!\n{file_name}\n", file=sys.stderr)
        return 1

    if version is None:
        print("Error: Version string could not be found!\n", file=sys.stderr)
        return 1
    print(f'#define PACKAGE_VERSION "{version}"')
    return 0


if __name__ == "__main__":
    sys.exit(main())