"""Small helpers shared by the converters and archive readers."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


def get_padding_size(count: int, alignment_size: int) -> int:
    """Return how many bytes must follow ``count`` bytes to reach ``alignment_size``."""
    if alignment_size <= 0:
        raise ValueError("alignment_size must be positive")
    return -count % alignment_size


def find_files(file_names: Iterable[str], *args: str) -> list[Path]:
    """Resolve command-line file names against the current directory.

    ``"*"`` selects every regular file ending in one of the default
    extensions given in ``args``; ``"*.ext"`` selects files ending in
    ``".ext"``; any other name is taken as a file in the current directory
    and kept if it exists. Named files come first, followed by the files
    matched by extension.
    """
    cwd = Path.cwd()
    files: list[Path] = []
    extensions: set[str] = set()

    for file_name in file_names:
        if file_name == "*":
            extensions.update(args)
            continue

        if file_name.startswith("*."):
            extensions.add(file_name[1:])
            continue

        path = cwd / file_name
        if path.exists():
            files.append(path)

    if extensions:
        ordered_extensions = sorted(extensions)
        for item in sorted(cwd.iterdir()):
            for extension in ordered_extensions:
                if item.name.endswith(extension) and item.is_file():
                    files.append(item)

    return files