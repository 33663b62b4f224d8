"""
Filename sanitization for export targets.

Only the base name is rewritten; the directory part of the path is kept
as given.
"""

import os
import re

DEFAULT_EXTENSIONS = "xls xlsx csv ods"

_UNSAFE_CHARACTERS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_EXTENSION_LIKE = re.compile(r"^[a-zA-Z]{2,5}\d?$")


def munge_filename(filename: str, extensions: str = DEFAULT_EXTENSIONS) -> str:
    """
    Neutralize a base filename.

    Unsafe characters become underscores, and every intermediate
    dot-separated part that looks like a file extension but is not in the
    allow-list gets an underscore appended, so "report.php.xls" becomes
    "report.php_.xls".

    Args:
        filename: Base filename, without directory.
        extensions: Space-separated list of allowed extensions.

    Returns:
        The sanitized filename.
    """
    allowed = {ext for ext in extensions.lower().split() if ext}
    filename = _UNSAFE_CHARACTERS.sub("_", filename)

    parts = filename.split(".")
    if len(parts) < 3:
        return filename

    munged = parts[0]
    for part in parts[1:-1]:
        munged += "." + part
        if part.lower() not in allowed and _EXTENSION_LIKE.match(part):
            munged += "_"

    return munged + "." + parts[-1]


def sanitize_filename(path: str, extensions: str = DEFAULT_EXTENSIONS) -> str:
    """
    Sanitize the filename portion of a path.

    Args:
        path: Target path.
        extensions: Space-separated list of allowed extensions.

    Returns:
        The path with its base filename sanitized.
    """
    directory, filename = os.path.split(path)
    return os.path.join(directory, munge_filename(filename, extensions))
