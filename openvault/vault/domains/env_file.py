"""Locating, parsing and updating .env credential files."""
import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

ENV_FILENAME = ".env"

_QUOTES = ('"', "'")
_NEEDS_QUOTING = re.compile(r"[\s#'\"]")


def find_env_file(start: Optional[Union[str, Path]] = None, filename: str = ENV_FILENAME) -> str:
    """
    Find the nearest credential file by walking up the directory tree.

    Args:
        start: Directory to start from (default: current working directory)
        filename: Name of the file to look for

    Returns:
        Absolute path of the nearest ``filename`` in ``start`` or one of its
        ancestors. When none exists, ``<start>/<filename>`` is returned so
        callers always get a path, even if nothing is there.
    """
    origin = Path(start).resolve() if start else Path(os.getcwd())
    current = origin

    while True:
        candidate = current / filename
        if candidate.is_file():
            logger.debug(f"Found credential file: {candidate}")
            return str(candidate)

        parent = current.parent
        if parent == current:
            # Reached filesystem root
            default = origin / filename
            logger.debug(f"No {filename} found above {origin}, defaulting to {default}")
            return str(default)
        current = parent


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def parse_env(text: str) -> Dict[str, str]:
    """
    Parse ``KEY=value`` lines into a dict.

    Blank lines, ``#`` comments and lines without ``=`` are skipped. One
    layer of matching quotes is stripped from values, without escape
    processing. Later duplicates overwrite earlier ones.
    """
    values: Dict[str, str] = {}

    for line in text.split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        key, sep, value = line.partition("=")
        if not sep:
            continue

        values[key.strip()] = _unquote(value.strip())

    return values


def load_env_file(path: Union[str, Path]) -> Dict[str, str]:
    """
    Read and parse a credential file.

    Returns:
        Parsed values, or an empty dict if the file is missing or unreadable
    """
    path = Path(path)
    if not path.is_file():
        logger.debug(f"Credential file not found: {path}")
        return {}

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Failed to read credential file {path}: {e}")
        return {}

    values = parse_env(text)
    logger.debug(f"Loaded {len(values)} credentials from {path}")
    return values


def format_env_line(key: str, value: str) -> str:
    """Render ``KEY=value``, quoting the value when it would not parse back verbatim."""
    if "\n" in value or "\r" in value:
        raise ValueError(f"Value for {key} cannot span multiple lines")
    if value and _NEEDS_QUOTING.search(value):
        quote = "'" if '"' in value else '"'
        return f"{key}={quote}{value}{quote}"
    return f"{key}={value}"


def write_env_value(path: Union[str, Path], key: str, value: str) -> None:
    """
    Set ``key`` in a credential file, creating the file if needed.

    The last existing line for ``key`` is replaced in place (it is the one
    that wins when parsing); otherwise a new line is appended. Comments and
    ordering of other lines are preserved.

    Raises:
        ValueError: If ``value`` contains a line break
    """
    path = Path(path)
    new_line = format_env_line(key, value)

    lines: List[str] = []
    if path.exists():
        lines = path.read_text(encoding="utf-8").split("\n")
        if lines[-1] == "":
            lines.pop()

    target = None
    for index, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("#"):
            continue
        existing_key, sep, _ = stripped.partition("=")
        if sep and existing_key.strip() == key:
            target = index

    if target is None:
        lines.append(new_line)
    else:
        lines[target] = new_line

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.info(f"Wrote {key} to {path}")
