"""Read claim documents from disk and parse them as JSON."""

import json
import logging
from pathlib import Path
from typing import Any, Union

from claims_timeline.errors import EmptyInputError, FileAccessError, JsonSyntaxError

logger = logging.getLogger(__name__)


def read_source(path: Union[str, Path]) -> str:
    """
    Read a claims file as UTF-8 text.

    A leading byte-order mark is dropped.

    Raises:
        FileAccessError: With the OS errno and matching recovery text
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            text = f.read()
    except OSError as e:
        raise FileAccessError.from_os_error(e, str(path)) from e
    except UnicodeDecodeError as e:
        raise FileAccessError(
            f"File is not valid UTF-8: {path}",
            details={"reason": str(e)},
            file_path=str(path),
        ) from e

    logger.debug(f"Read {len(text)} characters from {path}")
    return text


def load_json_text(text: str, file_path: str = None) -> Any:
    """
    Parse JSON text.

    Raises:
        EmptyInputError: For empty or whitespace-only text
        JsonSyntaxError: For malformed JSON, with line and column
    """
    if not text or not text.strip():
        raise EmptyInputError("File is empty or contains only whitespace", file_path=file_path)

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise JsonSyntaxError(
            f"Invalid JSON format: {e.msg} (line {e.lineno}, column {e.colno})",
            line=e.lineno,
            column=e.colno,
            file_path=file_path,
        ) from e


def load_document(path: Union[str, Path]) -> Any:
    """Read and parse one claims document."""
    return load_json_text(read_source(path), file_path=str(path))
