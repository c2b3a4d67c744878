import dataclasses
import json
import logging
import os
import sys
from typing import Any, Optional

from django.core.serializers.json import DjangoJSONEncoder

from countries.exceptions import OutputError

logger = logging.getLogger(__name__)


class FetcherJSONEncoder(DjangoJSONEncoder):
    """DjangoJSONEncoder that also understands dataclasses (Country, Region)."""

    def default(self, o):
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            return dataclasses.asdict(o)
        return super().default(o)


def to_json_string(value: Any, prefix: str = "", indent: str = "  ") -> str:
    """
    Encode value as indented JSON. Every line after the first begins
    with prefix followed by the indentation.
    """
    text = json.dumps(value, cls=FetcherJSONEncoder, indent=indent, ensure_ascii=False)
    if prefix:
        text = text.replace("\n", "\n" + prefix)
    return text


def to_json(
    value: Any,
    filename: Optional[str] = None,
    prefix: str = "",
    indent: str = "  ",
    permission: int = 0o644,
    force_override: bool = True,
    stream=None,
) -> None:
    """
    Write value as JSON to a file, or to stdout (or stream) if no filename.

    The permission bits are enforced even if the file already existed
    with different permissions.

    Raises:
        OutputError: If the file exists and force_override is False, or on I/O errors.
    """
    text = to_json_string(value, prefix=prefix, indent=indent)

    if not filename:
        stream = stream if stream is not None else sys.stdout
        stream.write(text + "\n")
        return

    existed = os.path.exists(filename)
    if existed and not force_override:
        raise OutputError(f"{filename} already exists and override is disabled")

    try:
        fd = os.open(filename, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, permission)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        # O_CREAT only applies the mode (minus umask) to new files
        os.chmod(filename, permission)
    except OSError as e:
        raise OutputError(f"Could not write {filename}: {e}") from e

    logger.info("Wrote JSON output to %s", filename)
