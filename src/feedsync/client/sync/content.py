"""Response content materialization."""

from __future__ import annotations

import codecs
import logging
from typing import BinaryIO

from feedsync.client.sync.types import QueryError

logger = logging.getLogger(__name__)

READ_BUFFER_SIZE = 8192


def materialize(stream: BinaryIO, encoding: str = "utf-8") -> str:
    """Read a byte stream to exhaustion and decode it.

    The stream is always closed, whatever the outcome. A failure to close is
    logged and never replaces the read result or the read error.

    Args:
        stream: Readable binary stream (ownership passes to this function).
        encoding: Text encoding of the content.

    Returns:
        Decoded text.

    Raises:
        QueryError: If reading or decoding fails.
    """
    decoder = codecs.getincrementaldecoder(encoding)()
    parts: list[str] = []
    try:
        for block in iter(lambda: stream.read(READ_BUFFER_SIZE), b""):
            parts.append(decoder.decode(block))
        parts.append(decoder.decode(b"", final=True))
        return "".join(parts)
    except Exception as e:
        raise QueryError(f"Failed to read response content: {e}") from e
    finally:
        try:
            stream.close()
        except Exception:
            logger.warning("Failed to close response stream", exc_info=True)
