"""Reading map files from disk for the command-line front end."""

from pathlib import Path

from src.shared_utilities import get_logger

from .exceptions import MapFileReadError

logger = get_logger(__name__)


def read_map_file(path: str | Path) -> str:
    """Read a map file as text.

    IAR writes map files in the build host's code page, so undecodable bytes
    are replaced rather than rejected.

    Raises:
        MapFileReadError: if the file is missing or unreadable
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.error("Failed to read map file", path=str(path), error=str(e))
        raise MapFileReadError(path, e.strerror or str(e)) from e

    logger.debug("Read map file", path=str(path), characters=len(text))
    return text
