"""Byte-for-byte copy of regular files."""

import logging
import os
import shutil
from pathlib import Path

from .errors import CopyError
from .models import ErrorKind

logger = logging.getLogger(__name__)


def copy_file(src: Path, dst: Path) -> None:
    """
    Copy the contents of src into dst, overwriting any existing file.

    Only the byte stream is copied; permissions and timestamps are not.
    A symbolic link already sitting at dst is replaced, never written
    through.
    A partially written dst is left in place if the copy fails midway.

    Raises:
        CopyError: NOT_FOUND if src vanished, IO_FAILURE for any other
            read or write error (including dst being a directory).
    """
    logger.debug(f"Copying file {src} -> {dst}")
    try:
        if os.path.islink(dst):
            os.unlink(dst)
        shutil.copyfile(src, dst)
    except FileNotFoundError as e:
        if not os.path.lexists(src):
            raise CopyError(src, ErrorKind.NOT_FOUND, e) from e
        raise CopyError(src, ErrorKind.IO_FAILURE, e) from e
    except (OSError, shutil.Error) as e:
        raise CopyError(src, ErrorKind.IO_FAILURE, e) from e
