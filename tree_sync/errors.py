"""Per-entry copy errors."""

from pathlib import Path
from typing import Union

from .models import CopyFailure, ErrorKind


class CopyError(Exception):
    """An entry could not be replicated.

    Raised inside copy tasks and turned into a CopyFailure record by the
    walker, so one bad entry never aborts its siblings.
    """

    def __init__(self, path: Union[str, Path], kind: ErrorKind, error: Union[str, BaseException]):
        self.path = str(path)
        self.kind = kind
        self.error = str(error)
        super().__init__(f"{kind.value}: {self.path}: {self.error}")

    def to_failure(self) -> CopyFailure:
        return CopyFailure(self.path, self.kind, self.error)
