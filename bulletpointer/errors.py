from __future__ import annotations


class BulletpointerError(Exception):
    """Base for every error that aborts a run."""

    code = "E.GENERIC"

    def __init__(self, msg: str):
        super().__init__(msg)
        self.msg = msg

    def __str__(self) -> str:
        return f"{self.code}: {self.msg}"


class UsageError(BulletpointerError):
    code = "E.USAGE"


class SourceFileError(BulletpointerError):
    code = "E.FS"


class ConfigError(BulletpointerError):
    code = "E.CONFIG"


class DocumentError(BulletpointerError):
    code = "E.DOC"


class ElementLookupError(BulletpointerError):
    code = "E.ID"

    def __init__(self, element_id: str, count: int):
        super().__init__(f"Expected one #{element_id} element; found {count}")
        self.element_id = element_id
        self.count = count


class OutputWriteError(BulletpointerError):
    code = "E.WRITE"


class RasterizeError(BulletpointerError):
    code = "E.RASTER"

    def __init__(self, msg: str, returncode: int | None = None, stderr: bytes = b""):
        super().__init__(msg)
        self.returncode = returncode
        self.stderr = stderr
