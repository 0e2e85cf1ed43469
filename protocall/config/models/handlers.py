"""Default handler configuration models."""

from pathlib import Path

from pydantic import BaseModel, Field


class HandlersConfig(BaseModel):
    """Defaults used by the built-in handler factories."""

    base_dir: Path | None = Field(
        default=None,
        description="Directory relative paths resolve against (cwd if unset)",
    )
    file_encoding: str | None = Field(
        default=None,
        description="Text encoding for file: reads (bytes if unset)",
    )
    glob_cwd: Path | None = Field(
        default=None,
        description="Directory glob: patterns expand in (base_dir if unset)",
    )
