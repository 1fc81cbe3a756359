"""In-memory representation of files sent to (and received from) the API."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class InputFile(BaseModel):
    """A named chunk of bytes.

    Usage::

        f = InputFile.from_path("hello.exe")
        f.name      # "hello.exe"
        len(f)      # size in bytes

        g = InputFile.from_content(b"\\x7fELF...", name="sample.elf")
    """

    model_config = ConfigDict(frozen=True)

    name: str
    content: bytes
    source: Path | None = None

    @classmethod
    def from_path(cls, path: str | Path, name: str | None = None) -> InputFile:
        """Read a file from disk; the name defaults to the path's file name."""
        path = Path(path)
        return cls(name=name or path.name, content=path.read_bytes(), source=path)

    @classmethod
    def from_content(cls, content: bytes, name: str) -> InputFile:
        return cls(name=name, content=bytes(content))

    def __len__(self) -> int:
        return len(self.content)

    def content_as_text(self, encoding: str = "utf-8") -> str:
        """Decode the content; the API itself always uses UTF-8."""
        return self.content.decode(encoding)

    def save_into(self, directory: str | Path, name: str | None = None) -> Path:
        """Write a copy into ``directory`` and return the written path."""
        target = Path(directory) / (name or self.name)
        target.write_bytes(self.content)
        return target
