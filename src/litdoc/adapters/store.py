from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..core.errors import ScriptError
from ..core.exit_codes import ERR_IO


class DocumentStore(Protocol):
    def read(self, doc_id: str) -> str: ...

    def write(self, doc_id: str, text: str) -> None: ...


class FileDocumentStore:
    """Documents addressed by path, relative ids resolved against `root`."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root or Path.cwd()

    def path_for(self, doc_id: str) -> Path:
        path = Path(doc_id)
        return path if path.is_absolute() else self.root / path

    def read(self, doc_id: str) -> str:
        path = self.path_for(doc_id)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ScriptError(f"document not found: {doc_id}", ERR_IO, "document_missing") from exc
        except OSError as exc:
            raise ScriptError(f"cannot read {doc_id}: {exc}", ERR_IO, "document_read") from exc

    def write(self, doc_id: str, text: str) -> None:
        path = self.path_for(doc_id)
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ScriptError(f"cannot write {doc_id}: {exc}", ERR_IO, "document_write") from exc


class MemoryDocumentStore:
    def __init__(self, documents: dict[str, str] | None = None) -> None:
        self.documents = dict(documents or {})
        self.writes: list[str] = []

    def read(self, doc_id: str) -> str:
        if doc_id not in self.documents:
            raise ScriptError(f"document not found: {doc_id}", ERR_IO, "document_missing")
        return self.documents[doc_id]

    def write(self, doc_id: str, text: str) -> None:
        self.documents[doc_id] = text
        self.writes.append(doc_id)
