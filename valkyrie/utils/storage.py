from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from valkyrie.core.config import settings


class StorageError(RuntimeError):
    pass


class Storage:
    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        """Store data under key and return its public URL."""
        raise NotImplementedError

    def key_for(self, url: str) -> str | None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class LocalStorage(Storage):
    root: Path
    base_url: str

    def _path(self, key: str) -> Path:
        safe_key = key.lstrip("/").replace("\\", "/")
        path = (self.root / safe_key).resolve()
        if self.root.resolve() not in path.parents:
            raise StorageError(f"Key escapes the storage root: {key}")
        return path

    def url_for(self, key: str) -> str:
        return f"{self.base_url.rstrip('/')}/{key.lstrip('/')}"

    def key_for(self, url: str) -> str | None:
        """Inverse of url_for; None for URLs this storage did not hand out."""
        prefix = self.base_url.rstrip("/") + "/"
        if url.startswith(prefix):
            return url[len(prefix):]
        return None

    def put_bytes(self, key: str, data: bytes, *, content_type: str | None = None) -> str:
        p = self._path(key)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)
        return self.url_for(key)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


def storage_from_settings() -> Storage:
    return LocalStorage(root=Path(settings.UPLOAD_DIR), base_url=settings.FILES_BASE_URL)
