from typing import Protocol


class BlobStore(Protocol):
    def write(self, path: str, data: bytes) -> None:
        ...

    def create(self, path: str, data: bytes) -> None:
        ...

    def read(self, path: str) -> bytes:
        ...

    def delete(self, path: str) -> None:
        ...

    def exists(self, path: str) -> bool:
        ...
