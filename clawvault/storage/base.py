"""Storage protocol consumed by the migration engine."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class Storage(Protocol):
    """A named secret store.

    The migration engine only ever calls :meth:`set`. The remaining methods
    exist for restore tooling and tests; ``get`` returns secret values and
    must never feed logs or reports.
    """

    def set(self, name: str, value: str) -> None: ...

    def get(self, name: str) -> str | None: ...

    def delete(self, name: str) -> None: ...

    def list(self) -> list[str]: ...

    def has(self, name: str) -> bool: ...


class MemoryStorage:
    """Dict-backed storage for tests and embedding."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}

    def set(self, name: str, value: str) -> None:
        self.values[name] = value

    def get(self, name: str) -> str | None:
        return self.values.get(name)

    def delete(self, name: str) -> None:
        self.values.pop(name, None)

    def list(self) -> list[str]:
        return list(self.values)

    def has(self, name: str) -> bool:
        return name in self.values
