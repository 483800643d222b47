"""
Variable Scope.

The read/write key-value space owned by a running process instance. Input
containers handed to script engines are plain VariableScopes too, detached
from the ambient one.
"""

from typing import Any, Iterator, Mapping


class VariableScope:
    """
    A dict-backed variable container.

    Storing None keeps the variable present, so a null script result can be
    told apart from a variable that was never written.
    """

    def __init__(self, variables: Mapping[str, Any] | None = None):
        self._variables: dict[str, Any] = dict(variables or {})

    @classmethod
    def empty(cls) -> "VariableScope":
        return cls()

    def get(self, name: str, default: Any = None) -> Any:
        return self._variables.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self._variables[name] = value

    def set_all(self, variables: Mapping[str, Any]) -> None:
        self._variables.update(variables)

    def has(self, name: str) -> bool:
        return name in self._variables

    def remove(self, name: str) -> None:
        self._variables.pop(name, None)

    def names(self) -> list[str]:
        return list(self._variables)

    def snapshot(self) -> dict[str, Any]:
        """Return a shallow copy of the variables."""
        return dict(self._variables)

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def __iter__(self) -> Iterator[str]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"VariableScope({self._variables!r})"
