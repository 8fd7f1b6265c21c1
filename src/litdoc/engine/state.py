from __future__ import annotations

from typing import Any, Iterator, MutableMapping


class SharedState(MutableMapping[str, Any]):
    """Key/value store shared by the fragments of one document."""

    def __init__(self, document_id: str) -> None:
        self.document_id = document_id
        self._values: dict[str, Any] = {}

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = value

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"SharedState({self.document_id!r}, keys={sorted(self._values)!r})"


class SharedStateRegistry:
    def __init__(self) -> None:
        self._states: dict[str, SharedState] = {}

    def for_document(self, document_id: str) -> SharedState:
        state = self._states.get(document_id)
        if state is None:
            state = SharedState(document_id)
            self._states[document_id] = state
        return state

    def discard(self, document_id: str) -> None:
        self._states.pop(document_id, None)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._states
