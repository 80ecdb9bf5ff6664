from collections.abc import Iterator, MutableMapping

from parley.models import Value


class Variables(MutableMapping):
    """
    Variable store with case-insensitive names.

    Keys are case-folded on every insertion and lookup, the spelling of the
    most recent assignment is kept for iteration.
    """

    def __init__(self, initial: dict[str, Value] | None = None):
        self._data: dict[str, tuple[str, Value]] = {}
        if initial:
            self.update(initial)

    def __getitem__(self, name: str) -> Value:
        return self._data[name.casefold()][1]

    def __setitem__(self, name: str, value: Value) -> None:
        # ints from the host side are stored as numbers like everything else
        if isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        self._data[name.casefold()] = (name, value)

    def __delitem__(self, name: str) -> None:
        del self._data[name.casefold()]

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._data.values())

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.casefold() in self._data

    def __repr__(self) -> str:
        return f"Variables({dict(self.items())!r})"
