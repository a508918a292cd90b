"""Case-insensitive mapping used as the in-memory settings map."""

from typing import Dict, Iterator, Mapping, MutableMapping, Optional, Tuple

from lazyconfig.config.policy import fold_key


class SettingsMap(MutableMapping):
    """
    Mapping from case-insensitive key to optional string value.

    The spelling used when a key is first inserted is kept for serialization;
    later writes through a differently-cased key update the value only.
    """

    def __init__(self, data: Optional[Mapping[str, Optional[str]]] = None):
        self._data: Dict[str, Tuple[str, Optional[str]]] = {}
        if data:
            self.update(data)

    def __getitem__(self, key: str) -> Optional[str]:
        return self._data[fold_key(key)][1]

    def __setitem__(self, key: str, value: Optional[str]) -> None:
        folded = fold_key(key)
        existing = self._data.get(folded)
        self._data[folded] = (existing[0] if existing else key, value)

    def __delitem__(self, key: str) -> None:
        del self._data[fold_key(key)]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._data.values())

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and fold_key(key) in self._data

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Plain dict keyed by the stored spelling."""
        return {original: value for original, value in self._data.values()}

    def copy(self) -> 'SettingsMap':
        return SettingsMap(self.to_dict())

    def __repr__(self) -> str:
        return f"SettingsMap({self.to_dict()!r})"
