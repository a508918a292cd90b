"""
Settings schema and encryption policy.

A schema is an explicit table of SettingSpec entries (key, semantic type,
default, encrypted flag). The EncryptionPolicy is derived from it once and
answers a single question: must this key be stored encrypted?
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Iterable, Iterator, Tuple, Union


class SettingType(Enum):
    """Semantic type of a setting's string value."""
    STRING = "str"
    BOOL = "bool"
    INT = "int"
    DATETIME = "datetime"


@dataclass(frozen=True)
class SettingSpec:
    """Declaration of one setting."""
    key: str
    type: SettingType = SettingType.STRING
    default: Any = None
    encrypted: bool = False
    description: str = ""

    def __post_init__(self):
        if not self.key or not self.key.strip():
            raise ValueError("Setting key cannot be empty")
        if self.encrypted and self.type is not SettingType.STRING:
            raise ValueError(f"Only string settings can be encrypted: {self.key}")


def fold_key(key: str) -> str:
    """
    Normalize a settings key for case-insensitive comparison.

    Per-character lowering keeps keys such as "Straße" and "STRASSE" apart.
    """
    return key.lower()


class EncryptionPolicy:
    """
    Immutable, case-insensitive set of keys that must be encrypted at rest.

    Built from SettingSpec entries or (key, encrypted) pairs:

        policy = EncryptionPolicy([("APIKey", True), ("User", False)])
        policy.is_encrypted("apikey")   # True
    """

    def __init__(self, declarations: Iterable[Union[SettingSpec, Tuple[str, bool]]] = ()):
        encrypted = set()
        names = []
        for decl in declarations:
            if isinstance(decl, SettingSpec):
                key, flag = decl.key, decl.encrypted
            else:
                key, flag = decl
            if flag:
                encrypted.add(fold_key(key))
                names.append(key)
        self._folded: FrozenSet[str] = frozenset(encrypted)
        self._names: Tuple[str, ...] = tuple(names)

    @classmethod
    def from_keys(cls, keys: Iterable[str]) -> 'EncryptionPolicy':
        """Policy that encrypts exactly the given keys."""
        return cls((key, True) for key in keys)

    def is_encrypted(self, key: str) -> bool:
        return fold_key(key) in self._folded

    @property
    def encrypted_keys(self) -> Tuple[str, ...]:
        """Encrypted keys in their declared spelling."""
        return self._names

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.is_encrypted(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._folded)

    def __repr__(self) -> str:
        return f"EncryptionPolicy({list(self._names)!r})"
