"""
Capability queries for matched entities.

The matcher only ever asks one question of an entity: "does it have capability X?".
Entities stay opaque; capability_test() adapts the common shapes callers hand in.
"""
from __future__ import annotations
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Iterable, Protocol, runtime_checkable

CapabilityTest = Callable[[str], bool]


@runtime_checkable
class HasCapabilities(Protocol):
    def has_capability(self, name: str) -> bool: ...


@dataclass(frozen=True)
class CapabilitySet:
    names: FrozenSet[str] = frozenset()

    @classmethod
    def of(cls, *names: str) -> "CapabilitySet":
        return cls(frozenset(names))

    @classmethod
    def from_iterable(cls, names: Iterable[str]) -> "CapabilitySet":
        return cls(frozenset(names))

    def has_capability(self, name: str) -> bool:
        return name in self.names


def _none(name: str) -> bool:
    return False


def capability_test(entity: Any) -> CapabilityTest:
    """
    Resolve an entity to a single-argument capability predicate.
    Accepted, in order: has_capability() objects, callables, mappings
    (truthy value under the name), collections of names, None (no capabilities).
    """
    if entity is None:
        return _none
    if isinstance(entity, HasCapabilities):
        return entity.has_capability
    if callable(entity):
        return entity
    if isinstance(entity, Mapping):
        return lambda name: bool(entity.get(name))
    if isinstance(entity, Collection) and not isinstance(entity, (str, bytes)):
        return lambda name: name in entity
    raise TypeError(f"cannot query capabilities of {type(entity).__name__}")
