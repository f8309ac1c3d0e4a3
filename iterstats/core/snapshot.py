"""
iterstats.core.snapshot
=======================

Flat snapshots of estimator state.

Every estimator serializes to a flat dict of its numeric fields plus a
`kind` key naming its type. The registry maps `kind` back to the estimator
class so that a stream can be stopped, stored and resumed: restoring a
snapshot and continuing to `update` is indistinguishable from never having
stopped.

Examples
--------
>>> from iterstats.stats.mean import MeanAccumulator
>>> from iterstats.core.snapshot import SnapshotRegistry, dumps, loads
>>> acc = MeanAccumulator.from_iterable([1.0, 2.0, 3.0])
>>> acc.snapshot()
{'kind': 'mean', 'count': 3, 'mean': 2.0}
>>> SnapshotRegistry.decode(loads(dumps(acc))) == acc
True
"""

from __future__ import annotations
import json
from typing import TYPE_CHECKING, Any, Callable, Dict, Type, TypeVar, Union

from iterstats.core.errors import InvalidConfiguration
from iterstats.core.names import EstimatorKind

if TYPE_CHECKING:
    from iterstats.core.components import Estimator

KindLike = Union[EstimatorKind, str]
T = TypeVar("T", bound=type)


def _kind_key(kind: KindLike) -> str:
    return kind.value if isinstance(kind, EstimatorKind) else str(kind)


class SnapshotRegistry:
    """Registry of estimator classes keyed by snapshot `kind`."""

    _classes: Dict[str, Type["Estimator"]] = {}

    @classmethod
    def register(cls, kind: KindLike, estimator_cls: Type["Estimator"]) -> None:
        """Register an estimator class for a snapshot kind."""
        cls._classes[_kind_key(kind)] = estimator_cls

    @classmethod
    def get(cls, kind: KindLike) -> Type["Estimator"]:
        """Return the class registered for `kind`."""
        try:
            return cls._classes[_kind_key(kind)]
        except KeyError:
            raise InvalidConfiguration(
                f"no estimator registered for snapshot kind '{_kind_key(kind)}'"
            ) from None

    @classmethod
    def kinds(cls) -> list[str]:
        return sorted(cls._classes)

    @classmethod
    def decode(cls, payload: Dict[str, Any]) -> "Estimator":
        """Rebuild an estimator from a snapshot payload."""
        if "kind" not in payload:
            raise InvalidConfiguration("snapshot payload has no 'kind' key")
        return cls.get(payload["kind"]).from_snapshot(payload)


def register_estimator(kind: KindLike) -> Callable[[T], T]:
    """Class decorator registering an estimator under `kind`."""

    def wrap(estimator_cls: T) -> T:
        SnapshotRegistry.register(kind, estimator_cls)
        return estimator_cls

    return wrap


def dumps(estimator: "Estimator") -> str:
    """Serialize an estimator snapshot to compact JSON."""
    return json.dumps(estimator.snapshot(), separators=(",", ":"))


def loads(text: str) -> Dict[str, Any]:
    """Parse a JSON snapshot payload (use `SnapshotRegistry.decode` to rebuild)."""
    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise InvalidConfiguration("snapshot JSON must be an object")
    return payload


def restore(text: str) -> "Estimator":
    """Parse a JSON snapshot and rebuild its estimator."""
    return SnapshotRegistry.decode(loads(text))
