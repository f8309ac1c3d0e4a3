"""
iterstats.core.components
=========================

Base classes shared by every estimator.

Component Types:
- `Estimator`: consumes samples one at a time through `update()` and answers
  queries at any point of the stream.
- `Mergeable`: an estimator whose state forms a commutative monoid; `merge()`
  folds the state of a disjoint sub-stream into the receiver exactly.

Both are plain value types owned by the caller. `merge()` mutates the
receiver only and never its argument; `combine()` is the non-mutating form
used by reducers that must keep their inputs intact.

`concatenate()` glues several estimators into one composite type that feeds
each sample to every member.

Examples
--------
>>> from iterstats.core.components import concatenate
>>> from iterstats.stats.extrema import MinAccumulator, MaxAccumulator
>>> MinMax = concatenate("MinMax", min=MinAccumulator, max=MaxAccumulator)
>>> s = MinMax.from_iterable([3.0, 1.0, 5.0])
>>> s.min(), s.max()
(1.0, 5.0)
"""

from __future__ import annotations
import copy
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, Type, TypeVar, cast

from iterstats.core.errors import InvalidConfiguration
from iterstats.core.names import EstimatorKind
from iterstats.core.snapshot import SnapshotRegistry

E = TypeVar("E", bound="Estimator")
M = TypeVar("M", bound="Mergeable")


class Estimator(ABC):
    """
    Base class for all single-pass estimators.

    Subclasses implement `update()`, `count`, `snapshot()` and
    `from_snapshot()`. Equality compares snapshots, so two estimators are
    equal exactly when their flat states are.
    """

    @abstractmethod
    def update(self, x: float) -> None:
        """Feed one sample."""

    @property
    @abstractmethod
    def count(self) -> int:
        """Number of samples seen so far."""

    @abstractmethod
    def snapshot(self) -> Dict[str, Any]:
        """Return the flat state of this estimator, including its `kind`."""

    @classmethod
    @abstractmethod
    def from_snapshot(cls: Type[E], payload: Dict[str, Any]) -> E:
        """Rebuild an estimator from `snapshot()` output."""

    def summary(self) -> Dict[str, Any]:
        """Every statistic this estimator offers, `None` where unavailable."""
        return {"count": self.count}

    def extend(self, samples: Iterable[float]) -> None:
        for x in samples:
            self.update(x)

    @classmethod
    def from_iterable(cls: Type[E], samples: Iterable[float], *args: Any, **kwargs: Any) -> E:
        """Construct an estimator and feed it every sample of `samples`."""
        est = cls(*args, **kwargs)
        est.extend(samples)
        return est

    def copy(self: E) -> E:
        return copy.deepcopy(self)

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.snapshot() == cast(Estimator, other).snapshot()

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{k}={v!r}" for k, v in self.snapshot().items() if k != "kind"
        )
        return f"{type(self).__name__}({fields})"


class Mergeable(Estimator):
    """
    Base class for estimators with an exact, associative merge.

    A freshly constructed (empty) estimator is the identity element:
    merging it into ``a`` leaves ``a`` unchanged, and merging ``a`` into it
    yields a value equal to ``a``.
    """

    @abstractmethod
    def merge(self: M, other: M) -> None:
        """Fold the state of `other` into this estimator in place."""

    @staticmethod
    def combine(a: M, b: M) -> M:
        """Return the merge of `a` and `b` without mutating either."""
        out = a.copy()
        out.merge(b)
        return out


def concatenate(name: str, **factories: Callable[[], Estimator]) -> Type[Estimator]:
    """
    Build a composite estimator type from several member estimators.

    Each keyword names a statistic and gives a zero-argument factory for the
    estimator computing it. The member must expose a method of the same name,
    which the composite re-exports. The composite is `Mergeable` when every
    member is. The new type is registered under `name` as its snapshot kind,
    so `restore()` and the ledger rebuild it; defining a composite again under
    the same name replaces the earlier registration.

    Parameters
    ----------
    name : str
        Class name of the new type
    **factories
        Statistic name mapped to a factory producing its estimator

    Returns
    -------
    type
        A new `Estimator` (or `Mergeable`) subclass
    """
    if not factories:
        raise InvalidConfiguration("concatenate() needs at least one estimator")
    if name in {kind.value for kind in EstimatorKind}:
        raise InvalidConfiguration(f"'{name}' is a built-in estimator kind")

    reserved = {"update", "count", "snapshot", "from_snapshot", "summary", "merge", "extend", "copy"}
    clashes = reserved.intersection(factories)
    if clashes:
        raise InvalidConfiguration(f"reserved statistic name(s): {sorted(clashes)}")

    members = {stat: factory() for stat, factory in factories.items()}
    for stat, member in members.items():
        if not callable(getattr(member, stat, None)):
            raise InvalidConfiguration(
                f"{type(member).__name__} has no '{stat}' accessor"
            )
    mergeable = all(isinstance(p, Mergeable) for p in members.values())

    def __init__(self: Any) -> None:
        self._members = {stat: factory() for stat, factory in factories.items()}

    def update(self: Any, x: float) -> None:
        for member in self._members.values():
            member.update(x)

    def count(self: Any) -> int:
        return next(iter(self._members.values())).count

    def snapshot(self: Any) -> Dict[str, Any]:
        return {
            "kind": name,
            "members": {stat: m.snapshot() for stat, m in self._members.items()},
        }

    @classmethod  # type: ignore[misc]
    def from_snapshot(cls: Any, payload: Dict[str, Any]) -> Any:
        obj = cls()
        obj._members = {
            stat: SnapshotRegistry.decode(member)
            for stat, member in payload["members"].items()
        }
        return obj

    def summary(self: Any) -> Dict[str, Any]:
        out: Dict[str, Any] = {"count": self.count}
        for stat, member in self._members.items():
            out[stat] = member.summary()
        return out

    def merge(self: Any, other: Any) -> None:
        for stat, member in self._members.items():
            member.merge(other._members[stat])

    def _accessor(stat: str) -> Callable[..., Any]:
        def get(self: Any, *args: Any, **kwargs: Any) -> Any:
            return getattr(self._members[stat], stat)(*args, **kwargs)

        get.__name__ = stat
        return get

    namespace: Dict[str, Any] = {
        "__init__": __init__,
        "update": update,
        "count": property(count),
        "snapshot": snapshot,
        "from_snapshot": from_snapshot,
        "summary": summary,
        "__doc__": f"Composite estimator of {', '.join(factories)}.",
    }
    if mergeable:
        namespace["merge"] = merge
    for stat in factories:
        namespace[stat] = _accessor(stat)

    base = Mergeable if mergeable else Estimator
    composite = type(base)(name, (base,), namespace)
    SnapshotRegistry.register(name, composite)
    return composite
