"""
iterstats.runtime.config
========================

Reducer settings, optionally read from the environment.

Environment variables
---------------------
- ``ITERSTATS_MAX_WORKERS``: worker threads of the parallel reducer
  (unset means the executor default).
- ``ITERSTATS_CHUNK_SIZE``: samples per partition (default 10000).

Examples
--------
>>> from iterstats.runtime.config import ReducerConfig
>>> ReducerConfig.from_env({"ITERSTATS_CHUNK_SIZE": "256"}).chunk_size
256
>>> ReducerConfig.from_env({}).max_workers is None
True
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, NoReturn, Optional

from iterstats.core.errors import EnvVarError, InvalidConfiguration

ENV_MAX_WORKERS = "ITERSTATS_MAX_WORKERS"
ENV_CHUNK_SIZE = "ITERSTATS_CHUNK_SIZE"
DEFAULT_CHUNK_SIZE = 10_000


def _get_env(var_name: str, environ: Mapping[str, str]) -> Optional[str]:
    """Fetch and normalise the value of an environment variable."""
    raw = environ.get(var_name)
    if raw is None:
        return None
    value = raw.strip()
    return value if value else None


def _raise_env_error(var_name: str, message: str, value: Optional[str] = None) -> NoReturn:
    raise EnvVarError(var_name, message, value)


def _parse_positive_int(var_name: str, environ: Mapping[str, str]) -> Optional[int]:
    raw = _get_env(var_name, environ)
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        _raise_env_error(var_name, f"expected an integer, got {raw!r}", raw)
    if value < 1:
        _raise_env_error(var_name, f"must be positive, got {value}", raw)
    return value


@dataclass(frozen=True)
class ReducerConfig:
    """
    Settings of the sequential and parallel reducers.

    Attributes:
        max_workers: Worker threads for `ParallelReducer` (None: executor default)
        chunk_size: Number of samples per partition
    """

    max_workers: Optional[int] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        if self.max_workers is not None and self.max_workers < 1:
            raise InvalidConfiguration(
                f"max_workers must be positive, got {self.max_workers}"
            )
        if self.chunk_size < 1:
            raise InvalidConfiguration(f"chunk_size must be positive, got {self.chunk_size}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ReducerConfig":
        """Build a config from `environ` (defaults to ``os.environ``)."""
        env = os.environ if environ is None else environ
        chunk_size = _parse_positive_int(ENV_CHUNK_SIZE, env)
        return cls(
            max_workers=_parse_positive_int(ENV_MAX_WORKERS, env),
            chunk_size=DEFAULT_CHUNK_SIZE if chunk_size is None else chunk_size,
        )
