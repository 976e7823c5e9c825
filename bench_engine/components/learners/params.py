from __future__ import annotations

"""Schema-described hyperparameters.

Every learner declares a :class:`ParamSet`; values are validated against the
declared bounds/levels before use. The same classes describe tuning search
spaces (a ParamSet whose entries are the ranges to search).
"""

import itertools
import math
from typing import Any, Dict, Iterator, List, Literal, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict

from bench_engine.errors import ConfigurationError


class _Param(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    default: Any = None
    tags: Tuple[str, ...] = ()

    @property
    def is_bounded(self) -> bool:
        return False

    def check(self, value: Any) -> Optional[str]:
        """Return an error message, or None when ``value`` is valid."""
        return None

    def grid(self, resolution: int) -> List[Any]:
        raise ConfigurationError(f"{type(self).__name__} cannot be gridded")

    def sample(self, rng: np.random.Generator) -> Any:
        raise ConfigurationError(f"{type(self).__name__} cannot be sampled")

    def perturb(self, value: Any, rng: np.random.Generator, step: float) -> Any:
        return self.sample(rng)


class ParamDbl(_Param):
    kind: Literal["dbl"] = "dbl"
    lower: float = -math.inf
    upper: float = math.inf
    logscale: bool = False

    @property
    def is_bounded(self) -> bool:
        return math.isfinite(self.lower) and math.isfinite(self.upper)

    def check(self, value: Any) -> Optional[str]:
        if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
            return f"must be a number, got {value!r}"
        if not self.lower <= float(value) <= self.upper:
            return f"must be in [{self.lower}, {self.upper}], got {value!r}"
        return None

    def _require_bounds(self) -> None:
        if not self.is_bounded:
            raise ConfigurationError("numeric search ranges need finite lower and upper bounds")
        if self.logscale and self.lower <= 0:
            raise ConfigurationError("logscale ranges need a positive lower bound")

    def grid(self, resolution: int) -> List[Any]:
        self._require_bounds()
        if self.logscale:
            return [float(v) for v in np.geomspace(self.lower, self.upper, resolution)]
        return [float(v) for v in np.linspace(self.lower, self.upper, resolution)]

    def sample(self, rng: np.random.Generator) -> Any:
        self._require_bounds()
        if self.logscale:
            return float(math.exp(rng.uniform(math.log(self.lower), math.log(self.upper))))
        return float(rng.uniform(self.lower, self.upper))

    def perturb(self, value: Any, rng: np.random.Generator, step: float) -> Any:
        self._require_bounds()
        if self.logscale:
            lo, hi = math.log(self.lower), math.log(self.upper)
            v = math.log(float(value)) + rng.normal() * step * (hi - lo)
            return float(math.exp(min(max(v, lo), hi)))
        v = float(value) + rng.normal() * step * (self.upper - self.lower)
        return float(min(max(v, self.lower), self.upper))


class ParamInt(_Param):
    kind: Literal["int"] = "int"
    lower: Optional[int] = None
    upper: Optional[int] = None

    @property
    def is_bounded(self) -> bool:
        return self.lower is not None and self.upper is not None

    def check(self, value: Any) -> Optional[str]:
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            return f"must be an integer, got {value!r}"
        if self.lower is not None and value < self.lower:
            return f"must be >= {self.lower}, got {value!r}"
        if self.upper is not None and value > self.upper:
            return f"must be <= {self.upper}, got {value!r}"
        return None

    def _require_bounds(self) -> None:
        if not self.is_bounded:
            raise ConfigurationError("integer search ranges need lower and upper bounds")

    def grid(self, resolution: int) -> List[Any]:
        self._require_bounds()
        vals = np.round(np.linspace(self.lower, self.upper, resolution)).astype(int)
        return [int(v) for v in dict.fromkeys(vals.tolist())]

    def sample(self, rng: np.random.Generator) -> Any:
        self._require_bounds()
        return int(rng.integers(self.lower, self.upper + 1))

    def perturb(self, value: Any, rng: np.random.Generator, step: float) -> Any:
        self._require_bounds()
        width = max(1.0, step * (self.upper - self.lower))
        v = int(round(int(value) + rng.normal() * width))
        return int(min(max(v, self.lower), self.upper))


class ParamFct(_Param):
    kind: Literal["fct"] = "fct"
    levels: Tuple[Any, ...] = ()

    @property
    def is_bounded(self) -> bool:
        return len(self.levels) > 0

    def check(self, value: Any) -> Optional[str]:
        if value not in self.levels:
            return f"must be one of {list(self.levels)}, got {value!r}"
        return None

    def grid(self, resolution: int) -> List[Any]:
        return list(self.levels)

    def sample(self, rng: np.random.Generator) -> Any:
        return self.levels[int(rng.integers(0, len(self.levels)))]


class ParamLgl(_Param):
    kind: Literal["lgl"] = "lgl"

    @property
    def is_bounded(self) -> bool:
        return True

    def check(self, value: Any) -> Optional[str]:
        if not isinstance(value, (bool, np.bool_)):
            return f"must be a boolean, got {value!r}"
        return None

    def grid(self, resolution: int) -> List[Any]:
        return [True, False]

    def sample(self, rng: np.random.Generator) -> Any:
        return bool(rng.integers(0, 2))


class ParamUty(_Param):
    """Untyped parameter (any value); not tunable."""

    kind: Literal["uty"] = "uty"


Param = Union[ParamDbl, ParamInt, ParamFct, ParamLgl, ParamUty]


class ParamSet:
    """Ordered mapping of parameter id -> parameter definition."""

    def __init__(self, params: Optional[Mapping[str, Param]] = None) -> None:
        self._params: Dict[str, Param] = dict(params or {})

    @property
    def ids(self) -> List[str]:
        return list(self._params)

    def __contains__(self, pid: str) -> bool:
        return pid in self._params

    def __getitem__(self, pid: str) -> Param:
        return self._params[pid]

    def __len__(self) -> int:
        return len(self._params)

    def __iter__(self) -> Iterator[str]:
        return iter(self._params)

    def items(self):
        return self._params.items()

    @property
    def defaults(self) -> Dict[str, Any]:
        return {k: p.default for k, p in self._params.items() if p.default is not None}

    @property
    def is_bounded(self) -> bool:
        return all(p.is_bounded for p in self._params.values())

    def subset(self, ids: Sequence[str]) -> "ParamSet":
        return ParamSet({k: self._params[k] for k in ids})

    def validate(self, values: Mapping[str, Any], *, context: str = "params") -> Dict[str, Any]:
        """Return ``values`` as a dict or raise ConfigurationError listing every problem."""
        errors: List[str] = []
        for k, v in values.items():
            if k not in self._params:
                errors.append(f"unknown parameter {k!r}")
                continue
            if v is None:
                continue
            msg = self._params[k].check(v)
            if msg is not None:
                errors.append(f"{k} {msg}")
        if errors:
            raise ConfigurationError(f"{context}: " + "; ".join(errors))
        return dict(values)

    def grid(self, resolution: int = 10, param_resolutions: Optional[Mapping[str, int]] = None) -> List[Dict[str, Any]]:
        """Cartesian grid; the last parameter varies fastest."""
        if resolution < 1:
            raise ConfigurationError(f"resolution must be >= 1, got {resolution}")
        per = dict(param_resolutions or {})
        unknown = set(per) - set(self._params)
        if unknown:
            raise ConfigurationError(f"param_resolutions for unknown parameters: {sorted(unknown)}")
        axes = [self._params[k].grid(int(per.get(k, resolution))) for k in self._params]
        return [dict(zip(self._params, combo)) for combo in itertools.product(*axes)]

    def sample(self, n: int, rng: np.random.Generator) -> List[Dict[str, Any]]:
        return [{k: p.sample(rng) for k, p in self._params.items()} for _ in range(int(n))]

    def perturb(self, config: Mapping[str, Any], rng: np.random.Generator, step: float) -> Dict[str, Any]:
        return {k: p.perturb(config[k], rng, step) for k, p in self._params.items()}

    def __repr__(self) -> str:
        return f"<ParamSet {self.ids}>"


__all__ = ["ParamDbl", "ParamInt", "ParamFct", "ParamLgl", "ParamUty", "Param", "ParamSet"]
