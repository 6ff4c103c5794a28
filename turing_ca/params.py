"""
params.py

Rate constants for the Turing-pattern automaton.

  d_a  diffusion rate of A, in [0, 1]
  d_b  diffusion rate of B, in [0, 1]
  f    feed rate of A, in [0, 1]
  k    death (decay) rate of B, in [0, 1]
  r    reproduction rate of the A + 2B -> 3B reaction, in [0, 1]
"""

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class Parameters:
    d_a: float
    d_b: float
    f: float
    k: float
    r: float

    def __post_init__(self):
        for name, v in asdict(self).items():
            try:
                x = float(v)
            except (TypeError, ValueError):
                raise ValueError(f"{name} must be a number, got {v!r}") from None
            if not math.isfinite(x) or not 0.0 <= x <= 1.0:
                raise ValueError(f"{name}={v!r} outside [0, 1]")
            object.__setattr__(self, name, x)

    @classmethod
    def from_cfg(cls, cfg: Dict[str, Any]) -> "Parameters":
        """Read d_a, d_b, f, k, r from a cfg dict, falling back to the reference run."""
        return cls(
            d_a=cfg.get("d_a", REFERENCE_PARAMETERS.d_a),
            d_b=cfg.get("d_b", REFERENCE_PARAMETERS.d_b),
            f=cfg.get("f", REFERENCE_PARAMETERS.f),
            k=cfg.get("k", REFERENCE_PARAMETERS.k),
            r=cfg.get("r", REFERENCE_PARAMETERS.r),
        )

    def to_cfg(self) -> Dict[str, float]:
        return asdict(self)


# Values of the reference 600x600, 700-generation run.
REFERENCE_PARAMETERS = Parameters(d_a=0.6, d_b=0.3, f=0.2, k=0.1, r=0.5)
