"""
Two-proportion z-test on variant click-through rates.

The normal CDF uses the Abramowitz–Stegun rational approximation of erf
(three-term, max error ~2.5e-5), which is accurate to 3+ significant digits
for |z| in [0, 6].
"""

import math

from pydantic import BaseModel

A1 = 0.3480242
A2 = -0.0958798
A3 = 0.7478556
P = 0.47047

DEFAULT_ALPHA = 0.05


class SignificanceResult(BaseModel):
    p1: float
    p2: float
    diff: float
    z: float
    p_value: float
    significant: bool


def normal_cdf(x: float) -> float:
    """P(X <= x) for a standard normal X."""
    sign = -1.0 if x < 0 else 1.0
    x_abs = abs(x) / math.sqrt(2)
    t = 1.0 / (1.0 + P * x_abs)
    poly = t * (A1 + t * (A2 + t * A3))
    erf = 1.0 - poly * math.exp(-x_abs * x_abs)
    return 0.5 * (1.0 + sign * erf)


def compare(n1: int, c1: int, n2: int, c2: int, alpha: float = DEFAULT_ALPHA) -> SignificanceResult:
    """
    Compare CTRs of two variants.

    n1, n2: exposures; c1, c2: clicks. Zero exposures on either side gives
    z=0 and p_value=1.
    """
    for name, v in (("n1", n1), ("c1", c1), ("n2", n2), ("c2", c2)):
        if v < 0:
            raise ValueError(f"{name} must be >= 0, got {v}")
    p1 = c1 / n1 if n1 > 0 else 0.0
    p2 = c2 / n2 if n2 > 0 else 0.0
    pooled = (c1 + c2) / (n1 + n2) if (n1 + n2) > 0 else 0.0

    z = 0.0
    p_value = 1.0
    if n1 > 0 and n2 > 0 and 0 < pooled < 1:
        std = math.sqrt(pooled * (1 - pooled) * (1.0 / n1 + 1.0 / n2))
        if std > 0:
            z = (p1 - p2) / std
            p_value = 2 * (1 - normal_cdf(abs(z)))
    p_value = min(1.0, max(0.0, p_value))
    return SignificanceResult(
        p1=p1,
        p2=p2,
        diff=p1 - p2,
        z=z,
        p_value=p_value,
        significant=p_value < alpha,
    )
