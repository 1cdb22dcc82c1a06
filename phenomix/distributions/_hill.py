"""
Hill's approximation to the Student-t quantile function.

Implements Algorithm 396 (Hill, 1970), the same approximation R's qt() uses
as its starting point, extended with a location and scale. The algorithm is
closed form (no root finding), so the quantile is a smooth function of the
degrees of freedom away from its two branch points. The branch structure and
every constant (including the truncated pi) are kept exactly: fitted
quartiles of Student-t curves are computed through this function, and any
change shifts them silently.

References:
    Hill, G. W. (1970). Algorithm 396: Student's t-quantiles.
    Communications of the ACM, 13(10), 617-619.
"""

from __future__ import annotations

import numpy as np
from scipy import stats as sp_stats


def qthill(
    quantile: float,
    v: float,
    mean: float = 0.0,
    sigma: float = 1.0,
) -> float:
    """Student-t quantile by Hill's algorithm.

    Args:
        quantile: Target cumulative probability in (0, 1).
        v: Degrees of freedom.
        mean: Location of the returned quantile.
        sigma: Scale of the returned quantile.

    Returns:
        ``mean + sigma * t_v^{-1}(quantile)`` (approximately).
    """
    quantile, v = np.float64(quantile), np.float64(v)
    # Hill works with the two-tailed probability; reflect about 0.5 and
    # remember which side we came from.
    if quantile > 0.5:
        flip = 1.0
        z = 2 * (1 - quantile)
    else:
        flip = -1.0
        z = 2 * quantile

    a = 1 / (v - 0.5)
    b = 48 / (a * a)
    c = ((20700 * a / b - 98) * a - 16) * a + 96.36
    d = ((94.5 / (b + c) - 3) / b + 1) * np.sqrt(a * 3.14159265 / 2) * v
    x = z * d
    y = x ** (2 / v)

    if y > 0.05 + a:
        # asymptotic inverse expansion about the normal quantile
        x = sp_stats.norm.ppf(z * 0.5, 0.0, 1.0)
        y = x * x
        if v < 5:
            c = c + 0.3 * (v - 4.5) * (x + 0.6)
        c = c + (((0.05 * d * x - 5) * x - 7) * x - 2) * x + b
        y = (((((0.4 * y + 6.3) * y + 36) * y + 94.5) / c - y - 3) / b + 1) * x
        y = a * y * y
        if y > 0.002:
            y = np.exp(y) - 1
        else:
            y = y + 0.5 * y * y
    else:
        y = ((1 / (((v + 6) / (v * y) - 0.089 * d - 0.822) * (v + 2) * 3)
              + 0.5 / (v + 4)) * y - 1) * (v + 1) / (v + 2) + 1 / y

    q = np.sqrt(v * y)
    q = q * flip

    return float(mean + sigma * q)
