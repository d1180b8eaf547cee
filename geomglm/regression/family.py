"""
Geometric response family.

The response counts trials up to and including the first success,
so y ∈ {1, 2, 3, ...} with P(Y = y) = (1 - π)^(y-1) π and mean μ = 1/π.

The family fixes:
- Link:              η = log(μ - 1),  μ = exp(η) + 1  (so μ > 1 always)
- Variance:          V(μ) = (μ - 1) μ
- IWLS weight:       W = (μ - 1)² / V
- Working response:  z = η + (y - μ) / (μ - 1)
- Deviance:          2 Σ [ (y-1) log((y-1)/(μ-1)) + y log(μ/y) ]

W reduces algebraically to (μ - 1)/μ; it is evaluated in the quotient form
above so that every backend produces bit-identical weights.

References:
    McCullagh, P., & Nelder, J. A. (1989). Generalized Linear Models (2nd ed.)
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


class GeometricFamily:
    """Variance, link and deviance functions for a geometric response."""

    @property
    def name(self) -> str:
        return 'geometric'

    @property
    def link_name(self) -> str:
        return 'log(mu - 1)'

    # -----------------------------------------------------------------
    # Link
    # -----------------------------------------------------------------

    def link(self, mu: NDArray) -> NDArray:
        """g(μ) = log(μ - 1)."""
        return np.log(mu - 1.0)

    def linkinv(self, eta: NDArray) -> NDArray:
        """g⁻¹(η) = exp(η) + 1."""
        return np.exp(eta) + 1.0

    # -----------------------------------------------------------------
    # IWLS working quantities
    # -----------------------------------------------------------------

    def variance(self, mu: NDArray) -> NDArray:
        return (mu - 1.0) * mu

    def weights(self, mu: NDArray) -> NDArray:
        return (mu - 1.0) ** 2 / self.variance(mu)

    def working_response(self, y: NDArray, eta: NDArray, mu: NDArray) -> NDArray:
        return eta + (y - mu) / (mu - 1.0)

    # -----------------------------------------------------------------
    # Deviance and likelihood
    # -----------------------------------------------------------------

    def deviance_lc(self, y: NDArray, mu: NDArray) -> NDArray:
        """
        (y - 1) log((y - 1)/(μ - 1)) with every non-finite entry set to 0.

        At y = 1 the expression is 0 · log(0) (or 0/0 when μ = 1); the
        saturated-model limit of that term is 0.
        """
        with np.errstate(divide='ignore', invalid='ignore'):
            lc = (y - 1.0) * np.log((y - 1.0) / (mu - 1.0))
        return np.where(np.isfinite(lc), lc, 0.0)

    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        """Half the deviance contribution of each observation."""
        with np.errstate(divide='ignore', invalid='ignore'):
            return self.deviance_lc(y, mu) + y * np.log(mu / y)

    def deviance(self, y: NDArray, mu: NDArray) -> float:
        return float(2.0 * np.sum(self.unit_deviance(y, mu)))

    def log_likelihood(self, y: NDArray, mu: NDArray) -> float:
        """Σ [(y - 1) log(1 - π) + log π] with π = 1/μ."""
        pi = 1.0 / mu
        with np.errstate(divide='ignore', invalid='ignore'):
            ll = (y - 1.0) * np.log1p(-pi) + np.log(pi)
        return float(np.sum(ll))

    def aic(self, y: NDArray, mu: NDArray, rank: int) -> float:
        return -2.0 * self.log_likelihood(y, mu) + 2.0 * rank

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
