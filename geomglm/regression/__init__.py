"""
Geometric-response generalized linear model.

Public API:
    fit(y, X, start=None, ...) -> GeometricSolution

The fit() function is the only entry point. It handles:
    - Input validation
    - Design construction
    - Backend selection
    - Result wrapping

Diagnostic plots live in geomglm.regression.plots (requires matplotlib
and statsmodels).

Example:
    >>> from geomglm.regression import fit
    >>> result = fit(y, X)
    >>> print(result.coefficients)
    >>> print(result.summary())
"""

from geomglm.regression.design import Design
from geomglm.regression.family import GeometricFamily
from geomglm.regression.solution import (
    CoefficientRow,
    GeometricParams,
    GeometricSolution,
)
from geomglm.regression.solvers import fit

__all__ = [
    "fit",
    "Design",
    "GeometricFamily",
    "GeometricParams",
    "GeometricSolution",
    "CoefficientRow",
]
