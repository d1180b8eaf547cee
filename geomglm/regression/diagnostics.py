"""
Post-convergence derivations for the geometric GLM.

Given the converged coefficients, compute everything the result bundle
carries: hat-matrix leverage, the residual family, deviance, Wald tests and
Cook's distance. Both the CPU and GPU backends finish here, on CPU in
float64, so their bundles are computed identically.

Quantities (n observations, p coefficients):
    H        = X (X'ŴX)⁻¹ X'Ŵ,  leverage = diag(H)
    h        = sqrt(1 - leverage)           (residual scaling term)
    Pearson  = (y - μ̂) / V̂,   standardized = Pearson / h
    lc       = (y-1) log((y-1)/(μ̂-1)),     non-finite → 0
    deviance = 2 Σ (lc + y log(μ̂/y))
    dev res  = sign(y - μ̂) sqrt(lc + y log(μ̂/y)),  standardized = / h
    Cook's D = (1/p) · standardized Pearson² · leverage / (1 - leverage)

Non-finite values other than lc are left in place and reported through
the returned warning list.
"""

from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy import stats

from geomglm.core.compute.linalg import invert_weighted_crossprod
from geomglm.regression.design import Design
from geomglm.regression.family import GeometricFamily
from geomglm.regression.solution import GeometricParams


def leverage(
    X: NDArray[np.floating[Any]],
    w: NDArray[np.floating[Any]],
    cov: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]]:
    """diag(X (X'WX)⁻¹ X'W) without forming the n x n matrix."""
    return np.einsum('ij,jk,ik->i', X, cov, X) * w


def null_deviance(y: NDArray[np.floating[Any]], family: GeometricFamily) -> float:
    """Deviance of the intercept-only fit, whose MLE is μ = mean(y)."""
    mu0 = np.full_like(y, np.mean(y))
    return family.deviance(y, mu0)


def derive(
    design: Design,
    coefficients: NDArray[np.floating[Any]],
    family: GeometricFamily,
    n_iter: int,
    score: float,
) -> tuple[GeometricParams, list[str]]:
    """
    Build the result payload from converged coefficients.

    Args:
        design: Validated inputs
        coefficients: Converged βhat (p,)
        family: Geometric family functions
        n_iter: IWLS iterations taken
        score: Final sum(|U|)

    Returns:
        (GeometricParams, warnings) where warnings lists any non-finite
        statistics that were passed through

    Raises:
        SingularMatrixError: If X'ŴX is singular at the converged estimate
    """
    X, y = design.X, design.y
    n, p = design.n, design.p
    beta = np.asarray(coefficients, dtype=np.float64)

    eta = X @ beta
    mu = family.linkinv(eta)
    var_mu = family.variance(mu)
    w = family.weights(mu)
    pi = 1.0 / mu

    inv = invert_weighted_crossprod(X, w, matrix_name="X'ŴX")
    cov = 0.5 * (inv + inv.T)
    lev = leverage(X, w, cov)

    with np.errstate(divide='ignore', invalid='ignore'):
        h = np.sqrt(1.0 - lev)

        se = np.sqrt(np.diag(cov))
        z_stat = beta / se
        p_val = 2.0 * stats.norm.cdf(-np.abs(z_stat))

        resid = y - mu
        pearson = resid / var_mu
        pearson_std = pearson / h

        lc = family.deviance_lc(y, mu)
        unit_dev = lc + y * np.log(mu / y)
        # unit_dev is non-negative up to rounding; NaN still propagates
        dev_resid = np.sign(resid) * np.sqrt(np.maximum(unit_dev, 0.0))
        dev_resid_std = dev_resid / h

        cooks = (1.0 / p) * pearson_std ** 2 * (lev / (1.0 - lev))

    deviance = float(2.0 * np.sum(unit_dev))

    params = GeometricParams(
        y=y,
        coefficients=beta,
        standard_errors=se,
        covariance=cov,
        z_statistics=z_stat,
        p_values=p_val,
        fitted_values=mu,
        linear_predictor=eta,
        probabilities=pi,
        weights=w,
        residuals=resid,
        residuals_pearson=pearson,
        residuals_pearson_std=pearson_std,
        residuals_deviance=dev_resid,
        residuals_deviance_std=dev_resid_std,
        deviance_lc=lc,
        leverage=lev,
        cooks_distance=cooks,
        deviance=deviance,
        null_deviance=null_deviance(y, family),
        log_likelihood=family.log_likelihood(y, mu),
        aic=family.aic(y, mu, p),
        rank=p,
        df_residual=n - p,
        df_null=n - 1,
        n_iter=n_iter,
        score=score,
        converged=True,
    )

    return params, _non_finite_report(params)


_CHECKED_FIELDS = (
    'standard_errors', 'z_statistics', 'p_values', 'fitted_values',
    'residuals_pearson_std', 'residuals_deviance', 'residuals_deviance_std',
    'leverage', 'cooks_distance', 'deviance', 'aic',
)


def _non_finite_report(params: GeometricParams) -> list[str]:
    messages = []
    for name in _CHECKED_FIELDS:
        values = np.atleast_1d(getattr(params, name))
        bad = int(np.sum(~np.isfinite(values)))
        if bad:
            messages.append(f"{name}: {bad} non-finite value(s)")
    return messages
