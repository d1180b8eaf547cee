"""
Regression solution types.

Contains the parameter payload produced by the estimator backends and the
user-facing solution wrapper.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray
from scipy import stats

from geomglm.core.result import Result

if TYPE_CHECKING:
    from geomglm.regression.design import Design


@dataclass(frozen=True)
class GeometricParams:
    """
    Parameter payload for a fitted geometric GLM.

    Everything here is computed once, from the converged coefficients,
    and never mutated afterwards.
    """
    y: NDArray[np.floating[Any]]

    # Coefficients and inference
    coefficients: NDArray[np.floating[Any]]
    standard_errors: NDArray[np.floating[Any]]
    covariance: NDArray[np.floating[Any]]
    z_statistics: NDArray[np.floating[Any]]
    p_values: NDArray[np.floating[Any]]

    # Fit on each observation
    fitted_values: NDArray[np.floating[Any]]
    linear_predictor: NDArray[np.floating[Any]]
    probabilities: NDArray[np.floating[Any]]
    weights: NDArray[np.floating[Any]]

    # Residuals and influence
    residuals: NDArray[np.floating[Any]]
    residuals_pearson: NDArray[np.floating[Any]]
    residuals_pearson_std: NDArray[np.floating[Any]]
    residuals_deviance: NDArray[np.floating[Any]]
    residuals_deviance_std: NDArray[np.floating[Any]]
    deviance_lc: NDArray[np.floating[Any]]
    leverage: NDArray[np.floating[Any]]
    cooks_distance: NDArray[np.floating[Any]]

    # Goodness of fit
    deviance: float
    null_deviance: float
    log_likelihood: float
    aic: float

    # Bookkeeping
    rank: int
    df_residual: int
    df_null: int
    n_iter: int
    score: float
    converged: bool


@dataclass(frozen=True)
class CoefficientRow:
    """One line of the coefficient table."""
    name: str
    estimate: float
    std_error: float
    z_value: float
    p_value: float


def _significance_stars(p: float) -> str:
    """Return significance stars like R."""
    if not np.isfinite(p):
        return ' '
    if p < 0.001:
        return '***'
    elif p < 0.01:
        return '**'
    elif p < 0.05:
        return '*'
    elif p < 0.1:
        return '.'
    return ' '


def _format_pvalue(p: float) -> str:
    """Format p-value like R."""
    if not np.isfinite(p):
        return 'NA'
    if p < 2e-16:
        return '< 2e-16'
    elif p < 0.001:
        return f'{p:.2e}'
    return f'{p:.4f}'


class GeometricSolution:
    """
    User-facing results of a geometric GLM fit.

    Wraps the backend Result and the Design that produced it. The numeric
    bundle is read-only; the presentation helpers (coef_table, summary,
    geomglm.regression.plots) consume it without feeding anything back.
    """

    def __init__(self, _result: Result[GeometricParams], _design: 'Design'):
        self._result = _result
        self._design = _design

    @property
    def params(self) -> GeometricParams:
        return self._result.params

    # --- Coefficients ---

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self.params.coefficients

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        return self.params.standard_errors

    @property
    def covariance(self) -> NDArray[np.floating[Any]]:
        """Covariance of the coefficients, (X'ŴX)⁻¹."""
        return self.params.covariance

    @property
    def z_statistics(self) -> NDArray[np.floating[Any]]:
        return self.params.z_statistics

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided normal p-values, 2Φ(-|z|)."""
        return self.params.p_values

    # --- Per-observation quantities ---

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        return self.params.y

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        """Fitted means μ̂."""
        return self.params.fitted_values

    @property
    def linear_predictor(self) -> NDArray[np.floating[Any]]:
        return self.params.linear_predictor

    @property
    def probabilities(self) -> NDArray[np.floating[Any]]:
        """Fitted success probabilities π̂ = 1/μ̂."""
        return self.params.probabilities

    @property
    def weights(self) -> NDArray[np.floating[Any]]:
        """IWLS weights Ŵ at convergence."""
        return self.params.weights

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        """Raw residuals y - μ̂."""
        return self.params.residuals

    @property
    def residuals_pearson(self) -> NDArray[np.floating[Any]]:
        return self.params.residuals_pearson

    @property
    def residuals_pearson_std(self) -> NDArray[np.floating[Any]]:
        return self.params.residuals_pearson_std

    @property
    def residuals_deviance(self) -> NDArray[np.floating[Any]]:
        return self.params.residuals_deviance

    @property
    def residuals_deviance_std(self) -> NDArray[np.floating[Any]]:
        return self.params.residuals_deviance_std

    @property
    def leverage(self) -> NDArray[np.floating[Any]]:
        """Diagonal of the hat matrix."""
        return self.params.leverage

    @property
    def cooks_distance(self) -> NDArray[np.floating[Any]]:
        return self.params.cooks_distance

    # --- Fit statistics ---

    @property
    def deviance(self) -> float:
        return self.params.deviance

    @property
    def null_deviance(self) -> float:
        return self.params.null_deviance

    @property
    def log_likelihood(self) -> float:
        return self.params.log_likelihood

    @property
    def aic(self) -> float:
        return self.params.aic

    @property
    def rank(self) -> int:
        """Number of coefficients p."""
        return self.params.rank

    @property
    def df_residual(self) -> int:
        return self.params.df_residual

    @property
    def df_null(self) -> int:
        return self.params.df_null

    @property
    def n_iter(self) -> int:
        return self.params.n_iter

    @property
    def score(self) -> float:
        """sum(|U|) at the last IWLS iteration."""
        return self.params.score

    @property
    def converged(self) -> bool:
        return self.params.converged

    # --- Envelope ---

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Derived views ---

    def hat_matrix(self) -> NDArray[np.floating[Any]]:
        """
        Full hat matrix H = X (X'ŴX)⁻¹ X'Ŵ (n x n).

        Built on demand; the fit itself only stores its diagonal.
        """
        X = self._design.X
        return X @ self.covariance @ (X * self.weights[:, np.newaxis]).T

    def conf_int(self, level: float = 0.95) -> NDArray[np.floating[Any]]:
        """
        Wald confidence intervals for the coefficients.

        Args:
            level: Confidence level in (0, 1)

        Returns:
            Array (p, 2) of [lower, upper] bounds
        """
        if not 0.0 < level < 1.0:
            raise ValueError(f"level must be in (0, 1), got {level}")
        q = stats.norm.ppf(0.5 + level / 2.0)
        half = q * self.standard_errors
        return np.column_stack([self.coefficients - half, self.coefficients + half])

    def coef_table(self, names: Sequence[str] | None = None) -> list[CoefficientRow]:
        """
        Per-coefficient estimate, standard error, z value and p-value.

        Args:
            names: Covariate names; defaults to β[0], β[1], ...
        """
        if names is None:
            names = [f"β[{i}]" for i in range(self.rank)]
        elif len(names) != self.rank:
            raise ValueError(
                f"Expected {self.rank} coefficient names, got {len(names)}"
            )
        return [
            CoefficientRow(
                name=str(name),
                estimate=float(b),
                std_error=float(se),
                z_value=float(z),
                p_value=float(pv),
            )
            for name, b, se, z, pv in zip(
                names, self.coefficients, self.standard_errors,
                self.z_statistics, self.p_values,
            )
        ]

    def summary(self, names: Sequence[str] | None = None) -> str:
        """Generate R-style summary output."""
        rows = self.coef_table(names)
        width = max([len(r.name) for r in rows] + [8])

        lines = [
            "Geometric GLM Results",
            "=" * 72,
            "Family: geometric    Link: log(mu - 1)",
            f"Observations: {self._design.n}    Parameters: {self.rank}    "
            f"Residual DF: {self.df_residual}",
            "",
            "Coefficients:",
            f"{'':<{width}} {'Estimate':>12} {'Std. Error':>12} {'z value':>9} {'Pr(>|z|)':>10}",
        ]
        for r in rows:
            lines.append(
                f"{r.name:<{width}} {r.estimate:12.6f} {r.std_error:12.6f} "
                f"{r.z_value:9.3f} {_format_pvalue(r.p_value):>10} "
                f"{_significance_stars(r.p_value)}"
            )
        lines.extend([
            "---",
            "Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1",
            "",
            f"    Null deviance: {self.null_deviance:.4f}  on {self.df_null} degrees of freedom",
            f"Residual deviance: {self.deviance:.4f}  on {self.df_residual} degrees of freedom",
            f"AIC: {self.aic:.4f}",
            "",
            f"IWLS iterations: {self.n_iter} (score sum = {self.score:.3e})",
            f"Backend: {self.backend_name}",
        ])
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        for w in self.warnings:
            lines.append(f"Warning: {w}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"GeometricSolution(n={self._design.n}, p={self.rank}, "
            f"deviance={self.deviance:.4f}, n_iter={self.n_iter})"
        )
