"""
Diagnostic plots for a fitted geometric GLM.

Pure presentation: every function reads a GeometricSolution and draws on a
matplotlib Axes. Nothing here calls plt.show() or feeds back into the fit.

Panels:
    deviance residuals vs linear predictor (with lowess smooth)
    normal Q-Q plot of deviance residuals
    deviance residuals vs observation index
    Cook's distance vs observation index
    standardized Pearson residuals vs leverage
    Cook's distance vs leverage
"""

from __future__ import annotations

from typing import TYPE_CHECKING
import numpy as np
import matplotlib.pyplot as plt
import statsmodels.api as sm
from scipy import stats

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure
    from geomglm.regression.solution import GeometricSolution


def _axes(ax: Axes | None) -> Axes:
    if ax is None:
        _, ax = plt.subplots(figsize=(5, 4))
    return ax


def _finite(*arrays: np.ndarray) -> np.ndarray:
    """Mask of positions where every array is finite."""
    mask = np.ones(len(arrays[0]), dtype=bool)
    for a in arrays:
        mask &= np.isfinite(a)
    return mask


def plot_residuals_vs_linear_predictor(
    solution: GeometricSolution,
    ax: Axes | None = None,
    frac: float = 2.0 / 3.0,
) -> Axes:
    """Deviance residuals against η̂ with a lowess smooth."""
    ax = _axes(ax)
    eta = solution.linear_predictor
    resid = solution.residuals_deviance
    ok = _finite(eta, resid)

    ax.scatter(eta[ok], resid[ok], s=12, alpha=0.7)
    if np.sum(ok) > 2:
        smooth = sm.nonparametric.lowess(resid[ok], eta[ok], frac=frac)
        ax.plot(smooth[:, 0], smooth[:, 1], color='red', linewidth=1.5)
    ax.axhline(0.0, color='grey', linestyle=':', linewidth=1)
    ax.set_xlabel('Linear predictor')
    ax.set_ylabel('Deviance residuals')
    ax.set_title('Residuals vs linear predictor')
    return ax


def plot_qq(solution: GeometricSolution, ax: Axes | None = None) -> Axes:
    """Normal quantile plot of the deviance residuals."""
    ax = _axes(ax)
    resid = solution.residuals_deviance
    stats.probplot(resid[np.isfinite(resid)], dist='norm', plot=ax)
    ax.set_xlabel('Theoretical quantiles')
    ax.set_ylabel('Deviance residuals')
    ax.set_title('Normal Q-Q')
    return ax


def plot_residuals_vs_index(solution: GeometricSolution, ax: Axes | None = None) -> Axes:
    """Deviance residuals in observation order."""
    ax = _axes(ax)
    resid = solution.residuals_deviance
    index = np.arange(1, len(resid) + 1)
    ax.scatter(index, resid, s=12, alpha=0.7)
    ax.axhline(0.0, color='grey', linestyle=':', linewidth=1)
    ax.set_xlabel('Observation')
    ax.set_ylabel('Deviance residuals')
    ax.set_title('Residuals vs index')
    return ax


def plot_cooks_vs_index(solution: GeometricSolution, ax: Axes | None = None) -> Axes:
    """Cook's distance in observation order, drawn as spikes."""
    ax = _axes(ax)
    cooks = solution.cooks_distance
    index = np.arange(1, len(cooks) + 1)
    ax.vlines(index, 0.0, cooks, linewidth=1)
    ax.set_xlabel('Observation')
    ax.set_ylabel("Cook's distance")
    ax.set_title("Cook's distance vs index")
    return ax


def plot_pearson_vs_leverage(solution: GeometricSolution, ax: Axes | None = None) -> Axes:
    """Standardized Pearson residuals against leverage."""
    ax = _axes(ax)
    ax.scatter(solution.leverage, solution.residuals_pearson_std, s=12, alpha=0.7)
    ax.axhline(0.0, color='grey', linestyle=':', linewidth=1)
    ax.set_xlabel('Leverage')
    ax.set_ylabel('Std. Pearson residuals')
    ax.set_title('Residuals vs leverage')
    return ax


def plot_cooks_vs_leverage(solution: GeometricSolution, ax: Axes | None = None) -> Axes:
    """Cook's distance against h/(1-h)."""
    ax = _axes(ax)
    lev = solution.leverage
    with np.errstate(divide='ignore', invalid='ignore'):
        ratio = lev / (1.0 - lev)
    ax.scatter(ratio, solution.cooks_distance, s=12, alpha=0.7)
    ax.set_xlabel('Leverage / (1 - leverage)')
    ax.set_ylabel("Cook's distance")
    ax.set_title("Cook's distance vs leverage")
    return ax


def plot_diagnostics(solution: GeometricSolution, figsize: tuple[float, float] = (15, 9)) -> Figure:
    """All six diagnostic panels on a 2 x 3 grid."""
    fig, axes = plt.subplots(2, 3, figsize=figsize)
    panels = (
        plot_residuals_vs_linear_predictor,
        plot_qq,
        plot_residuals_vs_index,
        plot_cooks_vs_index,
        plot_pearson_vs_leverage,
        plot_cooks_vs_leverage,
    )
    for draw, ax in zip(panels, axes.ravel()):
        draw(solution, ax=ax)
    fig.tight_layout()
    return fig
