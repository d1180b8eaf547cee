"""
Weighted cross-product inversion.

Every IWLS step needs (X'WX)⁻¹. Inversion itself is delegated to LAPACK
(via NumPy) or to PyTorch; this module only decides whether the matrix is
invertible. Singularity is judged on the reduced QR factor of √W·X rather
than on X'WX, whose condition number is the square of the former.

Numerical rank rule (shared by CPU and GPU paths):
    rank = #{ j : |R_jj| > max(n, p) · eps · |R_00| }
"""

from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray

from geomglm.core.exceptions import SingularMatrixError

if TYPE_CHECKING:
    import torch


def numerical_rank(diag_R: NDArray[np.floating[Any]], shape: tuple[int, int], eps: float) -> int:
    """Count diagonal entries of R above the rank tolerance."""
    if len(diag_R) == 0 or not diag_R[0] > 0:
        return 0
    tol = max(shape) * eps * diag_R[0]
    return int(np.sum(diag_R > tol))


def _singular(rank: int, p: int, matrix_name: str, iteration: int | None) -> SingularMatrixError:
    where = f" at IWLS iteration {iteration}" if iteration is not None else ""
    return SingularMatrixError(
        f"{matrix_name} is singular{where}: rank={rank}, expected={p}. "
        f"This indicates perfectly collinear columns in X.",
        matrix_name=matrix_name,
        rank=rank,
        expected_rank=p,
        iteration=iteration,
    )


def invert_weighted_crossprod(
    X: NDArray[np.floating[Any]],
    w: NDArray[np.floating[Any]],
    matrix_name: str = "X'WX",
    iteration: int | None = None,
) -> NDArray[np.floating[Any]]:
    """
    Form X'WX and invert it (CPU).

    Args:
        X: Design matrix (n x p)
        w: Non-negative finite weights (n,)
        matrix_name: Name used in error messages
        iteration: Current IWLS iteration, recorded on failure

    Returns:
        (X'WX)⁻¹ (p x p)

    Raises:
        SingularMatrixError: If √W·X is numerically rank-deficient
    """
    p = X.shape[1]
    Xw = X * np.sqrt(w)[:, np.newaxis]
    R = np.linalg.qr(Xw, mode='r')
    rank = numerical_rank(np.abs(np.diag(R)), Xw.shape, np.finfo(np.float64).eps)
    if rank < p:
        raise _singular(rank, p, matrix_name, iteration)

    XtWX = (X * w[:, np.newaxis]).T @ X
    try:
        return np.linalg.inv(XtWX)
    except np.linalg.LinAlgError as e:
        raise _singular(rank, p, matrix_name, iteration) from e


def invert_weighted_crossprod_gpu(
    X: 'torch.Tensor',
    w: 'torch.Tensor',
    matrix_name: str = "X'WX",
    iteration: int | None = None,
) -> 'torch.Tensor':
    """
    Form X'WX and invert it on the tensors' device.

    Args:
        X: Design matrix tensor (n x p)
        w: Weight tensor (n,) on the same device
        matrix_name: Name used in error messages
        iteration: Current IWLS iteration, recorded on failure

    Returns:
        (X'WX)⁻¹ as a tensor on the input device

    Raises:
        SingularMatrixError: If √W·X is numerically rank-deficient
    """
    import torch

    p = X.shape[1]
    Xw = X * torch.sqrt(w).unsqueeze(1)
    try:
        R = torch.linalg.qr(Xw, mode='r').R
    except NotImplementedError:
        # MPS has no QR kernel; p x p work on host is cheap
        R = torch.linalg.qr(Xw.cpu(), mode='r').R
    diag_R = torch.abs(torch.diagonal(R)).cpu().numpy()
    rank = numerical_rank(diag_R, tuple(Xw.shape), torch.finfo(X.dtype).eps)
    if rank < p:
        raise _singular(rank, p, matrix_name, iteration)

    XtWX = (X * w.unsqueeze(1)).T @ X
    inverse, info = torch.linalg.inv_ex(XtWX)
    if int(info.item()) != 0:
        raise _singular(rank, p, matrix_name, iteration)

    return inverse
