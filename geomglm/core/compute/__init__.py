"""
Shared compute infrastructure for geomglm.

This is NOT where estimator backends live; those go in
regression/backends/. This package holds the numeric plumbing the backends
share.

Submodules:
    device: Hardware detection and device selection
    timing: Phase timing
    linalg: Weighted cross-product inversion with singularity checks
    tolerances: Precision tiers per compute path
"""

from geomglm.core.compute.device import (
    DeviceInfo,
    detect_gpu,
    get_cpu_info,
    select_device,
)
from geomglm.core.compute.linalg import invert_weighted_crossprod
from geomglm.core.compute.timing import Timer

__all__ = [
    # Device detection
    "DeviceInfo",
    "detect_gpu",
    "get_cpu_info",
    "select_device",
    # Linear algebra
    "invert_weighted_crossprod",
    # Timing
    "Timer",
]
