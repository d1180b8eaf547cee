"""
Tolerance tiers for numerical comparison.

Defines how closely a compute path is expected to reproduce the CPU float64
reference. GPU_FP64 bounds the CUDA backend against CPU; float32 devices
cannot resolve the default score tolerance, so the GPU backend raises it to
FP32_SCORE_FLOOR.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


GPU_FP64 = ToleranceTier(
    rtol=1e-8,
    atol=1e-10,
    name='gpu_fp64',
    description='GPU double precision, matches CPU up to summation order',
)

# Smallest score tolerance a float32 IWLS loop can be asked to reach.
FP32_SCORE_FLOOR = 1e-3
