"""
Estimator backends.

Available backends:
    CPUIWLSBackend: NumPy reference implementation
    GPUIWLSBackend: PyTorch implementation (import from backends.gpu;
        requires torch)
"""

from geomglm.regression.backends.cpu import CPUIWLSBackend

__all__ = [
    "CPUIWLSBackend",
]
