"""
Generic result container for geomglm computations.

The Result class is the standardized envelope around a backend's parameter
payload. It carries timing, backend identity and non-fatal warnings next to
the numbers, so solution wrappers and tooling never have to know which
backend produced them.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (method, iterations, device)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for statistical computations.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific parameters (coefficients, residuals, etc.)
        info: Structured metadata (method, iterations, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=GeometricParams(...),
        ...     info={'method': 'iwls', 'iterations': 7},
        ...     timing={'total_seconds': 0.01, 'iwls': 0.008},
        ...     backend_name='cpu_iwls'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
