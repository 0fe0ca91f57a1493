"""
errors.py — Visualizer Error Hierarchy
=======================================
Every failure the engine reports is a VisualizerError subclass.

    VisualizerError
      ├── InvalidTransition        command not allowed in the current state
      ├── InvalidArgument          bad delay / value / record id
      │     └── UnknownAlgorithm   algorithm key not in the registry
      ├── GeneratorExhaustedError  pull after exhaustion was already reported
      ├── InvariantViolation       snapshot failed the permutation / order check
      └── StepFailed               a step raised something unexpected (e.g. the renderer)

InvalidTransition, InvalidArgument and GeneratorExhaustedError are
recoverable: the controller reports them and stays in a safe state.
InvariantViolation means an algorithm is broken and StepFailed wraps any
other exception raised while pulling or publishing a step; either one
aborts the current run.
"""

from typing import Any, Dict, Optional


class VisualizerError(Exception):
    """Base class for all engine errors."""

    kind = "error"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": str(self), "kind": self.kind}


class InvalidTransition(VisualizerError):
    kind = "invalid_transition"

    def __init__(self, command: str, state: str):
        super().__init__(f"Cannot {command} while {state}")
        self.command = command
        self.state = state


class InvalidArgument(VisualizerError, ValueError):
    kind = "invalid_argument"


class UnknownAlgorithm(InvalidArgument):
    kind = "unknown_algorithm"

    def __init__(self, key: Any):
        super().__init__(f"Unknown algorithm: {key}")
        self.key = key


class GeneratorExhaustedError(VisualizerError):
    kind = "generator_exhausted"


class InvariantViolation(VisualizerError):
    """
    Attributes:
        step   : 1-based index of the offending step (0 = before any step).
        detail : Diagnostic data (expected / actual values, ids, …).
    """

    kind = "invariant_violation"

    def __init__(self, message: str, step: int = 0, detail: Optional[Dict[str, Any]] = None):
        super().__init__(f"{message} (step {step})")
        self.step = step
        self.detail = detail or {}

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["step"] = self.step
        data["detail"] = self.detail
        return data


class StepFailed(VisualizerError):
    """An unexpected exception while pulling or publishing a step (chained as __cause__)."""

    kind = "step_failed"

    def __init__(self, step: int, cause: BaseException):
        super().__init__(f"Step {step} failed: {type(cause).__name__}: {cause}")
        self.step = step
