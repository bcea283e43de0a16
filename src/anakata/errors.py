"""
Exception hierarchy for the polytope engine.

Only structural problems surface as exceptions. Numeric edge cases (a zoom
denominator near zero, a hyperplane that misses every cell, a resolution of
zero) are handled where they occur and produce valid, possibly empty, results.
"""


class AnakataError(Exception):
    """Base class for every error raised by the engine."""


class MalformedShape(AnakataError):
    """A face or cell references an index outside its table.

    Raised once when a polytope is built; shapes are never repaired silently.
    """

    def __init__(self, message: str, kind: str = None, index: int = None):
        super().__init__(message)
        self.kind = kind
        self.index = index


class UnsupportedFaceArity(AnakataError):
    """A face has too few vertices to be fan-triangulated."""

    def __init__(self, face_index: int, arity: int):
        super().__init__(
            f"Face #{face_index} has {arity} vertices; "
            f"triangulation needs at least 3"
        )
        self.face_index = face_index
        self.arity = arity


class ConfigError(AnakataError, ValueError):
    """An unknown option, option value, shape name or palette name."""


class FormulaError(AnakataError, ValueError):
    """A parametric formula uses syntax outside the allowed subset."""
