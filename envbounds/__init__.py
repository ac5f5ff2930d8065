"""Proof search for lower bounds on environment derivatives of passage times, with LaTeX reports."""

__version__ = "0.1.0"
__all__ = ["__version__"]