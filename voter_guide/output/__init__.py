"""Output rendering and file generation for resolution results."""

from .output_generator import OutputGenerator

__all__ = ['OutputGenerator']
