"""Benchmark apps on OpenHarmony devices using hitrace timing markers."""

__version__ = "0.2.2"
__all__ = ["__version__"]