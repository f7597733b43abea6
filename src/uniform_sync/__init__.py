"""Compare and synchronize Uniform component definitions between two projects."""

__version__ = "0.3.0"
