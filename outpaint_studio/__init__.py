"""Outpaint Studio: multi-format outpainting and masked editing of photos."""

__version__ = "1.0.0"
