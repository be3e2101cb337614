"""Exceptions raised by the colour, palette and dithering layers."""

from __future__ import annotations


class FormatError(ValueError):
    """A hex colour string could not be parsed."""


class UnknownKernelError(ValueError):
    """A dithering kernel selector is outside the known kernels."""


class EmptyPaletteError(ValueError):
    """A nearest-colour lookup was requested against an empty palette."""
