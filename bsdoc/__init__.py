"""bsdoc renders an indentation-structured plain text markup into HTML."""

from .markup import Renderer, render

__version__ = "0.1.0"

__all__ = ("Renderer", "render", "__version__")
