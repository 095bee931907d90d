"""A small terminal text editor with syntax highlighting and search."""

from .constants import KILO_VERSION as __version__
from .document import Document
from .editor import Editor, run

__all__ = ["Document", "Editor", "run", "__version__"]
