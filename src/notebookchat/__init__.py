"""notebookchat: chat with the sources of your NotebookLM notebooks."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("notebookchat")
except PackageNotFoundError:  # running from a source checkout
    __version__ = "0.0.0"
