"""spaces CLI: create, find and remove disposable git clones."""

from ._helpers import main  # noqa: F401  (entry point)

# Import command modules to register Click commands with the main group.
from . import _spaces, _copy, _clean, _mirror, _config  # noqa: F401
