"""Language server for the Views view-description language."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version('views-lsp')
except PackageNotFoundError:
    # Running from a source checkout.
    __version__ = '0.0.0.dev0'
