"""EasyAudit static analysis engine for Magento 2 code bases."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("easyaudit")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0-dev"

__all__ = ["__version__"]
