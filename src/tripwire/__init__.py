"""tripwire: secret-leak notifications for chat and webhook endpoints."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tripwire-alerts")
except PackageNotFoundError:
    __version__ = "0.4.0"
