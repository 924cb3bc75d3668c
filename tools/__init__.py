"""
Lazy exports for the tools package.

Importing the package does not import the Azure SDKs until a client is used.

Usage:
	from tools import AppConfigClient, BlobStorageClient, get_search_credential
"""

from typing import Any

__all__ = [
	"AppConfigClient",
	"ConfigurationError",
	"BlobStorageClient",
	"get_search_credential",
	"get_search_endpoint",
]


def __getattr__(name: str) -> Any:  # PEP 562 lazy attribute access
	if name in ("AppConfigClient", "ConfigurationError"):
		from .appconfig import (
			AppConfigClient as _AppConfigClient,
			ConfigurationError as _ConfigurationError,
		)
		return {
			"AppConfigClient": _AppConfigClient,
			"ConfigurationError": _ConfigurationError,
		}[name]
	if name == "BlobStorageClient":
		from .blob import BlobStorageClient as _BlobStorageClient
		return _BlobStorageClient
	if name in ("get_search_credential", "get_search_endpoint"):
		from .aisearch import (
			get_search_credential as _get_search_credential,
			get_search_endpoint as _get_search_endpoint,
		)
		return {
			"get_search_credential": _get_search_credential,
			"get_search_endpoint": _get_search_endpoint,
		}[name]
	raise AttributeError(name)


def __dir__():  # help() and dir() friendliness
	return sorted(list(globals().keys()) + __all__)
