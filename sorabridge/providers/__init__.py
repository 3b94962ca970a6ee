# -*- coding: utf-8 -*-
"""Sora2API provider — models, HTTP client + persistent config store."""

from .client import (
    DecodeError,
    NetworkError,
    NotAuthenticated,
    Ok,
    ProtocolError,
    ProviderClient,
    strip_trailing_slash,
)
from .models import (
    ConnectionResult,
    ConnectionState,
    ProviderLinks,
    SoraConfig,
    SoraStats,
    SoraToken,
)
from .storage import LocalStorage, get_storage_json_path
from .store import ConfigStore, mask_secret

__all__ = [
    # models
    "ConnectionResult",
    "ConnectionState",
    "ProviderLinks",
    "SoraConfig",
    "SoraStats",
    "SoraToken",
    # client
    "DecodeError",
    "NetworkError",
    "NotAuthenticated",
    "Ok",
    "ProtocolError",
    "ProviderClient",
    "strip_trailing_slash",
    # storage
    "LocalStorage",
    "get_storage_json_path",
    # store
    "ConfigStore",
    "mask_secret",
]
