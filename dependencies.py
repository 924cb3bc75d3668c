"""
Provides the shared configuration client.
"""
from typing import Optional

from tools.appconfig import AppConfigClient, DEFAULT_SETTINGS_FILE

__config: Optional[AppConfigClient] = None


def get_config(settings_file: Optional[str] = None) -> AppConfigClient:
    """
    Returns the process wide AppConfigClient, creating it on first use.

    Passing a different settings file reloads it.
    """
    global __config

    if (
        __config is None
        or (settings_file is not None and settings_file != __config.settings_file)
    ):
        __config = AppConfigClient(settings_file or DEFAULT_SETTINGS_FILE)

    return __config


def reset_config() -> None:
    global __config
    __config = None
