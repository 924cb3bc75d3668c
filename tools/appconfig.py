import os
import json
import logging

from typing import Dict, Any
from azure.identity import ChainedTokenCredential, ManagedIdentityCredential, AzureCliCredential
from azure.appconfiguration.provider import (
    AzureAppConfigurationKeyVaultOptions,
    load,
    SettingSelector
)

from tenacity import retry, wait_random_exponential, stop_after_attempt

DEFAULT_SETTINGS_FILE = "appsettings.json"


class ConfigurationError(Exception):
    """Raised when a required setting is missing or cannot be converted."""


def flatten_settings(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """
    Flattens nested JSON objects into colon separated keys.

    {"AISearch": {"Name": "x"}} becomes {"AISearch:Name": "x"}. Lists and
    scalars are kept as values.
    """
    flat = {}
    for key, value in data.items():
        full_key = f"{prefix}:{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten_settings(value, full_key))
        else:
            flat[full_key] = value
    return flat


def retry_before_sleep(retry_state):
    # Log the outcome of each retry attempt.
    message = f"""Retrying {retry_state.fn}:
                    attempt {retry_state.attempt_number}
                    ended with: {retry_state.outcome}"""
    if retry_state.outcome.failed:
        ex = retry_state.outcome.exception()
        message += f"; Exception: {ex.__class__.__name__}: {ex}"
    if retry_state.attempt_number < 1:
        logging.info(message)
    else:
        logging.warning(message)


def load_settings_file(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8-sig") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file '{path}' must contain a JSON object.")
    return flatten_settings(data)


class AppConfigClient:

    credential = None

    def __init__(self, settings_file: str = DEFAULT_SETTINGS_FILE):
        """
        Loads the settings file into an in-memory dict and, when APP_CONFIG_ENDPOINT
        is set, connects to Azure App Configuration as a fallback source.

        Raises:
            FileNotFoundError: if the settings file does not exist.
            ConfigurationError: if the settings file is not valid JSON or App Configuration is unreachable.
        """
        self.settings_file = settings_file
        self.client_id = os.environ.get('AZURE_CLIENT_ID') or None

        self.allow_env_vars = os.environ.get("allow_environment_variables", "false").strip().lower() in ['true', '1', 'yes']

        if not os.path.isfile(settings_file):
            raise FileNotFoundError(f"Cannot Read Configuration File '{settings_file}'")

        try:
            self.settings = load_settings_file(settings_file)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Configuration File '{settings_file}' is not valid JSON. {e}") from e
        logging.debug(f"[appconfig] Loaded {len(self.settings)} settings from '{settings_file}'.")

        self.client = None
        endpoint = os.getenv("APP_CONFIG_ENDPOINT")
        if endpoint:
            self.credential = ChainedTokenCredential(
                ManagedIdentityCredential(client_id=self.client_id),
                AzureCliCredential()
            )
            no_label_selector = SettingSelector(label_filter=None, key_filter='*')
            try:
                self.client = load(selects=[no_label_selector], endpoint=endpoint, credential=self.credential, key_vault_options=AzureAppConfigurationKeyVaultOptions(credential=self.credential))
            except Exception as e:
                raise ConfigurationError(f"Unable to connect to Azure App Configuration. Please check APP_CONFIG_ENDPOINT setting. {e}") from e

    def get(self, key: str, default: Any = None, type: type = str, allow_none : bool = False) -> Any:
        return self.get_value(key, default=default, allow_none=allow_none, type=type)

    def get_value(self, key: str, default: Any = None, allow_none: bool = False, type: type = str) -> Any:

        if key is None:
            raise ConfigurationError('The key parameter is required for get_value().')

        value = None

        if self.allow_env_vars is True:
            value = os.environ.get(key)
            if value is None:
                # "AISearch:Name" may be exported as AISearch__Name
                value = os.environ.get(key.replace(":", "__"))

        if value is None:
            value = self.settings.get(key)

        if value is None and self.client is not None:
            try:
                value = self.get_config_with_retry(name=key)
            except Exception as e:
                logging.debug(f"[appconfig] '{key}' not found in Azure App Configuration. {e}")

        if value is not None:
            if type is not None and not isinstance(value, (list, dict)):
                if type is bool:
                    if isinstance(value, str):
                        value = value.strip().lower() in ['true', '1', 'yes']
                    else:
                        value = bool(value)
                else:
                    try:
                        value = type(value)
                    except ValueError as e:
                        raise ConfigurationError(f'Value for {key} could not be converted to {type.__name__}. Error: {e}')
            return value
        else:
            if default is not None or allow_none is True:
                return default

            raise ConfigurationError(f'The configuration variable {key} not found.')

    @retry(
        wait=wait_random_exponential(multiplier=1, max=5),
        stop=stop_after_attempt(5),
        before_sleep=retry_before_sleep
    )
    def get_config_with_retry(self, name):
        return self.client.get(name)

    # Helper functions for reading settings
    def read_env_list(self, var_name, default=None):
        value = self.get_value(var_name, default="", type=None)
        if isinstance(value, list):
            items = [str(item).strip() for item in value]
        else:
            value = str(value).strip()
            if value.startswith("["):
                try:
                    items = [str(item).strip() for item in json.loads(value)]
                except json.JSONDecodeError as e:
                    raise ConfigurationError(f'Value for {var_name} is not a valid JSON list. Error: {e}')
            else:
                items = [item.strip() for item in value.split(",")]
        items = [item for item in items if item]
        if not items and default is not None:
            return list(default)
        return items

    def read_env_boolean(self, var_name, default=False):
        value = str(self.get_value(var_name, str(default))).strip().lower()
        return value in ['true', '1', 'yes']
