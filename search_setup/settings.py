import dataclasses
from enum import Enum
from typing import Optional, Tuple

from search_setup.catalog import DEFAULT_CATALOG_SIZE
from search_setup.skills import DEFAULT_ENABLED_SKILLS
from tools.aisearch import Credential, get_search_credential, get_search_endpoint
from tools.appconfig import AppConfigClient, ConfigurationError


class PipelineMode(str, Enum):
    # run every stage regardless of earlier failures
    BEST_EFFORT = "best-effort"
    # stop at the first stage that does not succeed
    STRICT = "strict"

    @classmethod
    def parse(cls, value: str) -> "PipelineMode":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(mode.value for mode in cls)
            raise ConfigurationError(f"Invalid pipeline mode '{value}'. Expected one of: {choices}")


def read_catalog_size(config: AppConfigClient) -> int:
    """
    Reads Catalog:Size as a non-negative whole number.

    Whole JSON numbers and numeric strings are accepted; fractions and booleans are not.
    """
    value = config.get("Catalog:Size", DEFAULT_CATALOG_SIZE, type=None)
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ConfigurationError(f"Catalog:Size must be a whole number, got {value!r}")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ConfigurationError(f"Catalog:Size must be a whole number, got '{value}'")
    if value < 0:
        raise ConfigurationError(f"Catalog:Size must not be negative, got {value}")
    return value


@dataclasses.dataclass(frozen=True)
class ResourceNames:
    data_source: str = "product-datasource"
    index: str = "products-index"
    indexer: str = "products-indexer"
    skillset: str = "product-skillset"
    container: str = "product"


@dataclasses.dataclass
class ProvisioningSettings:
    search_service_name: Optional[str]
    search_key: Optional[str]
    storage_account_name: str
    storage_account_key: str
    search_endpoint: Optional[str] = None
    names: ResourceNames = dataclasses.field(default_factory=ResourceNames)
    enabled_skills: Tuple[str, ...] = DEFAULT_ENABLED_SKILLS
    mode: PipelineMode = PipelineMode.BEST_EFFORT
    catalog_size: int = DEFAULT_CATALOG_SIZE
    client_id: Optional[str] = None

    @property
    def endpoint(self) -> str:
        return get_search_endpoint(self.search_service_name, self.search_endpoint)

    def credential(self) -> Credential:
        return get_search_credential(self.search_key, client_id=self.client_id)

    @staticmethod
    def from_app_config(config: AppConfigClient) -> "ProvisioningSettings":
        """
        Reads the provisioning settings.

        Raises:
            ConfigurationError: when a required key is missing or a value is invalid.
        """
        defaults = ResourceNames()
        search_endpoint = config.get("AISearch:Endpoint", allow_none=True)
        search_service_name = config.get("AISearch:Name", allow_none=search_endpoint is not None)

        catalog_size = read_catalog_size(config)

        return ProvisioningSettings(
            search_service_name=search_service_name,
            search_endpoint=search_endpoint,
            search_key=config.get("AISearch:Key", allow_none=True),
            storage_account_name=config.get("StorageAccount:Name"),
            storage_account_key=config.get("StorageAccount:Key"),
            names=ResourceNames(
                data_source=config.get("Resources:DataSourceName", defaults.data_source),
                index=config.get("Resources:IndexName", defaults.index),
                indexer=config.get("Resources:IndexerName", defaults.indexer),
                skillset=config.get("Resources:SkillsetName", defaults.skillset),
                container=config.get("Resources:ContainerName", defaults.container),
            ),
            enabled_skills=tuple(config.read_env_list("Skillset:EnabledSkills", default=DEFAULT_ENABLED_SKILLS)),
            mode=PipelineMode.parse(config.get("Pipeline:Mode", PipelineMode.BEST_EFFORT.value)),
            catalog_size=catalog_size,
            client_id=config.get("AZURE_CLIENT_ID", allow_none=True),
        )
