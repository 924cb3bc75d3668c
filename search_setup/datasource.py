import logging

from azure.search.documents.indexes import SearchIndexerClient
from azure.search.documents.indexes.models import (
    SearchIndexerDataContainer,
    SearchIndexerDataSourceConnection,
)

from search_setup.results import StageResult
from tools.aisearch import Credential
from tools.blob import BlobStorageClient, build_storage_connection_string

STAGE = "DATA SOURCE"

########################################################
# Create Data Source in AI Search
########################################################


def ensure_container(storage_account_name: str, storage_account_key: str, container_name: str) -> bool:
    """Creates the blob container if missing. Raises on any storage error."""
    with BlobStorageClient(storage_account_name, storage_account_key) as blob_client:
        return blob_client.ensure_container(container_name)


def create_storage_data_source(
    endpoint: str,
    credential: Credential,
    data_source_name: str,
    storage_account_name: str,
    storage_account_key: str,
    container_name: str,
) -> StageResult:
    """
    Creates or updates a blob data source connection on the search service.

    The container is created first when missing. A container failure is
    logged but does not prevent registering the data source; the stage is
    then reported as partial.
    """
    container_error = None
    try:
        created = ensure_container(storage_account_name, storage_account_key, container_name)
        if created:
            logging.info(f"[DATA SOURCE] Container '{container_name}' created successfully.")
        else:
            logging.info(f"[DATA SOURCE] Container '{container_name}' already exists.")
    except Exception as e:
        container_error = e
        logging.error(f"[DATA SOURCE] Error: Cannot Create Container '{container_name}'. Error: {e}")

    try:
        data_source = SearchIndexerDataSourceConnection(
            name=data_source_name,
            type="azureblob",
            connection_string=build_storage_connection_string(storage_account_name, storage_account_key),
            container=SearchIndexerDataContainer(name=container_name),
        )

        with SearchIndexerClient(endpoint, credential) as indexer_client:
            result = indexer_client.create_or_update_data_source_connection(data_source)
    except Exception as e:
        logging.error(f"[DATA SOURCE] Error: Cannot Create Data Source {data_source_name}. Error: {e}")
        return StageResult.failure(
            STAGE,
            f"Cannot create data source '{data_source_name}': {e}",
            error=e,
            container_error=str(container_error) if container_error else None,
        )

    if container_error is not None:
        logging.warning(f"[DATA SOURCE] Data Source {data_source_name} registered but container '{container_name}' is not available.")
        return StageResult.partial(
            STAGE,
            f"Data source '{data_source_name}' registered but container '{container_name}' could not be created: {container_error}",
            resource=result,
            error=container_error,
        )

    logging.info(f"[DATA SOURCE] Data Source {data_source_name} Status: OK")
    return StageResult.success(STAGE, f"Data source '{data_source_name}' points at container '{container_name}'", resource=result)
