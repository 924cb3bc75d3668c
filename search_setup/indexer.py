import logging

from azure.core.exceptions import ResourceNotFoundError
from azure.search.documents.indexes import SearchIndexerClient
from azure.search.documents.indexes.models import IndexingParameters, SearchIndexer

from search_setup.results import StageResult
from tools.aisearch import Credential

STAGE = "INDEXER"

# -1 tolerates any number of failed items, the indexer never aborts
MAX_FAILED_ITEMS = -1
MAX_FAILED_ITEMS_PER_BATCH = -1

########################################################
# Create indexer
########################################################


def build_indexer(indexer_name: str, index_name: str, data_source_name: str, skillset_name: str) -> SearchIndexer:
    parameters = IndexingParameters(
        max_failed_items=MAX_FAILED_ITEMS,
        max_failed_items_per_batch=MAX_FAILED_ITEMS_PER_BATCH,
    )
    return SearchIndexer(
        name=indexer_name,
        description=indexer_name,
        data_source_name=data_source_name,
        target_index_name=index_name,
        skillset_name=skillset_name,
        parameters=parameters,
    )


def create_indexer(
    endpoint: str,
    credential: Credential,
    indexer_name: str,
    index_name: str,
    data_source_name: str,
    skillset_name: str,
) -> StageResult:
    """
    Recreates the indexer that wires the data source and skillset into the index.

    An existing indexer with the same name is deleted first. The constructed
    indexer is always returned as the result resource; the status tells
    whether the service accepted it.
    """
    indexer = build_indexer(indexer_name, index_name, data_source_name, skillset_name)

    try:
        indexer_client = SearchIndexerClient(endpoint, credential)
    except Exception as e:
        logging.error(f"[INDEXER] Error: Cannot connect to the search service. Error: {e}")
        return StageResult.failure(STAGE, f"Cannot create indexer '{indexer_name}': {e}", error=e, resource=indexer)

    with indexer_client:
        deleted = False
        try:
            indexer_client.get_indexer(indexer_name)
            logging.info(f"[INDEXER] Indexer '{indexer_name}' exists. Deleting it...")
            indexer_client.delete_indexer(indexer_name)
            deleted = True
        except ResourceNotFoundError:
            logging.info(f"[INDEXER] Indexer '{indexer_name}' does not exist yet.")
        except Exception as e:
            logging.warning(f"[INDEXER] Could not delete the existing Indexer '{indexer_name}'. Error: {e}")

        logging.info(f"[INDEXER] Creating the Indexer '{indexer_name}'...")
        try:
            indexer_client.create_indexer(indexer)
        except Exception as e:
            logging.error(f"[INDEXER] Failed to create the Indexer '{indexer_name}'. Exception Message: {e}")
            return StageResult.failure(STAGE, f"Cannot create indexer '{indexer_name}': {e}", error=e, resource=indexer, deleted=deleted)

    logging.info(f"[INDEXER] Indexer '{indexer_name}' created.")
    return StageResult.success(
        STAGE,
        f"Indexer '{indexer_name}' wires '{data_source_name}' through '{skillset_name}' into '{index_name}'",
        resource=indexer,
        deleted=deleted,
    )
