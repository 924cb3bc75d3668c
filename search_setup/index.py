import logging
import random
from typing import Optional

from azure.core.exceptions import ResourceNotFoundError
from azure.search.documents import SearchClient
from azure.search.documents.indexes import SearchIndexClient
from azure.search.documents.indexes.models import SearchIndex

from search_setup.catalog import DEFAULT_CATALOG_SIZE, Product, build_fields, generate_catalog
from search_setup.results import StageResult
from tools.aisearch import Credential

STAGE = "INDEX"

# the service rejects batches with more actions
MAX_UPLOAD_BATCH_SIZE = 1000

########################################################
# Create index
########################################################


def create_index(
    endpoint: str,
    credential: Credential,
    index_name: str,
    catalog_size: int = DEFAULT_CATALOG_SIZE,
    rng: Optional[random.Random] = None,
) -> StageResult:
    """
    Ensures the product index exists.

    An existing index is left untouched. A missing index is created with the
    schema derived from `Product` and seeded with a generated catalog; the
    upload is awaited so a partially seeded index is reported as such.

    Args:
        endpoint: search service endpoint, e.g. https://<name>.search.windows.net
        credential: admin key or token credential for the search service
        index_name: name of the index to ensure
        catalog_size: number of sample products uploaded on creation
        rng: optional random source for the generated catalog
    """
    try:
        with SearchIndexClient(endpoint, credential) as index_client:
            try:
                index = index_client.get_index(index_name)
                logging.info(f"[INDEX] Index '{index_name}' Exists!")
                return StageResult.success(STAGE, f"Index '{index_name}' exists", resource=index, created=False)
            except ResourceNotFoundError:
                logging.info(f"[INDEX] Index '{index_name}' not found. Creating it...")

            index = index_client.create_index(SearchIndex(name=index_name, fields=build_fields(Product)))
            logging.info(f"[INDEX] Index '{index_name}' Created!")

            return upload_catalog(index_client.get_search_client(index_name), index, catalog_size, rng)
    except Exception as e:
        logging.error(f"[INDEX] Error: Cannot Create Index '{index_name}'. Error: {e}")
        return StageResult.failure(STAGE, f"Cannot create index '{index_name}': {e}", error=e)


def upload_catalog(
    search_client: SearchClient,
    index: SearchIndex,
    catalog_size: int = DEFAULT_CATALOG_SIZE,
    rng: Optional[random.Random] = None,
) -> StageResult:
    """Uploads a fresh catalog into a just created index and reports per-document failures."""
    products = list(generate_catalog(catalog_size, rng))
    documents = [product.to_document() for product in products]

    if not documents:
        logging.info(f"[INDEX] No documents to upload into '{index.name}'.")
        return StageResult.success(STAGE, f"Index '{index.name}' created", resource=index, created=True, uploaded=0)

    results = []
    try:
        with search_client:
            for start in range(0, len(documents), MAX_UPLOAD_BATCH_SIZE):
                batch = documents[start:start + MAX_UPLOAD_BATCH_SIZE]
                logging.debug(f"[INDEX] Uploading documents {start + 1}-{start + len(batch)} into '{index.name}'.")
                results.extend(search_client.upload_documents(documents=batch))
    except Exception as e:
        logging.error(f"[INDEX] Error: Index '{index.name}' created but the catalog upload failed. Error: {e}")
        accepted = {result.key for result in results if result.succeeded}
        return StageResult.partial(
            STAGE,
            f"Index '{index.name}' created but the catalog upload failed: {e}",
            resource=index,
            error=e,
            created=True,
            uploaded=len(accepted),
            failed_keys=[document["id"] for document in documents if document["id"] not in accepted],
        )

    failed_keys = [result.key for result in results if not result.succeeded]
    uploaded = len(documents) - len(failed_keys)

    if failed_keys:
        for result in results:
            if not result.succeeded:
                logging.warning(f"[INDEX] Document '{result.key}' was not indexed: {result.error_message}")
        logging.error(f"[INDEX] Uploaded {uploaded}/{len(documents)} documents into '{index.name}'.")
        return StageResult.partial(
            STAGE,
            f"Index '{index.name}' created but {len(failed_keys)} of {len(documents)} documents failed to upload",
            resource=index,
            created=True,
            uploaded=uploaded,
            failed_keys=failed_keys,
        )

    logging.info(f"[INDEX] Uploaded {uploaded} documents into '{index.name}'.")
    return StageResult.success(STAGE, f"Index '{index.name}' created with {uploaded} documents", resource=index, created=True, uploaded=uploaded)

########################################################
# Delete index
########################################################


def delete_index(endpoint: str, credential: Credential, index_name: str) -> StageResult:
    """Deletes the index if it exists. A missing index is not an error."""
    try:
        with SearchIndexClient(endpoint, credential) as index_client:
            try:
                index_client.get_index(index_name)
            except ResourceNotFoundError:
                logging.info(f"[INDEX] Index '{index_name}' does not exist. Nothing to delete.")
                return StageResult.success(STAGE, f"Index '{index_name}' does not exist", existed=False)

            index_client.delete_index(index_name)
            logging.info(f"[INDEX] Index '{index_name}' deleted successfully.")
            return StageResult.success(STAGE, f"Index '{index_name}' deleted", existed=True)
    except Exception as e:
        logging.error(f"[INDEX] Error: Failed to delete index '{index_name}'. Error: {e}")
        return StageResult.failure(STAGE, f"Cannot delete index '{index_name}': {e}", error=e)
