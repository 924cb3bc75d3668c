import logging
from typing import Optional, Union

from azure.core.credentials import AzureKeyCredential, TokenCredential
from azure.identity import AzureCliCredential, ChainedTokenCredential, ManagedIdentityCredential

Credential = Union[AzureKeyCredential, TokenCredential]


def get_search_endpoint(search_service_name: Optional[str], endpoint: Optional[str] = None) -> str:
    """
    Returns the search service endpoint.

    An explicit endpoint wins; otherwise it is built from the service name.
    """
    if endpoint:
        return endpoint.rstrip("/")
    if not search_service_name:
        logging.error("[aisearch] Search service name or endpoint must be configured.")
        raise ValueError("Search service name or endpoint must be configured.")
    return f"https://{search_service_name}.search.windows.net"


def get_search_credential(admin_key: Optional[str] = None, client_id: Optional[str] = None) -> Credential:
    """
    Returns the credential used against the search service.

    Parameters:
        admin_key (str): search admin key; when set an AzureKeyCredential is returned.
        client_id (str): user-assigned managed identity client id, used when no key is set.
    """
    if admin_key:
        logging.debug("[aisearch] Using admin key credential.")
        return AzureKeyCredential(admin_key)

    try:
        credential = ChainedTokenCredential(
            ManagedIdentityCredential(client_id=client_id),
            AzureCliCredential()
        )
        logging.debug("[aisearch] Initialized ChainedTokenCredential with ManagedIdentity and AzureCliCredential.")
    except Exception as e:
        logging.error(f"[aisearch] Failed to initialize credentials: {e}")
        raise
    return credential
