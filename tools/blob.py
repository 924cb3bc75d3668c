from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import BlobServiceClient, PublicAccess
import logging

STORAGE_ENDPOINT_SUFFIX = "core.windows.net"


def build_storage_connection_string(account_name: str, account_key: str, endpoint_suffix: str = STORAGE_ENDPOINT_SUFFIX) -> str:
    return (
        f"DefaultEndpointsProtocol=https;AccountName={account_name};"
        f"AccountKey={account_key};EndpointSuffix={endpoint_suffix}"
    )


class BlobStorageClient:
    """
    BlobStorageClient provides methods to interact with Azure Blob Storage
    using a storage account name and access key.

    Attributes:
        account_name (str): The storage account name.
        connection_string (str): The account connection string, also handed to the search data source.
        blob_service_client (BlobServiceClient): The BlobServiceClient instance.
    """

    def __init__(self, account_name, account_key):
        """
        Initializes the BlobStorageClient for a storage account.

        Args:
            account_name (str): The storage account name.
            account_key (str): The storage account access key.

        Raises:
            ValueError: If the account name or key is missing.
            Exception: If the connection string cannot be parsed.
        """
        if not account_name or not account_key:
            logging.error("[blob] Storage account name and key are required.")
            raise ValueError("Storage account name and key are required.")

        self.account_name = account_name
        self.account_url = f"https://{account_name}.blob.{STORAGE_ENDPOINT_SUFFIX}"
        self.connection_string = build_storage_connection_string(account_name, account_key)

        try:
            self.blob_service_client = BlobServiceClient.from_connection_string(self.connection_string)
            logging.debug(f"[blob] Initialized BlobServiceClient for '{self.account_url}'.")
        except Exception as e:
            logging.error(f"[blob] Failed to initialize BlobServiceClient for '{self.account_url}': {e}")
            raise

    def ensure_container(self, container_name, public_access=PublicAccess.BLOB):
        """
        Creates the container if it does not already exist.

        Args:
            container_name (str): The container to ensure.
            public_access: Public access level applied when the container is created.

        Returns:
            bool: True if the container was created, False if it already existed.
        """
        container_client = self.blob_service_client.get_container_client(container_name)
        if container_client.exists():
            logging.info(f"[blob] Container '{container_name}' already exists.")
            return False

        try:
            container_client.create_container(public_access=public_access)
        except ResourceExistsError:
            logging.info(f"[blob] Container '{container_name}' already exists.")
            return False

        logging.info(f"[blob] Container '{container_name}' created successfully.")
        return True

    def close(self):
        self.blob_service_client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
