import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from azure.core.credentials import AzureKeyCredential

from search_setup.settings import PipelineMode, ProvisioningSettings, ResourceNames
from tools.aisearch import get_search_endpoint
from tools.appconfig import AppConfigClient, ConfigurationError

REQUIRED = {
    "AISearch": {"Name": "contoso", "Key": "admin-key"},
    "StorageAccount": {"Name": "contosostorage", "Key": "c2VjcmV0"},
}


class TestPipelineMode(unittest.TestCase):

    def test_parse(self):
        self.assertIs(PipelineMode.parse("Strict"), PipelineMode.STRICT)
        self.assertIs(PipelineMode.parse(" best-effort "), PipelineMode.BEST_EFFORT)
        with self.assertRaises(ConfigurationError):
            PipelineMode.parse("eventually")


class TestSearchEndpoint(unittest.TestCase):

    def test_endpoint_from_name(self):
        self.assertEqual(get_search_endpoint("contoso"), "https://contoso.search.windows.net")

    def test_explicit_endpoint_wins(self):
        self.assertEqual(get_search_endpoint("contoso", "https://search.internal/"), "https://search.internal")

    def test_neither(self):
        with self.assertRaises(ValueError):
            get_search_endpoint(None)


class TestProvisioningSettings(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.temp_dir)
        env_patcher = patch.dict(os.environ, {"allow_environment_variables": "false"})
        env_patcher.start()
        self.addCleanup(env_patcher.stop)
        os.environ.pop("APP_CONFIG_ENDPOINT", None)

    def load(self, settings):
        path = os.path.join(self.temp_dir, "appsettings.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings, f)
        return ProvisioningSettings.from_app_config(AppConfigClient(path))

    def test_defaults(self):
        settings = self.load(REQUIRED)

        self.assertEqual(settings.endpoint, "https://contoso.search.windows.net")
        self.assertEqual(settings.names, ResourceNames())
        self.assertEqual(settings.names.index, "products-index")
        self.assertEqual(settings.enabled_skills, ("language-detection",))
        self.assertIs(settings.mode, PipelineMode.BEST_EFFORT)
        self.assertEqual(settings.catalog_size, 100)

        credential = settings.credential()
        self.assertIsInstance(credential, AzureKeyCredential)
        self.assertEqual(credential.key, "admin-key")

    def test_overrides(self):
        settings = self.load(dict(
            REQUIRED,
            Resources={"IndexName": "catalog-index", "ContainerName": "catalog"},
            Skillset={"EnabledSkills": "ocr,merge"},
            Pipeline={"Mode": "strict"},
            Catalog={"Size": 10},
        ))

        self.assertEqual(settings.names.index, "catalog-index")
        self.assertEqual(settings.names.container, "catalog")
        self.assertEqual(settings.names.indexer, "products-indexer")
        self.assertEqual(settings.enabled_skills, ("ocr", "merge"))
        self.assertIs(settings.mode, PipelineMode.STRICT)
        self.assertEqual(settings.catalog_size, 10)

    def test_missing_storage_account(self):
        with self.assertRaises(ConfigurationError):
            self.load({"AISearch": {"Name": "contoso"}})

    def test_endpoint_replaces_name(self):
        settings = self.load({
            "AISearch": {"Endpoint": "https://contoso.search.windows.net/"},
            "StorageAccount": REQUIRED["StorageAccount"],
        })

        self.assertIsNone(settings.search_service_name)
        self.assertEqual(settings.endpoint, "https://contoso.search.windows.net")

    def test_negative_catalog_size(self):
        with self.assertRaises(ConfigurationError):
            self.load(dict(REQUIRED, Catalog={"Size": -1}))

    def test_catalog_size_must_be_a_whole_number(self):
        for size in (10.5, True, "many", "2.5"):
            with self.subTest(size=size):
                with self.assertRaises(ConfigurationError):
                    self.load(dict(REQUIRED, Catalog={"Size": size}))

    def test_catalog_size_from_string(self):
        self.assertEqual(self.load(dict(REQUIRED, Catalog={"Size": " 25 "})).catalog_size, 25)

    def test_invalid_mode(self):
        with self.assertRaises(ConfigurationError):
            self.load(dict(REQUIRED, Pipeline={"Mode": "sometimes"}))

    @patch("tools.aisearch.ManagedIdentityCredential")
    @patch("tools.aisearch.AzureCliCredential")
    def test_keyless_credential(self, mock_cli, mock_managed_identity):
        settings = self.load({"AISearch": {"Name": "contoso"}, "StorageAccount": REQUIRED["StorageAccount"]})

        credential = settings.credential()

        self.assertNotIsInstance(credential, AzureKeyCredential)
        mock_managed_identity.assert_called_once_with(client_id=None)
        mock_cli.assert_called_once_with()


if __name__ == '__main__':
    unittest.main()
