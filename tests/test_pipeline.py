import unittest
from unittest.mock import patch

from search_setup.pipeline import build_stages, log_report, provision, run_stages
from search_setup.results import ProvisioningReport, StageResult, StageStatus
from search_setup.settings import PipelineMode, ProvisioningSettings, ResourceNames


def stage(name, status=StageStatus.SUCCEEDED, calls=None):
    def run():
        if calls is not None:
            calls.append(name)
        return StageResult(stage=name, status=status, message=f"{name} {status.value}")
    return (name, run)


def make_settings(**overrides):
    values = dict(
        search_service_name="contoso",
        search_key="admin-key",
        storage_account_name="contosostorage",
        storage_account_key="c2VjcmV0",
    )
    values.update(overrides)
    return ProvisioningSettings(**values)


class TestRunStages(unittest.TestCase):

    def test_best_effort_runs_every_stage(self):
        calls = []
        stages = [
            stage("INDEX", calls=calls),
            stage("DATA SOURCE", StageStatus.FAILED, calls),
            stage("SKILLSET", calls=calls),
            stage("INDEXER", calls=calls),
        ]

        report = run_stages(stages, PipelineMode.BEST_EFFORT)

        self.assertEqual(calls, ["INDEX", "DATA SOURCE", "SKILLSET", "INDEXER"])
        self.assertEqual(report.failed_stages, ["DATA SOURCE"])
        self.assertEqual(report.exit_code, 1)

    def test_strict_skips_after_first_failure(self):
        calls = []
        stages = [
            stage("INDEX", calls=calls),
            stage("DATA SOURCE", StageStatus.PARTIAL, calls),
            stage("SKILLSET", calls=calls),
            stage("INDEXER", calls=calls),
        ]

        report = run_stages(stages, PipelineMode.STRICT)

        self.assertEqual(calls, ["INDEX", "DATA SOURCE"])
        self.assertEqual(
            [r.status for r in report.results],
            [StageStatus.SUCCEEDED, StageStatus.PARTIAL, StageStatus.SKIPPED, StageStatus.SKIPPED],
        )
        self.assertIn("DATA SOURCE", report.get("INDEXER").message)

    def test_all_succeeded(self):
        report = run_stages([stage("INDEX"), stage("INDEXER")], PipelineMode.STRICT)

        self.assertTrue(report.succeeded)
        self.assertEqual(report.exit_code, 0)
        self.assertEqual(report.summary(), "All 2 stages succeeded.")

    def test_elapsed_is_recorded(self):
        report = run_stages([stage("INDEX")])
        self.assertGreaterEqual(report.get("INDEX").elapsed, 0.0)


class TestProvisioningReport(unittest.TestCase):

    def test_empty_report_is_not_success(self):
        self.assertFalse(ProvisioningReport().succeeded)
        self.assertEqual(ProvisioningReport().exit_code, 1)

    def test_summary_lines(self):
        report = ProvisioningReport()
        report.add(StageResult.success("INDEX", "Index ready"))
        report.add(StageResult.failure("INDEXER", "Cannot create indexer"))

        self.assertEqual(report.summary_lines(), ["[INDEX] SUCCEEDED - Index ready", "[INDEXER] FAILED - Cannot create indexer"])
        self.assertEqual(report.summary(), "1 of 2 stages did not succeed: INDEXER")

    def test_log_report(self):
        report = ProvisioningReport()
        report.add(StageResult.success("INDEX", "Index ready"))
        report.add(StageResult.failure("INDEXER", "Cannot create indexer"))

        with self.assertLogs(level="INFO") as logs:
            log_report(report)

        self.assertIn("ERROR:root:[main] [INDEXER] FAILED - Cannot create indexer", logs.output)


class TestProvision(unittest.TestCase):

    def setUp(self):
        self.patches = {
            name: patch(f"search_setup.pipeline.{target}")
            for name, target in {
                "create_index": "index.create_index",
                "delete_index": "index.delete_index",
                "data_source": "datasource.create_storage_data_source",
                "skillset": "skillset.create_skillset",
                "indexer": "indexer.create_indexer",
            }.items()
        }
        self.mocks = {name: p.start() for name, p in self.patches.items()}
        for p in self.patches.values():
            self.addCleanup(p.stop)

        self.mocks["create_index"].return_value = StageResult.success("INDEX", "ok")
        self.mocks["delete_index"].return_value = StageResult.success("INDEX", "deleted")
        self.mocks["data_source"].return_value = StageResult.success("DATA SOURCE", "ok")
        self.mocks["skillset"].return_value = StageResult.success("SKILLSET", "ok")
        self.mocks["indexer"].return_value = StageResult.success("INDEXER", "ok")

    def test_stages_run_in_order_with_configured_names(self):
        names = ResourceNames(index="catalog-index", container="catalog")
        settings = make_settings(names=names, enabled_skills=("ocr", "merge"), catalog_size=10)

        report = provision(settings)

        self.assertEqual([r.stage for r in report.results], ["INDEX", "DATA SOURCE", "SKILLSET", "INDEXER"])
        self.assertEqual(report.exit_code, 0)

        endpoint = "https://contoso.search.windows.net"
        args, kwargs = self.mocks["create_index"].call_args
        self.assertEqual(args[0], endpoint)
        self.assertEqual(args[2], "catalog-index")
        self.assertEqual(kwargs["catalog_size"], 10)
        self.assertEqual(self.mocks["data_source"].call_args[0][2:], ("product-datasource", "contosostorage", "c2VjcmV0", "catalog"))
        self.assertEqual(self.mocks["skillset"].call_args[0][2:], ("product-skillset", ("ocr", "merge")))
        self.assertEqual(
            self.mocks["indexer"].call_args[0][2:],
            ("products-indexer", "catalog-index", "product-datasource", "product-skillset"),
        )
        self.mocks["delete_index"].assert_not_called()

    def test_failed_data_source_still_creates_indexer_in_best_effort(self):
        self.mocks["data_source"].return_value = StageResult.failure("DATA SOURCE", "bad credentials")

        report = provision(make_settings())

        self.mocks["indexer"].assert_called_once()
        self.assertEqual(report.exit_code, 1)

    def test_failed_data_source_stops_strict_pipeline(self):
        self.mocks["data_source"].return_value = StageResult.failure("DATA SOURCE", "bad credentials")

        report = provision(make_settings(mode=PipelineMode.STRICT))

        self.mocks["skillset"].assert_not_called()
        self.mocks["indexer"].assert_not_called()
        self.assertEqual(report.get("INDEXER").status, StageStatus.SKIPPED)

    def test_recreate_index_deletes_first(self):
        provision(make_settings(), recreate_index=True)

        self.mocks["delete_index"].assert_called_once()
        self.mocks["create_index"].assert_called_once()

    def test_recreate_index_delete_failure(self):
        self.mocks["delete_index"].return_value = StageResult.failure("INDEX", "cannot delete")

        report = provision(make_settings(), recreate_index=True)

        self.mocks["create_index"].assert_not_called()
        self.assertEqual(report.get("INDEX").message, "cannot delete")

    def test_build_stages_names(self):
        stages = build_stages(make_settings())
        self.assertEqual([name for name, _ in stages], ["INDEX", "DATA SOURCE", "SKILLSET", "INDEXER"])


if __name__ == '__main__':
    unittest.main()
