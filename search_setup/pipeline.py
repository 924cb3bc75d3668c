import logging
import time
from typing import Callable, List, Tuple

from search_setup import datasource, index, indexer, skillset
from search_setup.results import ProvisioningReport, StageResult
from search_setup.settings import PipelineMode, ProvisioningSettings
from telemetry import Telemetry

Stage = Tuple[str, Callable[[], StageResult]]

########################################################
# set up the search indexing pipeline
########################################################


def build_stages(settings: ProvisioningSettings, recreate_index: bool = False) -> List[Stage]:
    """Returns the provisioning stages in execution order."""
    endpoint = settings.endpoint
    credential = settings.credential()
    names = settings.names

    def index_stage() -> StageResult:
        if recreate_index:
            deleted = index.delete_index(endpoint, credential, names.index)
            if not deleted.succeeded:
                return deleted
        return index.create_index(endpoint, credential, names.index, catalog_size=settings.catalog_size)

    def data_source_stage() -> StageResult:
        return datasource.create_storage_data_source(
            endpoint,
            credential,
            names.data_source,
            settings.storage_account_name,
            settings.storage_account_key,
            names.container,
        )

    def skillset_stage() -> StageResult:
        return skillset.create_skillset(endpoint, credential, names.skillset, settings.enabled_skills)

    def indexer_stage() -> StageResult:
        return indexer.create_indexer(endpoint, credential, names.indexer, names.index, names.data_source, names.skillset)

    return [
        (index.STAGE, index_stage),
        (datasource.STAGE, data_source_stage),
        (skillset.STAGE, skillset_stage),
        (indexer.STAGE, indexer_stage),
    ]


def run_stages(stages: List[Stage], mode: PipelineMode = PipelineMode.BEST_EFFORT) -> ProvisioningReport:
    """
    Runs the stages in order and collects their results.

    In strict mode every stage after the first one that did not succeed is
    recorded as skipped without being run.
    """
    report = ProvisioningReport()
    tracer = Telemetry.get_tracer(__name__)

    for step, (stage, run) in enumerate(stages, start=1):
        if mode is PipelineMode.STRICT and report.failed_stages:
            logging.warning(f"[{stage}] Step {step} skipped, '{report.failed_stages[0]}' did not succeed (strict mode).")
            report.add(StageResult.skipped(stage, f"Skipped because {report.failed_stages[0]} did not succeed"))
            continue

        logging.info(f"[{stage}] Step {step}: provisioning...")
        start_time = time.time()
        with tracer.start_as_current_span(f"provision.{stage.lower().replace(' ', '_')}") as span:
            result = run()
            result.elapsed = time.time() - start_time
            span.set_attribute("provision.status", result.status.value)
            if result.error is not None:
                Telemetry.record_exception(span, result.error)

        logging.info(f"[{stage}] Step {step}: {result.status.value} in {round(result.elapsed, 2)} seconds")
        report.add(result)

    return report


def provision(settings: ProvisioningSettings, recreate_index: bool = False) -> ProvisioningReport:
    """
    Sets up the complete search indexing pipeline: index, data source, skillset and indexer.

    Args:
        settings: service, storage and resource settings
        recreate_index: delete the index before ensuring it, so it is reseeded
    """
    logging.info(f"[main] Provisioning search resources on {settings.endpoint} ({settings.mode.value} mode)")
    return run_stages(build_stages(settings, recreate_index=recreate_index), settings.mode)


def log_report(report: ProvisioningReport) -> None:
    for line, result in zip(report.summary_lines(), report.results):
        if result.succeeded:
            logging.info(f"[main] {line}")
        else:
            logging.error(f"[main] {line}")

    if report.succeeded:
        logging.info(f"[main] {report.summary()}")
    else:
        logging.error(f"[main] {report.summary()}")
