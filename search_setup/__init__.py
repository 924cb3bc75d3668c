"""
Provisioning of the Azure AI Search product pipeline:
index, blob data source, enrichment skillset and indexer.
"""

from .pipeline import log_report, provision
from .results import ProvisioningReport, StageResult, StageStatus
from .settings import PipelineMode, ProvisioningSettings, ResourceNames

__all__ = [
    "PipelineMode",
    "ProvisioningReport",
    "ProvisioningSettings",
    "ResourceNames",
    "StageResult",
    "StageStatus",
    "log_report",
    "provision",
]
