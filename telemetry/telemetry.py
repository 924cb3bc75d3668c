import logging
import platform

from azure.monitor.opentelemetry import configure_azure_monitor
from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource, SERVICE_INSTANCE_ID, SERVICE_VERSION, SERVICE_NAMESPACE
from opentelemetry.trace import Span, Status, StatusCode, Tracer

from tools.appconfig import AppConfigClient

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Azure SDK loggers that print request and response details at INFO
AZURE_LOGGERS = [
    "azure",
    "azure.core.pipeline.policies.http_logging_policy",
    "azure.identity",
    "azure.storage",
    "azure.search",
    "azure.appconfiguration",
    "urllib3",
]


class Telemetry:
    """
    Manages logging and the recording of application telemetry.
    """

    log_level : int = logging.INFO
    azure_log_level : int = logging.WARNING
    api_name : str = None
    telemetry_connection_string : str = None

    @staticmethod
    def translate_log_level(log_level: str, default: int = logging.INFO) -> int:
        level = logging.getLevelName(str(log_level).strip().upper())
        # getLevelName returns "Level X" for unknown names
        return level if isinstance(level, int) else default

    @staticmethod
    def configure_basic(config: AppConfigClient = None):
        log_level = config.get('LOG_LEVEL', 'INFO') if config is not None else 'INFO'
        azure_log_level = config.get('AZURE_LOG_LEVEL', 'WARNING') if config is not None else 'WARNING'

        Telemetry.log_level = Telemetry.translate_log_level(log_level)
        Telemetry.azure_log_level = Telemetry.translate_log_level(azure_log_level, logging.WARNING)

        logging.basicConfig(level=Telemetry.log_level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, force=True)
        for name in AZURE_LOGGERS:
            logging.getLogger(name).setLevel(Telemetry.azure_log_level)

    @staticmethod
    def configure_monitoring(config: AppConfigClient, telemetry_connection_string: str, api_name : str) -> bool:
        """
        Sends traces and logs to Application Insights when a connection string is configured.

        Returns True when monitoring was configured.
        """
        Telemetry.telemetry_connection_string = config.get(telemetry_connection_string, allow_none=True)
        Telemetry.api_name = api_name

        if not Telemetry.telemetry_connection_string:
            logging.debug(f"[telemetry] {telemetry_connection_string} not set. Monitoring disabled.")
            return False

        resource = Resource.create(
            {
                SERVICE_NAME: f"{Telemetry.api_name}",
                SERVICE_NAMESPACE : api_name,
                SERVICE_VERSION: f"1.0.0",
                SERVICE_INSTANCE_ID: f"{platform.node()}"
            })

        configure_azure_monitor(
            connection_string=Telemetry.telemetry_connection_string,
            disable_offline_storage=True,
            disable_metrics=True,
            resource=resource
        )
        logging.info("[telemetry] Application Insights monitoring enabled.")
        return True

    @staticmethod
    def get_tracer(name: str) -> Tracer:
        return trace.get_tracer(name)

    @staticmethod
    def record_exception(span: Span, ex: BaseException):
        span.set_status(Status(StatusCode.ERROR))
        span.record_exception(ex)
