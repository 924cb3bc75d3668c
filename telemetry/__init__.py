from .telemetry import Telemetry

__all__ = ["Telemetry"]
