import dataclasses
from enum import Enum
from typing import Any, Dict, List, Optional


class StageStatus(str, Enum):
    SUCCEEDED = "succeeded"
    PARTIAL = "partial"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclasses.dataclass
class StageResult:
    """
    Outcome of a single provisioning stage.

    A stage never raises; whatever went wrong is captured here so the
    orchestrator can decide whether to continue and what to report.
    """

    stage: str
    status: StageStatus
    message: str = ""
    error: Optional[BaseException] = None
    resource: Any = None
    elapsed: float = 0.0
    details: Dict[str, Any] = dataclasses.field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status is StageStatus.SUCCEEDED

    @classmethod
    def success(cls, stage: str, message: str, resource: Any = None, **details) -> "StageResult":
        return cls(stage=stage, status=StageStatus.SUCCEEDED, message=message, resource=resource, details=details)

    @classmethod
    def partial(cls, stage: str, message: str, resource: Any = None, error: Optional[BaseException] = None, **details) -> "StageResult":
        return cls(stage=stage, status=StageStatus.PARTIAL, message=message, resource=resource, error=error, details=details)

    @classmethod
    def failure(cls, stage: str, message: str, error: Optional[BaseException] = None, resource: Any = None, **details) -> "StageResult":
        return cls(stage=stage, status=StageStatus.FAILED, message=message, error=error, resource=resource, details=details)

    @classmethod
    def skipped(cls, stage: str, message: str) -> "StageResult":
        return cls(stage=stage, status=StageStatus.SKIPPED, message=message)


@dataclasses.dataclass
class ProvisioningReport:
    results: List[StageResult] = dataclasses.field(default_factory=list)

    def add(self, result: StageResult) -> StageResult:
        self.results.append(result)
        return result

    @property
    def succeeded(self) -> bool:
        return bool(self.results) and all(r.succeeded for r in self.results)

    @property
    def failed_stages(self) -> List[str]:
        return [r.stage for r in self.results if not r.succeeded]

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    def get(self, stage: str) -> Optional[StageResult]:
        for result in self.results:
            if result.stage == stage:
                return result
        return None

    def summary_lines(self) -> List[str]:
        lines = []
        for result in self.results:
            line = f"[{result.stage}] {result.status.value.upper()}"
            if result.message:
                line += f" - {result.message}"
            if result.elapsed:
                line += f" ({round(result.elapsed, 2)} seconds)"
            lines.append(line)
        return lines

    def summary(self) -> str:
        if self.succeeded:
            return f"All {len(self.results)} stages succeeded."
        return f"{len(self.failed_stages)} of {len(self.results)} stages did not succeed: {', '.join(self.failed_stages)}"
