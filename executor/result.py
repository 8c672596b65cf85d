import dataclasses
import time
from typing import Any


def utc_iso8601() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


@dataclasses.dataclass(frozen=True)
class ChangedFile:
    file_path: str
    status: str


@dataclasses.dataclass
class ValidationResult:
    files_validated: int
    files_passed: int
    files_failed: int
    errors: list[str]
    validated_files: list[str]

    @classmethod
    def empty(cls) -> "ValidationResult":
        return cls(files_validated=0, files_passed=0, files_failed=0, errors=[], validated_files=[])

    @property
    def passed(self) -> bool:
        return self.files_failed == 0

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    def validate_counts(self) -> None:
        if self.files_validated != self.files_passed + self.files_failed:
            raise ValueError(
                "validation.result.invalid files_validated must equal files_passed + files_failed"
            )
        if any(count < 0 for count in (self.files_validated, self.files_passed, self.files_failed)):
            raise ValueError("validation.result.invalid negative count")
