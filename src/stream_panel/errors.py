from __future__ import annotations

from collections.abc import Sequence


class StreamPanelError(Exception):
    """Base class for failures that end a render pass with the error panel."""


class EmptyDataError(StreamPanelError):
    def __init__(self, message: str = "No data provided") -> None:
        super().__init__(message)


class MissingFieldsError(StreamPanelError):
    def __init__(self, missing: Sequence[str], available: Sequence[str]) -> None:
        self.missing = list(missing)
        self.available = list(available)
        super().__init__(
            f"Missing required fields: {', '.join(self.missing)}. "
            f"Available: {', '.join(self.available)}"
        )


class InvalidDateError(StreamPanelError):
    def __init__(self, invalid_rows: int) -> None:
        self.invalid_rows = invalid_rows
        super().__init__(f"Invalid dates found in {invalid_rows} rows")


class InvalidValueError(StreamPanelError):
    def __init__(self, raw_value: object) -> None:
        self.raw_value = raw_value
        super().__init__(f"Value is not numeric: {raw_value!r}")


class UnmappableColumnsError(StreamPanelError):
    def __init__(self, missing_roles: Sequence[str], columns: Sequence[str]) -> None:
        self.missing_roles = list(missing_roles)
        self.columns = list(columns)
        super().__init__(
            f"Required columns not found for: {', '.join(self.missing_roles)}. "
            f"Available: {', '.join(self.columns)}. "
            "Need columns containing: date, category/sex, value"
        )


class DataSourceExhaustedError(StreamPanelError):
    def __init__(self, paths: Sequence[str]) -> None:
        self.paths = list(paths)
        super().__init__(f"Data file not found. Expected paths: {', '.join(self.paths)}")


class RenderError(StreamPanelError):
    pass
