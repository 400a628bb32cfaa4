# Copyright (c) Syntropy Systems
"""Pydantic models for saved benchmark reports."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import Field

from scalebench.diagnostic import AggregatedSample, Diagnostic, DiagnosticRow

from .base import JSONValue, ScalebenchBaseModel


def utc_now() -> str:
    """Current UTC time as an ISO-8601 string with a Z suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class DiagnosticRowRecord(ScalebenchBaseModel):
    """One parallelism level above serial."""

    level: int
    measured_seconds: float
    ideal_seconds: float
    speedup_factor: float
    squared_error: float
    cumulative_squared_error: float


class DiagnosticRecord(ScalebenchBaseModel):
    """Diagnostic of one sweep, with the parameters that produced it."""

    name: str
    digits: int | None = None
    total_work: int
    repetitions: int
    backend: str
    automatic_seconds: float | None = None
    serial_seconds: float
    rows: list[DiagnosticRowRecord] = Field(default_factory=list)

    @classmethod
    def from_diagnostic(
        cls,
        diagnostic: Diagnostic,
        *,
        name: str,
        total_work: int,
        repetitions: int,
        backend: str,
        digits: int | None = None,
    ) -> DiagnosticRecord:
        """Build a record from an in-memory diagnostic."""
        return cls(
            name=name,
            digits=digits,
            total_work=total_work,
            repetitions=repetitions,
            backend=backend,
            automatic_seconds=(
                diagnostic.automatic.average_seconds
                if diagnostic.automatic is not None
                else None
            ),
            serial_seconds=diagnostic.serial.average_seconds,
            rows=[
                DiagnosticRowRecord(
                    level=row.level,
                    measured_seconds=row.measured_seconds,
                    ideal_seconds=row.ideal_seconds,
                    speedup_factor=row.speedup_factor,
                    squared_error=row.squared_error,
                    cumulative_squared_error=row.cumulative_squared_error,
                )
                for row in diagnostic.rows
            ],
        )

    def to_diagnostic(self) -> Diagnostic:
        """Rebuild the in-memory diagnostic."""
        automatic = (
            AggregatedSample(level=0, average_seconds=self.automatic_seconds)
            if self.automatic_seconds is not None
            else None
        )
        return Diagnostic(
            serial=AggregatedSample(level=1, average_seconds=self.serial_seconds),
            automatic=automatic,
            rows=[DiagnosticRow(**row.model_dump()) for row in self.rows],
        )


class BenchmarkReport(ScalebenchBaseModel):
    """Everything `scalebench bench` measured in one session."""

    created_at: str = Field(default_factory=utc_now)
    machine: dict[str, JSONValue] = Field(default_factory=dict)
    diagnostics: list[DiagnosticRecord] = Field(default_factory=list)
    total_seconds: float | None = None
