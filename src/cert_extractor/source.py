"""
Certificate sources: one scan target each, dispatched to its reader by format.

    CertificateSource.direct_file(path)                                  → read_pem_file
    CertificateSource.structured_document(path, pairs, evaluator)        → StructuredDocumentReader
    CertificateSource.cluster_secret(secret)                             → read_secret

`parse()` runs exactly one reader and keeps its records. Sources share no
state, so `scan_sources` can fan them out over a thread pool and collect
failures as SourceError values next to the successful records.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from cert_extractor.domain.models import (
    CertificateRecord,
    PathExpressionPair,
    SourceError,
    SourceFormat,
)
from cert_extractor.domain.ports import QueryEvaluator, SecretLike
from cert_extractor.readers import StructuredDocumentReader, read_pem_file, read_secret
from cert_extractor.result import ErrorCode, Result

log = structlog.get_logger()


@dataclass(eq=False)
class CertificateSource:
    """
    A single scan target: where to read, how to read it, and what was found.

    Build one with the `direct_file`, `structured_document` or
    `cluster_secret` factories; `records` stays empty until `parse()`
    succeeds.
    """

    path: str
    format: SourceFormat
    records: list[CertificateRecord] = field(default_factory=list)
    path_expressions: tuple[PathExpressionPair, ...] = ()
    secret: SecretLike | None = None
    evaluator: QueryEvaluator | None = field(default=None, repr=False)

    @classmethod
    def direct_file(cls, path: str | Path) -> CertificateSource:
        return cls(path=str(path), format=SourceFormat.DIRECT_FILE)

    @classmethod
    def structured_document(
        cls,
        path: str | Path,
        path_expressions: Sequence[PathExpressionPair],
        evaluator: QueryEvaluator,
    ) -> CertificateSource:
        """Document source; `evaluator` runs each path expression against the file."""
        return cls(
            path=str(path),
            format=SourceFormat.STRUCTURED_DOCUMENT,
            path_expressions=tuple(path_expressions),
            evaluator=evaluator,
        )

    @classmethod
    def cluster_secret(cls, secret: SecretLike, path: str | None = None) -> CertificateSource:
        """Secret source; `path` defaults to `secret/<namespace>/<name>`."""
        if path is None:
            namespace = getattr(secret, "namespace", None)
            path = f"secret/{namespace}/{secret.name}" if namespace else f"secret/{secret.name}"
        return cls(path=path, format=SourceFormat.CLUSTER_SECRET, secret=secret)

    def parse(self) -> Result[list[CertificateRecord]]:
        """
        Read this source with the reader registered for its format.

        On success the records are stored on `self.records` and returned;
        on failure the reader's Result.failure is returned unchanged.
        """
        reader = _READERS[self.format]
        return (
            reader(self)
            .peek(self._store)
            .peek_failure(
                lambda err: log.warning(
                    "source.failed",
                    path=self.path,
                    format=self.format.value,
                    code=err.code.value,
                    error=err.message,
                )
            )
        )

    def _store(self, records: list[CertificateRecord]) -> None:
        self.records = records
        log.info(
            "source.parsed",
            path=self.path,
            format=self.format.value,
            certificates=len(records),
        )


# ─────────────────────── Format handlers ───────────────────────


def _parse_direct_file(source: CertificateSource) -> Result[list[CertificateRecord]]:
    return read_pem_file(source.path)


def _parse_structured_document(source: CertificateSource) -> Result[list[CertificateRecord]]:
    if source.evaluator is None:
        return Result.failure(
            ErrorCode.CONFIGURATION_ERROR,
            f"{source.path}: structured document source has no query evaluator",
        )
    return StructuredDocumentReader(source.evaluator).read(source.path, source.path_expressions)


def _parse_cluster_secret(source: CertificateSource) -> Result[list[CertificateRecord]]:
    if source.secret is None:
        return Result.failure(
            ErrorCode.CONFIGURATION_ERROR,
            f"{source.path}: cluster secret source has no secret",
        )
    return read_secret(source.secret)


_READERS: dict[SourceFormat, Callable[[CertificateSource], Result[list[CertificateRecord]]]] = {
    SourceFormat.DIRECT_FILE: _parse_direct_file,
    SourceFormat.STRUCTURED_DOCUMENT: _parse_structured_document,
    SourceFormat.CLUSTER_SECRET: _parse_cluster_secret,
}


# ─────────────────────── Fan-out scan ───────────────────────


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Outcome of scanning many sources: every source, plus the ones that failed."""

    sources: tuple[CertificateSource, ...] = ()
    errors: tuple[SourceError, ...] = ()

    @property
    def records(self) -> list[CertificateRecord]:
        """Records of every successfully parsed source, in source order."""
        failed = {id(error.source) for error in self.errors}
        return [
            record
            for source in self.sources
            if id(source) not in failed
            for record in source.records
        ]

    @property
    def failed(self) -> bool:
        return bool(self.errors)

    @property
    def succeeded(self) -> list[CertificateSource]:
        failed = {id(error.source) for error in self.errors}
        return [source for source in self.sources if id(source) not in failed]


def scan_sources(sources: Iterable[CertificateSource], max_workers: int = 4) -> ScanReport:
    """
    Parse every source, one worker per source, and collect the outcome.

    A failing source never stops the others; its failure is recorded as a
    SourceError in the returned report.
    """
    pending = tuple(sources)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        results = list(pool.map(CertificateSource.parse, pending))

    errors = tuple(
        SourceError(underlying=result.error(), source=source)
        for source, result in zip(pending, results, strict=True)
        if result.is_failure()
    )
    log.info("scan.complete", sources=len(pending), failed=len(errors))
    return ScanReport(sources=pending, errors=errors)
