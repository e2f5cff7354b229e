"""
Application entry point: wires dependencies and scans the configured sources.

Composition root: creates the concrete query evaluator, builds one
CertificateSource per configured file, and hands them to scan_sources.

Responsibilities:
  1. Configure structlog for structured logging
  2. Load and validate configuration from environment
  3. Create the yq evaluator and the certificate sources
  4. Scan, log every certificate found and every failing source
"""

from __future__ import annotations

import logging
import sys

import structlog

from cert_extractor import __version__
from cert_extractor.adapters.yq_evaluator import YqQueryEvaluator
from cert_extractor.catalog import KUBECONFIG_PATH_EXPRESSIONS
from cert_extractor.config import ExtractorSettings
from cert_extractor.source import CertificateSource, ScanReport, scan_sources


def configure_structlog(log_level: str = "INFO") -> None:
    """Configure structlog for structured, human-readable console output."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_sources(settings: ExtractorSettings) -> list[CertificateSource]:
    """Create one source per configured PEM file and kubeconfig file."""
    evaluator = YqQueryEvaluator(
        binary=settings.yq.binary,
        timeout=settings.yq.timeout_seconds,
    )
    sources = [CertificateSource.direct_file(path) for path in settings.pem_files]
    sources += [
        CertificateSource.structured_document(path, KUBECONFIG_PATH_EXPRESSIONS, evaluator)
        for path in settings.kubeconfig_files
    ]
    return sources


def _log_report(report: ScanReport) -> None:
    log = structlog.get_logger()
    for source in report.succeeded:
        for record in source.records:
            log.info(
                "certificate.found",
                source=source.path,
                identity=record.identity,
                subject=record.subject,
                not_after=record.not_valid_after.isoformat(),
            )
    for error in report.errors:
        log.error("source.error", source=error.source.path, code=error.underlying.code.value, error=error.message)


def main() -> None:
    """Load settings, scan every configured source, exit non-zero if any failed."""
    try:
        settings = ExtractorSettings()
    except Exception as e:
        print(f"FATAL: Configuration error: {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    configure_structlog(settings.log_level)
    log = structlog.get_logger()
    log.info(
        "app.starting",
        version=__version__,
        pem_files=len(settings.pem_files),
        kubeconfig_files=len(settings.kubeconfig_files),
    )

    report = scan_sources(build_sources(settings), max_workers=settings.max_workers)
    _log_report(report)

    if report.failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
