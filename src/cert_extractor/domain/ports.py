"""
Ports: Protocol-based interfaces for the collaborators the readers depend on.

Each port is a Protocol (structural typing) so adapters and test fakes
satisfy the contract simply by implementing the members, no inheritance.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from cert_extractor.result import Result


@runtime_checkable
class QueryEvaluator(Protocol):
    """
    Port: evaluate a path expression against a structured document.

    Returns Result[str] holding the raw matched text (one match per line,
    empty when nothing matched), or a QUERY_EVALUATION_ERROR failure that
    carries the evaluator's own output verbatim.
    """

    def evaluate(self, document: Path, expression: str) -> Result[str]: ...


@runtime_checkable
class SecretLike(Protocol):
    """Port: anything exposing a secret name and a key → bytes payload mapping."""

    @property
    def name(self) -> str: ...

    @property
    def data(self) -> Mapping[str, bytes]: ...
