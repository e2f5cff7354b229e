"""
PEM decoder adapter: concatenated PEM blocks → X.509 certificates.

Uses:
  - asn1crypto: PEM armor detection and unarmoring (handles several blocks
    per buffer, skips text between blocks, tolerates RFC 1421 headers)
  - cryptography (PyCA): DER → x509.Certificate

A buffer without any armor decodes to an empty list. Decoding stops at the
first block whose armor cannot be read (BEGIN without END, body that is not
base64) and keeps the certificates before it. A block with intact armor but
a payload that is not a certificate fails the whole buffer.
"""

from __future__ import annotations

import binascii

import structlog
from asn1crypto import pem
from cryptography import x509

from cert_extractor.domain.errors import CertificateExtractionError, MalformedCertificateError
from cert_extractor.result import Result

log = structlog.get_logger()


def _unarmor_blocks(data: bytes) -> list[bytes]:
    """Return the DER payload of every readable PEM block, in order of appearance."""
    if not pem.detect(data):
        return []
    blocks: list[bytes] = []
    armored = pem.unarmor(data, multiple=True)
    while True:
        try:
            _, _, der_bytes = next(armored)
        except StopIteration:
            return blocks
        except (ValueError, binascii.Error) as e:
            log.debug("pem.armor_unreadable", blocks=len(blocks), reason=str(e))
            return blocks
        blocks.append(der_bytes)


def _load_certificate(der_bytes: bytes) -> x509.Certificate:
    try:
        return x509.load_der_x509_certificate(der_bytes)
    except ValueError as e:
        raise MalformedCertificateError(str(e)) from e


def _do_decode(data: bytes) -> list[x509.Certificate]:
    certificates = [_load_certificate(der_bytes) for der_bytes in _unarmor_blocks(data)]
    log.debug("pem.decoded", certificates=len(certificates), size=len(data))
    return certificates


def decode_pem(data: bytes) -> Result[list[x509.Certificate]]:
    """
    Decode every PEM block in `data` into an X.509 certificate.

    Returns Result[list[x509.Certificate]] (possibly empty) on success, or
    Result.failure(MALFORMED_CERTIFICATE, ...) when a block's payload is not
    a valid certificate.
    """
    return Result.from_computation(lambda: _do_decode(data), CertificateExtractionError)
