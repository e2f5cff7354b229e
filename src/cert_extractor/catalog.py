"""
Well-known certificate locations inside kubeconfig files.

Clusters carry their CA, users their client certificate, each either inline
(`*-data`, base64) or as a path relative to the kubeconfig.
"""

from __future__ import annotations

from cert_extractor.domain.models import Encoding, PathExpressionPair

KUBECONFIG_PATH_EXPRESSIONS: tuple[PathExpressionPair, ...] = (
    PathExpressionPair(
        certificate_expression="clusters.[*].cluster.certificate-authority-data",
        identity_expression="clusters.[*].name",
        encoding=Encoding.INLINE_BASE64,
    ),
    PathExpressionPair(
        certificate_expression="clusters.[*].cluster.certificate-authority",
        identity_expression="clusters.[*].name",
        encoding=Encoding.FILE_REFERENCE,
    ),
    PathExpressionPair(
        certificate_expression="users.[*].user.client-certificate-data",
        identity_expression="users.[*].name",
        encoding=Encoding.INLINE_BASE64,
    ),
    PathExpressionPair(
        certificate_expression="users.[*].user.client-certificate",
        identity_expression="users.[*].name",
        encoding=Encoding.FILE_REFERENCE,
    ),
)
