"""Namespaced identifiers used as the index primary key."""

from __future__ import annotations

import re

from .errors import InvalidDocumentError
from .models import SourceDocument

_WHITESPACE_CHAR = re.compile(r"\s")


def assign_id(document: SourceDocument) -> str:
    """Return ``<type>-<id>`` with the type lowercased and whitespace dashed.

    ``{"type": "Technical Report", "id": 9}`` becomes ``technical-report-9``.
    """

    if document.type is None or not document.type.strip():
        raise InvalidDocumentError("document is missing a type", retryable=False)
    if document.id is None or not document.id.strip():
        raise InvalidDocumentError(
            f"{document.type} document is missing an id", retryable=False
        )

    namespace = _WHITESPACE_CHAR.sub("-", document.type.lower())
    return f"{namespace}-{document.id}"
