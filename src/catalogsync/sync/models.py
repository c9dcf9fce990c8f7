"""Data models for catalog records, index payloads, and sync outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import PartialBatchFailure

UNIQUE_ID_FIELD = "os_id"


class SourceDocument(BaseModel):
    """Raw record returned by an upstream catalog feed.

    Only the fields the sync pipeline reads are declared; everything else the
    feed sends is kept verbatim and forwarded to the index. A declared field
    holding anything other than a string or number is read as absent, so a
    record with an unusable type or id is skipped later instead of failing
    the fetch.
    """

    type: str | None = None
    id: str | None = None
    abstract: str | None = None
    attachment_url: str | None = Field(default=None, alias="file_s3")

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        coerce_numbers_to_str=True,
        frozen=True,
    )

    @field_validator("type", "id", "abstract", "attachment_url", mode="before")
    @classmethod
    def drop_unusable_values(cls, value: Any) -> Any:
        # CMS feeds send ``false`` or ``[]`` for empty fields.
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return None
        return value

    def as_record(self) -> dict[str, Any]:
        """Return the record as the feed delivered it, unusable fields as null."""

        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


@dataclass(slots=True, frozen=True)
class IndexDocument:
    """Prepared document ready to be written under ``os_id``."""

    os_id: str
    source: SourceDocument
    abstract: str | None = None
    file_text: list[str] | None = None

    def to_body(self) -> dict[str, Any]:
        """Serialise into the document body stored in the index."""

        body = self.source.as_record()
        if self.abstract is not None:
            body["abstract"] = self.abstract
        if self.file_text is not None:
            body["file_text"] = list(self.file_text)
        body[UNIQUE_ID_FIELD] = self.os_id
        return body


@dataclass(slots=True, frozen=True)
class SkippedDocument:
    """Catalog record excluded from a run because it could not be prepared."""

    reason: str
    type: str | None = None
    id: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {"type": self.type, "id": self.id, "reason": self.reason}


@dataclass(slots=True, frozen=True)
class BatchItemFailure:
    """A single delete or index operation the store rejected."""

    os_id: str
    action: str
    status: int
    error: Any = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "os_id": self.os_id,
            "action": self.action,
            "status": self.status,
            "error": self.error,
        }


@dataclass(slots=True, frozen=True)
class BatchWriteResult:
    """Raw store response for a batch plus the items it rejected."""

    response: dict[str, Any] = field(default_factory=dict)
    failures: list[BatchItemFailure] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class SyncPlan:
    """Mutations needed to make the index match a catalog snapshot."""

    deletes: list[str]
    upserts: list[IndexDocument]

    @property
    def is_empty(self) -> bool:
        return not self.deletes and not self.upserts

    @property
    def upsert_ids(self) -> list[str]:
        return list(dict.fromkeys(doc.os_id for doc in self.upserts))


@dataclass(slots=True, frozen=True)
class SyncResult:
    """Outcome of one reconciliation run."""

    deleted: list[str]
    indexed: list[str]
    results: dict[str, Any] = field(default_factory=dict)
    failures: list[BatchItemFailure] = field(default_factory=list)
    skipped: list[SkippedDocument] = field(default_factory=list)

    @property
    def deleted_ids(self) -> frozenset[str]:
        return frozenset(self.deleted)

    @property
    def upserted_ids(self) -> frozenset[str]:
        return frozenset(self.indexed)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    def raise_for_failures(self) -> None:
        """Raise :class:`PartialBatchFailure` if any batch item failed."""

        if self.failures:
            raise PartialBatchFailure(
                f"{len(self.failures)} batch item(s) failed",
                retryable=True,
                failures=list(self.failures),
            )

    def as_dict(self) -> dict[str, Any]:
        return {
            "deleted": list(self.deleted),
            "indexed": list(self.indexed),
            "results": self.results,
            "failures": [failure.as_dict() for failure in self.failures],
            "skipped": [skipped.as_dict() for skipped in self.skipped],
        }
