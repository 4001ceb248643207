"""Data model for the CSAF documents served as VEX files and security advisories."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


@dataclass
class Remediation:
    """A remediation offered for a vulnerability."""

    category: str = ""
    details: str = ""
    url: str = ""
    product_ids: list[str] = field(default_factory=list)


@dataclass
class Threat:
    """A threat entry, such as the impact rating of a vulnerability."""

    category: str = ""
    details: str = ""
    product_ids: list[str] = field(default_factory=list)


@dataclass
class Vulnerability:
    """One vulnerability of a document with the status of each product."""

    cve: str = ""
    product_status: dict[str, list[str]] = field(default_factory=dict)
    threats: list[Threat] = field(default_factory=list)
    remediations: list[Remediation] = field(default_factory=list)


@dataclass
class Tracking:
    """Identification and release data of a document."""

    id: str = ""
    current_release_date: datetime | None = None


@dataclass
class DocumentMetadata:
    """Document-level metadata."""

    title: str = ""
    category: str = ""
    tracking: Tracking = field(default_factory=Tracking)


@dataclass
class CSAF:
    """A CSAF document: metadata and the vulnerabilities it describes."""

    document: DocumentMetadata = field(default_factory=DocumentMetadata)
    vulnerabilities: list[Vulnerability] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> CSAF:
        """Build a document from decoded JSON; raise ValueError on malformed data."""
        root = _object(data, "document root")
        meta = _object(root.get("document"), "document")
        tracking = _object(meta.get("tracking"), "tracking")
        return cls(
            document=DocumentMetadata(
                title=_string(meta, "title"),
                category=_string(meta, "category"),
                tracking=Tracking(
                    id=_string(tracking, "id"),
                    current_release_date=_parse_time(tracking.get("current_release_date")),
                ),
            ),
            vulnerabilities=[_vulnerability(item) for item in _objects(root, "vulnerabilities")],
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the document as JSON-ready data."""
        tracking: dict[str, Any] = {"id": self.document.tracking.id}
        released = self.document.tracking.current_release_date
        if released is not None:
            tracking["current_release_date"] = released.isoformat()
        return {
            "document": {
                "title": self.document.title,
                "category": self.document.category,
                "tracking": tracking,
            },
            "vulnerabilities": [
                {
                    "cve": vuln.cve,
                    "product_status": {key: list(ids) for key, ids in vuln.product_status.items()},
                    "threats": [
                        {
                            "category": threat.category,
                            "details": threat.details,
                            "product_ids": list(threat.product_ids),
                        }
                        for threat in vuln.threats
                    ],
                    "remediations": [
                        {
                            "category": rem.category,
                            "details": rem.details,
                            "url": rem.url,
                            "product_ids": list(rem.product_ids),
                        }
                        for rem in vuln.remediations
                    ],
                }
                for vuln in self.vulnerabilities
            ],
        }


def parse_csaf(text: str | bytes) -> CSAF:
    """Parse a JSON CSAF document; raise ValueError if it is not one."""
    return CSAF.from_dict(json.loads(text))


def dump_csaf(doc: CSAF) -> str:
    """Serialise a document to JSON text."""
    return json.dumps(doc.to_dict(), ensure_ascii=False)


def _object(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be a JSON object")
    return value


def _string(mapping: dict[str, Any], key: str) -> str:
    value = mapping.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _string_list(value: Any, what: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{what} must be a list of strings")
    return list(value)


def _objects(mapping: dict[str, Any], key: str) -> list[dict[str, Any]]:
    value = mapping.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list")
    return [_object(item, key) for item in value]


def _parse_time(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValueError("timestamp must be a string")
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"invalid timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if parsed == _ZERO_TIME:
        return None
    return parsed


def _vulnerability(data: dict[str, Any]) -> Vulnerability:
    status = _object(data.get("product_status"), "product_status")
    return Vulnerability(
        cve=_string(data, "cve"),
        product_status={
            key: _string_list(ids, f"product_status[{key!r}]") for key, ids in status.items()
        },
        threats=[
            Threat(
                category=_string(item, "category"),
                details=_string(item, "details"),
                product_ids=_string_list(item.get("product_ids"), "product_ids"),
            )
            for item in _objects(data, "threats")
        ],
        remediations=[
            Remediation(
                category=_string(item, "category"),
                details=_string(item, "details"),
                url=_string(item, "url"),
                product_ids=_string_list(item.get("product_ids"), "product_ids"),
            )
            for item in _objects(data, "remediations")
        ],
    )