"""Upload server data type definitions."""

from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict


class UploadStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETE = "complete"


@dataclass
class UploadSession:
    """
    Durable progress record for one upload identifier.

    ``received_bytes`` is the frontier confirmed written; ``next_expected_byte``
    mirrors it as a resume hint for clients. ``checksum`` is reserved and
    always 0.
    """
    file_id: str
    status: UploadStatus
    received_bytes: int
    total_bytes: int
    next_expected_byte: int
    last_updated: datetime
    checksum: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        data["last_updated"] = self.last_updated.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UploadSession":
        return cls(
            file_id=data["file_id"],
            status=UploadStatus(data["status"]),
            received_bytes=int(data["received_bytes"]),
            total_bytes=int(data["total_bytes"]),
            next_expected_byte=int(data["next_expected_byte"]),
            last_updated=datetime.fromisoformat(data["last_updated"]),
            checksum=int(data.get("checksum", 0)),
        )


@dataclass(frozen=True)
class ChunkResult:
    """
    Outcome of a chunk upload.
    """
    next_expected_byte: int
    received_bytes: int
    total_bytes: int
    status: UploadStatus
    replayed: bool = False
