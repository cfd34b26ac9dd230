# enhance_relay/models.py
# Job record kept in memory by the JobStore

from enum import Enum
from typing import Any, Optional
from datetime import datetime, timezone
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"


class Job(BaseModel):
    # Records are never edited in place; a state change is a new Job via model_copy
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    status: JobStatus = JobStatus.PROCESSING  # processing | success | failed
    input_image: str
    scale: Any = 2
    face_enhance: Any = True
    enhanced_image: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None

    def succeed(self, enhanced_image: str) -> "Job":
        return self.model_copy(update={
            "status": JobStatus.SUCCESS,
            "enhanced_image": enhanced_image,
            "completed_at": _utcnow(),
        })

    def fail(self, error: str) -> "Job":
        return self.model_copy(update={
            "status": JobStatus.FAILED,
            "error": error,
            "completed_at": _utcnow(),
        })
