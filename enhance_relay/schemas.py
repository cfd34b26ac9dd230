# enhance_relay/schemas.py
# Pydantic schemas for the request/response bodies of the HTTP API

from typing import Any, Optional
from pydantic import BaseModel
from datetime import datetime

from .models import Job, JobStatus

# POST /enhance body; image_url is optional here so a missing value gets our own 400.
# scale and face_enhance go to Replicate exactly as sent; defaults only fill absent keys
class EnhanceRequest(BaseModel):
    image_url: Optional[str] = None
    scale: Any = 2
    face_enhance: Any = True

# 202 response of POST /enhance
class EnhanceAccepted(BaseModel):
    job_id: str
    status: JobStatus
    input_image: str
    created_at: datetime
    poll_url: str

    @classmethod
    def from_job(cls, job: Job) -> "EnhanceAccepted":
        return cls(
            job_id=job.id,
            status=job.status,
            input_image=job.input_image,
            created_at=job.created_at,
            poll_url=f"/enhance/{job.id}",
        )

# GET /enhance/{job_id}; unset fields are left out of the JSON
class JobOut(BaseModel):
    job_id: str
    status: JobStatus
    input_image: str
    enhanced_image: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None

    @classmethod
    def from_job(cls, job: Job) -> "JobOut":
        return cls(
            job_id=job.id,
            status=job.status,
            input_image=job.input_image,
            enhanced_image=job.enhanced_image,
            error=job.error,
            created_at=job.created_at,
            completed_at=job.completed_at,
        )
