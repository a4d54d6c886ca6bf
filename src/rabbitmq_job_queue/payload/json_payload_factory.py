"""JSON implementation of the payload factory."""

from __future__ import annotations

import json
from typing import Any, Dict

from rabbitmq_job_queue.contracts import IPayloadFactory


class JSONPayloadFactory(IPayloadFactory):
    """Encodes a job reference and its data as a JSON document.

    ``job`` is either a handler name or an object; objects exposing ``to_dict``
    contribute that dictionary as the job data when no explicit data is given.
    """

    def create_payload(self, job: Any, data: Any = "") -> bytes:
        document = self._describe(job, data)
        try:
            return json.dumps(document).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise ValueError("Unable to JSON encode payload.") from exc

    def _describe(self, job: Any, data: Any) -> Dict[str, Any]:
        if isinstance(job, str):
            return {"displayName": job, "job": job, "data": data}

        job_type = type(job)
        if not data and hasattr(job, "to_dict"):
            data = job.to_dict()
        return {
            "displayName": job_type.__name__,
            "job": f"{job_type.__module__}.{job_type.__qualname__}",
            "data": data,
        }
