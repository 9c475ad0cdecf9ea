"""
Job store backed by Redis.

Jobs live in a Redis hash (job_id -> JSON document). Submitting a job
writes its pending document and publishes a creation request to a Redis
stream consumed by job executors; executors update the document with a
completion_time when the run finishes.

The store prunes the hash itself: finished periodic job documents older
than the retention window are deleted while reading the history, except
the latest record of each periodic, which trigger decisions depend on.
"""

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

import redis

from release_periodics.config import get_settings
from release_periodics.core.errors import FetchFailed
from release_periodics.core.history import decode_job_records, latest_jobs
from release_periodics.models.periodic import JobRecord, ReleaseJob
from release_periodics.utils.time import now_utc

logger = logging.getLogger(__name__)


def _parse_document(job_id: str, raw: str) -> Optional[Dict[str, Any]]:
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"Skipping job {job_id}: invalid JSON document: {e}")
        return None
    if not isinstance(document, dict):
        logger.error(f"Skipping job {job_id}: document is not an object")
        return None
    document.setdefault("job_id", job_id)
    return document


class RedisJobStore:
    """Job history source and job sink on top of Redis."""

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        jobs_key: Optional[str] = None,
        stream_name: Optional[str] = None,
        stream_maxlen: int = 10000,
        retention_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        """
        Initialize the job store.

        Args:
            redis_client: Optional Redis client (created if not provided)
            jobs_key: Hash holding job documents (default from settings)
            stream_name: Stream receiving creation requests (default from settings)
            stream_maxlen: Approximate cap on the request stream length
            retention_seconds: Age after which finished job documents are
                pruned, 0 to keep all (default from settings)
            clock: Source of the current time
        """
        settings = get_settings()
        if redis_client is None:
            self.redis_client = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
            )
        else:
            self.redis_client = redis_client

        self.jobs_key = jobs_key or settings.redis_jobs_key
        self.stream_name = stream_name or settings.redis_stream_job_requests
        self.stream_maxlen = stream_maxlen
        if retention_seconds is None:
            retention_seconds = settings.job_retention_seconds
        self.retention = timedelta(seconds=retention_seconds)
        self._clock = clock

    def list_job_records(self) -> List[JobRecord]:
        """
        Read the periodic job history snapshot.

        Finished documents past the retention window are pruned first.

        Returns:
            Decoded periodic job records; malformed entries are skipped

        Raises:
            FetchFailed: If Redis cannot be read
        """
        try:
            raw_jobs = self.redis_client.hgetall(self.jobs_key)
        except redis.RedisError as e:
            raise FetchFailed(f"failed to read jobs from {self.jobs_key}: {e}") from e

        documents = []
        for job_id, raw in raw_jobs.items():
            document = _parse_document(job_id, raw)
            if document is not None:
                documents.append(document)
        return self._prune(decode_job_records(documents))

    def _prune(self, records: List[JobRecord]) -> List[JobRecord]:
        if not self.retention:
            return records

        cutoff = self._clock() - self.retention
        latest = {record.job_id for record in latest_jobs(records).values()}
        expired = {
            record.job_id
            for record in records
            if record.completed and record.start_time < cutoff and record.job_id not in latest
        }
        if not expired:
            return records

        try:
            self.redis_client.hdel(self.jobs_key, *sorted(expired))
        except redis.RedisError as e:
            logger.warning(f"Failed to prune {len(expired)} finished jobs from {self.jobs_key}: {e}")
            return records

        logger.info(f"Pruned {len(expired)} finished jobs older than {self.retention}")
        return [record for record in records if record.job_id not in expired]

    def submit(self, job: ReleaseJob) -> None:
        """
        Store a new job and publish its creation request.

        Both writes go through one MULTI/EXEC pipeline.

        Args:
            job: Job to create

        Raises:
            redis.RedisError: If the transaction fails
        """
        document = job.to_dict()
        payload = json.dumps(document)

        pipe = self.redis_client.pipeline(transaction=True)
        pipe.hset(self.jobs_key, job.job_id, payload)
        pipe.xadd(
            name=self.stream_name,
            fields={
                "event_type": "job.requested",
                "job_id": job.job_id,
                "job_name": job.job_name,
                "payload": payload,
            },
            maxlen=self.stream_maxlen,
            approximate=True,
        )
        pipe.execute()

        logger.debug(f"Published job {job.job_id} ({job.job_name}) to {self.stream_name}")

    def close(self) -> None:
        """Close the Redis connection."""
        try:
            self.redis_client.close()
        except redis.RedisError as e:
            logger.warning(f"Error during Redis disconnect: {e}")


class InMemoryJobStore:
    """Job history source and job sink kept in process memory."""

    def __init__(self, documents: Optional[List[Dict[str, Any]]] = None):
        self.documents: Dict[str, Dict[str, Any]] = {}
        for document in documents or []:
            self.documents[str(document.get("job_id"))] = dict(document)
        self.submitted: List[ReleaseJob] = []

    def list_job_records(self) -> List[JobRecord]:
        return decode_job_records(list(self.documents.values()))

    def submit(self, job: ReleaseJob) -> None:
        self.documents[job.job_id] = job.to_dict()
        self.submitted.append(job)

    def complete(self, job_id: str, at: datetime) -> None:
        """Mark a stored job as finished."""
        self.documents[job_id]["completion_time"] = at.isoformat()
