"""
Job history view.

Reduces the job store snapshot to the latest record per periodic name.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping

from pydantic import ValidationError

from release_periodics.core.constants import JobType
from release_periodics.models.periodic import JobRecord
from release_periodics.models.schemas import JobRecordSchema

logger = logging.getLogger(__name__)


def decode_job_records(items: Iterable[Any]) -> List[JobRecord]:
    """
    Decode raw job store entries into periodic JobRecords.

    Entries that are not mappings, fail validation or belong to another
    job type are skipped.

    Args:
        items: Raw job documents

    Returns:
        Decoded periodic job records
    """
    records = []
    for item in items:
        if not isinstance(item, Mapping):
            logger.warning(f"Skipping job entry of unexpected type {type(item).__name__}")
            continue
        try:
            payload = JobRecordSchema.model_validate(item)
        except ValidationError as e:
            logger.error(
                f"Failed to decode job entry {item.get('job_id', '<unknown>')}: {e}"
            )
            continue
        if payload.job_type != JobType.PERIODIC:
            continue
        records.append(payload.to_record())
    return records


def latest_jobs(records: Iterable[JobRecord]) -> Dict[str, JobRecord]:
    """
    Get the most recent record for every periodic name.

    The latest record is the one with the greatest start time; ties are
    broken by the greater job_id so the result does not depend on input
    order.

    Args:
        records: Job records

    Returns:
        Dictionary mapping periodic name to its latest JobRecord
    """
    latest: Dict[str, JobRecord] = {}
    for record in records:
        current = latest.get(record.periodic_name)
        if current is None or (record.start_time, record.job_id) > (
            current.start_time,
            current.job_id,
        ):
            latest[record.periodic_name] = record
    return latest
