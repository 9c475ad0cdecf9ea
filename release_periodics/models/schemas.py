"""Pydantic schemas for decoding release, template and job documents."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from release_periodics.core.constants import JobAgent, JobType, ReleasePhase
from release_periodics.models.periodic import Container, EnvVar, JobRecord, PeriodicTemplate
from release_periodics.models.release import (
    ArtifactTag,
    PeriodicTemplateRef,
    ReleaseDefinition,
    ReleaseSourceRef,
)
from release_periodics.utils.time import ensure_utc


# ============= Release Documents =============


class ArtifactTagSchema(BaseModel):
    """A release tag entry."""

    name: str = Field(..., min_length=1)
    phase: ReleasePhase


class PeriodicRefSchema(BaseModel):
    """A release's reference to a periodic template."""

    model_config = ConfigDict(populate_by_name=True)

    base_job_name: str = Field(..., min_length=1, alias="job")
    upgrade: bool = False
    upgrade_from: str = Field(default="", alias="upgradeFrom")


class ReleaseSchema(BaseModel):
    """A release definition document."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    namespace: str = Field(..., min_length=1)
    source_name: str = Field(..., min_length=1, alias="sourceName")
    target_repository: str = Field(..., min_length=1, alias="targetRepository")
    periodics: List[PeriodicRefSchema] = Field(default_factory=list)
    tags: List[ArtifactTagSchema] = Field(
        default_factory=list, description="Tags ordered newest first"
    )
    mirrors: Dict[str, str] = Field(default_factory=dict)

    def to_definition(self) -> ReleaseDefinition:
        """Convert to the ReleaseDefinition domain model."""
        return ReleaseDefinition(
            name=self.name,
            source=ReleaseSourceRef(namespace=self.namespace, name=self.source_name),
            target_repository=self.target_repository,
            periodics=[
                PeriodicTemplateRef(
                    base_job_name=ref.base_job_name,
                    upgrade=ref.upgrade,
                    upgrade_from=ref.upgrade_from,
                )
                for ref in self.periodics
            ],
            tags=[ArtifactTag(name=tag.name, phase=tag.phase) for tag in self.tags],
            mirrors=dict(self.mirrors),
        )


# ============= Template Documents =============


class EnvVarSchema(BaseModel):
    name: str = Field(..., min_length=1)
    value: str = ""


class ContainerSchema(BaseModel):
    name: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    args: List[str] = Field(default_factory=list)
    env: List[EnvVarSchema] = Field(default_factory=list)


class PeriodicTemplateSchema(BaseModel):
    """A periodic template document."""

    name: str = Field(..., min_length=1)
    cron: str = ""
    interval: str = ""
    agent: JobAgent = JobAgent.KUBERNETES
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    containers: List[ContainerSchema] = Field(default_factory=list)

    def to_template(self) -> PeriodicTemplate:
        """Convert to the PeriodicTemplate domain model."""
        return PeriodicTemplate(
            name=self.name,
            cron=self.cron.strip(),
            interval=self.interval.strip(),
            agent=self.agent,
            labels=dict(self.labels),
            annotations=dict(self.annotations),
            containers=[
                Container(
                    name=c.name,
                    image=c.image,
                    args=list(c.args),
                    env=[EnvVar(name=e.name, value=e.value) for e in c.env],
                )
                for c in self.containers
            ],
        )


# ============= Job Store Documents =============


class JobRecordSchema(BaseModel):
    """A job document as kept in the job store."""

    model_config = ConfigDict(extra="ignore")

    job_id: str = Field(..., min_length=1)
    job_name: str = Field(..., min_length=1)
    job_type: JobType
    start_time: datetime
    completion_time: Optional[datetime] = None

    @field_validator("start_time", "completion_time")
    @classmethod
    def normalize_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Treat naive timestamps as UTC."""
        return ensure_utc(v) if v is not None else None

    @model_validator(mode="after")
    def check_ordering(self) -> "JobRecordSchema":
        """A job cannot complete before it starts."""
        if self.completion_time is not None and self.completion_time < self.start_time:
            raise ValueError("completion_time precedes start_time")
        return self

    def to_record(self) -> JobRecord:
        """Convert to the JobRecord domain model."""
        return JobRecord(
            job_id=self.job_id,
            periodic_name=self.job_name,
            completed=self.completion_time is not None,
            start_time=self.start_time,
        )
