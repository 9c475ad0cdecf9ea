"""
File-backed release and template sources.

Both documents are re-read on every tick so edits take effect without a
restart.

releases.json:
    {"releases": [{"name": "4.10", "namespace": "ocp", "sourceName": "release",
                   "targetRepository": "registry.example.com/ocp/release",
                   "periodics": [{"job": "e2e-upgrade", "upgrade": true,
                                  "upgradeFrom": "4.9"}],
                   "tags": [{"name": "4.10.0-0.nightly-1", "phase": "Accepted"}],
                   "mirrors": {"4.10.0-0.nightly-1": "registry.example.com/ocp/4.10-art"}}]}

periodics.json:
    {"periodics": [{"name": "e2e-upgrade", "interval": "24h",
                    "containers": [{"name": "test", "image": "tests:latest",
                                    "env": [{"name": "RELEASE_IMAGE_LATEST"}]}]}]}
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError

from release_periodics.core.errors import FetchFailed
from release_periodics.models.periodic import PeriodicTemplate
from release_periodics.models.release import ReleaseDefinition
from release_periodics.models.schemas import PeriodicTemplateSchema, ReleaseSchema

logger = logging.getLogger(__name__)


def _read_entries(path: Path, key: str) -> List[Any]:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise FetchFailed(f"failed to read {path}: {e}") from e

    entries = document.get(key) if isinstance(document, dict) else None
    if not isinstance(entries, list):
        raise FetchFailed(f"{path} must contain a '{key}' list")
    return entries


class FileReleaseSource:
    """Reads release definitions from a JSON document."""

    def __init__(self, path):
        self.path = Path(path)

    def list_releases(self) -> List[ReleaseDefinition]:
        """
        Load all valid release definitions.

        Returns:
            Release definitions in document order

        Raises:
            FetchFailed: If the document cannot be read
        """
        releases = []
        seen = set()
        for index, entry in enumerate(_read_entries(self.path, "releases")):
            try:
                release = ReleaseSchema.model_validate(entry).to_definition()
            except ValidationError as e:
                logger.error(f"Skipping invalid release #{index} in {self.path}: {e}")
                continue
            if release.name in seen:
                logger.error(f"Skipping duplicate release {release.name} in {self.path}")
                continue
            seen.add(release.name)
            releases.append(release)
        return releases


class FileTemplateSource:
    """Reads the periodic template registry from a JSON document."""

    def __init__(self, path):
        self.path = Path(path)

    def load_templates(self) -> Dict[str, PeriodicTemplate]:
        """
        Load all valid periodic templates.

        Returns:
            Dictionary mapping template name to PeriodicTemplate

        Raises:
            FetchFailed: If the document cannot be read
        """
        templates: Dict[str, PeriodicTemplate] = {}
        for index, entry in enumerate(_read_entries(self.path, "periodics")):
            try:
                template = PeriodicTemplateSchema.model_validate(entry).to_template()
            except ValidationError as e:
                logger.error(f"Skipping invalid periodic #{index} in {self.path}: {e}")
                continue
            if template.name in templates:
                logger.warning(f"Duplicate periodic {template.name} in {self.path}; keeping the first")
                continue
            templates[template.name] = template
        return templates


class ReleaseMirrorStore:
    """Resolves tag mirrors from the release definition's mirror map."""

    def get_mirror(self, release: ReleaseDefinition, tag_name: str) -> str:
        try:
            return release.mirrors[tag_name]
        except KeyError:
            raise LookupError(
                f"release {release.name} has no mirror for tag {tag_name}"
            ) from None
