"""
Tripwire Watch File.

Loads watch targets and the audit store block from a YAML file.

The file holds two YAML documents: a list of targets, then an optional
audit store block:

    - path: /home/user/project
      commands:
        - go build ./...
      log_file: /home/user/project_build.log
      include: ['.*\\.go$']
      exclude: ['.+_test\\.go$']
    ---
    type: sqlite
    location: /var/lib/tripwire/audit.db
    changes: changes
    commands: commands

Requires Python 3.11+.
"""

from dataclasses import dataclass, field
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from audit.store import AuditConfig
from utils.errors import ConfigError
from utils.logger import get_logger
from watcher.models import WatchTarget

logger = get_logger(__name__)


class TargetConfig(BaseModel):
    """One entry of the target list."""

    model_config = ConfigDict(extra="ignore")

    path: Path
    commands: list[str] = Field(default_factory=list)
    log_file: Path | None = None
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)

    def to_target(self) -> WatchTarget:
        """Freeze into the pipeline's target type."""
        return WatchTarget(
            path=self.path,
            commands=tuple(self.commands),
            log_file=self.log_file,
            include=tuple(self.include),
            exclude=tuple(self.exclude),
        )


_targets_adapter = TypeAdapter(list[TargetConfig])


@dataclass
class WatchFile:
    """Parsed contents of a watch file."""

    targets: list[WatchTarget] = field(default_factory=list)
    audit: AuditConfig | None = None


def load_config(path: Path) -> WatchFile:
    """
    Read a watch file.

    A broken audit block only disables audit logging; a broken target
    list makes the whole file unusable.

    Args:
        path: YAML file to read

    Returns:
        Targets and the audit store config, if any

    Raises:
        ConfigError: If the file cannot be read or the target list is invalid
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"could not open config file: {e}") from e

    documents = yaml.safe_load_all(text)

    try:
        raw_targets = next(documents, None)
    except yaml.YAMLError as e:
        raise ConfigError(f"could not parse watcher config: {e}") from e

    if raw_targets is None:
        raise ConfigError("could not parse watcher config: no targets")

    try:
        targets = [t.to_target() for t in _targets_adapter.validate_python(raw_targets)]
    except ValidationError as e:
        raise ConfigError(f"could not parse watcher config: {e}") from e

    return WatchFile(targets=targets, audit=_load_audit(documents))


def _load_audit(documents) -> AuditConfig | None:
    try:
        raw = next(documents, None)
    except yaml.YAMLError as e:
        logger.warning("could_not_parse_db_config", error=str(e))
        return None

    if raw is None:
        return None

    try:
        return AuditConfig.model_validate(raw)
    except ValidationError as e:
        logger.warning("could_not_parse_db_config", error=str(e))
        return None
