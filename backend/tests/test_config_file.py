"""
Tests for Watch File loading.

Requires Python 3.11+.
"""

from pathlib import Path

import pytest

from app.config_file import load_config
from utils.errors import ConfigError
from watcher.models import WatchTarget

FULL = """\
- path: /home/user/project1
  commands:
    - go build -o ./build/bin/app1 cmd/service/main.go
    - ./build/bin/app1 --selftest
  log_file: /home/user/project1_build_log.out
  include:
    - '.*\\.go$'
    - '.*\\.mod$'
  exclude:
    - '.+_test\\.go$'
- path: /home/user/project2
  commands:
    - make
---
type: sqlite
location: /var/lib/tripwire/audit.db
changes: changes
commands: commands
"""

NO_DB = """\
- path: /home/user/project1
  commands:
    - make
"""

INVALID = """\
- path: [unterminated
"""

INVALID_DB = """\
- path: /home/user/project1
  commands:
    - make
---
type: [sqlite
"""

WRONG_SHAPE = """\
path: /home/user/project1
"""


@pytest.fixture
def write_config(tmp_path: Path):
    def _write(text: str) -> Path:
        path = tmp_path / "watch.yaml"
        path.write_text(text)
        return path

    return _write


class TestLoadConfig:
    """Test cases for load_config."""

    def test_full_config(self, write_config):
        """Test reading targets and the audit block."""
        watch_file = load_config(write_config(FULL))

        assert len(watch_file.targets) == 2
        first = watch_file.targets[0]
        assert isinstance(first, WatchTarget)
        assert first.path == Path("/home/user/project1")
        assert first.commands[0] == "go build -o ./build/bin/app1 cmd/service/main.go"
        assert len(first.include) == 2
        assert first.exclude == (r".+_test\.go$",)
        assert first.log_file == Path("/home/user/project1_build_log.out")

        second = watch_file.targets[1]
        assert second.log_file is None
        assert second.include == ()

        assert watch_file.audit is not None
        assert watch_file.audit.kind == "sqlite"
        assert watch_file.audit.location == "/var/lib/tripwire/audit.db"
        assert watch_file.audit.changes == "changes"

    def test_no_db(self, write_config):
        """Test that a missing audit block is fine."""
        watch_file = load_config(write_config(NO_DB))
        assert len(watch_file.targets) == 1
        assert watch_file.audit is None

    def test_invalid_db_keeps_targets(self, write_config):
        """Test that a broken audit block only drops the audit config."""
        watch_file = load_config(write_config(INVALID_DB))
        assert len(watch_file.targets) == 1
        assert watch_file.audit is None

    @pytest.mark.parametrize("text", [INVALID, WRONG_SHAPE, ""], ids=["invalid", "wrong shape", "empty"])
    def test_invalid_targets(self, write_config, text):
        """Test that an unusable target list is an error."""
        with pytest.raises(ConfigError):
            load_config(write_config(text))

    def test_missing_file(self, tmp_path: Path):
        """Test that a missing file is an error."""
        with pytest.raises(ConfigError, match="could not open config file"):
            load_config(tmp_path / "nothing.atall")
