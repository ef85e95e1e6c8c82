"""
Tests for Supervisor and the command-line entry point.

Requires Python 3.11+.
"""

import threading
from pathlib import Path

import pytest

from app import main as main_module
from app.supervisor import Supervisor
from audit.loggers import NullChangeLogger, NullCommandLogger
from audit.store import AuditLoggers
from utils.errors import SetupError
from watcher.models import WatchTarget


class FakePipeline:
    def __init__(self, target: WatchTarget) -> None:
        self.target = target
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


@pytest.fixture
def loggers() -> AuditLoggers:
    return AuditLoggers(NullChangeLogger(), NullCommandLogger())


class TestSupervisor:
    """Test cases for Supervisor."""

    def test_failed_target_does_not_block_others(self, loggers: AuditLoggers):
        """Test that a setup error skips only that target."""
        started: list[FakePipeline] = []

        def starter(target: WatchTarget, **kwargs) -> FakePipeline:
            if target.path == Path("/bad"):
                raise SetupError("/bad", "no such directory")
            pipeline = FakePipeline(target)
            started.append(pipeline)
            return pipeline

        supervisor = Supervisor(loggers, starter=starter)
        count = supervisor.start_all(
            [WatchTarget(path=Path("/good1")), WatchTarget(path=Path("/bad")), WatchTarget(path=Path("/good2"))]
        )

        assert count == 2
        assert [p.target.path for p in started] == [Path("/good1"), Path("/good2")]

    def test_loggers_passed_to_every_target(self, loggers: AuditLoggers):
        """Test that all targets share the audit loggers."""
        seen: list[dict] = []

        def starter(target: WatchTarget, **kwargs) -> FakePipeline:
            seen.append(kwargs)
            return FakePipeline(target)

        Supervisor(loggers, starter=starter).start_all([WatchTarget(path=Path("/a"))])

        assert seen[0]["change_logger"] is loggers.changes
        assert seen[0]["command_logger"] is loggers.commands

    def test_stop_request_stops_all(self, loggers: AuditLoggers):
        """Test that a stop request ends run_until_stopped and stops every target."""
        supervisor = Supervisor(loggers, starter=lambda target, **kwargs: FakePipeline(target))
        supervisor.start_all([WatchTarget(path=Path("/a")), WatchTarget(path=Path("/b"))])
        pipelines = supervisor.pipelines

        runner = threading.Thread(target=supervisor.run_until_stopped)
        runner.start()
        supervisor.request_stop()
        runner.join(5.0)

        assert not runner.is_alive()
        assert all(p.stopped for p in pipelines)
        assert supervisor.pipelines == []


class TestMain:
    """Test cases for the command-line entry point."""

    def test_missing_config_fails(self, tmp_path: Path):
        """Test that an unreadable watch file exits with an error."""
        assert main_module.main([str(tmp_path / "nothing.yaml")]) == 1

    def test_no_running_targets_fails(self, tmp_path: Path):
        """Test that a file whose targets all fail to start exits with an error."""
        config = tmp_path / "watch.yaml"
        config.write_text(f"- path: {tmp_path / 'missing'}\n  commands: ['echo hi']\n")

        assert main_module.main([str(config)]) == 1

    def test_version(self, capsys):
        """Test the --version flag."""
        with pytest.raises(SystemExit) as excinfo:
            main_module.main(["--version"])

        assert excinfo.value.code == 0
        assert "tripwire" in capsys.readouterr().out

    def test_runs_until_stopped(self, tmp_path: Path, monkeypatch):
        """Test the full start and shutdown path with a real target."""
        watched = tmp_path / "watched"
        watched.mkdir()
        config = tmp_path / "watch.yaml"
        config.write_text(f"- path: {watched}\n  commands: ['echo hi']\n")

        instances: list[Supervisor] = []

        class NoSignalSupervisor(Supervisor):
            def install_signal_handlers(self) -> None:
                instances.append(self)
                self.request_stop()

        monkeypatch.setattr(main_module, "Supervisor", NoSignalSupervisor)

        assert main_module.main([str(config)]) == 0
        assert instances and instances[0].pipelines == []
