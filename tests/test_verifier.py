#
# test_verifier.py
# Minecraft Backup Script
#
# Covers the send-and-verify protocol: watcher-before-send ordering, timeouts, fire-and-forget sends and error propagation.
#
# Thales Matheus Mendonça Santos - November 2025
#
import logging
import time

import pytest

from minecraft_backup.errors import SenderError, VerificationTimeout, WatcherError
from minecraft_backup.session import ScreenSession
from minecraft_backup.verifier import CommandVerifier
from minecraft_backup.watcher import LogWatcher


def build(server, tmp_path, events=None, timeout=0.5, grace=0.05):
    events = events if events is not None else []
    log_path = tmp_path / "latest.log"

    class RecordingSession(ScreenSession):
        def send(self, command):
            events.append(("send", command))
            super().send(command)

    def factory(pattern):
        events.append(("watch", pattern))
        return LogWatcher(log_path, pattern, runner=server.runner)

    def sleep(seconds):
        events.append(("sleep", seconds))

    sender = RecordingSession("minecraft", runner=server.runner)
    verifier = CommandVerifier(sender, factory, timeout=timeout, grace_delay=grace, sleep=sleep)
    return verifier, events


def test_confirmed_command_returns(tmp_path, fake_server):
    verifier, events = build(fake_server, tmp_path)
    verifier.verify("save-all", "Saved the world")

    assert fake_server.received == ["save-all"]
    # Watcher first, then the grace interval, then the command.
    assert events == [("watch", "Saved the world"), ("sleep", 0.05), ("send", "save-all")]
    assert all(p.returncode is not None for p in fake_server.runner.spawned)


def test_watcher_is_running_when_command_is_sent(tmp_path, fake_server):
    seen = []

    class CheckingSession(ScreenSession):
        def send(self, command):
            seen.append(len(fake_server.runner.live_processes()))
            super().send(command)

    verifier = CommandVerifier(
        CheckingSession("minecraft", runner=fake_server.runner),
        lambda p: LogWatcher(tmp_path / "latest.log", p, runner=fake_server.runner),
        timeout=1.0,
        grace_delay=0.0,
    )
    verifier.verify("save-off", "Turned off world auto-saving")
    assert seen == [1]


def test_empty_pattern_is_fire_and_forget(tmp_path, fake_server):
    verifier, events = build(fake_server, tmp_path)
    verifier.verify("say hello", "")
    verifier.announce("Backing up world...")

    assert events == [("send", "say hello"), ("send", "say Backing up world...")]
    assert fake_server.runner.spawned == []


def test_unconfirmed_command_times_out(tmp_path, fake_server, caplog):
    caplog.set_level(logging.DEBUG, logger="minecraft_backup")
    fake_server.silent.add("save-all")
    verifier, _ = build(fake_server, tmp_path, timeout=0.3)

    started = time.monotonic()
    with pytest.raises(VerificationTimeout) as exc:
        verifier.verify("save-all", "Saved the world")
    elapsed = time.monotonic() - started

    assert 0.3 <= elapsed < 2.0
    assert exc.value.command == "save-all"
    assert exc.value.timeout == 0.3
    assert "'save-all' -> timed_out" in caplog.text
    # The abandoned watcher's tail process was killed.
    assert [p.terminated for p in fake_server.runner.spawned] == [True]


def test_per_call_timeout_overrides_default(tmp_path, fake_server):
    fake_server.silent.add("list")
    verifier, _ = build(fake_server, tmp_path, timeout=30)
    with pytest.raises(VerificationTimeout) as exc:
        verifier.verify("list", "players online", timeout=0.1)
    assert exc.value.timeout == 0.1


def test_watcher_error_propagates(tmp_path, fake_server):
    class ClosingSession(ScreenSession):
        def send(self, command):
            super().send(command)
            # The log stream dies instead of answering.
            for proc in fake_server.runner.live_processes():
                proc.stdout.end()

    fake_server.silent.add("save-off")
    verifier = CommandVerifier(
        ClosingSession("minecraft", runner=fake_server.runner),
        lambda p: LogWatcher(tmp_path / "latest.log", p, runner=fake_server.runner),
        timeout=2.0,
        grace_delay=0.0,
    )
    with pytest.raises(WatcherError):
        verifier.verify("save-off", "Turned off world auto-saving")


def test_sender_error_cancels_watcher(tmp_path, fake_server):
    fake_server.screen_down = True
    verifier, _ = build(fake_server, tmp_path)
    with pytest.raises(SenderError):
        verifier.verify("save-off", "Turned off world auto-saving")
    assert [p.terminated for p in fake_server.runner.spawned] == [True]


def test_from_config_wires_session_and_log(temp_config, fake_server, logger):
    verifier = CommandVerifier.from_config(temp_config, runner=fake_server.runner, logger=logger)
    verifier.verify("save-on", "Turned on world auto-saving")

    assert verifier.timeout == temp_config.settings.verify_timeout
    assert fake_server.runner.spawned[0].argv[-1] == str(temp_config.paths.server_log)
    assert fake_server.runner.calls[0][:3] == ["screen", "-S", "minecraft"]
