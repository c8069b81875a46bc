#
# conftest.py
# Minecraft Backup Script
#
# Reusable pytest fixtures: a temporary backup configuration and fake screen/bup/tail processes driven by a scripted server.
#
# Thales Matheus Mendonça Santos - November 2025
#
import logging
import queue
import threading

import pytest

from minecraft_backup.config import BackupConfig, Paths, Settings
from minecraft_backup.process import CommandResult


class FakeStdout:
    """Line iterator fed from the test thread; blocks like a pipe."""

    def __init__(self):
        self._lines = queue.Queue()
        self.closed = False

    def feed(self, line):
        self._lines.put(line)

    def end(self):
        self._lines.put(None)

    def __iter__(self):
        return self

    def __next__(self):
        item = self._lines.get()
        if item is None:
            # Keep the end marker for any later reader.
            self._lines.put(None)
            raise StopIteration
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


class FakeProcess:
    def __init__(self, argv):
        self.argv = list(argv)
        self.stdout = FakeStdout()
        self.returncode = None
        self.terminated = False
        self.killed = False

    def poll(self):
        return self.returncode

    def terminate(self):
        self.terminated = True
        self.returncode = -15
        self.stdout.end()

    def kill(self):
        self.killed = True
        self.returncode = -9
        self.stdout.end()

    def wait(self, timeout=None):
        return self.returncode


class FakeRunner:
    """Records every argv. ``handler(argv)`` may return a CommandResult."""

    def __init__(self, handler=None):
        self.handler = handler
        self.calls = []
        self.spawned = []
        self._lock = threading.Lock()

    def run(self, argv):
        with self._lock:
            self.calls.append(list(argv))
        if self.handler is not None:
            result = self.handler(list(argv))
            if result is not None:
                return result
        return CommandResult(argv=list(argv), returncode=0)

    def spawn(self, argv):
        proc = FakeProcess(argv)
        with self._lock:
            self.spawned.append(proc)
        return proc

    def live_processes(self):
        with self._lock:
            return [p for p in self.spawned if p.returncode is None]


class FakeServer:
    """Plays the Minecraft console behind screen and answers into every live tail."""

    RESPONSES = {
        "list": "There are 0 of a max of 20 players online:",
        "save-off": "Turned off world auto-saving",
        "save-all": "Saved the world",
        "save-on": "Turned on world auto-saving",
    }

    def __init__(self):
        self.runner = FakeRunner(handler=self.handle)
        self.received = []
        self.silent = set()
        self.failing_bup = set()
        self.screen_down = False

    @property
    def bup_calls(self):
        return [c for c in self.runner.calls if c[0] == "bup"]

    def handle(self, argv):
        if argv[0] == "screen" and argv[1] == "-ls":
            listing = "" if self.screen_down else "There is a screen on:\n\t4242.minecraft\t(Detached)\n"
            return CommandResult(argv=argv, returncode=1, stdout=listing or "No Sockets found.\n")
        if argv[0] == "screen" and "stuff" in argv:
            if self.screen_down:
                return CommandResult(argv=argv, returncode=1, stdout="No screen session found.\n")
            command = argv[-1][: -len("\\r")]
            self.received.append(command)
            if command in self.RESPONSES and command not in self.silent:
                for proc in self.runner.live_processes():
                    proc.stdout.feed("[12:00:00] [Server thread/INFO]: chatter\n")
                    proc.stdout.feed(f"[12:00:00] [Server thread/INFO]: {self.RESPONSES[command]}\n")
            return CommandResult(argv=argv, returncode=0)
        if argv[0] == "bup":
            sub = argv[3]
            if sub in self.failing_bup:
                return CommandResult(argv=argv, returncode=1, stderr=f"bup {sub}: boom\n")
        return None


@pytest.fixture
def temp_config(tmp_path):
    paths = Paths(
        backup_root=tmp_path / "backups",
        world_dir=tmp_path / "server" / "world",
        server_log=tmp_path / "server" / "logs" / "latest.log",
    )
    settings = Settings(verify_timeout=0.5, grace_delay=0.0)
    config = BackupConfig(paths=paths, settings=settings)

    # Create the minimal folder structure expected by the code under test.
    paths.backup_root.mkdir(parents=True, exist_ok=True)
    paths.world_dir.mkdir(parents=True, exist_ok=True)
    paths.server_log.parent.mkdir(parents=True, exist_ok=True)
    paths.server_log.touch()
    (paths.world_dir / "level.dat").write_text("x")

    return config


@pytest.fixture
def logger(request):
    return logging.getLogger(f"tests.{request.node.name}")


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def fake_server():
    return FakeServer()
