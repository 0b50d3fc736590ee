"""Shared fixtures: a hand-cranked clock, a fake file executor and clips."""

import asyncio
from pathlib import Path

import pytest

from sortie.config import ConfigProvider
from sortie.logging import LogConfig, configure_logging
from sortie.models.action import DeleteAction, MoveAction, SkipAction
from sortie.models.clip import VideoClip
from sortie.models.result import OperationResult


class ManualTimer:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by the test: time only moves on ``advance``.

    Spawned coroutines are collected and only run by ``run_spawned``.
    """

    def __init__(self):
        self.now = 0.0
        self.timers = []
        self.spawned = []

    def call_later(self, delay, callback):
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def spawn(self, coro):
        self.spawned.append(coro)

    @property
    def pending(self):
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = sorted(
                (t for t in self.pending if t.due <= target + 1e-9),
                key=lambda t: t.due,
            )
            if not due:
                break
            timer = due[0]
            self.timers.remove(timer)
            self.now = max(self.now, timer.due)
            timer.callback()
        self.now = target

    def run_spawned(self):
        """Run spawned coroutines, and anything they spawn, to completion."""

        async def drain():
            while self.spawned:
                await self.spawned.pop(0)

        asyncio.run(drain())


class FakeExecutor:
    """In-memory stand-in for the file operations of a session."""

    def __init__(self, clips=None):
        self.clips = list(clips or [])
        self.load_error = None
        self.process_error = None
        self.undo_error = None
        self.gate = None
        self.calls = []

    async def load(self, directory):
        self.calls.append(("load", str(directory)))
        if self.load_error:
            return OperationResult.failure(self.load_error)
        return OperationResult.success(list(self.clips))

    async def process(self, clip, action):
        self.calls.append(("process", clip.filename, action))
        if self.gate is not None:
            await self.gate.wait()
        if self.process_error:
            return OperationResult.failure(self.process_error)
        if isinstance(action, SkipAction):
            return OperationResult.success(clip.path)
        folder = "_Trash" if isinstance(action, DeleteAction) else action.target
        return OperationResult.success(str(Path(clip.path).parent / folder / clip.filename))

    async def undo(self, current_path, original_path):
        self.calls.append(("undo", current_path, original_path))
        if self.undo_error:
            return OperationResult.failure(self.undo_error)
        return OperationResult.success()


def make_clip(name, folder="/videos", size=1024):
    return VideoClip.from_path(Path(folder) / name, size=size)


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo verbosity and file logging changes made by a test."""
    yield
    configure_logging(LogConfig())


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def clips():
    return [make_clip("a.mp4"), make_clip("b.mp4"), make_clip("c.mov")]


@pytest.fixture
def executor(clips):
    return FakeExecutor(clips)


@pytest.fixture
def config_provider(tmp_path):
    return ConfigProvider(tmp_path / "organizer_config.json")


@pytest.fixture
def move_right():
    return MoveAction(target="A-Roll")
