# tests/conftest.py

import asyncio
import os
from pathlib import PurePosixPath

import pytest

# Qt widgets are created without a display in the test run.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from shortcut_dock.core.errors import CreationError, PathLookupError
from shortcut_dock.core.item_processor import ItemProcessor
from shortcut_dock.core.models import IconPayload, PathInfo, ShortcutCreationInput, ShortcutRecord


class FakeCapabilities:
    """
    In-memory collaborators for the core pipeline.

    Paths listed in `files` / `directories` exist; everything else is
    missing. The other sets switch on individual failures; `crashing` paths
    make `get_path_info` raise something other than a lookup error.
    """

    def __init__(self, files=(), directories=(), invalid=(), unreadable=(), icon_failures=(), crashing=(),
                 creation_failures=None, dialog_answers=(), create_delay=0.0):
        self.files = set(files)
        self.directories = set(directories)
        self.invalid = set(invalid)
        self.unreadable = set(unreadable)
        self.icon_failures = set(icon_failures)
        self.crashing = set(crashing)
        self.creation_failures = dict(creation_failures or {})
        self.dialog_answers = list(dialog_answers)
        self.create_delay = create_delay
        self.calls = []
        self.created = []

    async def get_path_info(self, path):
        self.calls.append(("get_path_info", path))
        if path in self.unreadable:
            raise PathLookupError(f"cannot stat {path}")
        if path in self.crashing:
            raise RuntimeError("collaborator crashed")
        return PathInfo(display_name=PurePosixPath(path).name or path, is_directory=path in self.directories)

    async def validate_file_path(self, path):
        self.calls.append(("validate_file_path", path))
        return path not in self.invalid

    async def validate_directory_path(self, path):
        self.calls.append(("validate_directory_path", path))
        return path not in self.invalid

    async def check_exists(self, path):
        self.calls.append(("check_exists", path))
        return path in self.files or path in self.directories

    async def get_file_icon(self, path, high_res):
        self.calls.append(("get_file_icon", path, high_res))
        if path in self.icon_failures:
            raise RuntimeError("icon extraction crashed")
        return IconPayload(data="ZmlsZQ==")

    async def get_directory_icon(self, path, high_res):
        self.calls.append(("get_directory_icon", path, high_res))
        if path in self.icon_failures:
            raise RuntimeError("icon extraction crashed")
        return IconPayload(data="ZGly")

    async def create_shortcut(self, request: ShortcutCreationInput):
        self.calls.append(("create_shortcut", request.path))
        if self.create_delay:
            await asyncio.sleep(self.create_delay)
        if request.path in self.creation_failures:
            raise CreationError(self.creation_failures[request.path])
        self.created.append(request)
        return ShortcutRecord(name=request.name, path=request.path, category_id=request.category_id,
                              icon_data=request.icon_data)

    async def open_file_dialog(self):
        self.calls.append(("open_file_dialog",))
        return self.dialog_answers.pop(0) if self.dialog_answers else None

    def called(self, method):
        return [call for call in self.calls if call[0] == method]


class Recorder:
    """Collects callback invocations."""

    def __init__(self):
        self.notices = []
        self.completions = []
        self.added = []
        self.item_snapshots = []

    def notify(self, level, message):
        self.notices.append((level, message))

    def batch_complete(self, success, error):
        self.completions.append((success, error))

    def item_added(self, path):
        self.added.append(path)

    def item_changed(self, item):
        self.item_snapshots.append((item.id, item.status))


@pytest.fixture
def caps():
    return FakeCapabilities(
        files={"/tmp/a.txt", "/docs/report.final.pdf", "/x", "/y", "/z"},
        directories={"/projects"},
    )


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def processor(caps, recorder):
    return ItemProcessor(caps, "default", on_item_changed=recorder.item_changed)


@pytest.fixture(scope="session")
def qapp():
    """Creates a QApplication instance for the test session."""
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app
