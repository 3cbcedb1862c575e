# tests/test_path_inspector.py

import pytest

from shortcut_dock.core.errors import PathLookupError
from shortcut_dock.core.models import PathDescriptor
from shortcut_dock.core.path_inspector import PathInspector, derive_shortcut_name


@pytest.mark.asyncio
async def test_classify_file_and_directory(caps):
    inspector = PathInspector(caps)

    file_desc = await inspector.classify("/tmp/a.txt")
    dir_desc = await inspector.classify("/projects")

    assert file_desc == PathDescriptor("/tmp/a.txt", False, "a.txt")
    assert dir_desc == PathDescriptor("/projects", True, "projects")


@pytest.mark.asyncio
async def test_classify_strips_whitespace(caps):
    descriptor = await PathInspector(caps).classify("  /tmp/a.txt \n")
    assert descriptor.path == "/tmp/a.txt"


@pytest.mark.asyncio
@pytest.mark.parametrize("blank", ["", "   "])
async def test_classify_rejects_blank_path(caps, blank):
    with pytest.raises(PathLookupError):
        await PathInspector(caps).classify(blank)
    assert caps.called("get_path_info") == []


@pytest.mark.asyncio
async def test_classify_lookup_failure_is_a_lookup_error(caps):
    caps.unreadable.add("/locked")
    with pytest.raises(LookupError):
        await PathInspector(caps).classify("/locked")


@pytest.mark.asyncio
async def test_classify_wraps_os_error(caps):
    async def broken(path):
        raise PermissionError("denied")

    caps.get_path_info = broken
    with pytest.raises(PathLookupError, match="denied"):
        await PathInspector(caps).classify("/secret")


@pytest.mark.asyncio
async def test_validate_routes_by_kind(caps):
    inspector = PathInspector(caps)

    await inspector.validate(PathDescriptor("/projects", True, "projects"))
    await inspector.validate(PathDescriptor("/tmp/a.txt", False, "a.txt"))

    assert caps.called("validate_directory_path") == [("validate_directory_path", "/projects")]
    assert caps.called("validate_file_path") == [("validate_file_path", "/tmp/a.txt")]


@pytest.mark.asyncio
async def test_validate_treats_collaborator_exception_as_invalid(caps):
    async def explode(path):
        raise RuntimeError("validator down")

    caps.validate_file_path = explode
    assert await PathInspector(caps).validate(PathDescriptor("/tmp/a.txt", False, "a.txt")) is False


@pytest.mark.asyncio
async def test_check_exists(caps):
    inspector = PathInspector(caps)
    assert await inspector.check_exists(PathDescriptor("/tmp/a.txt", False, "a.txt")) is True
    assert await inspector.check_exists(PathDescriptor("/missing/b", False, "b")) is False


@pytest.mark.parametrize("name, is_directory, expected", [
    ("report.final.pdf", False, "report.final"),
    ("notes.txt", False, "notes"),
    ("README", False, "README"),
    (".bashrc", False, ".bashrc"),
    ("archive.", False, "archive."),
    ("my.project", True, "my.project"),
])
def test_derive_shortcut_name(name, is_directory, expected):
    descriptor = PathDescriptor(f"/somewhere/{name}", is_directory, name)
    assert derive_shortcut_name(descriptor) == expected
