# tests/test_shortcut_store.py

import json

import pytest

from shortcut_dock.core.errors import StorageError
from shortcut_dock.core.models import ShortcutCreationInput
from shortcut_dock.core.shortcut_store import DEFAULT_CATEGORY_ID, STORE_VERSION, ShortcutStore


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data" / "shortcuts.json"


def test_missing_file_starts_with_default_category(data_file):
    store = ShortcutStore(data_file)

    categories = store.list_categories()
    assert [c.id for c in categories] == [DEFAULT_CATEGORY_ID]
    assert store.list_shortcuts() == []
    assert not data_file.exists()


def test_create_shortcut_writes_document(data_file):
    store = ShortcutStore(data_file)
    record = store.create_shortcut(ShortcutCreationInput("notes", "/tmp/notes.txt", DEFAULT_CATEGORY_ID, "aWNv"))

    document = json.loads(data_file.read_text(encoding="utf-8"))
    assert document["version"] == STORE_VERSION
    assert document["shortcuts"][0]["id"] == record.id
    assert document["shortcuts"][0]["icon_data"] == "aWNv"
    assert {c["id"] for c in document["categories"]} == {DEFAULT_CATEGORY_ID}
    assert "last_updated" in document


def test_store_round_trips_through_disk(data_file):
    store = ShortcutStore(data_file)
    category = store.create_category("Work")
    store.create_shortcut(ShortcutCreationInput("plan", "/work/plan.md", category.id))

    reloaded = ShortcutStore(data_file)
    assert [s.name for s in reloaded.list_shortcuts(category.id)] == ["plan"]
    assert reloaded.list_shortcuts(DEFAULT_CATEGORY_ID) == []
    assert reloaded.get_category(category.id).name == "Work"


def test_duplicate_path_in_same_category_is_rejected(data_file):
    store = ShortcutStore(data_file)
    request = ShortcutCreationInput("notes", "/tmp/notes.txt", DEFAULT_CATEGORY_ID)
    store.create_shortcut(request)

    with pytest.raises(StorageError, match="shortcut already exists: notes"):
        store.create_shortcut(request)

    other = store.create_category("Other")
    store.create_shortcut(ShortcutCreationInput("notes", "/tmp/notes.txt", other.id))
    assert len(store.list_shortcuts()) == 2


def test_unknown_category_is_rejected(data_file):
    store = ShortcutStore(data_file)
    with pytest.raises(StorageError, match="does not exist"):
        store.create_shortcut(ShortcutCreationInput("x", "/x", "nope"))


@pytest.mark.parametrize("name", ["", "   ", "default"])
def test_create_category_rejects_empty_and_duplicate_names(data_file, name):
    store = ShortcutStore(data_file)
    with pytest.raises(StorageError):
        store.create_category(name)


def test_second_save_keeps_a_backup(data_file):
    store = ShortcutStore(data_file)
    store.create_shortcut(ShortcutCreationInput("a", "/a", DEFAULT_CATEGORY_ID))
    store.create_shortcut(ShortcutCreationInput("b", "/b", DEFAULT_CATEGORY_ID))

    backup = json.loads(data_file.with_suffix(".json.bak").read_text(encoding="utf-8"))
    assert [s["name"] for s in backup["shortcuts"]] == ["a"]


def test_failed_save_rolls_back_memory(data_file, monkeypatch):
    store = ShortcutStore(data_file)
    store.create_shortcut(ShortcutCreationInput("a", "/a", DEFAULT_CATEGORY_ID))

    def broken_dump(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr("shortcut_dock.core.shortcut_store.json.dump", broken_dump)
    with pytest.raises(StorageError, match="disk full"):
        store.create_shortcut(ShortcutCreationInput("b", "/b", DEFAULT_CATEGORY_ID))
    monkeypatch.undo()

    assert [s.name for s in store.list_shortcuts()] == ["a"]
    assert [s.name for s in ShortcutStore(data_file).list_shortcuts()] == ["a"]


def test_corrupt_file_raises_storage_error(data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("{not json", encoding="utf-8")

    with pytest.raises(StorageError):
        ShortcutStore(data_file).list_shortcuts()


def test_delete_shortcut(data_file):
    store = ShortcutStore(data_file)
    record = store.create_shortcut(ShortcutCreationInput("a", "/a", DEFAULT_CATEGORY_ID))

    assert store.delete_shortcut(record.id) is True
    assert store.delete_shortcut(record.id) is False
    assert ShortcutStore(data_file).list_shortcuts() == []


@pytest.mark.parametrize("content", ["[]", '{"shortcuts": ["not a record"]}', '{"categories": 5}'])
def test_wrongly_shaped_file_raises_storage_error(data_file, content):
    data_file.parent.mkdir(parents=True)
    data_file.write_text(content, encoding="utf-8")

    with pytest.raises(StorageError):
        ShortcutStore(data_file).list_categories()


def test_record_usage_counts_and_persists(data_file):
    store = ShortcutStore(data_file)
    record = store.create_shortcut(ShortcutCreationInput("a", "/a", DEFAULT_CATEGORY_ID))
    assert record.last_used is None

    store.record_usage(record.id)
    updated = store.record_usage(record.id)

    assert updated.usage_count == 2
    assert updated.last_used is not None
    reloaded = ShortcutStore(data_file).get_shortcut(record.id)
    assert (reloaded.usage_count, reloaded.last_used) == (2, updated.last_used)


def test_record_usage_of_unknown_shortcut(data_file):
    with pytest.raises(StorageError, match="does not exist"):
        ShortcutStore(data_file).record_usage("nope")


def test_delete_category_moves_shortcuts_to_default(data_file):
    store = ShortcutStore(data_file)
    work = store.create_category("Work")
    store.create_shortcut(ShortcutCreationInput("plan", "/work/plan.md", work.id))
    store.create_shortcut(ShortcutCreationInput("notes", "/tmp/notes.txt", work.id))
    store.create_shortcut(ShortcutCreationInput("notes", "/tmp/notes.txt", DEFAULT_CATEGORY_ID))

    assert store.delete_category(work.id) is True

    reloaded = ShortcutStore(data_file)
    assert [c.id for c in reloaded.list_categories()] == [DEFAULT_CATEGORY_ID]
    assert sorted(s.path for s in reloaded.list_shortcuts(DEFAULT_CATEGORY_ID)) == [
        "/tmp/notes.txt", "/work/plan.md"]
    assert len(reloaded.list_shortcuts()) == 2


def test_delete_category_refuses_default_and_ignores_unknown(data_file):
    store = ShortcutStore(data_file)

    with pytest.raises(StorageError, match="default category cannot be deleted"):
        store.delete_category(DEFAULT_CATEGORY_ID)
    assert store.delete_category("nope") is False
    assert [c.id for c in store.list_categories()] == [DEFAULT_CATEGORY_ID]
