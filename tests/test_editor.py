"""Tests for the editing session: EntryGrid and STFDocument.

WHY: The grid enforces the one rule the codec cannot (ids are unique),
and the document owns undo/redo and the dirty flag. Bugs here lose user
edits silently.

HOW: Grids are built over small in-memory row lists with a recording
on_change callback. Documents are opened from files in tmp_path and
saved back, with the bytes re-decoded to check what hit disk.

RULES:
- page_size is passed explicitly so tests do not depend on STF_PAGE_SIZE
"""

import pytest

from stf_converter.core.codec import FormatError, decode
from stf_converter.core.ir import STFData, StringEntry
from stf_converter.editor import Backup, DuplicateKeyError, EntryGrid, STFDocument


def _rows(*ids):
    return [StringEntry(id=i, value="value of " + i) for i in ids]


class _Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, entries):
        self.calls.append(entries)


# =========================================================================
# EntryGrid: search and pagination
# =========================================================================


class TestGridSearch:
    def test_empty_query_matches_all(self):
        grid = EntryGrid(_rows("a", "b", "c"), page_size=10)
        assert grid.filtered_indices == [0, 1, 2]
        assert grid.stats() == "3 entries"

    def test_matches_id_or_value_case_insensitively(self):
        rows = [
            StringEntry(id="menu_start", value="Start"),
            StringEntry(id="quit", value="Beenden"),
            StringEntry(id="other", value="nothing"),
        ]
        grid = EntryGrid(rows, page_size=10)
        assert grid.search("START") == [0]
        assert grid.search("been") == [1]
        assert grid.stats() == "1 of 3 matched"

    def test_matches_astral_characters_by_display_form(self):
        grid = EntryGrid([StringEntry(id="e", value="\ud83d\ude00")], page_size=10)
        assert grid.search("\U0001F600") == [0]

    def test_search_resets_page(self):
        grid = EntryGrid(_rows(*"abcdef"), page_size=2)
        grid.last_page()
        grid.search("")
        assert grid.page == 0

    def test_no_matches(self):
        grid = EntryGrid(_rows("a"), page_size=10)
        assert grid.search("zzz") == []
        assert grid.total_pages == 1
        assert grid.page_entries() == []


class TestGridPagination:
    def test_total_pages(self):
        assert EntryGrid([], page_size=5).total_pages == 1
        assert EntryGrid(_rows(*"abcde"), page_size=5).total_pages == 1
        assert EntryGrid(_rows(*"abcdef"), page_size=5).total_pages == 2

    def test_navigation_is_clamped(self):
        grid = EntryGrid(_rows(*"abcde"), page_size=2)
        assert grid.prev_page() == 0
        assert grid.next_page() == 1
        assert grid.last_page() == 2
        assert grid.next_page() == 2
        assert grid.go_to_page(-5) == 0
        assert grid.go_to_page(99) == 2
        assert grid.first_page() == 0

    def test_page_contents(self):
        grid = EntryGrid(_rows(*"abcde"), page_size=2)
        grid.go_to_page(2)
        assert grid.page_indices() == [4]
        assert [e.id for e in grid.page_entries()] == ["e"]

    def test_invalid_page_size(self):
        with pytest.raises(ValueError):
            EntryGrid([], page_size=0)


# =========================================================================
# EntryGrid: editing
# =========================================================================


class TestGridEditing:
    def test_add_entry_uses_first_free_id(self):
        recorder = _Recorder()
        grid = EntryGrid(_rows("new_entry", "new_entry_1"), on_change=recorder, page_size=10)
        index = grid.add_entry()
        assert index == 2
        assert grid.entries[2] == StringEntry(id="new_entry_2", value="")
        assert [e.id for e in recorder.calls[-1]] == ["new_entry", "new_entry_1", "new_entry_2"]

    def test_add_entry_prefix_is_configurable(self):
        grid = EntryGrid([], page_size=10, new_entry_prefix="row")
        grid.add_entry()
        grid.add_entry()
        assert [e.id for e in grid.entries] == ["row", "row_1"]

    def test_add_entry_clears_query_and_shows_last_page(self):
        grid = EntryGrid(_rows(*"abcde"), page_size=2)
        grid.search("a")
        grid.add_entry()
        assert grid.query == ""
        assert grid.page == grid.total_pages - 1
        assert grid.page_indices()[-1] == 5

    def test_set_value(self):
        recorder = _Recorder()
        grid = EntryGrid(_rows("a", "b"), on_change=recorder, page_size=10)
        grid.set_cell(1, "value", "new \U0001F600")
        assert grid.entries[1].value == "new \ud83d\ude00"
        assert len(recorder.calls) == 1

    def test_set_id(self):
        grid = EntryGrid(_rows("a", "b"), page_size=10)
        grid.set_cell(0, "id", "c")
        assert [e.id for e in grid.entries] == ["c", "b"]

    def test_duplicate_id_rejected_and_row_unchanged(self):
        recorder = _Recorder()
        grid = EntryGrid(_rows("a", "b"), on_change=recorder, page_size=10)
        with pytest.raises(DuplicateKeyError) as info:
            grid.set_cell(1, "id", "a")
        assert str(info.value) == 'Duplicate key: "a" already exists'
        assert info.value.key == "a"
        assert grid.entries[1].id == "b"
        assert recorder.calls == []

    def test_same_id_on_same_row_allowed(self):
        grid = EntryGrid(_rows("a", "b"), page_size=10)
        grid.set_cell(0, "id", "a")
        assert grid.entries[0].id == "a"

    def test_empty_id_always_allowed(self):
        grid = EntryGrid(_rows("a", "b"), page_size=10)
        grid.set_cell(0, "id", "")
        grid.set_cell(1, "id", "")
        assert [e.id for e in grid.entries] == ["", ""]

    def test_unknown_field(self):
        grid = EntryGrid(_rows("a"), page_size=10)
        with pytest.raises(ValueError, match="field"):
            grid.set_cell(0, "key", "x")

    def test_out_of_range_row(self):
        grid = EntryGrid(_rows("a"), page_size=10)
        with pytest.raises(IndexError):
            grid.set_cell(1, "value", "x")
        with pytest.raises(IndexError):
            grid.select(-1)

    def test_delete_selected(self):
        recorder = _Recorder()
        grid = EntryGrid(_rows("a", "b", "c"), on_change=recorder, page_size=10)
        assert grid.delete_selected() is None
        grid.select(1)
        removed = grid.delete_selected()
        assert removed.id == "b"
        assert grid.selected is None
        assert [e.id for e in recorder.calls[-1]] == ["a", "c"]

    def test_delete_returns_to_first_page(self):
        grid = EntryGrid(_rows(*"abcde"), page_size=2)
        grid.last_page()
        grid.delete_entry(0)
        assert grid.page == 0

    def test_load_replaces_rows_silently(self):
        recorder = _Recorder()
        grid = EntryGrid(_rows("a", "b"), on_change=recorder, page_size=10)
        rows = _rows("x", "y", "z")
        grid.load(rows)
        assert [e.id for e in grid.entries] == ["x", "y", "z"]
        assert recorder.calls == []
        rows[0].id = "mutated"
        assert grid.entries[0].id == "x"

    def test_load_keeps_query_and_clamps_page(self):
        grid = EntryGrid(_rows("x1", "x2", "x3", "x4", "y"), page_size=1)
        grid.search("x")
        grid.last_page()
        grid.load(_rows("x1", "y"))
        assert grid.query == "x"
        assert grid.filtered_indices == [0]
        assert grid.page == 0

    def test_load_clears_selection_past_end(self):
        grid = EntryGrid(_rows(*"abc"), page_size=10)
        grid.select(2)
        grid.load(_rows("a"))
        assert grid.selected is None
        grid.select(0)
        grid.load(_rows("a", "b"))
        assert grid.selected == 0

    def test_grid_does_not_alias_caller_rows(self):
        rows = _rows("a")
        grid = EntryGrid(rows, page_size=10)
        grid.set_cell(0, "value", "changed")
        assert rows[0].value == "value of a"
        grid.entries[0].value = "outside"
        assert grid.entries[0].value == "changed"


# =========================================================================
# STFDocument
# =========================================================================


class TestDocumentHistory:
    def test_open(self, sample_stf_file, sample_table):
        doc = STFDocument.open(sample_stf_file)
        assert doc.data == sample_table
        assert not doc.is_dirty
        assert not doc.can_undo
        assert not doc.can_redo

    def test_open_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            STFDocument.open(tmp_path / "missing.stf")

    def test_open_malformed_file(self, tmp_path):
        path = tmp_path / "bad.stf"
        path.write_bytes(b"\x00\x00")
        with pytest.raises(FormatError):
            STFDocument.open(path)

    def test_from_bytes(self, tmp_path, worked_example_bytes, worked_example_table):
        doc = STFDocument.from_bytes(tmp_path / "x.stf", worked_example_bytes)
        assert doc.data == worked_example_table

    def test_edit_recomputes_next_uid(self, sample_stf_file):
        doc = STFDocument.open(sample_stf_file)
        doc.apply_edit(_rows("a", "b"))
        assert doc.data.next_uid == 3
        assert doc.is_dirty

    def test_undo_redo(self, sample_stf_file, sample_table):
        doc = STFDocument.open(sample_stf_file)
        doc.apply_edit(_rows("a"))
        assert doc.undo() is True
        assert doc.data == sample_table
        assert not doc.is_dirty
        assert doc.redo() is True
        assert [e.id for e in doc.data.entries] == ["a"]
        assert doc.data.next_uid == 2

    def test_undo_redo_when_empty(self, sample_stf_file):
        doc = STFDocument.open(sample_stf_file)
        assert doc.undo() is False
        assert doc.redo() is False

    def test_new_edit_clears_redo(self, sample_stf_file):
        doc = STFDocument.open(sample_stf_file)
        doc.apply_edit(_rows("a"))
        doc.undo()
        doc.apply_edit(_rows("b"))
        assert not doc.can_redo

    def test_history_is_isolated_from_caller(self, sample_stf_file):
        doc = STFDocument.open(sample_stf_file)
        rows = _rows("a")
        doc.apply_edit(rows)
        rows[0].id = "mutated"
        doc.apply_edit(_rows("b"))
        doc.undo()
        assert doc.data.entries[0].id == "a"

    def test_grid_changes_become_edits(self, sample_stf_file):
        doc = STFDocument.open(sample_stf_file)
        grid = doc.grid(page_size=2)
        grid.add_entry()
        assert len(doc.data.entries) == 6
        assert doc.data.entries[-1].id == "new_entry"
        assert doc.data.next_uid == 7
        assert doc.can_undo

    def test_grid_follows_undo(self, sample_stf_file):
        doc = STFDocument.open(sample_stf_file)
        grid = doc.grid(page_size=2)
        grid.add_entry()
        doc.undo()
        assert len(grid) == 5
        grid.set_cell(0, "value", "edited")
        assert len(doc.data.entries) == 5
        assert "new_entry" not in [e.id for e in doc.data.entries]
        assert doc.data.entries[0].value == "edited"

    def test_grid_follows_redo(self, sample_stf_file):
        doc = STFDocument.open(sample_stf_file)
        grid = doc.grid(page_size=2)
        grid.set_cell(0, "value", "first")
        doc.undo()
        assert grid.entries[0].value == "Start game"
        doc.redo()
        assert grid.entries[0].value == "first"
        grid.set_cell(1, "value", "second")
        assert [e.value for e in doc.data.entries[:2]] == ["first", "second"]

    def test_grid_follows_revert(self, sample_stf_file, sample_table):
        doc = STFDocument.open(sample_stf_file)
        grid = doc.grid(page_size=2)
        grid.delete_entry(0)
        doc.revert()
        assert grid.entries == sample_table.entries
        grid.set_cell(0, "value", "after revert")
        assert len(doc.data.entries) == 5
        assert doc.data.entries[0].id == "menu_start"


class TestDocumentLifecycle:
    def test_save_writes_and_clears_dirty(self, sample_stf_file):
        doc = STFDocument.open(sample_stf_file)
        doc.apply_edit(_rows("only"))
        assert doc.save() == sample_stf_file
        assert not doc.is_dirty
        saved = decode(sample_stf_file.read_bytes())
        assert saved == STFData(version=3, next_uid=2, entries=_rows("only"))

    def test_undo_after_save_is_dirty(self, sample_stf_file):
        doc = STFDocument.open(sample_stf_file)
        doc.apply_edit(_rows("only"))
        doc.save()
        doc.undo()
        assert doc.is_dirty
        doc.redo()
        assert not doc.is_dirty

    def test_save_as(self, sample_stf_file, tmp_path):
        doc = STFDocument.open(sample_stf_file)
        target = tmp_path / "copy.stf"
        assert doc.save_as(target) == target
        assert doc.path == target
        assert target.read_bytes() == sample_stf_file.read_bytes()

    def test_revert(self, sample_stf_file, sample_table):
        doc = STFDocument.open(sample_stf_file)
        doc.apply_edit(_rows("a"))
        doc.revert()
        assert doc.data == sample_table
        assert not doc.is_dirty
        assert not doc.can_undo

    def test_backup_default_path(self, sample_stf_file):
        doc = STFDocument.open(sample_stf_file)
        doc.apply_edit(_rows("a"))
        backup = doc.backup()
        assert isinstance(backup, Backup)
        assert backup.path == sample_stf_file.with_name("strings.stf.bak")
        assert decode(backup.path.read_bytes()).entries == _rows("a")
        assert doc.is_dirty
        backup.delete()
        assert not backup.path.exists()
        backup.delete()

    def test_to_bytes(self, tmp_path, worked_example_bytes):
        doc = STFDocument.from_bytes(tmp_path / "x.stf", worked_example_bytes)
        assert doc.to_bytes() == worked_example_bytes
