"""Searchable, paginated row grid for editing a string table.

WHY: Tables run to thousands of rows. Users find rows by typing part of
an id or value, page through the matches, add and delete rows, and edit
cells. A key that already exists must never be accepted, because
two rows with one id make the file ambiguous for whatever loads it.

HOW: EntryGrid keeps its own copy of the rows plus the view state
(query, matching indices, current page, selected row). Every mutation
ends by calling ``on_change`` with a fresh copy of all rows, which is how
STFDocument.apply_edit() learns about edits.

RULES:
- Search is a case-insensitive substring match on id or value; an empty
  query matches every row
- Changing the query (or deleting a row) returns to the first page
- total_pages is never less than 1; page moves are clamped
- New rows get the first free id of "new_entry", "new_entry_1",
  "new_entry_2", ...; adding clears the query and jumps to the last page
- A non-empty id already used by another row raises DuplicateKeyError
  and leaves the row unchanged; an empty id is always accepted
- load() replaces the rows silently; on_change is not called
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Callable, List, Optional

from stf_converter.config import NEW_ENTRY_PREFIX, PAGE_SIZE
from stf_converter.core.ir import StringEntry
from stf_converter.core.text import to_code_units, to_display

ChangeCallback = Callable[[List[StringEntry]], None]

_FIELDS = ("id", "value")


class DuplicateKeyError(ValueError):
    """Raised when an edit would give two rows the same id."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__('Duplicate key: "{}" already exists'.format(key))


class EntryGrid:
    """Row grid with search, pagination, selection, and cell editing."""

    def __init__(
        self,
        entries: List[StringEntry],
        on_change: Optional[ChangeCallback] = None,
        page_size: int = PAGE_SIZE,
        new_entry_prefix: str = NEW_ENTRY_PREFIX,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be at least 1, got {}".format(page_size))
        self._entries = [replace(e) for e in entries]
        self._on_change = on_change
        self.page_size = page_size
        self.new_entry_prefix = new_entry_prefix
        self.query = ""
        self.page = 0
        self.selected: Optional[int] = None
        self.filtered_indices: List[int] = []
        self._apply_filter()

    # -- rows ---------------------------------------------------------------

    @property
    def entries(self) -> List[StringEntry]:
        """Copy of all rows in table order."""
        return [replace(e) for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def used_ids(self) -> set:
        return {e.id for e in self._entries}

    def load(self, entries: List[StringEntry]) -> None:
        """Replace every row without reporting a change.

        The owner calls this after undo, redo or revert so the next edit
        starts from the restored table. Query and page are kept (the page
        is clamped); a selection past the last row is cleared.
        """
        page = self.page
        self._entries = [replace(e) for e in entries]
        if self.selected is not None and self.selected >= len(self._entries):
            self.selected = None
        self._apply_filter()
        self.go_to_page(page)

    # -- search and pagination ------------------------------------------------

    def _apply_filter(self) -> None:
        needle = self.query.lower()
        self.filtered_indices = [
            i for i, e in enumerate(self._entries)
            if not needle
            or needle in e.id.lower()
            or needle in to_display(e.value).lower()
        ]
        self.page = 0

    def search(self, query: str) -> List[int]:
        """Set the search query and return the indices of matching rows."""
        self.query = query
        self._apply_filter()
        return list(self.filtered_indices)

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(len(self.filtered_indices) / self.page_size))

    def go_to_page(self, page: int) -> int:
        self.page = min(max(page, 0), self.total_pages - 1)
        return self.page

    def first_page(self) -> int:
        return self.go_to_page(0)

    def prev_page(self) -> int:
        return self.go_to_page(self.page - 1)

    def next_page(self) -> int:
        return self.go_to_page(self.page + 1)

    def last_page(self) -> int:
        return self.go_to_page(self.total_pages - 1)

    def page_indices(self) -> List[int]:
        """Table indices of the rows on the current page."""
        start = self.page * self.page_size
        return self.filtered_indices[start:start + self.page_size]

    def page_entries(self) -> List[StringEntry]:
        return [replace(self._entries[i]) for i in self.page_indices()]

    def stats(self) -> str:
        total = len(self._entries)
        matched = len(self.filtered_indices)
        if matched == total:
            return "{} entries".format(total)
        return "{} of {} matched".format(matched, total)

    # -- editing --------------------------------------------------------------

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.entries)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._entries):
            raise IndexError("row {} out of range (0..{})".format(index, len(self._entries) - 1))

    def select(self, index: int) -> None:
        self._check_index(index)
        self.selected = index

    def next_free_id(self) -> str:
        used = self.used_ids()
        candidate = self.new_entry_prefix
        counter = 1
        while candidate in used:
            candidate = "{}_{}".format(self.new_entry_prefix, counter)
            counter += 1
        return candidate

    def add_entry(self) -> int:
        """Append an empty row with a fresh id and show it. Returns its index."""
        self._entries.append(StringEntry(id=self.next_free_id(), value=""))
        self.query = ""
        self._apply_filter()
        self.last_page()
        self._notify()
        return len(self._entries) - 1

    def delete_entry(self, index: int) -> StringEntry:
        """Remove a row and return it."""
        self._check_index(index)
        removed = self._entries.pop(index)
        self.selected = None
        self._apply_filter()
        self._notify()
        return removed

    def delete_selected(self) -> Optional[StringEntry]:
        if self.selected is None:
            return None
        return self.delete_entry(self.selected)

    def set_cell(self, index: int, field: str, value: str) -> None:
        """Edit one cell.

        Raises:
            DuplicateKeyError: ``field`` is "id" and another row already
                uses the non-empty ``value``.
            ValueError: ``field`` is not "id" or "value".
        """
        self._check_index(index)
        if field not in _FIELDS:
            raise ValueError("field must be one of {}, got {!r}".format(_FIELDS, field))
        if field == "id" and value != "":
            if any(i != index and e.id == value for i, e in enumerate(self._entries)):
                raise DuplicateKeyError(value)
        if field == "value":
            value = to_code_units(value)
        setattr(self._entries[index], field, value)
        self._notify()
