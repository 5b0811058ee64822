"""One open STF file: its table, edit history, and lifecycle.

WHY: A host that edits STF files needs open, save, save-as, revert, and
crash backups, plus undo/redo of user edits. None of that belongs in the
codec, so this module wraps decode/encode with the document state a host
would otherwise have to rebuild every time.

HOW: STFDocument holds the decoded STFData and two stacks of _Edit
snapshots. apply_edit() replaces the whole row list (the grid always
reports complete tables) and records the before/after state. Saving,
reverting, and backups go through core.codec and plain Path I/O.

RULES:
- apply_edit() sets next_uid to len(entries) + 1 on every edit
- A new edit clears the redo stack
- undo()/redo() restore both entries and next_uid; they return False
  when there is nothing to do
- is_dirty is True when the table differs from what was last opened,
  saved, or reverted (tracked by edit identity, not content comparison)
- revert() re-reads the file and clears history
- Grids handed out by grid() are reloaded after every edit, undo, redo
  and revert
- backup() writes the current table elsewhere without touching is_dirty
"""

from __future__ import annotations

import itertools
import logging
import weakref
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Union

from stf_converter.core.codec import decode, encode
from stf_converter.core.ir import STFData, StringEntry
from stf_converter.editor.grid import EntryGrid

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_edit_ids = itertools.count(1)


def _copy_entries(entries: List[StringEntry]) -> List[StringEntry]:
    return [replace(e) for e in entries]


@dataclass
class _Edit:
    id: int
    before_entries: List[StringEntry]
    before_next_uid: int
    after_entries: List[StringEntry]
    after_next_uid: int


@dataclass
class Backup:
    """A backup copy written by STFDocument.backup()."""

    path: Path

    def delete(self) -> None:
        """Remove the backup file; a missing file is not an error."""
        self.path.unlink(missing_ok=True)


class STFDocument:
    """An STF file opened for editing."""

    def __init__(self, path: PathLike, data: STFData) -> None:
        self.path = Path(path)
        self.data = data
        self._undo: List[_Edit] = []
        self._redo: List[_Edit] = []
        self._saved_edit_id = 0
        self._grids: "weakref.WeakSet[EntryGrid]" = weakref.WeakSet()

    @classmethod
    def open(cls, path: PathLike) -> "STFDocument":
        """Read and decode ``path``.

        Raises:
            FileNotFoundError: The file does not exist.
            FormatError: The file is not a valid STF table.
        """
        source = Path(path)
        doc = cls(source, decode(source.read_bytes()))
        logger.info("Opened %s (%d entries)", source, len(doc.data.entries))
        return doc

    @classmethod
    def from_bytes(cls, path: PathLike, raw: bytes) -> "STFDocument":
        """Create a document from bytes the host has already read."""
        return cls(path, decode(raw))

    # -- state --------------------------------------------------------------

    def _current_edit_id(self) -> int:
        return self._undo[-1].id if self._undo else 0

    @property
    def is_dirty(self) -> bool:
        return self._current_edit_id() != self._saved_edit_id

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def grid(self, **kwargs) -> EntryGrid:
        """A grid over the current rows whose changes become edits here.

        The document keeps a weak reference to every grid it hands out and
        reloads them whenever its rows change, so a grid never reports a
        table that undo, redo or revert has already replaced.
        """
        grid = EntryGrid(self.data.entries, on_change=self.apply_edit, **kwargs)
        self._grids.add(grid)
        return grid

    def _reload_grids(self) -> None:
        for grid in list(self._grids):
            grid.load(self.data.entries)

    # -- edits --------------------------------------------------------------

    def apply_edit(self, entries: List[StringEntry]) -> None:
        """Replace all rows, recompute next_uid, and record the change."""
        new_entries = _copy_entries(entries)
        edit = _Edit(
            id=next(_edit_ids),
            before_entries=_copy_entries(self.data.entries),
            before_next_uid=self.data.next_uid,
            after_entries=new_entries,
            after_next_uid=len(new_entries) + 1,
        )
        self._undo.append(edit)
        self._redo.clear()
        self._restore(edit.after_entries, edit.after_next_uid)
        logger.debug("Applied edit %d (%d entries)", edit.id, len(new_entries))

    def _restore(self, entries: List[StringEntry], next_uid: int) -> None:
        self.data.entries = _copy_entries(entries)
        self.data.next_uid = next_uid
        self._reload_grids()

    def undo(self) -> bool:
        if not self._undo:
            return False
        edit = self._undo.pop()
        self._redo.append(edit)
        self._restore(edit.before_entries, edit.before_next_uid)
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        edit = self._redo.pop()
        self._undo.append(edit)
        self._restore(edit.after_entries, edit.after_next_uid)
        return True

    # -- lifecycle ----------------------------------------------------------

    def to_bytes(self) -> bytes:
        return encode(self.data)

    def save(self) -> Path:
        self.path.write_bytes(self.to_bytes())
        self._saved_edit_id = self._current_edit_id()
        logger.info("Saved %s (%d entries)", self.path, len(self.data.entries))
        return self.path

    def save_as(self, destination: PathLike) -> Path:
        """Write to ``destination`` and make it this document's path."""
        self.path = Path(destination)
        return self.save()

    def revert(self) -> None:
        """Discard unsaved changes by re-reading the file from disk."""
        self.data = decode(self.path.read_bytes())
        self._undo.clear()
        self._redo.clear()
        self._saved_edit_id = 0
        self._reload_grids()
        logger.info("Reverted %s", self.path)

    def backup(self, destination: Optional[PathLike] = None) -> Backup:
        """Write the current table to ``destination`` (default: ``<path>.bak``)."""
        target = Path(destination) if destination else self.path.with_name(self.path.name + ".bak")
        target.write_bytes(self.to_bytes())
        logger.info("Backed up %s to %s", self.path, target)
        return Backup(path=target)
