# draftdesk

draftdesk manages the life cycle of one text document in an editor. It can
open, reload, rename, save and close the document. It can also save untitled
documents as drafts, back a file up before it is overwritten, and remember
the cursor position of recently closed files.

The library has no third-party dependencies and needs Python 3.10 or later.

```
pip install draftdesk
```

## Modules

### `draftdesk.bookmark`

`Bookmark(file_path=None, position=0)` pairs a file path with a cursor
position.

- The path is stored as an absolute path.
- A negative position is stored as 0.
- A bookmark made without a path is null: `file_path` is `None` and
  `is_null()` returns `True`.
- `is_valid()` returns `True` when the path exists and is a regular file.
- `last_read()` returns the file's last access time as a `datetime`, or
  `None` if it cannot be found.
- Bookmarks compare equal, and hash the same, when their absolute paths match.
  The cursor position plays no part.

```python
from draftdesk.bookmark import Bookmark

mark = Bookmark("notes.md", 120)
mark.file_path                      # absolute path to notes.md
mark.cursor_position                # 120
Bookmark("notes.md", -5).cursor_position        # 0
Bookmark("./notes.md") == Bookmark("notes.md")  # True
```

### `draftdesk.storage`

File helpers. Every failure raises `StorageError`.

- `read_text(path)` reads a file as UTF-8. If the file starts with a UTF-8,
  UTF-16 or UTF-32 byte-order mark, it decodes with that encoding instead.
- `write_text(path, text)` writes UTF-8 and keeps line endings exactly as
  given. An empty or `None` path raises `StorageError("No file path specified")`.
- `backup_file(path, backup_location)` copies the file to
  `<backup_location>/<name>.backup`.
  - It creates the backup directory if needed.
  - It replaces any earlier backup of the same name.
  - It returns the backup path.
  - If the file does not exist, it makes no copy.
- `ensure_directory(directory)` creates the directory and its parents, then
  returns the absolute path.
- `next_draft_path(location, name)` returns the first `<name>-<n>.md`, counting
  from 1, that does not exist yet.
- `is_draft_path(path, location, name)` tells whether a path lies directly in
  the location and its base name starts with `name`.

### `draftdesk.documentmanager`

- `Document` is a dataclass with these fields:
  - `text`
  - `file_path`
  - `cursor_position`
  - `modified`
  - `read_only`
  - `timestamp`

  Its methods are `is_new()`, `is_empty()`, `display_name()` and `clear()`.
  `display_name()` returns `"untitled"` for a new document.
- `UserInterface` is a scripted, non-interactive front end.
  - It takes queues of answers, paths to open and paths to save.
  - When a queue is used up, each question gets its default answer and no
    path is chosen.
  - It records every question in `questions`, every file-chooser request in
    `path_requests` and every error in `errors`.
  - An answer that is not one of the choices offered raises `ValueError`.
  - An interactive application subclasses it and overrides `ask`,
    `show_error`, `choose_open_path` and `choose_save_path`.
- `RecentHistory` is an in-memory list of recently closed files, most recent
  first. It has these methods:
  - `add_recent(path, cursor_position)` ignores files that do not exist.
  - `remove_recent(path)`
  - `recent_files(max_count=-1)` returns only files that still exist.
  - `lookup(path)` returns a null `Bookmark` when the path is unknown.
- `Answer` lists the possible answers: `YES`, `NO`, `SAVE`, `DISCARD` and
  `CANCEL`.
- `Event` lists what subscribers can listen for. Each callback receives the
  arguments shown:

  | Event | Callback arguments |
  | --- | --- |
  | `DISPLAY_NAME_CHANGED` | the name |
  | `MODIFIED_CHANGED` | a bool |
  | `OPERATION_STARTED` | a description |
  | `OPERATION_UPDATE` | `None` |
  | `OPERATION_FINISHED` | none |
  | `DOCUMENT_LOADED` | none |
  | `DOCUMENT_CLOSED` | none |

- `DocumentManager(ui=None, history=None, document=None)` ties these together.

#### Using `DocumentManager`

```python
from draftdesk.documentmanager import DocumentManager, Event, UserInterface

manager = DocumentManager(UserInterface(save_paths=["copy.md"]))
unsubscribe = manager.subscribe(Event.DOCUMENT_LOADED, lambda: print("loaded"))
manager.set_backup_location("backups")
manager.open("notes.md")
manager.document.text += "\nMore text."
manager.set_modified(True)
manager.save()        # writes notes.md, after backing it up to backups/notes.md.backup
manager.save_as()     # writes copy.md
manager.close()       # adds copy.md to the recent history
```

#### Operations

- `open(path=None)` loads a file.
  - If no path is given, it asks the UI for one.
  - If the current document has unsaved changes, it first offers to save
    them.
  - It returns `True` once the file is loaded.
- `reload()` reads the file from disk again. If the document has unsaved
  changes, it asks before discarding them.
- `rename()` moves the file to a path chosen through the UI and saves it
  there.
- `save()` writes to the document's file.
  - If the document is new, it asks for a path instead.
  - If the file is read-only, it offers to overwrite it. If the user declines,
    it asks for another path.
- `save_as()` asks for a path and saves there.
- `save_file()` calls `save_as()` for a draft and `save()` for anything else.
- `close()` offers to save any changes, then resets to an empty new document
  and records the closed file in the history.
- `reopen_last_closed_file()` opens the most recent file in the history.

#### Backups and drafts

- Before each save, the existing file is copied to `<name>.backup`, unless
  `file_backup_enabled` is `False`. The copy goes in `backup_location`, or
  next to the file if no backup location is set.
- `file_history_enabled` turns the recent-file history on or off.
- `set_auto_save_enabled(True)` turns on autosave. From then on, a new
  document that is modified and has content is saved straight away as a draft
  named `untitled-1.md`, `untitled-2.md` and so on. Drafts go in
  `draft_location`, which defaults to `~/Documents` and can be changed with
  `set_draft_location()`.
- When a draft is saved under a new name with `save_as()`, the draft file and
  its backup are deleted.

## What it does not do

- It does not watch files or run timers. To learn of changes made on disk by
  other programs, call `file_changed_externally(path)` yourself. To autosave,
  call `auto_save()` periodically.
- Saves happen synchronously in the calling thread.
- `RecentHistory` keeps its list in memory only, so the history is lost when
  the process exits.
- There is no interactive user interface, no export of documents to other
  formats and no command-line program.