"""Life-cycle management of a single text document: open, save, close and more."""

from __future__ import annotations

import enum
import os
import stat
from collections import defaultdict, deque
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Sequence

from draftdesk.bookmark import Bookmark
from draftdesk.storage import (
    BACKUP_SUFFIX,
    StorageError,
    backup_file,
    ensure_directory,
    is_draft_path,
    next_draft_path,
    read_text,
    write_text,
)

DRAFT_NAME = "untitled"

FILE_CHOOSER_FILTER = (
    "Markdown (*.md *.markdown *.mdown *.mkdn *.mkd *.mdwn *.mdtxt *.mdtext "
    "*.text *.Rmd *.txt);;Text (*.txt);;All (*)"
)


class Answer(enum.Enum):
    """Possible answers to a question put to the user."""

    YES = "yes"
    NO = "no"
    SAVE = "save"
    DISCARD = "discard"
    CANCEL = "cancel"


class Event(enum.Enum):
    """Notifications sent by a DocumentManager to its subscribers."""

    DISPLAY_NAME_CHANGED = "display_name_changed"
    MODIFIED_CHANGED = "modified_changed"
    OPERATION_STARTED = "operation_started"
    OPERATION_UPDATE = "operation_update"
    OPERATION_FINISHED = "operation_finished"
    DOCUMENT_LOADED = "document_loaded"
    DOCUMENT_CLOSED = "document_closed"


@dataclass
class Document:
    """The text being edited together with its file and editing state."""

    text: str = ""
    file_path: str | None = None
    cursor_position: int = 0
    modified: bool = False
    read_only: bool = False
    timestamp: datetime | None = None

    def is_new(self) -> bool:
        """Return True if the document is not associated with a file."""
        return not self.file_path

    def is_empty(self) -> bool:
        """Return True if the document holds no text."""
        return not self.text

    def display_name(self) -> str:
        """Return the name to show for the document."""
        if self.is_new():
            return DRAFT_NAME
        return os.path.basename(self.file_path)

    def clear(self) -> None:
        """Remove all text and move the cursor to the start."""
        self.text = ""
        self.cursor_position = 0


class UserInterface:
    """Scripted, non-interactive user interface.

    Answers and chosen paths are taken in order from the queues given at
    construction; once a queue runs out, questions are answered with their
    default and no path is chosen.  Every question, path request and error
    is recorded.  Interactive front ends override these methods.
    """

    def __init__(
        self,
        answers: Iterable[Answer] = (),
        open_paths: Iterable[str | None] = (),
        save_paths: Iterable[str | None] = (),
    ) -> None:
        self._answers: deque[Answer] = deque(answers)
        self._open_paths: deque[str | None] = deque(open_paths)
        self._save_paths: deque[str | None] = deque(save_paths)
        self.questions: list[tuple[str, str]] = []
        self.path_requests: list[tuple[str, str | None]] = []
        self.errors: list[tuple[str, str]] = []

    def ask(self, title: str, text: str, choices: Sequence[Answer], default: Answer) -> Answer:
        """Put a question to the user and return the answer."""
        self.questions.append((title, text))
        if not self._answers:
            return default
        answer = self._answers.popleft()
        if answer not in choices:
            raise ValueError(f"{answer!r} is not one of the offered choices")
        return answer

    def show_error(self, title: str, text: str) -> None:
        """Report an error to the user."""
        self.errors.append((title, text))

    def choose_open_path(self, title: str, directory: str | None, file_filter: str) -> str | None:
        """Let the user pick a file to open; None means cancelled."""
        self.path_requests.append((title, directory))
        return self._open_paths.popleft() if self._open_paths else None

    def choose_save_path(self, title: str, directory: str | None, file_filter: str) -> str | None:
        """Let the user pick a file to save to; None means cancelled."""
        self.path_requests.append((title, directory))
        return self._save_paths.popleft() if self._save_paths else None


class RecentHistory:
    """In-memory history of recently closed files, most recent first."""

    def __init__(self) -> None:
        self._bookmarks: list[Bookmark] = []

    def add_recent(self, file_path: str | None, cursor_position: int = 0) -> None:
        """Record a file at the front of the history, if it exists."""
        bookmark = Bookmark(file_path, cursor_position)
        if not bookmark.is_valid():
            return
        self._bookmarks = [b for b in self._bookmarks if b != bookmark]
        self._bookmarks.insert(0, bookmark)

    def remove_recent(self, file_path: str | None) -> None:
        """Forget a file."""
        if file_path is None:
            return
        target = Bookmark(file_path)
        self._bookmarks = [b for b in self._bookmarks if b != target]

    def recent_files(self, max_count: int = -1) -> list[Bookmark]:
        """Return the recent files whose paths still exist, up to max_count."""
        valid = [b for b in self._bookmarks if b.is_valid()]
        return valid if max_count < 0 else valid[:max_count]

    def lookup(self, file_path: str | None) -> Bookmark:
        """Return the bookmark for a path, or a null bookmark if unknown."""
        if file_path is None:
            return Bookmark()
        target = Bookmark(file_path)
        return next((b for b in self._bookmarks if b == target), Bookmark())


def _modification_time(path: str) -> datetime:
    return datetime.fromtimestamp(os.path.getmtime(path))


class DocumentManager:
    """Opens, saves, reloads, renames and closes a document on behalf of the user."""

    def __init__(
        self,
        ui: UserInterface | None = None,
        history: RecentHistory | None = None,
        document: Document | None = None,
    ) -> None:
        self.ui = ui if ui is not None else UserInterface()
        self.history = history if history is not None else RecentHistory()
        self.document = document if document is not None else Document()
        self.file_history_enabled = True
        self.file_backup_enabled = True
        self.draft_location = os.path.join(os.path.expanduser("~"), "Documents")
        self.backup_location: str | None = None
        self._auto_save_enabled = False
        self._save_in_progress = False
        self._notification_visible = False
        self._subscribers: dict[Event, list[Callable[..., Any]]] = defaultdict(list)

    # -- events ---------------------------------------------------------

    def subscribe(self, event: Event, callback: Callable[..., Any]) -> Callable[[], None]:
        """Call ``callback`` whenever ``event`` occurs; return an unsubscriber."""
        self._subscribers[event].append(callback)
        return lambda: self._subscribers[event].remove(callback)

    def _emit(self, event: Event, *args: Any) -> None:
        for callback in list(self._subscribers[event]):
            callback(*args)

    # -- settings -------------------------------------------------------

    @property
    def auto_save_enabled(self) -> bool:
        return self._auto_save_enabled

    def set_auto_save_enabled(self, enabled: bool) -> None:
        """Turn auto-saving on or off."""
        self._auto_save_enabled = enabled
        doc = self.document
        if enabled:
            if doc.is_new() and not doc.is_empty() and doc.modified:
                self._create_draft()
            self._emit(Event.MODIFIED_CHANGED, False)
        elif doc.modified:
            self.set_modified(False)

    def set_draft_location(self, directory: str | os.PathLike[str]) -> None:
        """Set (and create) the directory where drafts are saved."""
        self.draft_location = ensure_directory(directory)

    def set_backup_location(self, directory: str | os.PathLike[str]) -> None:
        """Set (and create) the directory where backup files are saved."""
        self.backup_location = ensure_directory(directory)

    def set_modified(self, modified: bool) -> None:
        """Change the document's modification state, as an edit does."""
        doc = self.document
        if doc.modified == modified:
            return
        doc.modified = modified
        if doc.read_only or not self._auto_save_enabled:
            self._emit(Event.MODIFIED_CHANGED, modified)
        if modified and self._auto_save_enabled and doc.is_new() and not doc.is_empty():
            self._create_draft()

    # -- operations -----------------------------------------------------

    def _starting_directory(self) -> str | None:
        if self.document.is_new():
            return None
        return os.path.dirname(self.document.file_path)

    def open(self, file_path: str | None = None) -> bool:
        """Open the given file, or one chosen by the user; return True if loaded."""
        if not self._check_save_changes():
            return False

        path = file_path or self.ui.choose_open_path(
            "Open File", self._starting_directory(), FILE_CHOOSER_FILTER
        )
        if not path:
            return False

        if not os.access(path, os.R_OK):
            self.ui.show_error(f"Could not open {path}", "Permission denied.")
            return False

        doc = self.document
        old_path = doc.file_path
        old_cursor = doc.cursor_position
        old_was_new = doc.is_new()

        if not self._load_file(path):
            return False
        if old_path == doc.file_path:
            doc.cursor_position = min(old_cursor, len(doc.text))
        elif self.file_history_enabled and not old_was_new:
            self.history.add_recent(old_path, old_cursor)
        return True

    def reopen_last_closed_file(self) -> None:
        """Open the most recent file in the history, if any."""
        if not self.file_history_enabled:
            return
        if not self.document.is_new():
            self.history.remove_recent(self.document.file_path)
        recent = self.history.recent_files(1)
        if recent:
            self.open(recent[0].file_path)
            self._emit(Event.DOCUMENT_CLOSED)

    def reload(self) -> None:
        """Reload the document from disk, asking first if it has unsaved changes."""
        doc = self.document
        if doc.is_new():
            return
        if doc.modified:
            response = self.ui.ask(
                "The document has been modified.",
                "Discard changes?",
                (Answer.YES, Answer.NO),
                Answer.NO,
            )
            if response == Answer.NO:
                return
        position = doc.cursor_position
        if self._load_file(doc.file_path):
            doc.cursor_position = min(position, len(doc.text))

    def rename(self) -> None:
        """Move the document's file to a path chosen by the user."""
        doc = self.document
        if doc.is_new():
            self.save_as()
            return

        new_path = self.ui.choose_save_path("Rename File", None, FILE_CHOOSER_FILTER)
        if not new_path:
            return

        title = f"Failed to rename {doc.file_path}"
        try:
            if os.path.exists(new_path):
                os.remove(new_path)
            os.rename(doc.file_path, new_path)
        except OSError as error:
            self.ui.show_error(title, error.strerror or str(error))
            return

        self._set_file_path(new_path)
        self.save()

    def save_file(self) -> bool:
        """Save the document, asking for a path if it is still a draft."""
        if self._document_is_draft():
            return self.save_as()
        return self.save()

    def save(self) -> bool:
        """Save the document to its file, asking for a path if it has none."""
        if self.document.is_new() or not self._check_permissions_before_save():
            return self.save_as()
        self._save()
        return True

    def save_as(self) -> bool:
        """Save the document to a path chosen by the user."""
        doc = self.document
        new_path = self.ui.choose_save_path(
            "Save File", self._starting_directory(), FILE_CHOOSER_FILTER
        )
        if not new_path:
            return False

        if self._document_is_draft():
            for leftover in (doc.file_path, doc.file_path + BACKUP_SUFFIX):
                try:
                    os.remove(leftover)
                except OSError:
                    pass

        self._set_file_path(new_path)
        self._save()
        return True

    def close(self) -> bool:
        """Close the document, leaving a new untitled one; return False if cancelled."""
        if not self._check_save_changes():
            return False

        doc = self.document
        file_path = doc.file_path
        cursor = doc.cursor_position
        was_new = doc.is_new()

        doc.clear()
        doc.read_only = False
        self._set_file_path(None)
        doc.modified = False

        if self.file_history_enabled and (not was_new or self._auto_save_enabled):
            self.history.add_recent(file_path, cursor)

        self._emit(Event.DOCUMENT_CLOSED)
        return True

    def auto_save(self) -> None:
        """Save the document if auto-save is on and it has unsaved changes."""
        doc = self.document
        if self._auto_save_enabled and not doc.is_new() and not doc.read_only and doc.modified:
            self.save()

    def file_changed_externally(self, path: str) -> None:
        """React to the document's file having been changed by another program."""
        doc = self.document

        if not os.path.exists(path):
            self._emit(Event.MODIFIED_CHANGED, True)
            doc.modified = True
            return

        writable = os.access(path, os.W_OK)
        if writable and doc.read_only:
            doc.read_only = False
            if self._auto_save_enabled:
                self._emit(Event.MODIFIED_CHANGED, False)
        elif not writable and not doc.read_only:
            doc.read_only = True
            if doc.modified:
                self._emit(Event.MODIFIED_CHANGED, True)

        newer = doc.timestamp is None or _modification_time(path) > doc.timestamp
        if not self._save_in_progress and newer and not self._notification_visible:
            self._notification_visible = True
            try:
                response = self.ui.ask(
                    "The document has been modified by another program.",
                    "Would you like to reload the document?",
                    (Answer.YES, Answer.NO),
                    Answer.YES,
                )
            finally:
                self._notification_visible = False
            if response == Answer.YES:
                self.reload()

    # -- internals ------------------------------------------------------

    def _save(self) -> None:
        doc = self.document
        doc.modified = False
        self._emit(Event.MODIFIED_CHANGED, False)
        doc.timestamp = datetime.now()
        self._save_in_progress = True
        try:
            if self.file_backup_enabled and doc.file_path:
                self._backup(doc.file_path)
            try:
                write_text(doc.file_path, doc.text)
            except StorageError as error:
                self.ui.show_error(f"Error saving {doc.file_path}", str(error))
                return
            doc.timestamp = datetime.now()
        finally:
            self._save_in_progress = False

    def _backup(self, file_path: str) -> None:
        location = self.backup_location or os.path.dirname(os.path.abspath(file_path))
        try:
            backup_file(file_path, location)
        except StorageError as error:
            self.ui.show_error("File backup failed", str(error))

    def _load_file(self, path: str) -> bool:
        doc = self.document
        try:
            text = read_text(path)
        except StorageError as error:
            self.ui.show_error(f"Could not read {path}", str(error))
            return False

        doc.clear()
        self._emit(Event.OPERATION_STARTED, f"opening {path}")

        self._set_file_path(path)
        doc.text = text
        doc.cursor_position = 0
        self._emit(Event.OPERATION_UPDATE, None)

        if self.file_history_enabled:
            position = self.history.lookup(path).cursor_position
            doc.cursor_position = min(position, len(text))

        doc.read_only = not os.access(path, os.W_OK)
        doc.modified = False
        doc.timestamp = _modification_time(path)

        self._emit(Event.OPERATION_FINISHED)
        self._emit(Event.MODIFIED_CHANGED, False)
        self._emit(Event.DOCUMENT_LOADED)
        return True

    def _set_file_path(self, path: str | None) -> None:
        doc = self.document
        doc.file_path = os.path.abspath(path) if path else None
        if doc.file_path and os.path.exists(doc.file_path):
            doc.read_only = not os.access(doc.file_path, os.W_OK)
        else:
            doc.read_only = False
        self._emit(Event.DISPLAY_NAME_CHANGED, doc.display_name())

    def _check_save_changes(self) -> bool:
        doc = self.document
        if not doc.modified:
            return True

        if self._auto_save_enabled and not doc.is_new() and not doc.read_only:
            return self.save()

        if doc.is_new():
            text = "File has been modified."
        else:
            text = f"{doc.display_name()} has been modified."

        response = self.ui.ask(
            text,
            "Would you like to save your changes?",
            (Answer.SAVE, Answer.DISCARD, Answer.CANCEL),
            Answer.SAVE,
        )
        if response == Answer.SAVE:
            return self.save_as() if doc.is_new() else self.save()
        return response != Answer.CANCEL

    def _check_permissions_before_save(self) -> bool:
        doc = self.document
        if not doc.read_only:
            return True

        response = self.ui.ask(
            f"{doc.file_path} is read only.",
            "Overwrite protected file?",
            (Answer.YES, Answer.NO),
            Answer.YES,
        )
        if response == Answer.NO:
            return False

        try:
            os.remove(doc.file_path)
        except OSError:
            try:
                os.chmod(doc.file_path, stat.S_IRUSR | stat.S_IWUSR)
                os.remove(doc.file_path)
            except OSError:
                self.ui.show_error(
                    "Overwrite failed.", "Please save file to another location."
                )
                return False
        doc.read_only = False
        return True

    def _document_is_draft(self) -> bool:
        if self.document.is_new():
            return False
        return is_draft_path(self.document.file_path, self.draft_location, DRAFT_NAME)

    def _create_draft(self) -> None:
        if not self.document.is_new():
            return
        self._set_file_path(next_draft_path(self.draft_location, DRAFT_NAME))
        self._save()