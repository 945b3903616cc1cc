import os

from draftdesk.documentmanager import (
    Answer,
    Document,
    DocumentManager,
    Event,
    RecentHistory,
    UserInterface,
)


class ScriptedUI(UserInterface):
    def __init__(self, answers=(), paths=()):
        super().__init__()
        self.answers = list(answers)
        self.paths = list(paths)
        self.questions = []

    def ask(self, title, text, choices, default):
        self.questions.append((title, text))
        return self.answers.pop(0) if self.answers else default

    def choose_open_path(self, title, directory, file_filter):
        return self.paths.pop(0) if self.paths else None

    def choose_save_path(self, title, directory, file_filter):
        return self.paths.pop(0) if self.paths else None


def make_file(path, text="hello world, this is a test file"):
    path.write_text(text, encoding="utf-8")
    return str(path)


def make_manager(tmp_path, ui=None, history=None):
    manager = DocumentManager(ui or ScriptedUI(), history or RecentHistory())
    manager.set_backup_location(tmp_path / "backups")
    manager.set_draft_location(tmp_path / "drafts")
    return manager


def test_new_document_display_name():
    doc = Document()
    assert doc.is_new()
    assert doc.display_name() == "untitled"


def test_open_loads_text_and_emits_loaded(tmp_path):
    path = make_file(tmp_path / "a.md", "some text")
    manager = make_manager(tmp_path)
    loaded = []
    manager.subscribe(Event.DOCUMENT_LOADED, lambda: loaded.append(True))
    assert manager.open(path)
    assert manager.document.text == "some text"
    assert manager.document.file_path == os.path.abspath(path)
    assert manager.document.modified is False
    assert loaded == [True]


def test_open_restores_cursor_from_history(tmp_path):
    path = make_file(tmp_path / "a.md")
    history = RecentHistory()
    history.add_recent(path, 7)
    manager = make_manager(tmp_path, history=history)
    manager.open(path)
    assert manager.document.cursor_position == 7


def test_open_missing_file_reports_error(tmp_path):
    ui = ScriptedUI()
    manager = make_manager(tmp_path, ui=ui)
    missing = str(tmp_path / "missing.md")
    assert manager.open(missing) is False
    assert ui.errors == [(f"Could not open {missing}", "Permission denied.")]
    assert manager.document.is_new()


def test_open_second_file_records_first_in_history(tmp_path):
    first = make_file(tmp_path / "a.md")
    second = make_file(tmp_path / "b.md")
    history = RecentHistory()
    manager = make_manager(tmp_path, history=history)
    manager.open(first)
    manager.document.cursor_position = 4
    manager.open(second)
    recent = history.recent_files()
    assert [b.file_path for b in recent] == [os.path.abspath(first)]
    assert recent[0].cursor_position == 4


def test_open_with_chosen_path(tmp_path):
    path = make_file(tmp_path / "a.md", "chosen")
    manager = make_manager(tmp_path, ui=ScriptedUI(paths=[path]))
    assert manager.open()
    assert manager.document.text == "chosen"


def test_save_writes_and_backs_up(tmp_path):
    path = make_file(tmp_path / "a.md", "original")
    manager = make_manager(tmp_path)
    manager.open(path)
    manager.document.text = "changed"
    manager.set_modified(True)
    assert manager.save()
    assert (tmp_path / "a.md").read_text(encoding="utf-8") == "changed"
    backup = tmp_path / "backups" / "a.md.backup"
    assert backup.read_text(encoding="utf-8") == "original"
    assert manager.document.modified is False


def test_save_new_document_asks_for_path(tmp_path):
    target = str(tmp_path / "new.md")
    manager = make_manager(tmp_path, ui=ScriptedUI(paths=[target]))
    manager.document.text = "fresh"
    assert manager.save()
    assert (tmp_path / "new.md").read_text(encoding="utf-8") == "fresh"
    assert manager.document.file_path == os.path.abspath(target)


def test_save_as_cancelled_returns_false(tmp_path):
    manager = make_manager(tmp_path)
    manager.document.text = "fresh"
    assert manager.save_as() is False
    assert manager.document.is_new()


def test_close_unmodified_records_history(tmp_path):
    path = make_file(tmp_path / "a.md")
    history = RecentHistory()
    manager = make_manager(tmp_path, history=history)
    manager.open(path)
    closed = []
    manager.subscribe(Event.DOCUMENT_CLOSED, lambda: closed.append(True))
    assert manager.close()
    assert manager.document.is_new()
    assert manager.document.text == ""
    assert closed == [True]
    assert history.lookup(path).file_path == os.path.abspath(path)


def test_close_cancelled_keeps_document(tmp_path):
    path = make_file(tmp_path / "a.md", "kept")
    ui = ScriptedUI(answers=[Answer.CANCEL])
    manager = make_manager(tmp_path, ui=ui)
    manager.open(path)
    manager.set_modified(True)
    assert manager.close() is False
    assert manager.document.text == "kept"
    assert ui.questions == [("a.md has been modified.", "Would you like to save your changes?")]


def test_close_discard_does_not_save(tmp_path):
    path = make_file(tmp_path / "a.md", "on disk")
    manager = make_manager(tmp_path, ui=ScriptedUI(answers=[Answer.DISCARD]))
    manager.open(path)
    manager.document.text = "edited"
    manager.set_modified(True)
    assert manager.close()
    assert (tmp_path / "a.md").read_text(encoding="utf-8") == "on disk"


def test_auto_save_creates_draft(tmp_path):
    manager = make_manager(tmp_path)
    manager.set_auto_save_enabled(True)
    manager.document.text = "draft text"
    manager.set_modified(True)
    path = manager.document.file_path
    assert os.path.dirname(path) == str(tmp_path / "drafts")
    assert os.path.basename(path).startswith("untitled")
    with open(path, encoding="utf-8") as stream:
        assert stream.read() == "draft text"


def test_save_file_on_draft_moves_to_chosen_path(tmp_path):
    target = str(tmp_path / "final.md")
    manager = make_manager(tmp_path, ui=ScriptedUI(paths=[target]))
    manager.set_auto_save_enabled(True)
    manager.document.text = "draft text"
    manager.set_modified(True)
    draft = manager.document.file_path
    assert manager.save_file()
    assert not os.path.exists(draft)
    assert (tmp_path / "final.md").read_text(encoding="utf-8") == "draft text"


def test_reload_declined_keeps_changes(tmp_path):
    path = make_file(tmp_path / "a.md", "on disk")
    manager = make_manager(tmp_path, ui=ScriptedUI(answers=[Answer.NO]))
    manager.open(path)
    manager.document.text = "edited"
    manager.set_modified(True)
    manager.reload()
    assert manager.document.text == "edited"


def test_reload_accepted_reads_disk(tmp_path):
    path = make_file(tmp_path / "a.md", "on disk")
    manager = make_manager(tmp_path, ui=ScriptedUI(answers=[Answer.YES]))
    manager.open(path)
    manager.document.text = "edited"
    manager.set_modified(True)
    manager.reload()
    assert manager.document.text == "on disk"
    assert manager.document.modified is False


def test_rename_moves_file(tmp_path):
    path = make_file(tmp_path / "a.md", "content")
    target = str(tmp_path / "b.md")
    manager = make_manager(tmp_path, ui=ScriptedUI(paths=[target]))
    manager.open(path)
    manager.rename()
    assert not os.path.exists(path)
    assert (tmp_path / "b.md").read_text(encoding="utf-8") == "content"
    assert manager.document.file_path == os.path.abspath(target)


def test_external_deletion_marks_modified(tmp_path):
    path = make_file(tmp_path / "a.md")
    manager = make_manager(tmp_path)
    manager.open(path)
    states = []
    manager.subscribe(Event.MODIFIED_CHANGED, states.append)
    os.remove(path)
    manager.file_changed_externally(path)
    assert manager.document.modified is True
    assert states == [True]


def test_external_change_prompts_and_reloads(tmp_path):
    path = make_file(tmp_path / "a.md", "before")
    ui = ScriptedUI(answers=[Answer.YES])
    manager = make_manager(tmp_path, ui=ui)
    manager.open(path)
    (tmp_path / "a.md").write_text("after", encoding="utf-8")
    stamp = os.path.getmtime(path) + 100
    os.utime(path, (stamp, stamp))
    manager.file_changed_externally(path)
    assert manager.document.text == "after"
    assert ui.questions[0][0] == "The document has been modified by another program."


def test_auto_save_saves_modified_document(tmp_path):
    path = make_file(tmp_path / "a.md", "before")
    manager = make_manager(tmp_path)
    manager.open(path)
    manager.set_auto_save_enabled(True)
    manager.document.text = "after"
    manager.set_modified(True)
    manager.auto_save()
    assert (tmp_path / "a.md").read_text(encoding="utf-8") == "after"
    assert manager.document.modified is False


def test_reopen_last_closed_file(tmp_path):
    path = make_file(tmp_path / "a.md", "reopened")
    manager = make_manager(tmp_path)
    manager.open(path)
    manager.close()
    manager.reopen_last_closed_file()
    assert manager.document.text == "reopened"
    assert manager.document.file_path == os.path.abspath(path)


def test_history_ignores_missing_and_clamps(tmp_path):
    first = make_file(tmp_path / "one.txt")
    second = make_file(tmp_path / "two.txt")
    history = RecentHistory()
    history.add_recent(str(tmp_path / "missing.txt"), 3)
    history.add_recent(first, -3000)
    history.add_recent(second, 80)
    history.add_recent(first, 20)
    recent = history.recent_files()
    assert [b.file_path for b in recent] == [os.path.abspath(first), os.path.abspath(second)]
    assert recent[0].cursor_position == 20
    assert len(history.recent_files(1)) == 1
    assert history.lookup(str(tmp_path / "missing.txt")).is_null()
    history.remove_recent(first)
    assert [b.file_path for b in history.recent_files()] == [os.path.abspath(second)]