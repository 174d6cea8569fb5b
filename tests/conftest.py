import pytest

from forth_interactive import Machine, Settings


class ScriptedEditor(object):
    """
    Stands in for LineEditor. Replays `script` one line per read_line call,
    raising any exception found in it, then raises EOFError. `history` of
    None means there is no history file to open.
    """
    def __init__(self, script=(), history=None, close_error=None):
        self.script = list(script)
        self.history = history
        self.close_error = close_error
        self.history_path = 'scripted-history'
        self.added = []
        self.opened = False
        self.closed = False

    def open(self):
        self.opened = True
        if self.history is None:
            raise FileNotFoundError(2, 'No such file or directory', self.history_path)

    def read_line(self):
        if not self.script:
            raise EOFError()
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def add_history(self, line):
        self.added.append(line)

    def close(self):
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class RecordingMachine(Machine):
    """ A Machine that remembers every execute_string call. """
    def __init__(self):
        super().__init__()
        self.executed = []

    def execute_string(self, text, gas_limit=None):
        self.executed.append((text, gas_limit))
        return super().execute_string(text, gas_limit)


@pytest.fixture
def scripted_editor():
    return ScriptedEditor


@pytest.fixture
def machine():
    return RecordingMachine()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        history_path=tmp_path / 'history.txt',
        capture_history_path=tmp_path / 'interactive_history.txt',
    )
