import logging
import readline

from forth_interactive.errors import as_shell_error, report_error

logger = logging.getLogger(__name__)

# Editors currently open. While any is, input() must not add lines to the
# history by itself: add_history is the only writer.
_open_editors = 0


class LineEditor(object):
    """
    Reads prompted lines through :mod:`readline` and owns one history file.

    readline keeps a single history list for the whole process, so opening an
    editor stashes whatever entries are current and loads its own file in
    their place; closing it writes its file and puts the stashed entries
    back. Nested editors (the capture sub-session inside the main prompt)
    therefore never see each other's lines.
    """
    def __init__(self, history_path, prompt):
        self.history_path = history_path
        self.prompt = prompt
        self._stashed = []

    def open(self):
        """ Swap in this editor's history. Raises OSError if the file can't be read. """
        global _open_editors
        _open_editors += 1
        readline.set_auto_history(False)
        self._stashed = [readline.get_history_item(index)
                         for index in range(1, readline.get_current_history_length() + 1)]
        readline.clear_history()
        readline.read_history_file(self.history_path)

    def read_line(self):
        return input(self.prompt)

    def add_history(self, line):
        readline.add_history(line)

    def close(self):
        global _open_editors
        try:
            readline.write_history_file(self.history_path)
        finally:
            readline.clear_history()
            for item in self._stashed:
                if item is not None:
                    readline.add_history(item)
            self._stashed = []
            _open_editors = max(_open_editors - 1, 0)
            if not _open_editors:
                readline.set_auto_history(True)


def open_history(editor):
    """ Open `editor`, starting with an empty history if its file can't be read. """
    try:
        editor.open()
    except OSError as exc:
        logger.info('no history loaded from %s: %s', editor.history_path, exc)
        print('No previous history.')
        return False
    return True


def close_history(editor):
    """ Close `editor`; failing to save its history is reported, not raised. """
    try:
        editor.close()
    except OSError as exc:
        report_error(as_shell_error(exc))
        return False
    return True
