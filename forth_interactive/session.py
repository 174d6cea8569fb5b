import logging
import sys

from forth_interactive.commands import build_registry, dispatch, render_help, tokenize
from forth_interactive.config import Settings
from forth_interactive.editor import LineEditor, close_history, open_history
from forth_interactive.machine import Machine

logger = logging.getLogger(__name__)

BANNER = 'This is the forth-interactive compiler'
LOG_FORMAT = '[%(asctime)s] %(levelname)s: %(message)s'


class Session(object):
    """
    The main prompt: read a line, dispatch it, repeat until ^C or ^D.

    The session owns the one :class:`Machine` and hands it to every command
    it dispatches. Command failures never end the session; only the line
    editor signalling an interrupt, end of input or an I/O error does.
    """
    def __init__(self, settings=None, machine=None, editor=None, registry=None):
        self.settings = settings if settings is not None else Settings()
        self.machine = machine if machine is not None else Machine()
        if editor is None:
            editor = LineEditor(self.settings.history_path, self.settings.prompt)
        self.editor = editor
        self.registry = registry if registry is not None else build_registry(self.settings)

    def run(self):
        print(BANNER)
        open_history(self.editor)
        try:
            while True:
                try:
                    line = self.editor.read_line()
                except KeyboardInterrupt:
                    print('CTRL-C')
                    break
                except EOFError:
                    print('CTRL-D')
                    break
                except OSError as exc:
                    print('Error: %s' % exc)
                    break
                self.handle_line(line)
        finally:
            close_history(self.editor)
        return 0

    def handle_line(self, line):
        """ Dispatch one line; print the help table when nothing handled it. """
        tokens = tokenize(line)
        if tokens is None:
            return False
        self.editor.add_history(line)
        logger.debug('line: %s', line)

        command, params = tokens
        handled = dispatch(self.registry, command, params, self.machine)
        if not handled:
            print(render_help(self.registry))
        return handled


def main():
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    return Session(settings).run()


if __name__ == '__main__':
    sys.exit(main())
