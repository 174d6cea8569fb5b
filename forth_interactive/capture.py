import logging

from forth_interactive.editor import close_history, open_history

logger = logging.getLogger(__name__)


class CaptureSession(object):
    """
    Collects raw source lines until ^D or ^C and hands them back as one block
    of text, each line followed by a single newline.

    The capture keeps its own history, separate from the main prompt's, and
    shares nothing with the outer session other than the text it returns.
    """
    def __init__(self, editor):
        self.editor = editor

    def run(self):
        source = ''
        open_history(self.editor)
        try:
            while True:
                try:
                    line = self.editor.read_line()
                except (EOFError, KeyboardInterrupt):
                    break
                except OSError as exc:
                    print('Error: %s' % exc)
                    break
                source += line + '\n'
                self.editor.add_history(line)
        finally:
            close_history(self.editor)

        logger.debug('captured %d lines', source.count('\n'))
        return source
