"""
One error type for everything a shell command can trip over.

Commands call into the Forth engine and the filesystem, and each of those
fails with its own exception type. :func:`shell_errors` re-raises them as the
matching :class:`ShellError` variant so the dispatcher only has to know about
one family. The wrapped exception is kept on `.cause`.
"""
import contextlib
import logging

from forth_interactive.machine import ForthError

logger = logging.getLogger(__name__)


class ShellError(Exception):
    kind = 'Unknown'

    def __init__(self, cause=None):
        super().__init__(cause)
        self.cause = cause

    def __str__(self):
        if self.cause is None:
            return self.kind
        return '%s: %s' % (self.kind, self.cause)


class InterpreterFailure(ShellError):
    kind = 'InterpreterFailure'


class IOFailure(ShellError):
    kind = 'IOFailure'


class ParseFailure(ShellError):
    kind = 'ParseFailure'


class UnknownFailure(ShellError):
    pass


# ParseFailure is raised directly by the commands that parse their
# parameters, so a stray ValueError elsewhere is not mistaken for one.
CONVERSIONS = (
    (ForthError, InterpreterFailure),
    (OSError, IOFailure),
    (UnicodeError, IOFailure),
)

CONVERTIBLE = tuple(source for source, variant in CONVERSIONS)


def as_shell_error(exc):
    """
    Wrap `exc` in the matching :class:`ShellError` variant. ShellErrors come
    back unchanged; anything with no conversion becomes an UnknownFailure.
    """
    if isinstance(exc, ShellError):
        return exc
    for source, variant in CONVERSIONS:
        if isinstance(exc, source):
            return variant(exc)
    return UnknownFailure(exc)


@contextlib.contextmanager
def shell_errors():
    """ Re-raise engine and I/O failures as ShellErrors. """
    try:
        yield
    except CONVERTIBLE as exc:
        raise as_shell_error(exc) from exc


def report_error(error):
    """ Show a command failure to the user, set off by blank lines. """
    logger.debug('command failed: %r', error, exc_info=error)
    print('\n%s\n' % error)
