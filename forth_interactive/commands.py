"""
The shell's commands and the dispatcher that runs them.

Each input line is split on whitespace; the first word names a command and
the rest are handed to it untouched. A :class:`Command` binds a name to its
usage text, its help text and the action that runs it. Actions are called as
``action(command_id, params, machine)`` and return True when they handled the
line. They signal failure by raising; the dispatcher reports the failure and
carries on.
"""
import functools
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from forth_interactive.capture import CaptureSession
from forth_interactive.editor import LineEditor
from forth_interactive.errors import (
    IOFailure,
    ParseFailure,
    ShellError,
    as_shell_error,
    report_error,
    shell_errors,
)
from forth_interactive.machine import INT64_MAX, INT64_MIN

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Command:
    id: str
    usage: str
    help: str
    action: Callable

    def handle(self, command_id, params, machine):
        """ Run the action if `command_id` is ours. False means not handled. """
        if command_id != self.id:
            return False
        return bool(self.action(self.id, params, machine))


class CommandRegistry(object):
    """
    Commands in registration order. That order is the order the dispatcher
    tries them in and the order help lists them in. Ids are not checked for
    uniqueness: two commands sharing an id both run.
    """
    def __init__(self, commands=()):
        self._commands = []
        for command in commands:
            self.register(command)

    def register(self, command):
        self._commands.append(command)
        return command

    def all(self):
        return tuple(self._commands)

    def __iter__(self):
        return iter(self.all())

    def __len__(self):
        return len(self._commands)


def tokenize(line):
    """ Split a line into (command, parameters); None for a blank line. """
    words = line.split()
    if not words:
        return None
    return words[0], words[1:]


def dispatch(registry, command_id, params, machine):
    """
    Offer the line to every registered command, in order. Every command whose
    id matches runs, even after an earlier one handled the line. A command
    that fails, for whatever reason, is reported and counts as not having
    handled the line; the rest still get their turn.
    """
    handled = False
    for command in registry:
        try:
            with shell_errors():
                if command.handle(command_id, params, machine):
                    handled = True
        except ShellError as error:
            report_error(error)
        except Exception as exc:
            logger.exception('command %r crashed', command.id)
            report_error(as_shell_error(exc))
    logger.debug('dispatched %r: handled=%s', command_id, handled)
    return handled


def render_help(registry):
    lines = ['Help text:']
    for command in registry:
        lines.append('    Command: %s  Usage: %s  %s' % (command.id, command.usage, command.help))
    return '\n'.join(lines)


INTEGER = re.compile(r'[+-]?[0-9]+\Z')


def parse_int64(text):
    """ Parse a signed 64-bit integer, raising ValueError for anything else. """
    if not INTEGER.match(text):
        raise ValueError('not an integer: %r' % text)
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError('out of 64-bit range: %r' % text)
    return value


def _print_output(output):
    if output:
        print(output)


# -------------------- commands ------------------------------


def load_files(gas_limit, command_id, params, machine):
    for name in params:
        try:
            source = Path(name).read_text(encoding='utf-8')
        except ValueError as exc:
            # bad path (embedded NUL) or undecodable contents
            raise IOFailure(exc) from exc
        logger.info('loading %s', name)
        _print_output(machine.execute_string(source, gas_limit))
    return True


def print_number_stack(command_id, params, machine):
    print('Number Stack', machine.number_stack)
    return True


def push_numbers(command_id, params, machine):
    # A bad number stops here; numbers before it stay pushed.
    for text in params:
        try:
            value = parse_int64(text)
        except ValueError as exc:
            raise ParseFailure(exc) from exc
        machine.number_stack.append(value)
    return True


def capture_and_execute(capture_factory, gas_limit, command_id, params, machine):
    source = capture_factory().run()
    _print_output(machine.execute_string(source, gas_limit))
    return True


def list_words(command_id, params, machine):
    # Reserved for listing word addresses.
    return True


def list_compiled_opcodes(command_id, params, machine):
    print('Compiled opcodes:')
    for address, opcode in enumerate(machine.compiled_code):
        print('    %4d  %s' % (address, opcode))
    return True


def clear_number_stack(command_id, params, machine):
    del machine.number_stack[:]
    return True


def build_registry(settings, capture_factory=None):
    """
    The shell's commands, in the order they are tried and listed.
    `capture_factory` builds the :class:`CaptureSession` for ``i``; by
    default it reads through a :class:`LineEditor` on the capture history.
    """
    if capture_factory is None:
        def capture_factory():
            return CaptureSession(
                LineEditor(settings.capture_history_path, settings.capture_prompt))

    return CommandRegistry([
        Command('l', 'l file1.f [file2.f]', 'Load Forth files',
                functools.partial(load_files, settings.gas_limit)),
        Command('n', 'n', 'Print number stack', print_number_stack),
        Command('p', 'p n1 [n2]', 'Push numbers on stack', push_numbers),
        Command('i', 'i', 'Enter Forth source, end with ^D',
                functools.partial(capture_and_execute, capture_factory, settings.gas_limit)),
        Command('list_words', 'list_words', 'List word addresses (reserved)', list_words),
        Command('list_compiled_opcodes', 'list_compiled_opcodes',
                'Print the compiled opcodes', list_compiled_opcodes),
        Command('clear_number_stack', 'clear_number_stack',
                'Remove every number from the stack', clear_number_stack),
    ])
