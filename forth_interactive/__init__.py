"""
An interactive shell around a small Forth machine.

The shell reads one command per line: load Forth files into the machine, push
numbers onto its stack, look at its stack and compiled opcodes, or type Forth
source over several lines. Usage should be as simple as:
    >>> from forth_interactive import Session
    >>> Session().run()

which puts you at the ">> " prompt until given an end of file (^D on Linux)
or an interrupt (^C). A line the shell doesn't recognise prints the command
table.

The Forth machine may also be driven directly:
    >>> m = Machine()
    >>> m.execute_string("5 4 + .")
    '9 '
    >>> m.number_stack
    []
"""
from forth_interactive.commands import (
    Command,
    CommandRegistry,
    build_registry,
    dispatch,
    render_help,
    tokenize,
)
from forth_interactive.config import Settings
from forth_interactive.errors import (
    InterpreterFailure,
    IOFailure,
    ParseFailure,
    ShellError,
    UnknownFailure,
)
from forth_interactive.machine import ForthError, GasLimitExceeded, Machine, Opcode
from forth_interactive.parser import Parser
from forth_interactive.session import Session, main
