import pytest

from forth_interactive import (
    ForthError,
    GasLimitExceeded,
    InterpreterFailure,
    IOFailure,
    ParseFailure,
    ShellError,
    UnknownFailure,
)
from forth_interactive.errors import as_shell_error, report_error, shell_errors


class TestConversions():
    def test_forth_errors_are_interpreter_failures(self):
        cause = ForthError('stack underflow')
        error = as_shell_error(cause)

        assert isinstance(error, InterpreterFailure)
        assert error.cause is cause
        assert str(error) == 'InterpreterFailure: stack underflow'

    def test_gas_exhaustion_is_an_interpreter_failure(self):
        error = as_shell_error(GasLimitExceeded(100))

        assert isinstance(error, InterpreterFailure)
        assert error.cause.limit == 100

    def test_os_errors_are_io_failures(self):
        cause = FileNotFoundError(2, 'No such file or directory', 'missing.f')
        error = as_shell_error(cause)

        assert isinstance(error, IOFailure)
        assert error.cause is cause
        assert 'missing.f' in str(error)

    def test_decoding_errors_are_io_failures(self):
        cause = UnicodeDecodeError('utf-8', b'\xff', 0, 1, 'invalid start byte')

        assert isinstance(as_shell_error(cause), IOFailure)

    def test_value_errors_are_not_parse_failures(self):
        error = as_shell_error(ValueError('embedded null byte'))

        assert isinstance(error, UnknownFailure)
        assert not isinstance(error, ParseFailure)

    def test_shell_errors_pass_through(self):
        error = ParseFailure(ValueError('x'))

        assert as_shell_error(error) is error

    def test_anything_else_is_unknown(self):
        error = as_shell_error(KeyError('x'))

        assert isinstance(error, UnknownFailure)
        assert str(error).startswith('Unknown: ')

    def test_bare_shell_error(self):
        assert str(UnknownFailure()) == 'Unknown'
        assert UnknownFailure().cause is None


class TestShellErrorsContext():
    def test_converts_and_chains(self):
        cause = ForthError('undefined word: X')
        with pytest.raises(InterpreterFailure) as excinfo:
            with shell_errors():
                raise cause

        assert excinfo.value.cause is cause
        assert excinfo.value.__cause__ is cause

    def test_variants_share_a_base(self, tmp_path):
        with pytest.raises(ShellError):
            with shell_errors():
                open(tmp_path / 'missing.f')

    def test_value_errors_propagate(self):
        with pytest.raises(ValueError):
            with shell_errors():
                int('abc')

    def test_other_exceptions_propagate(self):
        with pytest.raises(TypeError):
            with shell_errors():
                raise TypeError('a bug')

    def test_quiet_when_nothing_fails(self):
        with shell_errors():
            value = 1

        assert value == 1


def test_report_error_surrounds_with_blank_lines(capsys):
    report_error(ParseFailure(ValueError("not an integer: 'abc'")))

    assert capsys.readouterr().out == "\nParseFailure: not an integer: 'abc'\n\n"
