"""
The Forth engine driven by the interactive shell.

Source text is compiled into a flat list of :class:`Opcode`s which is then run
under an optional gas limit (a cap on the number of opcodes executed). All
compiled code, including user word definitions, is kept in
:attr:`Machine.compiled_code` so it can be listed from the shell.
"""
import collections
import inspect
import logging

from forth_interactive.parser import Parser

logger = logging.getLogger(__name__)


class ForthError(Exception): pass


class GasLimitExceeded(ForthError):
    def __init__(self, limit):
        super().__init__('gas limit of %d steps exceeded' % limit)
        self.limit = limit


INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1

TRUE = -1
FALSE = 0

MAX_RETURN_DEPTH = 1024

CONTROL_WORDS = ('IF', 'ELSE', 'THEN', 'DO', 'LOOP', '+LOOP')
COMPILER_WORDS = (':', ';', '(', '\\') + CONTROL_WORDS


def wrap_int64(value):
    """ Wrap an arbitrary int into the signed 64-bit range, two's complement style. """
    return (value - INT64_MIN) % 2 ** 64 + INT64_MIN


def _div(a, b):
    """ Integer division truncating towards zero. """
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _mod(a, b):
    return a - b * _div(a, b)


class Opcode(collections.namedtuple('Opcode', 'kind value')):
    """
    One compiled instruction. Jumps (JR, JRZ, DO, LOOP, +LOOP) carry an offset
    relative to their own address, CALL carries an absolute address, LDI a
    number and BUILTIN a word name. RET has no operand.
    """
    __slots__ = ()

    def __str__(self):
        if self.value is None:
            return self.kind
        return '%s %s' % (self.kind, self.value)


def _word(*names):
    """
    Creates a decorator that adds a .words member to its given func, which is
    then picked up by the :class:`Machine`'s __init__ method. Once a
    :class:`Machine` exists it's too late to decorate; call its
    :meth:`Machine.add_stackmethod` instead.
    """
    def decorator(func):
        func.words = names
        return func
    return decorator


class Machine(object):
    """ A Forth machine. It has a number stack, compiled code and words. """
    def __init__(self):
        self.number_stack = []
        self.compiled_code = []
        self.words = {}
        self.builtins = {}
        self.loop_stack = []
        self.parser = None

        # Add decorated member words
        for name, method in inspect.getmembers(self, inspect.ismethod):
            for word in getattr(method, 'words', ()):
                self.builtins[word] = method

        # Add basic math and stack handling
        for words, func in (
            (('+', 'ADD'), lambda b, a: a + b),
            (('-', 'SUB'), lambda b, a: a - b),
            (('*', 'MUL'), lambda b, a: a * b),
            (('/', 'DIV'), lambda b, a: _div(a, b)),
            (('MOD',), lambda b, a: _mod(a, b)),
            (('/MOD',), lambda b, a: (_mod(a, b), _div(a, b))),
            (('=',), lambda b, a: TRUE if a == b else FALSE),
            (('<',), lambda b, a: TRUE if a < b else FALSE),
            (('>',), lambda b, a: TRUE if a > b else FALSE),
            (('SWAP',), lambda b, a: (b, a)),
            (('DUP',), lambda a: (a, a)),
            (('2DUP',), lambda b, a: (a, b, a, b)),
            (('OVER',), lambda b, a: (a, b, a)),
            (('ROT',), lambda c, b, a: (b, c, a)),
            (('DROP',), lambda a: None),
            (('TUCK',), lambda b, a: (b, a, b)),
        ):
            for word in words:
                self.add_stackmethod(word, func)

    def _push(self, val):
        self.number_stack.append(wrap_int64(val))

    def _push_all(self, ls):
        for val in ls:
            self._push(val)

    def _pop(self):
        if self.number_stack:
            return self.number_stack.pop()
        else:
            raise ForthError('stack underflow')

    @_word('.')
    def _stack_pop(self):
        return str(self._pop()) + ' '

    @_word('.S')
    def _print_stack(self):
        return repr(self.number_stack) + ' '

    @_word('WORDS')
    def _print_words(self):
        names = set(self.builtins) | set(self.words) | set(COMPILER_WORDS)
        return ' '.join(sorted(names)) + ' '

    @_word('EMIT')
    def _emit(self):
        value = self._pop()
        try:
            return chr(value)
        except (ValueError, OverflowError):
            raise ForthError('not a character: %d' % value)

    @_word('CR')
    def _newline(self):
        return '\n'

    @_word('I')
    def _loop_index(self):
        if not self.loop_stack:
            raise ForthError('I outside of a loop')
        self._push(self.loop_stack[-1][0])

    def add_stackmethod(self, word, func):
        """
        Turns a given function `func` into a stack-consumer.

        The function will get its arguments from the stack automatically, in
        the order they pop off (so from the stack [1, 2] the call to a
        two-argument function will be func(2, 1)). The function's return value
        (or tuple of values) goes back on the stack, wrapped to 64 bits.

        There is no provision for a stack-consumer to yield any output text,
        nor for it to touch any other parts of the :class:`Machine`.
        """
        num_args = func.__code__.co_argcount

        def stack_helper():
            if len(self.number_stack) < num_args:
                raise ForthError('stack underflow')
            args = [self._pop() for x in range(num_args)]
            try:
                ret = func(*args)
            except ZeroDivisionError:
                raise ForthError('division by zero')
            if ret is None:
                return
            try:
                self._push_all(ret)
            except TypeError:
                self._push(ret)
        self.builtins[word] = stack_helper

    def execute_string(self, text, gas_limit=None):
        """
        Compile and run `text`, returning whatever it printed.

        `gas_limit` of None runs without a limit; otherwise
        :exc:`GasLimitExceeded` is raised once more than `gas_limit` opcodes
        would execute. A compilation error commits nothing; a runtime error
        leaves the compiled code and the number stack as they were when it
        happened.
        """
        code, words, entry = self.compile(text)
        self.compiled_code = code
        self.words = words
        logger.debug('compiled %d opcodes, entry at %d', len(code) - entry, entry)
        return self.run(entry, gas_limit)

    def compile(self, text):
        """
        Compile `text` without committing anything. Returns (code, words,
        entry): the full new code list (existing code first), the full new
        word table and the address of the top-level code.
        """
        code = list(self.compiled_code)
        words = dict(self.words)
        main = []
        target = main
        control = []
        defining = None

        self.parser = Parser(text)
        for word in self.parser.generate():
            upper = word.upper()
            if upper == '(':
                if self.parser.parse_until(')') is None:
                    raise ForthError('unclosed comment')
            elif upper == '\\':
                try:
                    self.parser.parse_rest_of_line()
                except StopIteration:
                    pass  # comment ran to the end of the text
            elif upper == ':':
                if defining is not None:
                    raise ForthError('nested definition of %s' % defining)
                if control:
                    raise ForthError('unclosed %s' % control[-1][0])
                try:
                    name = self.parser.next_word()
                except StopIteration:
                    name = None
                if not name:
                    raise ForthError('no name given')
                defining = name.upper()
                target = []
            elif upper == ';':
                if defining is None:
                    raise ForthError('compile-only word')
                if control:
                    raise ForthError('unclosed %s' % control[-1][0])
                target.append(Opcode('RET', None))
                words[defining] = len(code)
                code.extend(target)
                defining = None
                target = main
            elif upper in CONTROL_WORDS:
                self._compile_control(upper, target, control)
            else:
                target.append(self._compile_word(word, words))

        if defining is not None:
            raise ForthError('unterminated definition of %s' % defining)
        if control:
            raise ForthError('unclosed %s' % control[-1][0])

        main.append(Opcode('RET', None))
        entry = len(code)
        code.extend(main)
        return code, words, entry

    def _compile_word(self, word, words):
        try:
            return Opcode('LDI', wrap_int64(int(word)))
        except ValueError:
            pass  # ignore the failed conversion.

        upper = word.upper()
        if upper in words:
            return Opcode('CALL', words[upper])
        elif upper in self.builtins:
            return Opcode('BUILTIN', upper)
        else:
            raise ForthError('undefined word: %s' % word)

    def _close(self, control, opener):
        if not control:
            raise ForthError('missing %s' % opener)
        if control[-1][0] != opener:
            raise ForthError('unclosed %s' % control[-1][0])
        return control.pop()

    def _compile_control(self, word, target, control):
        """
        IF, ELSE and DO leave a placeholder in `target` which the closing
        word patches with the right relative jump.
        """
        if word == 'IF':
            control.append(('IF', len(target)))
            target.append(None)
        elif word == 'ELSE':
            opener, at = self._close(control, 'IF')
            control.append(('ELSE', len(target)))
            target.append(None)
            target[at] = Opcode('JRZ', len(target) - at)
        elif word == 'THEN':
            if not control or control[-1][0] not in ('IF', 'ELSE'):
                raise ForthError('missing IF')
            opener, at = control.pop()
            kind = 'JRZ' if opener == 'IF' else 'JR'
            target[at] = Opcode(kind, len(target) - at)
        elif word == 'DO':
            control.append(('DO', len(target)))
            target.append(None)
        else:
            opener, at = self._close(control, 'DO')
            target.append(Opcode(word, at + 1 - len(target)))
            target[at] = Opcode('DO', len(target) - at)

    def run(self, entry, gas_limit=None):
        """ Run compiled code from address `entry` until its final RET. """
        ret = ''
        return_stack = []
        self.loop_stack = []
        pc = entry
        steps = 0

        while True:
            if gas_limit is not None and steps >= gas_limit:
                raise GasLimitExceeded(gas_limit)
            steps += 1

            kind, value = self.compiled_code[pc]
            if kind == 'LDI':
                self._push(value)
                pc += 1
            elif kind == 'BUILTIN':
                output = self.builtins[value]()
                if output is not None:
                    ret += output
                pc += 1
            elif kind == 'CALL':
                if len(return_stack) >= MAX_RETURN_DEPTH:
                    raise ForthError('return stack overflow')
                return_stack.append(pc + 1)
                pc = value
            elif kind == 'RET':
                if not return_stack:
                    break
                pc = return_stack.pop()
            elif kind == 'JR':
                pc += value
            elif kind == 'JRZ':
                pc += value if self._pop() == 0 else 1
            elif kind == 'DO':
                index = self._pop()
                limit = self._pop()
                if index < limit:
                    self.loop_stack.append([index, limit])
                    pc += 1
                else:
                    pc += value
            elif kind in ('LOOP', '+LOOP'):
                step = 1 if kind == 'LOOP' else self._pop()
                frame = self.loop_stack[-1]
                frame[0] += step
                if frame[0] < frame[1]:
                    pc += value
                else:
                    self.loop_stack.pop()
                    pc += 1
            else:
                raise ForthError('unknown opcode: %s' % kind)

        logger.debug('ran %d steps', steps)
        return ret
