import re


class Parser(object):
    """
    Word scanner for the Forth compiler in :mod:`forth_interactive.machine`.

    The compiler pulls words one at a time through :meth:`generate`, but some
    words take over the reading of what follows them: ``:`` reads its name
    with :meth:`next_word`, ``(`` skips to the closing parenthesis with
    :meth:`parse_until`, and ``\\`` drops the rest of its line with
    :meth:`parse_rest_of_line`. All of them advance the same position, so the
    generator picks up after whatever they consumed.

    Newlines count as plain whitespace between words. The parse_* methods
    raise :exc:`StopIteration` once the text is used up; :meth:`generate`
    turns that into the normal end of iteration.
    """
    def __init__(self, text):
        self.text = text
        self.pos = 0

    @property
    def is_finished(self):
        return self.pos >= len(self.text)

    def _consume(self, pattern):
        """
        Consume (advancing self.pos) some characters based on a regex. The
        regex is applied to a slice of self.text starting from self.pos, and
        matches are only ever expected at the start of that slice.
        """
        if self.is_finished:
            raise StopIteration()
        found = re.match(pattern, self.text[self.pos:])
        if found is None:
            return None
        self.pos += found.end()
        return found.group()

    def parse_whitespace(self):
        return self._consume(r'\s*')

    def parse_word(self):
        return self._consume(r'\S+')

    def parse_rest_of_line(self):
        line = self._consume(r'[^\n]*')
        if not self.is_finished:
            self.pos += 1  # the newline itself
        return line

    def parse_until(self, terminator):
        """ Consume up to and including `terminator`; None if it never shows. """
        if self.is_finished:
            return None
        found = self._consume(r'[^%s]*%s' % ((re.escape(terminator),) * 2))
        if found is None:
            self.pos = len(self.text)
        return found

    def next_word(self):
        self.parse_whitespace()
        return self.parse_word()

    def generate(self):
        while True:
            try:
                word = self.next_word()
            except StopIteration:
                return
            if word is None:
                return
            yield word
