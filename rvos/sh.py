"""Parser for the command language of the shell: pipes, lists, redirections, blocks."""

from dataclasses import dataclass, field

from .riscv import O_CREATE, O_RDONLY, O_TRUNC, O_WRONLY

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
MAXARGS = 10


class ShellSyntaxError(ValueError):
    """Raised when a command line cannot be parsed."""


@dataclass
class ExecCmd:
    argv: list = field(default_factory=list)


@dataclass
class RedirCmd:
    cmd: object
    file: str
    mode: int
    fd: int


@dataclass
class PipeCmd:
    left: object
    right: object


@dataclass
class ListCmd:
    left: object
    right: object


@dataclass
class BackCmd:
    cmd: object


_REDIRECTIONS = {
    "<": (O_RDONLY, 0),
    ">": (O_WRONLY | O_CREATE | O_TRUNC, 1),
    "+": (O_WRONLY | O_CREATE, 1),  # >>
}


class _Parser:
    def __init__(self, text):
        self.text = text
        self.pos = 0

    def _skip(self):
        while self.pos < len(self.text) and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def _current(self):
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def peek(self, toks):
        self._skip()
        c = self._current()
        return bool(c) and c in toks

    def gettoken(self):
        """Consume one token; return (kind, word). kind is '' at the end."""
        self._skip()
        start = self.pos
        c = self._current()
        if not c:
            kind = ""
        elif c in "|();&<":
            self.pos += 1
            kind = c
        elif c == ">":
            self.pos += 1
            if self._current() == ">":
                self.pos += 1
                kind = "+"
            else:
                kind = ">"
        else:
            kind = "a"
            text = self.text
            while (self.pos < len(text) and text[self.pos] not in WHITESPACE
                   and text[self.pos] not in SYMBOLS):
                self.pos += 1
        word = self.text[start:self.pos]
        self._skip()
        return kind, word

    def line(self):
        cmd = self.pipe()
        while self.peek("&"):
            self.gettoken()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.gettoken()
            cmd = ListCmd(cmd, self.line())
        return cmd

    def pipe(self):
        cmd = self.exec()
        if self.peek("|"):
            self.gettoken()
            cmd = PipeCmd(cmd, self.pipe())
        return cmd

    def redirs(self, cmd):
        while self.peek("<>"):
            tok, _ = self.gettoken()
            kind, word = self.gettoken()
            if kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            mode, fd = _REDIRECTIONS[tok]
            cmd = RedirCmd(cmd, word, mode, fd)
        return cmd

    def block(self):
        self.gettoken()
        cmd = self.line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.gettoken()
        return self.redirs(cmd)

    def exec(self):
        if self.peek("("):
            return self.block()
        node = ExecCmd()
        ret = self.redirs(node)
        while not self.peek("|)&;"):
            kind, word = self.gettoken()
            if not kind:
                break
            if kind != "a":
                raise ShellSyntaxError("syntax")
            node.argv.append(word)
            if len(node.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.redirs(ret)
        return ret


def parse_command(s):
    """Parse one command line into a tree of command objects."""
    parser = _Parser(s)
    cmd = parser.line()
    parser.peek("")
    if parser.pos != len(s):
        raise ShellSyntaxError(f"leftovers: {s[parser.pos:]}")
    return cmd