# -*- coding: utf-8 -*-
"""Ask the operator for the FTP credentials missing from a request.

Passwords are read without echo, one key at a time, and end at a carriage
return, so they may contain characters a line reader would treat specially.
Reading a secret is done by a `SecretReader`, which keeps the console
handling out of `resolve_credentials`.

"""

import os
import sys

try:
    import termios
    import tty
except ImportError:
    termios = tty = None

try:
    import msvcrt
except ImportError:
    msvcrt = None

__all__ = (
    "ANONYMOUS_PASSWD",
    "ANONYMOUS_USER",
    "ConsoleSecretReader",
    "CredentialError",
    "SecretReader",
    "StreamSecretReader",
    "TerminalSecretReader",
    "default_secret_reader",
    "resolve_credentials"
)

ANONYMOUS_USER = 'anonymous'
ANONYMOUS_PASSWD = 'mail@mail.com'
CR = '\r'
CTRL_C = '\x03'


class CredentialError(Exception):
    """A required username or password was not given."""
    exitcode = 2


class SecretReader:
    """Reads one secret line from the operator."""

    def read_secret_line(self):
        """Return the secret without its terminating carriage return."""
        raise NotImplementedError


class TerminalSecretReader(SecretReader):
    """Read a secret from a POSIX terminal in raw mode.

    Nothing is echoed. Input ends with a carriage return (the Enter key) or
    end of file, Ctrl-C raises KeyboardInterrupt. The terminal settings are
    restored afterwards in any case.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin

    def read_secret_line(self):
        fd = self.stream.fileno()
        old = termios.tcgetattr(fd)
        data = bytearray()

        try:
            # keep typeahead, unlike TCSAFLUSH
            tty.setraw(fd, termios.TCSADRAIN)

            while True:
                c = os.read(fd, 1)

                if not c or c == b'\r':
                    break
                elif c == b'\x03':
                    raise KeyboardInterrupt

                data += c
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old)

        encoding = getattr(self.stream, 'encoding', None) or 'utf-8'
        return data.decode(encoding, 'replace')


class ConsoleSecretReader(SecretReader):
    """Read a secret from the Windows console, same rules as on POSIX."""

    def read_secret_line(self):
        chars = []

        while True:
            c = msvcrt.getwch()

            if c == CR:
                break
            elif c == CTRL_C:
                raise KeyboardInterrupt

            chars.append(c)

        return ''.join(chars)


class StreamSecretReader(SecretReader):
    """Read a secret from a non-interactive stream, e.g. a pipe.

    Input ends at a carriage return, a newline or end of file.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin

    def read_secret_line(self):
        chars = []

        while True:
            c = self.stream.read(1)

            if not c or c in '\r\n':
                break

            chars.append(c)

        return ''.join(chars)


def default_secret_reader(stream=None):
    """Return the best `SecretReader` for `stream` (default: sys.stdin)."""
    stream = stream or sys.stdin

    try:
        interactive = stream.isatty()
    except (AttributeError, ValueError):
        interactive = False

    if interactive:
        if termios is not None:
            return TerminalSecretReader(stream)
        elif msvcrt is not None:
            return ConsoleSecretReader()

    return StreamSecretReader(stream)


def _ask(prompt, reader):
    try:
        return reader(prompt)
    except EOFError:
        return ''


def resolve_credentials(request, prompt=input, secret_reader=None):
    """Fill in a missing username and password of `request`.

    For anonymous requests the fixed anonymous credentials replace whatever
    was given and nothing is asked. Otherwise an empty username is read with
    `prompt` (a callable like `input`) and an empty password with
    `secret_reader`. Each value is asked for once only; an empty or blank
    answer raises `CredentialError`.
    """
    if request.anonymous:
        request.username = ANONYMOUS_USER
        request.password = ANONYMOUS_PASSWD
        return request

    if not request.username:
        username = _ask("%s username: " % request.host, prompt)

        if not username.strip():
            raise CredentialError("username is required")

        request.username = username

    if not request.password:
        if secret_reader is None:
            secret_reader = default_secret_reader()

        print("%s password: " % request.host, end='', flush=True)
        password = secret_reader.read_secret_line()
        print()

        if not password.strip():
            raise CredentialError("password is required")

        request.password = password

    return request
