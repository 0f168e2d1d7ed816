#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Copy a single file to an FTP server.

Usage::

    ftpcp [options] source [user@]host[:path]

    -p port   connect to specified port
    -l user   connect with specified username
    -pw passw login with specified password
    -a        anonymous connection
    -pasv     use passive mode
    -d        increase debugging output (may be repeated)

Missing usernames and passwords are asked for interactively. The exit status
is 0 on success, 1 if the transfer failed, 2 if a credential is missing, 3 if
the source is not a regular file and -1 on command line errors.

"""

import os
import sys

from ftpcreds import CredentialError, resolve_credentials
from ftpupload import FTPUploader, transfer

__all__ = (
    "ExitOutcome",
    "Request",
    "UsageError",
    "ValidationError",
    "check_source",
    "main",
    "parse_args",
    "parse_target",
    "run"
)

__version__ = '1.0.1'

PROG = 'ftpcp'
MIN_PORT = 1
MAX_PORT = 65535

EXIT_OK = 0
EXIT_USAGE = -1
# 128 + SIGINT, like a shell reports an interrupted command
EXIT_INTERRUPTED = 130

USAGE = """\
Usage: ftpcp [options] source [user@]host[:path]

Options:
    -p port   connect to specified port
    -l user   connect with specified username
    -pw passw login with specified password
    -a        anonymous connection
    -pasv     use passive mode
    -d        increase debugging output"""


class UsageError(Exception):
    """Malformed or missing command line arguments."""
    exitcode = EXIT_USAGE


class ValidationError(Exception):
    """The source path is missing or not a regular file."""
    exitcode = 3


class Request:
    """Everything needed for one upload, filled in stage by stage."""

    def __init__(self, source=None, host=None, port=None, remote_path='/',
                 anonymous=False, username=None, password=None,
                 passive=False, debuglevel=0):
        self.source = source
        self.host = host
        self.port = port
        self.remote_path = remote_path
        self.anonymous = anonymous
        self.username = username
        self.password = password
        # accepted on the command line, not applied to the connection yet
        self.passive = passive
        self.debuglevel = debuglevel

    def __eq__(self, other):
        if not isinstance(other, Request):
            return NotImplemented
        return vars(self) == vars(other)

    def __repr__(self):
        fields = dict(vars(self))
        if fields['password']:
            fields['password'] = '***'
        return "Request(%s)" % ", ".join("%s=%r" % item
                                          for item in sorted(fields.items()))


class ExitOutcome:
    """The exit code of a run and the message already shown for it."""

    def __init__(self, code, message=None):
        self.code = code
        self.message = message

    def __repr__(self):
        return "ExitOutcome(%r, %r)" % (self.code, self.message)


# Command line arguments

def _optarg(args, pos, opt):
    # An argument starting with '-' is the next option, not a value.
    arg = args[pos] if pos < len(args) else None

    if not arg or arg.startswith('-'):
        raise UsageError('option "%s" requires an argument' % opt)

    return arg


def _parse_port(value, opt):
    if not (value.isascii() and value.isdigit()):
        raise UsageError('invalid argument option "%s", value must be number'
                         % opt)

    port = int(value)

    if not MIN_PORT <= port <= MAX_PORT:
        raise UsageError('invalid argument option "%s", value must be number '
                         'in range %i..%i' % (opt, MIN_PORT, MAX_PORT))

    return port


def parse_args(args):
    """Parse command line arguments.

    Returns a tuple of a new `Request` and the unparsed target specifier.
    Repeated options override earlier ones. Raises `UsageError` for unknown
    options, missing or invalid option values and missing or surplus
    positional arguments.
    """
    request = Request()
    target = None
    i = 0

    while i < len(args):
        arg = args[i]

        if arg.startswith('-'):
            if arg == '-p':
                request.port = _parse_port(_optarg(args, i + 1, arg), arg)
                i += 1
            elif arg == '-l':
                request.username = _optarg(args, i + 1, arg)
                i += 1
            elif arg == '-pw':
                request.password = _optarg(args, i + 1, arg)
                i += 1
            elif arg == '-a':
                request.anonymous = True
            elif arg == '-pasv':
                request.passive = True
            elif arg == '-d':
                request.debuglevel += 1
            else:
                raise UsageError('unknown option "%s"' % arg)
        elif request.source is None:
            request.source = arg
        elif target is None:
            target = arg
        else:
            raise UsageError("too many arguments")

        i += 1

    if request.source is None:
        raise UsageError("no source file specified")
    elif target is None:
        raise UsageError("no target FTP specified")

    return request, target


def parse_target(target, request):
    """Split a '[user@]host[:path]' target into `request`.

    A username given here replaces one given with '-l'. The remote path
    defaults to '/'. Raises `UsageError` if the host part is empty.
    """
    user, sep, rest = target.partition('@')

    if sep:
        request.username = user
        target = rest

    host, _, path = target.partition(':')

    if not host:
        raise UsageError("no target FTP specified")

    request.host = host
    request.remote_path = path or '/'
    return request


def check_source(path):
    """Raise `ValidationError` unless `path` is an existing regular file."""
    if os.path.isdir(path):
        raise ValidationError("%s: is directory" % path)
    elif not os.path.isfile(path):
        raise ValidationError("%s: no such file" % path)


# Console output

def show_app_info():
    print("FTP files copy client")
    print("Version: %s" % __version__)


def show_usage():
    print(USAGE)


def show_error(message):
    print("%s: %s" % (PROG, message))


def show_help_hint():
    print('       try typing just "%s" for help' % PROG)


def run(args, prompt=input, secret_reader=None, uploader_class=FTPUploader):
    """Run one upload for the command line arguments `args`.

    Every stage either hands a complete request on or ends the run. All
    messages are printed where they arise. Returns an `ExitOutcome`.
    """
    show_app_info()

    if not args:
        show_usage()
        return ExitOutcome(EXIT_OK)

    try:
        request, target = parse_args(args)
        parse_target(target, request)
    except UsageError as exc:
        show_error(exc)
        show_help_hint()
        return ExitOutcome(exc.exitcode, str(exc))

    try:
        check_source(request.source)
        resolve_credentials(request, prompt, secret_reader)
    except (ValidationError, CredentialError) as exc:
        show_error(exc)
        return ExitOutcome(exc.exitcode, str(exc))

    result = transfer(request, uploader_class)
    if result.stage and request.debuglevel:
        print("Transfer failed while %s." % result.stage)
    print(result.message)
    return ExitOutcome(result.code, result.message)


def main(args=None):
    if args is None:
        args = sys.argv[1:]

    try:
        return run(args).code
    except KeyboardInterrupt:
        print()
        return EXIT_INTERRUPTED


if __name__ == '__main__':
    sys.exit(main())
