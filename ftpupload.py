# -*- coding: utf-8 -*-
"""Upload a single local file to an FTP server.

The FTP protocol itself is handled by the standard 'ftplib' module. This module
wraps it in the three operations an upload needs (log in, open a remote file
for writing, copy bytes) and drives them in order::

    >>> from ftpupload import transfer
    >>> result = transfer(request)
    >>> result.code, result.message
    (0, 'README.md: upload success')

A failure in any step ends the transfer. It is reported as a `TransferResult`
value, never as an exception.

"""

import ftplib
import os

__all__ = (
    "AuthenticationError",
    "FTPUploader",
    "RemoteError",
    "RemoteFile",
    "TransferError",
    "TransferResult",
    "copy",
    "transfer"
)

BLOCKSIZE = 8192

# ftplib also rejects commands it cannot send: ValueError for CR or LF in an
# argument, UnicodeEncodeError for undecodable file names
ENGINE_ERRORS = ftplib.all_errors + (ValueError,)

# Orchestrator states
IDLE = 'idle'
AUTHENTICATING = 'authenticating'
OPENING = 'opening remote target'
COPYING = 'copying'
SUCCEEDED = 'succeeded'
FAILED = 'failed'


class TransferError(Exception):
    """Base exception for failures reported by the FTP server or network."""
    exitcode = 1


class AuthenticationError(TransferError):
    """Connecting, logging in or changing to the base directory failed."""
    pass


class RemoteError(TransferError):
    """The remote file could not be opened for writing."""
    pass


def _describe(exc):
    # ftplib replies already read like '530 Login incorrect.'
    return str(exc) or exc.__class__.__name__


class RemoteFile:
    """Writable byte sink for a file being stored on the server.

    Wraps the data connection returned by a STOR command. Closing it normally
    reads the server's final reply, which raises an 'ftplib' error if the
    server did not accept the data.
    """

    def __init__(self, ftp, conn):
        self.ftp = ftp
        self.conn = conn

    def __enter__(self):
        return self

    def __exit__(self, exc_type, *args):
        if exc_type is None:
            self.close()
        else:
            self.abort()

    def write(self, data):
        self.conn.sendall(data)
        return len(data)

    def abort(self):
        """Drop the data connection without waiting for the server's reply."""
        conn = self.conn
        self.conn = None
        if conn is not None:
            conn.close()

    def close(self):
        conn = self.conn
        self.conn = None
        if conn is not None:
            conn.close()
            self.ftp.voidresp()

    @property
    def closed(self):
        return self.conn is None


class FTPUploader:
    """A single FTP session used to store one file.

    The arguments configure the session, nothing is sent before `login` is
    called. `port` may be None for the default FTP port and `basedir` is the
    remote directory the file is stored in.

    Use the instance as a context manager to make sure the connection is
    closed again.
    """

    ftp_class = ftplib.FTP

    def __init__(self, host, port=None, user='', passwd='', basedir='/',
                 debuglevel=0):
        self.host = host
        self.port = port or ftplib.FTP_PORT
        self.user = user
        self.passwd = passwd
        self.basedir = basedir
        self.debuglevel = debuglevel
        self.ftp = None

    def __enter__(self):
        return self

    # Context management protocol: try to quit() if logged in
    def __exit__(self, *args):
        self.close()

    def login(self):
        """Connect, log in and change to the base directory.

        Raises `AuthenticationError` carrying the server's or the network
        layer's message if any of these steps fails.
        """
        ftp = self.ftp_class()
        ftp.set_debuglevel(self.debuglevel)

        try:
            ftp.connect(self.host, self.port)
            ftp.login(self.user, self.passwd)

            if self.basedir:
                ftp.cwd(self.basedir)
        except ENGINE_ERRORS as exc:
            ftp.close()
            raise AuthenticationError(_describe(exc)) from exc

        self.ftp = ftp

    def open_write(self, filename):
        """Start storing `filename` in binary mode and return a `RemoteFile`."""
        if self.ftp is None:
            raise RemoteError("not logged in")

        try:
            self.ftp.voidcmd('TYPE I')
            conn = self.ftp.transfercmd('STOR ' + filename)
        except ENGINE_ERRORS as exc:
            raise RemoteError(_describe(exc)) from exc

        return RemoteFile(self.ftp, conn)

    def close(self):
        ftp = self.ftp
        self.ftp = None
        if ftp is not None:
            try:
                ftp.quit()
            except ftplib.all_errors:
                # the server may already have dropped a broken session
                pass
            finally:
                ftp.close()


class TransferResult:
    """Outcome of `transfer`: final state, exit code and console message."""

    def __init__(self, state, code, message, stage=None):
        self.state = state
        self.code = code
        self.message = message
        # the step that was running when the transfer failed
        self.stage = stage

    def __repr__(self):
        return "TransferResult(%r, %r, %r, %r)" % (self.state, self.code,
                                                   self.message, self.stage)


def copy(fp, remote, blocksize=BLOCKSIZE):
    """Copy everything readable from `fp` to `remote`.

    Args:
      fp: A file-like object with a read(num_bytes) method.
      remote: A file-like object with a write(data) method.
      blocksize: The maximum data size to read from fp and write at once.

    Returns:
      The number of bytes copied.
    """
    total = 0

    while 1:
        buf = fp.read(blocksize)
        if not buf:
            break

        remote.write(buf)
        total += len(buf)

    return total


def _failed(stage, exc):
    return TransferResult(FAILED, getattr(exc, "exitcode", 1), _describe(exc),
                          stage)


def transfer(request, uploader_class=FTPUploader):
    """Upload `request.source` as described by `request`.

    The steps run strictly in order: log in, open the remote file (named
    after the base name of the local file), copy the bytes. The first failing
    step ends the transfer. The local file, the remote file and the session
    are closed on every path.

    `request` needs the attributes source, host, port, remote_path, username,
    password and debuglevel.
    """
    name = os.path.basename(request.source)
    debugging = request.debuglevel
    state = IDLE

    # TODO: apply request.passive once the intended data connection mode
    # for '-pasv' is decided; ftplib uses passive mode by default.
    with uploader_class(request.host, request.port, request.username,
                        request.password, request.remote_path,
                        debugging) as uploader:
        state = AUTHENTICATING
        if debugging:
            print("Connecting to %s port %s..." % (uploader.host,
                                                  uploader.port))
            print("Logging in as user '%s'." % request.username)

        try:
            uploader.login()
        except TransferError as exc:
            return _failed(state, exc)

        state = OPENING
        if debugging:
            print("Storing '%s' in '%s'." % (name, request.remote_path))

        try:
            remote = uploader.open_write(name)
        except TransferError as exc:
            return _failed(state, exc)

        state = COPYING
        try:
            with remote, open(request.source, 'rb') as fp:
                size = copy(fp, remote)
        except ENGINE_ERRORS as exc:
            # local read errors are OSErrors too
            return _failed(state, exc)

        state = SUCCEEDED
        if debugging:
            print("Sent %i bytes." % size)

    return TransferResult(state, 0, "%s: upload success" % request.source)
