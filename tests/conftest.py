"""
Shared pytest fixtures and helpers for the ftpcp test suite.
"""

import os
import sys
import pathlib

import pytest

# Ensure the project root is importable regardless of how
# pytest is invoked, so tests can simply ``import ftpcp``.
_PROJECT_ROOT = pathlib.Path(__file__).parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from ftpupload import FTPUploader, RemoteError, AuthenticationError  # noqa: E402


class FakeRemote:
    """In-memory remote file recording what was written."""

    def __init__(self, fail_on_write=None):
        self.data = bytearray()
        self.closed = False
        self.aborted = False
        self.fail_on_write = fail_on_write

    def __enter__(self):
        return self

    def __exit__(self, exc_type, *args):
        if exc_type is None:
            self.close()
        else:
            self.aborted = True
            self.closed = True

    def write(self, data):
        if self.fail_on_write:
            raise self.fail_on_write
        self.data += data
        return len(data)

    def close(self):
        self.closed = True


class FakeUploader(FTPUploader):
    """An FTPUploader that never touches the network.

    Class attributes control failures; every instance is recorded in
    ``instances`` so tests can inspect the session afterwards.
    """

    login_error = None
    open_error = None
    write_error = None
    instances = []

    def __init__(self, *args, **kw):
        super().__init__(*args, **kw)
        self.logged_in = False
        self.opened = []
        self.closed = False
        self.remote = None
        self.instances.append(self)

    def login(self):
        if self.login_error:
            raise AuthenticationError(self.login_error)
        self.logged_in = True

    def open_write(self, filename):
        if self.open_error:
            raise RemoteError(self.open_error)
        self.opened.append(filename)
        self.remote = FakeRemote(self.write_error)
        return self.remote

    def close(self):
        self.closed = True


@pytest.fixture
def fake_uploader():
    """Return a fresh FakeUploader subclass with its own settings."""
    return type("FakeUploader", (FakeUploader,), {"instances": []})


@pytest.fixture
def localfile(tmp_path):
    path = tmp_path / "localfile.txt"
    path.write_bytes(b"hello ftp\n" * 2000)
    return path


@pytest.fixture
def ftp_server(tmp_path):
    """Run a pyftpdlib server on a free local port for one test.

    Yields ``(port, rootdir)``.
    """
    from ftpserver import ServerThread, make_server

    rootdir = tmp_path / "ftproot"
    (rootdir / "incoming").mkdir(parents=True)
    server = make_server(os.fspath(rootdir), anonymous_writable=True)
    server.handler.auth_failed_timeout = 0
    thread = ServerThread(server)
    thread.start()
    try:
        yield thread.port, rootdir
    finally:
        thread.stop()
