"""
Line oriented prompt channels the quiz commands talk through
"""

import sys
import socket
import logging

try:
    import readline
except ImportError: # pragma: no cover - not available on every platform
    readline = None

DEFAULT_PROMPT = 'quiz > '


class ChannelClosed(Exception):
    """The other end went away while a session was using the channel"""


class PromptChannel:
    """
    Base prompt channel

    Subclasses implement _write, _read_line and _release.
    """

    supports_prefill = False

    def __init__(self, prompt=DEFAULT_PROMPT):
        self._prompt = prompt
        self._closed = False

    @property
    def closed(self):
        return self._closed

    def emit(self, text=''):
        """Write one or more lines of text"""
        for line in str(text).split('\n'):
            self._checked_write(line + '\n')

    def prompt(self):
        """Write the marker that asks for the next command"""
        self._checked_write(self._prompt)

    def request_line(self, text, prefill=None):
        """
        Ask for one line of input and wait for it

        Arguments:
            text (str): Text shown before the input
            prefill (str or None): Initial input buffer. Ignored when the
                                   channel can't pre-fill.

        Returns:
            str: The line without its line ending

        Raises:
            ChannelClosed: The channel was closed before a line arrived
        """

        if self._closed:
            raise ChannelClosed()

        line = self._read_line(text, prefill if self.supports_prefill else None)

        if line is None:
            self.close()
            raise ChannelClosed()

        return line.rstrip('\r\n')

    def read_command(self):
        """Wait for the next command line, None when the channel is done"""
        try:
            return self.request_line('')
        except ChannelClosed:
            return None

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._release()

    def _checked_write(self, data):
        if self._closed:
            raise ChannelClosed()
        self._write(data)

    def _write(self, data):
        raise NotImplementedError

    def _read_line(self, text, prefill):
        raise NotImplementedError

    def _release(self):
        pass


class SocketChannel(PromptChannel):
    """
    Prompt channel over a connected socket
    """

    def __init__(self, sock, prompt=DEFAULT_PROMPT):
        super().__init__(prompt)
        self._socket = sock
        self._rfile = sock.makefile('r', encoding='utf-8', errors='replace', newline='\n')
        self._wfile = sock.makefile('w', encoding='utf-8', newline='\n')

    def _write(self, data):
        try:
            self._wfile.write(data)
            self._wfile.flush()
        except OSError as ex:
            logging.info('Write to closed connection: %s', ex)
            self.close()
            raise ChannelClosed() from ex

    def _read_line(self, text, prefill):
        if text:
            self._write(text)

        try:
            line = self._rfile.readline()
        except OSError as ex:
            logging.info('Read from closed connection: %s', ex)
            return None

        return line or None

    def _release(self):
        for file in (self._wfile, self._rfile):
            try:
                file.close()
            except OSError:
                logging.debug('Connection file already closed')

        try:
            self._socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            logging.debug('Connection already shut down')


class ConsoleChannel(PromptChannel):
    """
    Prompt channel on the local terminal

    Pre-fills input through readline when stdin is a terminal.
    """

    def __init__(self, prompt=DEFAULT_PROMPT, stdin=None, stdout=None):
        super().__init__(prompt)
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self.supports_prefill = readline is not None and self._stdin.isatty()

    def _write(self, data):
        self._stdout.write(data)
        self._stdout.flush()

    def _read_line(self, text, prefill):
        if not self._stdin.isatty():
            if text:
                self._write(text)
            return self._stdin.readline() or None

        if prefill:
            readline.set_startup_hook(lambda: readline.insert_text(prefill))

        try:
            return input(text)
        except (EOFError, KeyboardInterrupt):
            return None
        finally:
            if prefill:
                readline.set_startup_hook()
