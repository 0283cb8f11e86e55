import io
import json
import os
import socket
import tempfile
import threading
import unittest
from unittest.mock import Mock, patch

from quiz_core import ChannelClosed, ConsoleChannel, QuizCore, SocketChannel
from quiz_server import QuizServer, QuizTCPServer

from .helpers import ScriptedChannel


def read_until(sock, marker):
    data = b''
    while marker.encode('utf-8') not in data:
        chunk = sock.recv(4096)
        if not chunk:
            break
        data += chunk
    return data.decode('utf-8')


def read_all(sock):
    data = b''
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return data.decode('utf-8')
        data += chunk


class TestSocketChannel(unittest.TestCase):

    def setUp(self):
        self._server_sock, self._client = socket.socketpair()
        self._client.settimeout(5)
        self._channel = SocketChannel(self._server_sock, prompt='> ')

    def tearDown(self):
        self._channel.close()
        self._server_sock.close()
        self._client.close()

    def test_emit_and_prompt(self):
        self._channel.emit('one\ntwo')
        self._channel.prompt()
        self._channel.close()
        self.assertEqual(read_all(self._client), 'one\ntwo\n> ')

    def test_request_line(self):
        self._client.sendall(b'hello there\r\nsecond\n')
        self.assertEqual(self._channel.request_line('Q: '), 'hello there')
        self.assertEqual(self._channel.request_line('Q: ', prefill='ignored'), 'second')
        self.assertFalse(self._channel.supports_prefill)
        self._channel.close()
        self.assertEqual(read_all(self._client), 'Q: Q: ')

    def test_peer_closed(self):
        self._client.close()
        with self.assertRaises(ChannelClosed):
            self._channel.request_line('Q: ')
        self.assertTrue(self._channel.closed)
        self.assertIsNone(self._channel.read_command())

    def test_closed_channel(self):
        self._channel.close()
        self._channel.close()
        with self.assertRaises(ChannelClosed):
            self._channel.emit('late')
        with self.assertRaises(ChannelClosed):
            self._channel.request_line('Q: ')


class TestConsoleChannel(unittest.TestCase):

    def test_non_tty(self):
        stdin = io.StringIO('answer\n')
        stdout = io.StringIO()
        channel = ConsoleChannel(prompt='> ', stdin=stdin, stdout=stdout)
        self.assertFalse(channel.supports_prefill)

        self.assertEqual(channel.request_line('Q: ', prefill='x'), 'answer')
        with self.assertRaises(ChannelClosed):
            channel.request_line('Q: ')

        self.assertEqual(stdout.getvalue(), 'Q: Q: ')
        self.assertTrue(channel.closed)

    @patch('builtins.input', side_effect=KeyboardInterrupt)
    def test_interrupt_on_tty(self, mock_input):
        """
        Ctrl-C at the terminal ends the session like end of input
        """
        stdin = Mock()
        stdin.isatty.return_value = True
        channel = ConsoleChannel(prompt='> ', stdin=stdin, stdout=io.StringIO())

        with self.assertRaises(ChannelClosed):
            channel.request_line('Q: ')
        self.assertTrue(channel.closed)
        mock_input.assert_called_once_with('Q: ')

        core = QuizCore(':memory:', credits=[], seed_quizzes=[])
        core.run_session(ConsoleChannel(prompt='> ', stdin=stdin, stdout=io.StringIO()))

    def test_prefill_ignored_when_unsupported(self):
        channel = ScriptedChannel(['line'])
        channel.request_line('Q: ', prefill='draft')
        self.assertEqual(channel.prefills, [None])


class TestQuizServer(unittest.TestCase):

    def test_session_over_tcp(self):
        core = QuizCore(':memory:', credits=[], seed_quizzes=[{'question': 'Q1', 'answer': 'A1'}])
        server = QuizTCPServer(('127.0.0.1', 0), core, prompt='> ')
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()

        try:
            with socket.create_connection(server.server_address[:2], timeout=5) as client:
                client.sendall(b'list\ntest 1\n a1 \nquit\n')
                text = read_all(client)
        finally:
            server.shutdown()
            server.server_close()

        self.assertTrue(text.startswith('> '))
        self.assertIn(' [1]: Q1\n', text)
        self.assertIn('Q1? Correct\n', text)
        self.assertTrue(text.endswith('Bye!\n'))

    def test_independent_sessions(self):
        """
        A session waiting at a prompt doesn't hold up other connections
        """
        core = QuizCore(':memory:', credits=[], seed_quizzes=[])
        server = QuizTCPServer(('127.0.0.1', 0), core, prompt='> ')
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()

        try:
            with socket.create_connection(server.server_address[:2], timeout=5) as first:
                first.sendall(b'add\n')
                self.assertIn('Enter a question: ', read_until(first, 'Enter a question: '))

                with socket.create_connection(server.server_address[:2], timeout=5) as second:
                    second.sendall(b'help\nquit\n')
                    second_text = read_all(second)

                first.sendall(b'Q\nA\nquit\n')
                first_text = read_all(first)
        finally:
            server.shutdown()
            server.server_close()

        self.assertIn('q|quit', second_text)
        self.assertTrue(second_text.endswith('Bye!\n'))
        self.assertIn('[Added 1]: Q => A', first_text)
        self.assertEqual(core.database.find_by_id(1)['question'], 'Q')

    def test_load_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'config.json')
            with open(path, 'w') as fp:
                json.dump({
                    'database': ':memory:',
                    'port': 0,
                    'credits': ['Someone'],
                    'seed_quizzes': [{'question': 'Q', 'answer': 'A'}],
                }, fp)

            server = QuizServer(path)

        self.assertEqual(server.core.database.count(), 1)
        self.assertEqual(server.core._config['credits'], ['Someone'])


if __name__ == '__main__':
    unittest.main()
