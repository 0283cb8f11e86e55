import json
import logging
import socketserver
from quiz_core import QuizCore, SocketChannel, ConsoleChannel

DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 3030
DEFAULT_PROMPT = 'quiz > '


class QuizRequestHandler(socketserver.BaseRequestHandler):
    """One quiz session per connection"""

    def handle(self):
        logging.info('Connection from %s:%s', *self.client_address[:2])
        channel = SocketChannel(self.request, prompt=self.server.prompt)
        try:
            self.server.core.run_session(channel)
        finally:
            channel.close()
            logging.info('Connection closed %s:%s', *self.client_address[:2])


class QuizTCPServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address, core, prompt=DEFAULT_PROMPT):
        self.core = core
        self.prompt = prompt
        super().__init__(address, QuizRequestHandler)


class QuizServer:

    def __init__(self, config_filename):
        logging.info('Starting QuizServer')
        self._load_config(config_filename)
        config = {k:v for k,v in self._config.items() if k not in ('database', 'host', 'port', 'prompt')}
        self._core = QuizCore(self._config['database'], **config)
        self._address = (
            self._config.get('host', DEFAULT_HOST),
            int(self._config.get('port', DEFAULT_PORT))
        )
        self._prompt = self._config.get('prompt', DEFAULT_PROMPT)

    def _load_config(self, filename):
        with open(filename, 'r') as fp:
            self._config = json.load(fp)

    @property
    def core(self):
        return self._core

    def serve_forever(self):
        with QuizTCPServer(self._address, self._core, self._prompt) as server:
            logging.info('Listening on %s:%s', *server.server_address[:2])
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                logging.info('Stopping QuizServer')

    def run_local(self):
        """Single session on this terminal"""
        self._core.run_session(ConsoleChannel(prompt=self._prompt))
