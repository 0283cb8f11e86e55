"""
Module for QuizCore class
"""

import re
import logging

from tabulate import tabulate

from .channel import ChannelClosed, ConsoleChannel, PromptChannel, SocketChannel
from .errors import (
        MissingParameter,
        NotANumber,
        NotFound,
        QuizError,
        StoreUnavailable,
        ValidationFailed,
        )
from .game import GameState, QuizGame, answers_match
from .quiz_database import QuizDatabase

REG_LEADING_INT = r'^\s*([+-]?)(?:0[xX]([0-9a-fA-F]*)|([0-9]+))'

DEFAULT_SEED_QUIZZES = [
        {'question': 'Capital of Italy', 'answer': 'Rome'},
        {'question': 'Capital of France', 'answer': 'Paris'},
        {'question': 'Capital of Spain', 'answer': 'Madrid'},
        {'question': 'Capital of Portugal', 'answer': 'Lisbon'},
        ]

SUGGESTED_CONFIGS = [
        ('credits', ['Quiz Manager developers']),
        ('seed_quizzes', DEFAULT_SEED_QUIZZES),
        ]


def validate_id(token):
    """
    Parse a quiz id argument

    Leading whitespace and trailing garbage are ignored, so '12abc' is 12.
    A 0x prefix reads the digits as hex, so '0x10' is 16.

    Raises:
        MissingParameter: No token given
        NotANumber: Token doesn't start with an integer
    """

    if token is None:
        raise MissingParameter('id')

    match = re.match(REG_LEADING_INT, token)
    if match is None:
        raise NotANumber(token, 'id')

    sign = -1 if match[1] == '-' else 1

    if match[2] is not None:
        if match[2] == '':
            raise NotANumber(token, 'id')
        return sign * int(match[2], 16)

    return sign * int(match[3])


class QuizCore:
    """
    Quiz commands bound to a quiz database

    One QuizCore is shared by every session. A session is a PromptChannel
    driven by run_session() on its own thread.
    """

    def __init__(self, database_path, rng=None, **kwargs):
        logging.info('Starting Quiz Core')
        self._config = kwargs
        self._check_config()

        self._rng = rng
        self._db = QuizDatabase(database_path)
        self._seed_quizzes(self._config['seed_quizzes'])

    @property
    def database(self):
        return self._db

    def run_session(self, channel:PromptChannel):
        """
        Read and handle commands until quit or until the channel closes

        Arguments:
            channel (PromptChannel): The session's channel
        """

        logging.info('Session started')
        try:
            channel.prompt()
        except ChannelClosed:
            return

        while not channel.closed:
            line = channel.read_command()
            if line is None:
                break
            self.handle_line(channel, line)

        logging.info('Session ended')

    def handle_line(self, channel:PromptChannel, line:str):
        """
        Handle one command line. Errors are reported on the channel, the next
        prompt is written unless the command ended the session.
        """

        parts = line.split()

        try:
            if parts:
                self._handle_command(channel, parts[0].lower(), parts[1] if len(parts) > 1 else None)

            if not channel.closed:
                channel.prompt()

        except ChannelClosed:
            logging.info('Channel closed while handling %r', line)

    def _handle_command(self, channel, name, argument):
        command = self._find_command(name)

        if command is None:
            self.error(channel, f'Unknown command: "{name}".')
            channel.emit('Use "help" to see the available commands.')
            return

        logging.info('Command: %s %s', command[0][-1], argument or '')

        try:
            command[3](channel, argument)

        except ValidationFailed as ex:
            logging.info('Command %s rejected: %s', name, ex)
            self.error(channel, 'The quiz is invalid:')
            for message in ex.messages:
                self.error(channel, message)

        except QuizError as ex:
            logging.info('Command %s failed: %s', name, ex)
            self.error(channel, str(ex))

        except ChannelClosed:
            raise

        except Exception as ex:
            logging.exception(ex)
            self.error(channel, f'Unexpected error: {ex}')

    def error(self, channel, text):
        channel.emit(f'Error: {text}')

    def _find_command(self, name):
        for command in self._commands():
            if name in command[0]:
                return command

        return None

    def _check_config(self):
        for suggested in SUGGESTED_CONFIGS:
            key = suggested[0]
            default = suggested[1]
            if key not in self._config:
                logging.warning(
                        '%s not supplied to QuizCore, defaulting to %s',
                        key,
                        repr(default)
                        )
                self._config[key] = default

    def _seed_quizzes(self, quizzes):
        if not quizzes or self._db.count() > 0:
            return

        for quiz in quizzes:
            self._db.create(dict(quiz))

        logging.info('Seeded %s quizzes', len(quizzes))

    def _commands(self):
        return (
            (
                ['h', 'help'],
                '',
                'Show this help',
                self._command_help
            ),
            (
                ['list'],
                '',
                'List the existing quizzes',
                self._command_list
            ),
            (
                ['show'],
                '<id>',
                'Show the question and answer of a quiz',
                self._command_show
            ),
            (
                ['add'],
                '',
                'Add a new quiz interactively',
                self._command_add
            ),
            (
                ['delete'],
                '<id>',
                'Delete a quiz',
                self._command_delete
            ),
            (
                ['edit'],
                '<id>',
                'Edit a quiz',
                self._command_edit
            ),
            (
                ['test'],
                '<id>',
                'Answer a quiz',
                self._command_test
            ),
            (
                ['p', 'play'],
                '',
                'Play all quizzes in random order',
                self._command_play
            ),
            (
                ['credits'],
                '',
                'Credits',
                self._command_credits
            ),
            (
                ['q', 'quit'],
                '',
                'Quit',
                self._command_quit
            ),
        )

    @staticmethod
    def _ask(channel, text, prefill=None):
        return channel.request_line(text, prefill=prefill).strip()

    def _get_quiz(self, argument):
        quiz_id = validate_id(argument)
        quiz = self._db.find_by_id(quiz_id)

        if quiz is None:
            raise NotFound(quiz_id)

        return quiz

    @staticmethod
    def _format_quiz(quiz):
        return f"{quiz['question']} => {quiz['answer']}"

    def _command_help(self, channel, _argument):
        rows = [['|'.join(c[0]) + (' ' + c[1] if c[1] else ''), c[2]] for c in self._commands()]
        channel.emit('Commands:')
        channel.emit(tabulate(rows, tablefmt='plain'))

    def _command_list(self, channel, _argument):
        for quiz in self._db.find_all():
            channel.emit(f" [{quiz['id']}]: {quiz['question']}")

    def _command_show(self, channel, argument):
        quiz = self._get_quiz(argument)
        channel.emit(f" [{quiz['id']}]: {self._format_quiz(quiz)}")

    def _command_add(self, channel, _argument):
        question = self._ask(channel, ' Enter a question: ')
        answer = self._ask(channel, ' Enter the answer: ')

        quiz = self._db.create({'question': question, 'answer': answer})
        channel.emit(f" [Added {quiz['id']}]: {self._format_quiz(quiz)}")

    def _command_delete(self, channel, argument):
        self._db.destroy(validate_id(argument))

    def _command_edit(self, channel, argument):
        quiz = self._get_quiz(argument)

        question = self._ask(channel, ' Enter the question: ', prefill=quiz['question'])
        answer = self._ask(channel, ' Enter the answer: ', prefill=quiz['answer'])

        quiz['question'] = question
        quiz['answer'] = answer
        quiz = self._db.save(quiz)
        channel.emit(f" Quiz {quiz['id']} changed to: {self._format_quiz(quiz)}")

    def _command_test(self, channel, argument):
        quiz = self._get_quiz(argument)
        response = self._ask(channel, f"{quiz['question']}? ")

        if answers_match(response, quiz['answer']):
            channel.emit('Correct')
        else:
            channel.emit('Incorrect')

    def _command_play(self, channel, _argument):
        game = QuizGame(self._db.find_all(), self._rng)

        def ask(quiz):
            return self._ask(channel, f"{quiz['question']}? ")

        def on_result(_quiz, correct):
            if correct:
                channel.emit(f'CORRECT - {game.score} right so far.')
            else:
                channel.emit('INCORRECT.')

        state = game.play(ask, on_result)

        if state is GameState.WON:
            channel.emit('Nothing left to ask.')

        channel.emit(f'Game over. Score: {game.score}')
        channel.emit(tabulate([[f'SCORE {game.score}']], tablefmt='grid'))

    def _command_credits(self, channel, _argument):
        channel.emit('Authors:')
        for author in self._config['credits']:
            channel.emit(f' {author}')

    def _command_quit(self, channel, _argument):
        channel.emit('Bye!')
        channel.close()
