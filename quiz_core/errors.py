"""
Errors raised by quiz commands and the quiz database
"""


class QuizError(Exception):
    """Base for errors reported back to the user as an error line"""


class MissingParameter(QuizError):
    def __init__(self, name='id'):
        super().__init__(f'Missing parameter <{name}>.')


class NotANumber(QuizError):
    def __init__(self, value, name='id'):
        self.value = value
        super().__init__(f'The value of parameter <{name}> is not a number: {value!r}')


class NotFound(QuizError):
    def __init__(self, quiz_id):
        self.quiz_id = quiz_id
        super().__init__(f'There is no quiz with id={quiz_id}.')


class ValidationFailed(QuizError):
    """
    A quiz was rejected by the database.

    Attributes:
        messages (list of str): One message per failing field
    """

    def __init__(self, messages):
        self.messages = list(messages)
        super().__init__('; '.join(self.messages))


class StoreUnavailable(QuizError):
    pass
