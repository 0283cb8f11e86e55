"""
Module for the QuizGame play loop
"""

import random
import logging
from enum import Enum


class GameState(Enum):
    PLAYING = 'playing'
    WON = 'won'
    LOST = 'lost'


def answers_match(given, expected):
    """Exact match ignoring surrounding whitespace and case"""
    return given.strip().lower() == expected.strip().lower()


class QuizGame:
    """
    One play session: every quiz asked at most once, in random order, until
    the first wrong answer or until none are left.

    Arguments:
        quizzes (iterable of dict): Quizzes with question and answer
        rng (random.Random): Random source, the random module by default
    """

    def __init__(self, quizzes, rng=None):
        self._pool = list(quizzes)
        self._rng = rng or random
        self.score = 0
        self.asked = []
        self.state = GameState.PLAYING

    @property
    def remaining(self):
        return len(self._pool)

    def draw(self):
        """
        Remove one quiz from the pool, picked uniformly among those left

        Returns:
            dict or None: The quiz to ask, None once the game is won
        """

        if self.state is not GameState.PLAYING:
            return None

        if not self._pool:
            self.state = GameState.WON
            return None

        quiz = self._pool.pop(self._rng.randrange(len(self._pool)))
        self.asked.append(quiz)
        return quiz

    def answer(self, quiz, response):
        """
        Grade a response to the quiz last drawn

        Returns:
            bool: True if correct
        """

        if answers_match(response, quiz['answer']):
            self.score += 1
            return True

        self.state = GameState.LOST
        return False

    def play(self, ask, on_result=None):
        """
        Run the game to the end

        Arguments:
            ask (callable): Called with a quiz, returns the player's response
            on_result (callable): Called with (quiz, correct) after each answer

        Returns:
            GameState: WON or LOST
        """

        quiz = self.draw()
        while quiz is not None:
            correct = self.answer(quiz, ask(quiz))
            if on_result is not None:
                on_result(quiz, correct)
            quiz = self.draw()

        logging.info('Game %s with score %s', self.state.value, self.score)
        return self.state
