"""
Module for QuizDatabase class
"""

import re
import logging
import sqlite3
from functools import wraps
from pathlib import Path
from threading import Lock

from .errors import StoreUnavailable, ValidationFailed

REG_QUERIES = r'(?i)^\s*--\s*name\s*:\s*(\S+)\s*\n([\S\s]+?)(?=--name|\Z)'
QUERIES_FILE = (Path(__file__).parent / 'queries.sql').resolve()
SQLITE_MIN_INT = -2 ** 63
SQLITE_MAX_INT = 2 ** 63 - 1


def _store_errors(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except sqlite3.Error as ex:
            logging.exception(ex)
            raise StoreUnavailable(f'Quiz database error: {ex}') from ex

    return wrapper


class QuizDatabase:
    """
    Quiz record store

    Every query runs under a single lock so sessions on different threads can
    share one connection.
    """

    def __init__(self, db_path):
        self._queries = self._load_queries(QUERIES_FILE)
        self._lock = Lock()
        self._connection = sqlite3.connect(db_path, check_same_thread=False)
        self._create_tables()

    def _create_tables(self):
        for query in self._queries:
            if query.startswith('create_') and query.endswith('_table'):
                self.execute(query, auto_commit = True)

    def _do_execute(self, query_name, params = None):
        if params is None:
            params = ()

        cursor = self._connection.cursor()
        query = self._queries[query_name]
        cursor.execute(query, params)

        return cursor

    def execute(self, query_name, params = None, auto_commit = False):
        with self._lock:
            cursor = self._do_execute(query_name, params)

            if auto_commit:
                self._connection.commit()

            return cursor

    def commit(self):
        with self._lock:
            self._connection.commit()

    def close(self):
        with self._lock:
            self._connection.close()

    def select_iter(self, query_name, params = None, as_map = False):
        with self._lock:
            cursor = self._do_execute(query_name, params)
            row = cursor.fetchone()

            while row is not None:
                if as_map:
                    row = self._row_as_map(cursor, row)

                yield row
                row = cursor.fetchone()

    def select_one(self, query_name, params = None, as_map = False):
        with self._lock:
            cursor = self._do_execute(query_name, params)
            row = cursor.fetchone()

            if as_map:
                row = self._row_as_map(cursor, row)

            return row

    @_store_errors
    def count(self):
        return self.select_one('count_quizzes')[0]

    @_store_errors
    def find_all(self):
        """
        Returns:
            list of dict: Every quiz ordered by id
        """

        return list(self.select_iter('get_all_quizzes', as_map=True))

    @_store_errors
    def find_by_id(self, quiz_id):
        """
        Returns:
            dict or None: The quiz with the given id
        """

        if not SQLITE_MIN_INT <= quiz_id <= SQLITE_MAX_INT:
            return None

        return self.select_one('get_quiz', {'id': quiz_id}, as_map=True)

    @_store_errors
    def create(self, quiz):
        """
        Validate and insert a new quiz

        Arguments:
            quiz (dict): question and answer

        Returns:
            dict: The stored quiz including its new id
        """

        quiz = self._validated(quiz)
        cursor = self.execute('add_quiz', quiz, auto_commit=True)
        quiz['id'] = cursor.lastrowid
        logging.info('Quiz created id: %s', quiz['id'])
        return quiz

    @_store_errors
    def save(self, quiz):
        """
        Validate and write back a quiz previously read from the database
        """

        quiz.update(self._validated(quiz))
        self.execute('update_quiz', quiz, auto_commit=True)
        logging.info('Quiz changed id: %s', quiz['id'])
        return quiz

    @_store_errors
    def destroy(self, quiz_id):
        """
        Delete a quiz by id. Deleting an id that does not exist does nothing.

        Returns:
            int: Number of deleted rows
        """

        if not SQLITE_MIN_INT <= quiz_id <= SQLITE_MAX_INT:
            logging.info('Quiz id out of range, nothing deleted: %s', quiz_id)
            return 0

        cursor = self.execute('delete_quiz', {'id': quiz_id}, auto_commit=True)
        logging.info('Quiz deleted id: %s (%s rows)', quiz_id, cursor.rowcount)
        return cursor.rowcount

    @staticmethod
    def _validated(quiz):
        messages = []
        cleaned = {}

        for field in ('question', 'answer'):
            value = quiz.get(field)
            value = value.strip() if isinstance(value, str) else ''
            if value == '':
                messages.append(f'{field} must not be empty.')
            cleaned[field] = value

        if messages:
            raise ValidationFailed(messages)

        return cleaned

    @staticmethod
    def _row_as_map(cursor, row):
        if row is None:
            return None
        return {k[0]:row[i] for i,k in enumerate(cursor.description)}

    @staticmethod
    def _load_queries(filename):
        queries = {}

        with open(filename, 'r', encoding='utf-8') as file_pointer:
            query_text = file_pointer.read()

        matches = re.finditer(REG_QUERIES, query_text, flags = re.MULTILINE)

        for match in matches:
            name = match[1]
            query = match[2]
            queries[name] = query

        return queries
