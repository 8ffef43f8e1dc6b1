import re

from sqlalchemy import event
from sqlalchemy.orm import Query
from sqlalchemy.dialects import postgresql as pg


def stmt2sql(stmt) -> str:
    """ Render a statement as PostgreSQL, with parameter values put in place *unquoted*

        Only good for assertions: `a.title LIKE foo%`
    """
    compiled = stmt.compile(dialect=pg.dialect())
    return compiled.string % compiled.params


def q2sql(q: Query) -> str:
    """ Render a Query as PostgreSQL """
    return stmt2sql(q.statement)


class TestQueryStringsMixin:
    """ unittest mixin for assertions on SQL strings """

    def assertQuery(self, qs, *expected_pieces):
        """ Check that every piece is found in the query

            The order of columns and conditions is not always stable,
            so a query is tested piece by piece rather than as a whole.

            :param qs: Query | SQL string
            :param expected_pieces: substrings to look for. Trailing commas are ignored.
            :returns: the SQL string
        """
        if isinstance(qs, Query):
            qs = q2sql(qs)

        for piece in expected_pieces:
            self.assertIn(piece.strip().rstrip(','), qs, msg='\n' + qs)
        return qs

    def assertSelectedColumns(self, qs, *expected):
        """ Check the set of columns in the SELECT clause, ignoring their labels

            :param qs: Query | SQL string
            :param expected: column names, like 'a.id'
            :returns: the SQL string
        """
        if isinstance(qs, Query):
            qs = q2sql(qs)

        self.assertEqual(_selected_columns(qs), set(expected), msg='\n' + qs)
        return qs


def _selected_columns(qs: str) -> set:
    """ 'SELECT a.id AS a_id, a.uid AS a_uid FROM a' -> {'a.id', 'a.uid'} """
    m = re.match(r'^SELECT (.*?)\s+FROM', qs, re.DOTALL)
    if not m:
        return set()
    return set(re.findall(r'(\S+?)(?: AS \w+)?(?:,|$)', m.group(1)))


class QueryLogger(list):
    """ Collect the SQL statements executed on an engine, with their parameters

        Usage:

            with QueryLogger(engine) as ql:
                ...
            self.assertEqual(len(ql), 1)
    """

    def __init__(self, engine):
        super(QueryLogger, self).__init__()
        self.engine = engine

    def _after_cursor_execute(self, conn, cursor, statement, parameters, context, executemany):
        # SQLite uses positional parameters: keep them next to the statement
        self.append('{} -- {!r}'.format(statement, parameters))

    def print_log(self):
        for i, q in enumerate(self):
            print('=' * 5, ' Query #{}'.format(i))
            print(q)

    def _done(self):
        """ Called when logging stops """

    def __enter__(self):
        event.listen(self.engine, 'after_cursor_execute', self._after_cursor_execute)
        return self

    def __exit__(self, *exc):
        event.remove(self.engine, 'after_cursor_execute', self._after_cursor_execute)
        if exc != (None, None, None):
            self.print_log()
        self._done()
        return False


class ExpectedQueryCounter(QueryLogger):
    """ A QueryLogger that fails when the number of queries is not the expected one """

    def __init__(self, engine, expected_queries: int, comment: str):
        super(ExpectedQueryCounter, self).__init__(engine)
        self.expected_queries = expected_queries
        self.comment = comment

    def _done(self):
        if len(self) != self.expected_queries:
            self.print_log()
            raise AssertionError('{} (expected {} queries, actually had {})'
                                 .format(self.comment, self.expected_queries, len(self)))
