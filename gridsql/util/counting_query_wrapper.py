import itertools

from sqlalchemy import func
from sqlalchemy.orm import Query


class CountingQuery:
    """ A page of rows, and the total number of rows, in one round-trip

        The page query gets one more column: a window function that counts every row
        the WHERE clause matches, regardless of LIMIT and OFFSET:

            SELECT a.*, count(*) OVER() AS anon_1 FROM a ... LIMIT 10 OFFSET 20

        Rows are given back without that column, so the wrapper reads like the query itself:

            ```python
            qc = CountingQuery(ssn.query(Article).order_by(Article.id).limit(10).offset(20))

            rows = list(qc)  # Article objects
            qc.count  # 127: one SQL query only
            ```

        There's one case the window can't handle: a page past the end has no rows to carry the count.
        Then, a separate COUNT query is made.
    """
    __slots__ = ('_page_query', '_counting_query',
                 '_total', '_rows', '_strip_count')

    def __init__(self, query: Query):
        #: The page query, as given
        self._page_query = query

        #: The same query with the counting window
        self._counting_query = query.add_columns(func.count().over())

        #: The total; `None` until the query is executed
        self._total = None

        #: Iterator over the result rows; `None` until the query is executed
        self._rows = None

        # Single entity: (entity, count) -> entity; otherwise: (a, b, count) -> (a, b)
        self._strip_count = _first_item if query.is_single_entity else _all_but_last_item

    @property
    def count(self) -> int:
        """ The total number of rows, ignoring LIMIT and OFFSET. Executes the query if necessary. """
        if self._total is None:
            self._execute()
        return self._total

    def __iter__(self):
        if self._rows is None:
            self._execute()
        return self._rows

    def _execute(self):
        """ Execute the query; take the count from the first row """
        result = iter(self._counting_query)

        try:
            first_row = next(result)
        except StopIteration:
            self._rows = iter(())
            # With an OFFSET, the rows may just be all skipped. Without one, there really are none.
            self._total = self._count_separately() if self._has_offset() else 0
            return

        self._total = first_row[-1]
        self._rows = map(self._strip_count, itertools.chain([first_row], result))

    def _count_separately(self) -> int:
        """ COUNT the rows with another query: no eager loads, no LIMIT, no OFFSET """
        return self._page_query \
            .enable_eagerloads(False) \
            .limit(None).offset(None) \
            .count()

    def _has_offset(self) -> bool:
        return self._page_query._offset_clause is not None  # protected, but there's no public way


def _first_item(row):
    return row[0]


def _all_but_last_item(row):
    return row[:-1]
