"""
### Pagination

Pagination corresponds to the `LIMIT .. OFFSET ..` part of an SQL query.

```
GET /articles?page=3&count=25
```

* `page`: the page number, starting with 1. A page too far to OFFSET to becomes the farthest page possible
* `count`: the page size. It has to be one of the allowed `counts`;
  when it is not given, the first allowed count is used;
  when it is not allowed, the page size is 10.
"""

import logging
from collections import OrderedDict

from .base import GridHandlerBase
from ..util.settings_dict import DEFAULT_COUNTS, DEFAULT_LIMIT

logger = logging.getLogger(__name__)


#: The largest OFFSET + LIMIT a database takes: a signed 64-bit integer
MAX_OFFSET = 2 ** 63 - 1


class GridLimit(GridHandlerBase):
    """ Page size and page number

        Input: (page, requested count)
    """

    handler_name = 'limit'

    def __init__(self, model, bags, counts=DEFAULT_COUNTS):
        """ Init a limit

        :param counts: The allowed page sizes: {count: label}. The first one is the default.
        """
        super(GridLimit, self).__init__(model, bags)

        # Config
        self.counts = OrderedDict(counts or ())

        # On input
        self.page = 1
        self.limit = None

    def resolve_limit(self, requested_count=None) -> int:
        """ Get the page size

            No count requested: the first allowed one.
            A count that is not allowed: DEFAULT_LIMIT, whatever `counts` are.
        """
        count = requested_count if requested_count is not None else next(iter(self.counts), None)
        count = _to_int(count)

        if not _is_allowed(count, self.counts):
            logger.debug('%s: count %r is not allowed, using %r', self.bags.model_name, requested_count, DEFAULT_LIMIT)
            count = DEFAULT_LIMIT
        return count

    def input(self, page=1, count=None):
        super(GridLimit, self).input((page, count))
        self.page = page if isinstance(page, int) and page >= 1 else 1
        self.limit = self.resolve_limit(count)

        # A page too far: the last page the database can still skip to
        if self.page > self.max_page:
            logger.debug('%s: page %r is too far, using %r', self.bags.model_name, self.page, self.max_page)
            self.page = self.max_page
        return self

    @property
    def max_page(self) -> int:
        # Room for the page itself, and the extra row that looks beyond it
        limit = max(self.limit, 1)
        return (MAX_OFFSET - limit - 1) // limit + 1

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def alter_query(self, query, extra_rows=0):
        """ Apply offset() and limit() to the query

        :param extra_rows: Fetch more rows than the page has: used to look beyond the page
        """
        if self.offset:
            query = query.offset(self.offset)
        return query.limit(self.limit + extra_rows)

    def get_final_input_value(self):
        return dict(page=self.page, limit=self.limit)


def _is_allowed(count, counts) -> bool:
    if isinstance(count, bool):
        return False
    try:
        return count in counts
    except TypeError:  # unhashable
        return False


def _to_int(value):
    """ Make an int out of a request value, if it looks like one. Otherwise, leave it as is """
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return value
    return value
