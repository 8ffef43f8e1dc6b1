import logging
from dataclasses import replace
from typing import List, Tuple

from sqlalchemy.orm import Query

from .handlers.limit import GridLimit
from .result import PaginationDescriptor
from .util.counting_query_wrapper import CountingQuery

logger = logging.getLogger(__name__)


class Pagination:
    """ Executes a finished query, one page of it

        Two strategies:

        * get(): counted. The total is counted with a window function in the same query: see CountingQuery
        * get_simple(): no count. One more row than the page size is fetched to tell whether there's a next page.
    """

    def __init__(self, query: Query, limit: GridLimit):
        """
        :param query: The query with all filters and sorting applied, but no limit
        :param limit: The limit handler that has received its input
        """
        self.query = query
        self.limit = limit

    def get(self) -> Tuple[List[object], PaginationDescriptor]:
        """ Fetch a page, and the total count """
        qc = CountingQuery(self.limit.alter_query(self.query))
        items = list(qc)
        total = qc.count

        logger.debug('Page %d of %d rows: %d rows fetched', self.limit.page, total, len(items))
        return items, PaginationDescriptor.counted(self.limit.page, self.limit.limit, total)

    def get_simple(self, with_count: bool = False) -> Tuple[List[object], PaginationDescriptor]:
        """ Fetch a page without counting

        :param with_count: Count the rows anyway, with a separate query
        """
        page_size = self.limit.limit
        items = list(self.limit.alter_query(self.query, extra_rows=1))
        has_more = len(items) > page_size
        items = items[:page_size]

        if with_count:
            total = self.query.order_by(None).count()
            pagination = replace(PaginationDescriptor.counted(self.limit.page, page_size, total),
                                 has_more=has_more, simple=True)
        else:
            pagination = PaginationDescriptor(page=self.limit.page, limit=page_size,
                                              has_more=has_more, simple=True)

        logger.debug('Simple page %d: %d rows fetched, has more: %s', self.limit.page, len(items), has_more)
        return items, pagination
