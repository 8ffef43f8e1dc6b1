"""
The GridView turns request parameters into a query in a few steps.
Every step is implemented by a handler:

* `filter`: [Filters](#filters): scopes, or column conditions, for every unrecognized request key
* `search`: [Search](#search): free-text search across columns
* `sort`: [Sorting](#sorting): sort by one column
* `limit`: [Pagination](#pagination): page size and page number

They are applied in this order: filters, search, sort, and then the limit.
The order matters: a scope used as a filter may join other tables, and everything after it
has to work with that.
"""

from .base import GridHandlerBase
from .filter import GridScopeFilter, FILTER_OPERATORS, lookup_operator, is_filter_value
from .search import GridSearch, is_non_latin
from .sort import GridSort, ASC, DESC
from .limit import GridLimit
