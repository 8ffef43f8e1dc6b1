"""
### Request Parameters

A grid is controlled by a flat mapping of request parameters, e.g. the query string:

```
GET /articles?page=2&count=25&sort=title&by=desc&search=python&theme=sci-fi
```

Six keys are recognized by the grid itself:

* `page`: the page number, starting with 1
* `count`: the page size; must be one of the allowed counts
* `sort`: the column to sort by
* `by`: sort direction: `asc` or `desc`
* `search`: free text to search for
* `export`: export the whole (filtered, sorted) result set

Every other key is a filter: `theme=sci-fi` filters by the `theme` column,
or calls the model's `theme` scope, if it has one.
"""

from typing import Any, Mapping


#: The keys recognized by the grid, in the order they are read
RECOGNIZED_KEYS = ('page', 'by', 'search', 'count', 'sort', 'export')

#: String values of the `export` flag that mean "no"
_FALSE_STRINGS = frozenset(('', '0', 'false', 'off', 'no'))


class RequestParameters:
    """ Request parameters, read in two phases

        1. The recognized keys are pulled out of the request: they are removed as they are read.
           This happens right away, in __init__(), exactly once.
        2. Whatever remains is the set of filter candidates: remaining()

        Because the first phase is over before anyone can get hold of the object,
        a recognized key can never be mistaken for a filter.

        Attrs:
            raw (dict): the request as it came, untouched. Echoed back with the result.
            page (int): page number, >= 1
            by (str | None): sort direction, as given; `None` when absent
            search (str): search text, stripped; '' when absent
            count (Any): the requested page size, as given; `None` when absent
            sort (str | None): the column to sort by, as given; `None` when absent
            export (bool): the export flag
    """

    __slots__ = ('raw', '_params', 'page', 'by', 'search', 'count', 'sort', 'export')

    def __init__(self, params: Mapping[str, Any] = None):
        #: The request as it came
        self.raw = dict(params or {})

        # The working copy: recognized keys are removed from it
        self._params = dict(self.raw)

        # Phase one: pull all recognized keys, in this order
        self.page = _parse_page(self.pull('page', 1))
        self.by = self.pull('by', None)
        self.search = _parse_str(self.pull('search', ''))
        self.count = self.pull('count', None)
        self.sort = self.pull('sort', None)
        self.export = _parse_bool(self.pull('export', False))

    def pull(self, key: str, default=None):
        """ Remove and return `key`; when missing, return `default` and change nothing """
        return self._params.pop(key, default)

    def has(self, key: str) -> bool:
        """ Is the key still there (i.e. not pulled yet)? """
        return key in self._params

    def remaining(self) -> dict:
        """ Phase two: the keys that were never pulled. These are the filter candidates. """
        return dict(self._params)

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self.raw)


def _parse_page(value) -> int:
    """ Page number: an integer >= 1. Anything else is page 1 """
    try:
        page = int(value)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def _parse_str(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


def _parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)
