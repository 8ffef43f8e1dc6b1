"""
### Filters

Every request parameter that the grid does not recognize is a filter:

```
GET /articles?theme=sci-fi&uid=0
```

For every such key:

1. If the model has a scope with this name (camelCased: `author_name` -> `authorName`),
   the scope is given the value and builds the condition itself.
2. Otherwise, if the key is a real column, the column is compared to the value:
   `theme LIKE 'sci-fi%'` (with the default `filter_operator='like'` and `filter_after_value='%'`).
   With `like`, `ilike`, `not like`, a column that is not a string is CAST to one: `CAST(uid AS VARCHAR) LIKE '0%'`.
3. Otherwise, the key is ignored.

Empty values are ignored, but a zero is not: `uid=0` is a valid filter.
"""

import logging

from sqlalchemy import String, cast, not_

from .base import GridHandlerBase
from ..exc import InvalidQueryError

logger = logging.getLogger(__name__)


# Operators that can be used to compare a column to a value
# operator => lambda column, value
FILTER_OPERATORS = {
    'like': lambda col, val: col.like(val),
    'ilike': lambda col, val: col.ilike(val),
    'not like': lambda col, val: not_(col.like(val)),
    '=': lambda col, val: col == val,
    '!=': lambda col, val: col != val,
    '<>': lambda col, val: col != val,
    '<': lambda col, val: col < val,
    '<=': lambda col, val: col <= val,
    '>': lambda col, val: col > val,
    '>=': lambda col, val: col >= val,
}

# Operators that compare text: other column types are CAST to a string first
TEXT_OPERATORS = frozenset(('like', 'ilike', 'not like'))


def lookup_operator(operator: str):
    """ Get the lambda for an operator

    :raises InvalidQueryError: unknown operator
    """
    try:
        return FILTER_OPERATORS[operator.strip().lower()]
    except (KeyError, AttributeError):
        raise InvalidQueryError('Unsupported filter operator: {!r}'.format(operator))


class FilterCriterionMixin:
    """ Builds `column <operator> value` conditions, with the value decorated by the configured affixes """

    def _init_criterion(self, filter_operator, filter_before_value, filter_after_value):
        self.filter_operator = filter_operator
        self.filter_before_value = filter_before_value or ''
        self.filter_after_value = filter_after_value or ''
        self._operator_lambda = lookup_operator(filter_operator)
        self._compares_text = filter_operator.strip().lower() in TEXT_OPERATORS

    def decorate_value(self, value: str) -> str:
        """ Wrap the value: e.g. 'foo' -> 'foo%' """
        return '{}{}{}'.format(self.filter_before_value, value, self.filter_after_value)

    def compile_criterion(self, column_name: str, value: str):
        """ Build the condition for a real column

        :param column_name: Name of a column that has passed bags.has_column()
        :param value: The raw value; decorated here
        """
        column = self.column(column_name)
        # `integer LIKE text` is an error in PostgreSQL
        if self._compares_text and not isinstance(column.type, String):
            column = cast(column, String)
        return self._operator_lambda(column, self.decorate_value(value))


class GridScopeFilter(FilterCriterionMixin, GridHandlerBase):
    """ Filters: scopes, or column conditions

        Input: dict of filter candidates {key: value}
    """

    handler_name = 'filter'

    def __init__(self, model, bags,
                 filter_operator='like', filter_before_value='', filter_after_value='%'):
        """ Init the filter

        :param filter_operator: The operator to compare columns with values
        :param filter_before_value: Prepended to every value
        :param filter_after_value: Appended to every value
        :raises InvalidQueryError: unknown operator
        """
        super(GridScopeFilter, self).__init__(model, bags)
        self._init_criterion(filter_operator, filter_before_value, filter_after_value)

        # On input
        #: [(key, value)]: filters handed to scopes
        self.scoped = []
        #: [(key, value)]: filters applied to columns
        self.filtered = []
        #: [key]: keys that are neither scopes nor columns
        self.ignored = []

    def input(self, candidates):
        super(GridScopeFilter, self).input(dict(candidates or {}))

        for key, value in self.input_value.items():
            if not is_filter_value(value):
                continue
            value = str(int(value)) if isinstance(value, bool) else str(value)

            if self.bags.get_scope(key) is not None:
                self.scoped.append((key, value))
            elif self.bags.has_column(key):
                self.filtered.append((key, value.strip()))
            else:
                self.ignored.append(key)

        if self.ignored:
            logger.debug('%s: ignoring unknown filters %r', self.bags.model_name, self.ignored)
        return self

    def alter_query(self, query):
        # Scopes
        for key, value in self.scoped:
            logger.debug('%s: filter %r handled by scope %r', self.bags.model_name, key, self.bags.get_scope(key))
            query = self.bags.get_scope(key)(query, value)

        # Columns
        for key, value in self.filtered:
            query = query.filter(self.compile_criterion(key, value))

        # Select the model's own columns explicitly: scopes may have joined other tables
        if self.input_value:
            query = select_model_columns(query, self.model)

        return query

    def get_final_input_value(self):
        return dict(self.scoped + self.filtered)


def is_filter_value(value) -> bool:
    """ Is the value worth filtering with?

        Empty values are skipped, but a zero is a legitimate value: 0, '0'
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value == 0:
        return True
    if isinstance(value, str) and value == '0':
        return True
    if not isinstance(value, (str, int, float)):
        return False
    return bool(value)


def select_model_columns(query, model):
    """ Make sure the model is the first thing selected, keeping any other selected columns after it """
    extra = [d['expr']
             for d in query.column_descriptions
             if d['expr'] is not model]
    return query.with_entities(model, *extra)
