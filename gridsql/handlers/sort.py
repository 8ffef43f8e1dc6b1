"""
### Sorting

Sorting corresponds to the `ORDER BY` part of an SQL query.

```
GET /articles?sort=title&by=desc
```

* `sort`: the column to sort by. When it's not a real column of the model,
  the default sort column is used instead: this is not an error.
* `by`: the direction: `asc` or `desc`.
"""

import logging

from .base import GridHandlerBase
from ..exc import InvalidQueryError

logger = logging.getLogger(__name__)


ASC = 'asc'
DESC = 'desc'


# Directions the query builder understands
# direction => lambda column
_directions = {
    ASC: lambda col: col.asc(),
    DESC: lambda col: col.desc(),
}


class GridSort(GridHandlerBase):
    """ Sorting by one column

        Input: (column name, direction)
    """

    handler_name = 'sort'

    def __init__(self, model, bags, sort_name_default='id'):
        """ Init sorting

        :param sort_name_default: The column to sort by when the requested one is not valid
        """
        super(GridSort, self).__init__(model, bags)
        self.sort_name_default = sort_name_default

        # On input
        #: The column actually used
        self.sort_name = None
        #: The direction, as given
        self.direction = None

    def input(self, sort_name, direction=ASC):
        super(GridSort, self).input((sort_name, direction))
        self.direction = direction

        if sort_name and not self.bags.has_column(sort_name):
            logger.debug('%s: cannot sort by %r, using %r',
                         self.bags.model_name, sort_name, self.sort_name_default)
            sort_name = self.sort_name_default
            # A model without the default column is not sorted at all
            if not self.bags.has_column(sort_name):
                sort_name = None
        self.sort_name = sort_name or None
        return self

    def compile_columns(self):
        """ Get the ORDER BY expressions

        :raises InvalidQueryError: the direction is not understood
        """
        if not self.sort_name:
            return []

        direction = self.direction.lower() if isinstance(self.direction, str) else self.direction
        try:
            apply_direction = _directions[direction]
        except (KeyError, TypeError):
            raise InvalidQueryError('Sort direction can be either "asc" or "desc"; {!r} given'.format(self.direction))

        return [apply_direction(self.column(self.sort_name))]

    def alter_query(self, query):
        columns = self.compile_columns()
        if not columns:
            return query  # short-circuit
        return query.order_by(*columns)

    def get_final_input_value(self):
        return self.sort_name
