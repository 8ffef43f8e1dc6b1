import logging
from collections import OrderedDict
from typing import Any, Callable, List, Mapping, Union

from sqlalchemy.engine import Row
from sqlalchemy.orm import Query

logger = logging.getLogger(__name__)


class ExportData:
    """ Export the whole result set: every filtered and sorted row, no pagination

        The export field map is independent from the grid columns:

            {
                'ID': 'id',                       # plain attribute
                'Author': 'user.name',            # dot-path through relationships
                0: 'user.articles.title',         # collections are joined with ', '; the label is the path
                'Name': lambda a: a.title.upper() # computed
            }
    """

    #: Separator for values collected from a related collection
    COLLECTION_SEPARATOR = ', '

    def fetch(self, query: Query, fields: Mapping[Any, Union[str, Callable]]) -> List[dict]:
        """ Execute the query and extract the fields from every row

        :param query: The query with filters and sorting, but no limit
        :param fields: The export field map
        """
        fields = OrderedDict((_label(label, source), source)
                             for label, source in fields.items())

        rows = [OrderedDict((label, self.extract(entity_of(row), source))
                            for label, source in fields.items())
                for row in query.limit(None).offset(None)]

        logger.debug('Exported %d rows, %d fields', len(rows), len(fields))
        return rows

    def extract(self, instance, source: Union[str, Callable]):
        """ Get one value out of an instance """
        if callable(source):
            return source(instance)
        return self._follow_path(instance, source.split('.'))

    def _follow_path(self, value, path):
        for i, name in enumerate(path):
            if value is None:
                return None
            if _is_collection(value):
                values = [self._follow_path(item, path[i:]) for item in value]
                return self.COLLECTION_SEPARATOR.join(str(v) for v in values if v is not None)
            value = getattr(value, name, None)

        if _is_collection(value):
            return self.COLLECTION_SEPARATOR.join(str(v) for v in value if v is not None)
        return value


def entity_of(row):
    """ The model instance of a result row: queries that select more than the model give tuples """
    if isinstance(row, (Row, tuple)):
        return row[0]
    return row


def _label(label, source):
    # List-style field maps have integer labels: use the path
    if isinstance(label, int) and isinstance(source, str):
        return source
    return label


def _is_collection(value) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))
