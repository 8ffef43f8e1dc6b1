"""
### Search

Free-text search across columns:

```
GET /articles?search=python
```

The search condition is an OR group that is AND-ed with all the other filters:

* With an explicit field, only that field is searched (if it's a real column).
* In strict mode (default), only the fields the model declares with `grid_search_fields()` are searched.
* In loose mode, all columns are searched.
  When the search text has no latin letters or digits at all (e.g. it's all Cyrillic),
  columns like `id` and `created_at` are skipped: they can never match such text.
  Loose search looks into every column of the model, `grid_hidden` ones included:
  a caller can tell hidden values apart by their prefix. Use strict mode for models with secrets.
* Columns that are not strings are CAST to strings for `like`-style operators.
"""

import logging
import re

from sqlalchemy import or_

from .base import GridHandlerBase
from .filter import FilterCriterionMixin
from ..util.settings_dict import NON_LATIN_EXCLUDED_COLUMNS

logger = logging.getLogger(__name__)


_ascii_word_char = re.compile(r'\w', re.ASCII)


def is_non_latin(text: str) -> bool:
    """ Does the text have no ASCII word characters at all? """
    return _ascii_word_char.search(text) is None


class GridSearch(FilterCriterionMixin, GridHandlerBase):
    """ Free-text search

        Input: the search text; optionally, the field to search in
    """

    handler_name = 'search'

    def __init__(self, model, bags,
                 strict=True,
                 filter_operator='like', filter_before_value='', filter_after_value='%',
                 non_latin_excluded_columns=NON_LATIN_EXCLUDED_COLUMNS):
        """ Init the search

        :param strict: Only search the fields from the model's `grid_search_fields()`
        :param filter_operator: The operator to compare columns with the search text
        :param filter_before_value: Prepended to the search text
        :param filter_after_value: Appended to the search text
        :param non_latin_excluded_columns: Columns a loose search skips when the text has no latin characters
        """
        super(GridSearch, self).__init__(model, bags)
        self._init_criterion(filter_operator, filter_before_value, filter_after_value)
        self.strict = strict
        self.non_latin_excluded_columns = frozenset(non_latin_excluded_columns or ())

        # On input
        #: The search text
        self.search = ''
        #: The explicit field, if given and valid
        self.field = None
        #: The list of columns the search is going to look into
        self.search_columns = []

    def input(self, search, field=None):
        super(GridSearch, self).input(search)
        self.search = (search or '').strip()
        if not self.search:
            return self

        # Explicit field: only if it's a real column. Otherwise, fall through.
        if field and self.bags.has_column(field):
            self.field = field
            self.search_columns = [field]
        elif self.strict:
            self.search_columns = self._strict_columns()
        else:
            self.search_columns = self._loose_columns()

        return self

    def _strict_columns(self):
        """ Strict mode: the declared searchable fields that are real columns """
        return [name
                for name in self.bags.search_fields or ()
                if self.bags.has_column(name)]

    def _loose_columns(self):
        """ Loose mode: every column, except for those useless for non-latin text """
        names = self.bags.columns.ordered_names
        if is_non_latin(self.search):
            skipped = [name for name in names if name in self.non_latin_excluded_columns]
            if skipped:
                logger.debug('%s: non-latin search %r skips columns %r', self.bags.model_name, self.search, skipped)
            names = [name for name in names if name not in self.non_latin_excluded_columns]
        return list(names)

    def compile_statement(self):
        """ The OR group of conditions; `None` when there's nothing to search """
        conditions = [self.compile_criterion(name, self.search)
                      for name in self.search_columns]
        if not conditions:
            return None
        return or_(*conditions).self_group() if len(conditions) > 1 else conditions[0]

    def alter_query(self, query):
        condition = self.compile_statement()
        if condition is None:
            return query  # short-circuit
        return query.filter(condition)

    def get_final_input_value(self):
        return self.search
