from collections import OrderedDict
from typing import Iterable, Mapping, Union

from .inspect import pluck_kwargs_from


#: Page sizes the user can choose from: {count: label}
DEFAULT_COUNTS = OrderedDict([
    (10, 10),
    (25, 25),
    (100, 100),
    (200, 200),
])

#: The page size used when the requested one is not allowed.
#: NOTE: it does not depend on `counts`: a grid configured with counts=(25, 50) still falls back to 10.
DEFAULT_LIMIT = 10

#: Columns skipped by a loose search when the search text has no latin word characters
NON_LATIN_EXCLUDED_COLUMNS = ('id', 'created_at', 'updated_at', 'deleted_at')


class GridSettingsDict(dict):
    """ GridView settings container.

        Every setting has its default right here, in the signature of __init__(),
        so that nothing is ever read from a global state.

        The keyword settings are plain kwargs names for the __init__ method of
        every handler (filter, search, sort, limit), which are fed to them by GridSettingsHandler.
        The rest are used by the GridView itself.
    """

    def __init__(self,
                 # --- limit
                 counts: Mapping[int, object] = DEFAULT_COUNTS,
                 # --- filter & search
                 filter_operator: str = 'like',
                 filter_before_value: str = '',
                 filter_after_value: str = '%',
                 # --- search
                 strict: bool = True,
                 non_latin_excluded_columns: Iterable[str] = NON_LATIN_EXCLUDED_COLUMNS,
                 # --- sort
                 sort_name_default: str = 'id',
                 # --- grid
                 order_by_default: str = 'asc',
                 visible_column: bool = True,
                 search_input: bool = False,
                 export: bool = False,
                 routes: bool = False,
                 id: Union[str, None] = None,
                 form_action: str = '',
                 ):
        """ Settings for a GridView

        Args:
            counts (dict[int, Any]): (for: limit)
                Page sizes the user may select with the `count` request parameter.
                Keys are the allowed sizes; the first key is the default one.
                A size that is not allowed falls back to DEFAULT_LIMIT (10).
            filter_operator (str): (for: filter, search)
                The operator used to compare columns with values: 'like', 'ilike', '=', '>=', ...
            filter_before_value (str): (for: filter, search)
                Prepended to every filter value. Use '%' to get a "contains" match.
            filter_after_value (str): (for: filter, search)
                Appended to every filter value.
            strict (bool): (for: search)
                Search only within the fields declared by the model's `grid_search_fields()`.
                When `False`, search through every column of the model.
            non_latin_excluded_columns (list[str]): (for: search)
                Columns skipped by a loose search when the search text has no latin characters at all.
            sort_name_default (str): (for: sort)
                The column to sort by when the user gives none, or an invalid one.
            order_by_default (str):
                Sort direction when the user gives none: 'asc' or 'desc'.
            visible_column (bool):
                Exclude the model's `grid_hidden` fields from auto-resolved columns.
            search_input (bool):
                Enable the free-text `search` request parameter.
            export (bool):
                Allow exporting: the `export` request parameter is ignored unless this is `True`.
            routes (bool):
                Generate action buttons (show, edit, delete) for every row, and a "create" button.
            id (str | None):
                The grid identifier, echoed into the result.
            form_action (str):
                The URL the grid form submits to, echoed into the result.
        """
        super(GridSettingsDict, self).__init__()
        self.update({k: v
                     for k, v in locals().items()
                     if k not in {'__class__', 'self'}})
        # locals(): there are plenty of settings, and every one has to make it into the dict

    def and_more(self, **settings):
        """ Copy the object and add more settings to it """
        return self.__class__(**{**self, **settings})

    @classmethod
    def pluck_from(cls, dict, skip=()):
        """ Initialize the class by plucking kwargs from a dictionary.

            This is useful when you have a dict with configuration for multiple things,
            and only want the keys GridView understands.
        """
        kwargs = pluck_kwargs_from(dict,
                                   for_func=cls.__init__,
                                   skip=skip
                                   )
        return cls(**kwargs)
