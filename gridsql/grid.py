import logging
from typing import Callable, Iterable, Mapping, Union

from sqlalchemy import inspect
from sqlalchemy.orm import Mapper, Query

from .bag import ModelPropertyBags
from .columns import Button, Column, ColumnRegistry, create_button
from .exc import QueryError, ModelNotFoundError
from .export import ExportData, entity_of
from .handlers import GridScopeFilter, GridSearch, GridSort, GridLimit, DESC
from .pagination import Pagination
from .params import RequestParameters
from .result import GridResult
from .util.settings_dict import GridSettingsDict
from .util.settings_handler import GridSettingsHandler

logger = logging.getLogger(__name__)


class GridView:
    """ A grid over one query: request parameters in, a page of rows out

        The GridView is initialized for every request:

            grid = GridView(GridSettingsDict(search_input=True, export=True))
            grid.set_query(ssn.query(Article))
            grid.column('id', 'ID')
            grid.column('title', 'Title')
            result = grid.get(request.args)

        The request parameters go through these steps:

        1. RequestParameters: the recognized keys are read (page, by, search, count, sort, export);
           the rest are filters
        2. ColumnRegistry: the columns are resolved (unless you've given them explicitly)
        3. Filters: every filter goes to the model's scope, or compares a column to the value
        4. Search: free-text search, if enabled with `search_input`
        5. Sorting
        6. Pagination: get(), get_simple(); or just first()
        7. Export: if enabled with `export`, and requested with `export=1`

        Attrs:
            columns (ColumnRegistry): the grid columns
            request (RequestParameters): the request of the last fetch
    """

    NAME = 'gridsql'

    # The classes that implement every step
    # You can override them, if necessary
    _FILTER_CLS = GridScopeFilter
    _SEARCH_CLS = GridSearch
    _SORT_CLS = GridSort
    _LIMIT_CLS = GridLimit
    _EXPORT_CLS = ExportData

    #: Settings that the GridView uses itself; the rest go to the handlers
    OWN_SETTINGS = frozenset(('order_by_default', 'visible_column', 'search_input',
                              'export', 'routes', 'id', 'form_action'))

    def __init__(self, settings: Union[dict, GridSettingsDict] = None):
        """ Init a grid

        :param settings: GridView settings. Missing settings get their defaults from GridSettingsDict
        """
        #: The settings: defaults first, then the given ones
        self._settings = {**GridSettingsDict(), **(settings or {})}

        #: Columns
        self.columns = ColumnRegistry()

        # Initialized later
        self._query = None  # type: Query | None
        self.model = None
        self.bags = None  # type: ModelPropertyBags | None
        self.request = None  # type: RequestParameters | None

    # region Configuration

    def set_query(self, query: Query) -> 'GridView':
        """ The query to build the grid on. It may have some filtering applied already. """
        self._query = query
        return self

    def column(self, name: str = None, label: str = None) -> Column:
        """ Add a column, and return it for further configuration

            Example:
                grid.column('created_at', 'Created').set_date_format('%Y-%m-%d')
        """
        return self.columns.add(Column(name, label))

    def column_actions(self, actions: Callable, label: str = None) -> Column:
        """ Add the action column: actions(instance) -> list[Button] """
        return self.columns.add(Column(ColumnRegistry.ACTION_NAME, label or '', sortable=False, actions=actions))

    @staticmethod
    def column_action() -> Button:
        """ A new button, for use within column_actions() """
        return Button()

    def set_fields_for_export(self, fields: Union[Mapping, Iterable]) -> 'GridView':
        """ The export field map. See ColumnRegistry.set_fields() """
        self.columns.set_fields(fields)
        return self

    def set_counts(self, counts: Mapping[int, object]) -> 'GridView':
        self._settings['counts'] = counts
        return self

    def set_visible_column(self, visible_column: bool) -> 'GridView':
        self._settings['visible_column'] = visible_column
        return self

    def set_strict_mode(self, strict: bool) -> 'GridView':
        self._settings['strict'] = strict
        return self

    def set_search_input(self, search_input: bool = False) -> 'GridView':
        self._settings['search_input'] = search_input
        return self

    def set_export(self, export: bool) -> 'GridView':
        self._settings['export'] = export
        return self

    def set_sort_name(self, sort_name_default: str) -> 'GridView':
        self._settings['sort_name_default'] = sort_name_default
        return self

    def set_order_by_desc(self) -> 'GridView':
        self._settings['order_by_default'] = DESC
        return self

    def set_id(self, id: str) -> 'GridView':
        self._settings['id'] = id
        return self

    def set_form_action(self, url: str) -> 'GridView':
        self._settings['form_action'] = url
        return self

    def get_id(self) -> str:
        return self._settings['id'] or '{}_1'.format(self.NAME)

    def get_order_by(self) -> str:
        return self._settings['order_by_default']

    def get_sort_name(self) -> str:
        return self._settings['sort_name_default']

    def is_export(self) -> bool:
        """ Export: enabled by the settings, and requested """
        return bool(self._settings['export']) and self.request is not None and self.request.export

    def is_search_input(self) -> bool:
        return bool(self._settings['search_input'])

    def is_strict_mode(self) -> bool:
        return bool(self._settings['strict'])

    def is_visible_column(self) -> bool:
        return bool(self._settings['visible_column'])

    # endregion

    # region Results

    def get(self, params: Mapping = None) -> GridResult:
        """ Get a page of rows, with the total count

        :param params: Request parameters
        :raises QueryError: no query
        :raises ModelNotFoundError: the query selects no model
        :raises ColumnsError: no columns
        """
        query = self._fetch(params)
        items, pagination = Pagination(query, self._limit).get()
        return self._get_grid_view_result(query, items, pagination, simple=False)

    def get_simple(self, params: Mapping = None, with_count: bool = False) -> GridResult:
        """ Get a page of rows without counting them: cheaper, but there's no total

        :param with_count: Count the rows anyway, with a separate query
        """
        query = self._fetch(params)
        items, pagination = Pagination(query, self._limit).get_simple(with_count=with_count)
        return self._get_grid_view_result(query, items, pagination, simple=True)

    def first(self, params: Mapping = None) -> GridResult:
        """ Get the first row only: the headers and one row dict (empty, when there are no rows) """
        query = self._fetch(params)
        row = query.first()
        data = self.columns.row(entity_of(row)) if row is not None else {}
        return GridResult(
            id=self.get_id(),
            headers=self.columns.to_list(),
            data=data,
            request_params=self.request.raw,
            filter=self.request.remaining(),
            page=self.request.page,
            order_by=self._order_by,
            search=self.request.search,
            sort_name=self._sort.sort_name,
            counts=self._limit.counts,
            search_input=self.is_search_input(),
            form_action=self._settings['form_action'],
        )

    def _get_grid_view_result(self, query: Query, items, pagination, simple: bool) -> GridResult:
        return GridResult(
            id=self.get_id(),
            headers=self.columns.to_list(),
            data=[self.columns.row(entity_of(item)) for item in items],
            pagination=pagination,
            simple=simple,
            request_params=self.request.raw,
            filter=self.request.remaining(),
            page=self._limit.page,
            order_by=self._order_by,
            search=self.request.search,
            limit=self._limit.limit,
            sort_name=self._sort.sort_name,
            counts=self._limit.counts,
            search_input=self.is_search_input(),
            export_data=self._get_export(query),
            form_action=self._settings['form_action'],
            button_create=create_button(self.bags) if self._settings['routes'] else None,
        )

    def _get_export(self, query: Query):
        if self.is_export():
            return self._EXPORT_CLS().fetch(query, self.columns.to_fields())
        return None

    # endregion

    # region The pipeline

    def _fetch(self, params: Union[Mapping, RequestParameters, None]) -> Query:
        """ Build the query: filters, search, sorting. The limit is applied by the Pagination

        :raises QueryError: no query
        :raises ModelNotFoundError: the query selects no model
        :raises ColumnsError: no columns
        """
        if self._query is None:
            raise QueryError()
        self.model = _get_query_model(self._query)
        if self.model is None:
            raise ModelNotFoundError()
        self.bags = ModelPropertyBags.for_model(self.model)

        # Columns: before the query is touched
        self.columns.resolve_auto(self.bags,
                                  hide_hidden=self.is_visible_column(),
                                  routes=bool(self._settings['routes']))

        # Request
        self.request = params if isinstance(params, RequestParameters) else RequestParameters(params)

        # Handlers
        self._init_handlers()

        # Defaults for the missing parameters
        # An empty direction (`by=`) is just as absent
        self._order_by = self.request.by or self.get_order_by()
        sort_name = self.request.sort if self.request.sort is not None else self.get_sort_name()

        # Apply: the order matters
        query = self._query
        query = self._filter.input(self.request.remaining()).alter_query(query)
        if self.is_search_input():
            query = self._search.input(self.request.search).alter_query(query)
        query = self._sort.input(sort_name, self._order_by).alter_query(query)
        self._limit.input(self.request.page, self.request.count)

        logger.debug('Grid %s over %s: page=%r limit=%r sort=%r %r search=%r filters=%r',
                     self.get_id(), self.bags.model_name,
                     self._limit.page, self._limit.limit, self._sort.sort_name, self._order_by,
                     self.request.search, self._filter.get_final_input_value())
        return query

    def _init_handlers(self):
        """ Initialize the handlers for this request, and give each one its settings """
        settings = GridSettingsHandler(self._settings)

        self._filter = self._FILTER_CLS(self.model, self.bags, **settings.get_settings(self._FILTER_CLS))
        self._search = self._SEARCH_CLS(self.model, self.bags, **settings.get_settings(self._SEARCH_CLS))
        self._sort = self._SORT_CLS(self.model, self.bags, **settings.get_settings(self._SORT_CLS))
        self._limit = self._LIMIT_CLS(self.model, self.bags, **settings.get_settings(self._LIMIT_CLS))

        # Typos?
        settings.raise_if_invalid_settings(self, self.OWN_SETTINGS)

    # endregion

    def __repr__(self):
        return '{}({})'.format(self.__class__.__name__, self.bags.model_name if self.bags else None)


def _get_query_model(query: Query):
    """ Get the model the query selects; `None` if there's none """
    for description in query.column_descriptions:
        entity = description.get('entity')
        if entity is not None and isinstance(inspect(entity, raiseerr=False), Mapper):
            return entity
    return None
