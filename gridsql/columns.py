from collections import OrderedDict
from datetime import date, datetime
from typing import Callable, Iterable, List, Mapping, Union

from .bag import ModelPropertyBags
from .exc import ColumnsError
from .util.strings import model_path_name


class Button:
    """ A button: just the data, no rendering

        Used for row actions (show, edit, delete), and for the "create" button of a grid.
    """

    __slots__ = ('url', 'label', 'method', 'handler')

    def __init__(self, url: str = '', label: str = '', method: str = 'GET', handler: Callable = None):
        self.url = url
        self.label = label
        self.method = method
        #: Optional predicate: handler(instance) -> bool. The button is only shown when it says so.
        self.handler = handler

    def set_url(self, url: str) -> 'Button':
        self.url = url
        return self

    def set_label(self, label: str) -> 'Button':
        self.label = label
        return self

    def set_method(self, method: str) -> 'Button':
        self.method = method
        return self

    def set_handler(self, handler: Callable) -> 'Button':
        self.handler = handler
        return self

    def is_visible(self, instance) -> bool:
        return self.handler is None or bool(self.handler(instance))

    def to_dict(self) -> dict:
        return dict(url=self.url, label=self.label, method=self.method)

    def __repr__(self):
        return '{}({!r}, {!r})'.format(self.__class__.__name__, self.label, self.url)


class Column:
    """ A grid column

        Attrs:
            key: the field this column displays
            label: column header
            visible: whether the column is shown
            sortable: whether the UI may sort by it
            value: value extractor: value(instance) -> Any; plain attribute access by default
            actions: for the action column: actions(instance) -> list[Button]
            date_format: strftime() format for date and datetime values
    """

    __slots__ = ('key', 'label', 'visible', 'sortable', 'value', 'actions', 'date_format')

    def __init__(self, key: str, label: str = None,
                 visible: bool = True, sortable: bool = True,
                 value: Callable = None, actions: Callable = None,
                 date_format: str = None):
        self.key = key
        self.label = key if label is None else label
        self.visible = visible
        self.sortable = sortable
        self.value = value
        self.actions = actions
        self.date_format = date_format

    # Chainable setters

    def set_label(self, label: str) -> 'Column':
        self.label = label
        return self

    def set_visible(self, visible: bool = True) -> 'Column':
        self.visible = visible
        return self

    def set_sort(self, sortable: bool = True) -> 'Column':
        self.sortable = sortable
        return self

    def set_handler(self, value: Callable) -> 'Column':
        """ Set a custom value extractor: value(instance) -> Any """
        self.value = value
        return self

    def set_actions(self, actions: Callable) -> 'Column':
        self.actions = actions
        return self

    def set_date_format(self, date_format: str) -> 'Column':
        self.date_format = date_format
        return self

    @property
    def is_action(self) -> bool:
        return self.actions is not None

    def get_value(self, instance):
        """ Get the value of this column for a row """
        if self.is_action:
            return [button.to_dict()
                    for button in self.actions(instance) or ()
                    if button.is_visible(instance)]

        if self.value is not None:
            return self.value(instance)

        value = getattr(instance, self.key, None)
        if self.date_format and isinstance(value, (date, datetime)):
            return value.strftime(self.date_format)
        return value

    def to_dict(self) -> dict:
        return dict(key=self.key, label=self.label, visible=self.visible, sortable=self.sortable)

    def __repr__(self):
        return '{}({!r})'.format(self.__class__.__name__, self.key)


class ColumnRegistry:
    """ The ordered set of grid columns

        Columns are keyed: adding a column with the same key replaces it in place.
        The order in which columns are added is the order in which they're rendered.

        The registry also keeps the export field map: see set_fields()
    """

    #: The key of the action column
    ACTION_NAME = 'actions'

    def __init__(self, columns: Iterable[Column] = ()):
        self._columns = OrderedDict()
        self._fields = None
        for column in columns:
            self.add(column)

    def add(self, column: Column) -> Column:
        self._columns[column.key] = column
        return column

    def __len__(self):
        return len(self._columns)

    def __iter__(self):
        return iter(self._columns.values())

    def __contains__(self, key: str) -> bool:
        return key in self._columns

    def __getitem__(self, key: str) -> Column:
        return self._columns[key]

    @property
    def keys(self) -> List[str]:
        return list(self._columns.keys())

    @property
    def field_columns(self) -> List[Column]:
        """ All columns but the action column """
        return [c for c in self._columns.values() if not c.is_action]

    # region Resolving

    def resolve_auto(self, bags: ModelPropertyBags, hide_hidden: bool = True, routes: bool = False) -> 'ColumnRegistry':
        """ Fill the registry from the model, unless there are columns already

            The fields come from the model's `grid_fields()`, or the table columns, in their natural order.
            With `hide_hidden`, the model's `grid_hidden` fields are removed.
            With `routes`, the action column is added: show, edit, delete buttons for every row.

            :raises ColumnsError: no columns at all
        """
        if not len(self):
            fields = bags.fields if bags.fields is not None else bags.columns.ordered_names
            if hide_hidden:
                fields = [name for name in fields if name not in bags.hidden]

            for name in fields:
                self.add(Column(name, name, sortable=True))

            if not len(self):
                raise ColumnsError(bags.model_name)

            if routes:
                self.add(Column(self.ACTION_NAME, '', sortable=False,
                                actions=lambda instance: route_buttons(bags, instance)))

        if not self.field_columns:
            raise ColumnsError(bags.model_name)
        return self

    @classmethod
    def resolve(cls, bags: ModelPropertyBags, explicit_columns: Iterable[Column] = None,
                hide_hidden: bool = True, routes: bool = False) -> 'ColumnRegistry':
        """ Build a registry: the explicit columns verbatim, or the auto-resolved ones """
        return cls(explicit_columns or ()).resolve_auto(bags, hide_hidden=hide_hidden, routes=routes)

    # endregion

    # region Export fields

    def set_fields(self, fields: Union[Mapping, Iterable]):
        """ Set the export field map

            Example:
                {
                    'ID': 'id',
                    'Time': 'created_at',
                    0: 'author.name',
                    'Name': lambda instance: instance.name.upper(),
                }

            A list is fine too: ['id', 'author.name']
        """
        if not isinstance(fields, Mapping):
            fields = OrderedDict(enumerate(fields))
        self._fields = OrderedDict(fields)
        return self

    def to_fields(self) -> Mapping:
        """ Get the export field map: the one that was set, or the field columns """
        if self._fields is not None:
            return self._fields
        return OrderedDict((c.key, c.key) for c in self.field_columns if c.visible)

    # endregion

    def row(self, instance) -> dict:
        """ Render a row: { column key: value } """
        return OrderedDict((column.key, column.get_value(instance))
                           for column in self._columns.values())

    def to_list(self) -> List[dict]:
        """ The headers: a snapshot of the columns' metadata """
        return [column.to_dict() for column in self._columns.values()]


def route_buttons(bags: ModelPropertyBags, instance) -> List[Button]:
    """ The default action buttons for a row: delete, show, edit """
    path = '/' + model_path_name(bags.model)
    pk = '/'.join(str(getattr(instance, name)) for name in bags.pk.ordered_names)
    if pk:
        path = '{}/{}'.format(path, pk)
    return [
        Button(url=path + '/delete', label='delete', method='DELETE'),
        Button(url=path, label='show'),
        Button(url=path + '/edit', label='edit'),
    ]


def create_button(bags: ModelPropertyBags) -> Button:
    """ The "create" button for a grid """
    return Button(url='/{}/create'.format(model_path_name(bags.model)), label='create')
