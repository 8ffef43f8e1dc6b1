from typing import Callable, FrozenSet, Iterable, Mapping, Tuple, Union

from sqlalchemy import inspect
from sqlalchemy import Column
from sqlalchemy.orm import ColumnProperty, DeclarativeMeta

from .util.strings import camel


class ModelPropertyBags:
    """ Model Property Bags is the class that lets you get information about the model's columns,
    and about the grid-related capabilities the model declares.

    All the meta-information about a certain Model is stored here:

    - Columns: the real, mapped columns of the table, in their declaration order
    - Primary keys
    - Hidden fields (`grid_hidden`)
    - Grid fields (`grid_fields()`): the default list of columns
    - Searchable fields (`grid_search_fields()`): the fields a strict search looks into
    - Scopes (`grid_scopes()`): named filter handlers

    The capabilities are optional: a model that declares none of them is still fine.
    """
    __bags_per_model_cache = {}

    @classmethod
    def for_model(cls, model: DeclarativeMeta) -> 'ModelPropertyBags':
        """ Get bags for a model.

        Please use this method over __init__(), because it initializes those bags only once
        """
        try:
            # Every model class has its own ModelPropertyBags, and no one inherits it.
            return cls.__bags_per_model_cache[model]
        except KeyError:
            cls.__bags_per_model_cache[model] = bags = cls(model)
            return bags

    def __init__(self, model: DeclarativeMeta):
        """ Init bags

        :param model: Model
        :type model: sqlalchemy.ext.declarative.DeclarativeMeta
        """
        # Get the inspector
        insp = inspect(model)

        # Initialize
        self.model = model
        self.model_name = model.__name__
        self.table_name = insp.local_table.name

        # Init bags
        self.columns = self._init_columns(model, insp)
        self.pk = self._init_primary_key(model, insp)

        # Capabilities declared by the model
        self.hidden = self._init_hidden(model)
        self.fields = self._init_fields(model)
        self.search_fields = self._init_search_fields(model)
        self.scopes = self._init_scopes(model)

    # region: Initialize bags

    # A bunch of initialization methods
    # This way, you can override the way a model is analyzed, and bags initialized

    def _init_columns(self, model, insp):
        """ Initialize: Column properties """
        return ColumnsBag(_get_model_columns(model, insp))

    def _init_primary_key(self, model, insp):
        """ Initialize: Primary key columns """
        names = [c.key for c in insp.column_attrs
                 if any(col.primary_key for col in c.columns)]
        return PrimaryKeyBag({name: self.columns[name] for name in names})

    def _init_hidden(self, model) -> FrozenSet[str]:
        """ Initialize: fields hidden from the auto-resolved columns """
        return frozenset(getattr(model, 'grid_hidden', None) or ())

    def _init_fields(self, model) -> Union[Tuple[str], None]:
        """ Initialize: the declared list of grid fields, if any """
        return _call_model_capability(model, 'grid_fields')

    def _init_search_fields(self, model) -> Union[Tuple[str], None]:
        """ Initialize: the declared list of searchable fields; defaults to the grid fields """
        search_fields = _call_model_capability(model, 'grid_search_fields')
        return search_fields if search_fields is not None else self.fields

    def _init_scopes(self, model) -> Mapping[str, Callable]:
        """ Initialize: scope handlers, keyed by their camelCase name """
        scopes = getattr(model, 'grid_scopes', None)
        scopes = scopes() if callable(scopes) else scopes
        return {camel(name): handler
                for name, handler in (scopes or {}).items()}

    # endregion

    def has_column(self, name: str) -> bool:
        """ Is `name` a real column of the model?

            This is the check every user-supplied field name has to pass before it gets near a query.
        """
        return isinstance(name, str) and name in self.columns

    def get_scope(self, name: str) -> Union[Callable, None]:
        """ Get a scope handler by a request key (camel-cased before the lookup) """
        return self.scopes.get(camel(name))


class _PropertiesBagBase:
    """ Base class for Property bags """

    def __contains__(self, name: str) -> bool:
        """ Test if the property is in the bag
        :param name: Property name
        """
        raise NotImplementedError

    def __getitem__(self, name: str):
        """ Get the property by name
        :param name: Property name
        """
        raise NotImplementedError

    @property
    def names(self) -> FrozenSet[str]:
        """ Get the set of names """
        raise NotImplementedError

    def __iter__(self):
        """ Get all items """
        raise NotImplementedError

    def get_invalid_names(self, names: Iterable[str]) -> set:
        """ Get the names of invalid items

        Use this for validation.
        """
        return set(names) - self.names


class ColumnsBag(_PropertiesBagBase):
    """ Columns bag

    Contains meta-information about columns:
    - list of their names, in the declaration order
    - list of all columns
    - getting a column by name: bag[column_name]
    """

    def __init__(self, columns: Mapping[str, ColumnProperty]):
        """ Init columns

        :param columns: Model columns, ordered
        """
        super(ColumnsBag, self).__init__()
        self._columns = dict(columns)
        self._column_names = frozenset(self._columns.keys())
        self._ordered_names = tuple(self._columns.keys())

    @property
    def names(self) -> FrozenSet[str]:
        return self._column_names

    @property
    def ordered_names(self) -> Tuple[str]:
        """ Column names in the order they were declared in """
        return self._ordered_names

    def __iter__(self) -> Iterable[Tuple[str, ColumnProperty]]:
        return iter(self._columns.items())

    def __len__(self):
        return len(self._columns)

    def __contains__(self, name: str) -> bool:
        return name in self._column_names

    def __getitem__(self, column_name: str) -> ColumnProperty:
        return self._columns[column_name]


class PrimaryKeyBag(ColumnsBag):
    """ Primary Key Bag

    Like ColumnBag, but with a fancy name :)
    """


def _get_model_columns(model, ins):
    """ Get an ordered dict of model columns """
    return {name: getattr(model, name)
            for name, c in ins.column_attrs.items()
            # ignore Labels and other stuff that .items() will always yield
            if isinstance(c.expression, Column)
            }


def _call_model_capability(model, name):
    """ Get a list of names from a model's classmethod (or a plain attribute); `None` if not declared """
    value = getattr(model, name, None)
    if callable(value):
        value = value()
    return tuple(value) if value is not None else None
