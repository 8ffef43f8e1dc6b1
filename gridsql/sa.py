from functools import partial
from typing import Callable, Iterable, Mapping, Union

from sqlalchemy.orm import Session, Query

from .util.method_decorator import method_decorator
from .util.strings import camel


class grid_scope(method_decorator):
    """ Mark a model method as a named grid scope.

        A scope is what a filter request key is handed to instead of the generic column filter.
        The method receives the model class, the query, and the raw string value;
        it returns the new query:

            class Article(Base, GridSqlBase):
                @grid_scope()
                def author_name(cls, query, value):
                    return query.join(Article.user).filter(User.name == value)

        Now `?author_name=john` (or `?authorName=john`) filters articles by their author.

        The scope is registered under the camelCase name of the method, or under the name given:

                @grid_scope('published')
                def only_published(cls, query, value): ...
    """
    METHOD_PROPERTY_NAME = '_grid_scope'

    def __init__(self, name: str = None):
        super(grid_scope, self).__init__()
        self.name = name

    @property
    def scope_name(self) -> str:
        return camel(self.name or self.method_name)

    def __get__(self, instance, owner):
        # Scopes are class-level: always bind to the class
        return partial(self.method, owner)

    def __repr__(self):
        return '@{decorator}({name!r})'.format(decorator=self.__class__.__name__, name=self.scope_name)


class GridSqlBase:
    """ Mixin for SqlAlchemy models that declares what a GridView needs to know about them.

        Everything here is optional and can be overridden:

        * `grid_hidden`: fields that are never shown as auto-resolved columns (e.g. 'password')
        * `grid_fields()`: the list of fields to show by default; all table columns when `None`
        * `grid_search_fields()`: the fields a strict search looks into; `grid_fields()` when `None`
        * `grid_scopes()`: named filter handlers; collected from @grid_scope methods
    """

    #: Fields hidden from auto-resolved columns
    grid_hidden = ()

    @classmethod
    def grid_fields(cls) -> Union[Iterable[str], None]:
        """ The list of fields shown by a grid. `None` means: all table columns """
        return None

    @classmethod
    def grid_search_fields(cls) -> Union[Iterable[str], None]:
        """ The list of fields a strict search looks into. `None` means: same as grid_fields() """
        return None

    @classmethod
    def grid_scopes(cls) -> Mapping[str, Callable]:
        """ Named scope handlers: { camelName: handler(query, value) -> query } """
        return {scope.scope_name: partial(scope.method, cls)
                for scope in grid_scope.all_decorators_from(cls)}

    @classmethod
    def gridview(cls, query_or_session: Union[Query, Session] = None, settings: dict = None):
        """ Build a GridView over this model

        :param query_or_session: Query to start with, or a session object to initiate the query with
        :type query_or_session: sqlalchemy.orm.Query | sqlalchemy.orm.Session | None
        :param settings: GridView settings
        :rtype: gridsql.GridView
        """
        from .grid import GridView

        if query_or_session is None:
            query = Query([cls])
        elif isinstance(query_or_session, Session):
            query = query_or_session.query(cls)
        elif isinstance(query_or_session, Query):
            query = query_or_session
        else:
            raise ValueError('Argument must be Query or Session')

        return GridView(settings).set_query(query)
