class BaseGridSqlException(Exception):
    pass


class QueryError(BaseGridSqlException):
    """ No query was bound to the grid """

    def __init__(self, err: str = 'Query is not set. Use set_query() first'):
        super(QueryError, self).__init__(err)


class ModelNotFoundError(BaseGridSqlException):
    """ The bound query does not select a mapped model """

    def __init__(self, err: str = 'Model not found. The query must select a mapped model'):
        super(ModelNotFoundError, self).__init__(err)


class ColumnsError(BaseGridSqlException):
    """ No columns could be resolved for the grid """

    def __init__(self, model: str = None):
        self.model = model
        super(ColumnsError, self).__init__('Not set columns. Columns is null')


class InvalidQueryError(BaseGridSqlException):
    """ Invalid input, or an invalid setting, that can't be turned into a query """

    def __init__(self, err: str):
        super(InvalidQueryError, self).__init__('Grid query error: {err}'.format(err=err))
