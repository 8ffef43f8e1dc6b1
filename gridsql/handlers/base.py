from ..bag import ModelPropertyBags


class GridHandlerBase:
    """ One step of the GridView pipeline: filtering, searching, sorting, or pagination

        The life of a handler is one request long:

        1. __init__(model, bags, **settings): keyword arguments with defaults are the settings.
           GridSettingsHandler finds them by their names.
        2. input(...): the part of the request this handler is responsible for. Only once!
        3. alter_query(query): the new query
    """

    #: Name of the handler, as used by GridSettingsHandler
    handler_name = None

    def __init__(self, model, bags: ModelPropertyBags):
        """ Init a handler for a model. No input yet.

        :param model: The model the grid is built for
        :type model: sqlalchemy.ext.declarative.DeclarativeMeta
        :param bags: The model's property bags
        """
        self.model = model
        self.bags = bags

        #: Has input() been called?
        self.input_received = False
        #: The input, as given
        self.input_value = None

    def input(self, value):
        """ Receive the input. Subclasses parse it further.

        :rtype: GridHandlerBase
        """
        self.input_value = value
        self.input_received = True

        # A second input() is a bug: handlers keep per-request state
        self.input = self.__input_twice

        return self

    def __input_twice(self, *args, **kwargs):
        raise RuntimeError('{}.input() was already called. '
                           'Create a new handler for every request!'
                           .format(self.__class__.__name__))

    def column(self, name: str):
        """ Get a mapped column by name. Only give it names that have passed bags.has_column() """
        return self.bags.columns[name]

    def alter_query(self, query):
        """ Apply this handler's part of the request

        :type query: sqlalchemy.orm.Query
        :rtype: sqlalchemy.orm.Query
        """
        raise NotImplementedError()

    def get_final_input_value(self):
        """ The input as it was actually applied: after the corrections """
        return self.input_value
