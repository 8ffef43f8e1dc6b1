import logging
from typing import Iterable

from .inspect import pluck_kwargs_from

logger = logging.getLogger(__name__)


class GridSettingsHandler:
    """ Settings keeper for GridView

        This is essentially a helper which will feed the correct kwargs to every handler.

        Grid handlers receive settings as kwargs to their __init__() methods,
        and those kwargs have unique names.

        This class keeps all settings as a single, flat dict,
        and gives each handler only the settings it wants.
        Handlers that share a setting (e.g. filter and search share `filter_operator`)
        both receive it.
    """

    def __init__(self, settings: dict):
        """ Store the settings for every handler

            :param settings: dict of handler kwargs and grid settings
        """
        assert isinstance(settings, dict)

        #: Settings dict
        self._settings = settings  # we don't make a copy, because we don't modify it

        #: all kwargs names (to identify invalid ones)
        self._all_known_kwargs_names = set()

    def get_settings(self, handler_cls: type) -> dict:
        """ Get settings for the given handler

            The handler's __init__() method is analyzed: its kwargs with defaults are its settings.
            The matching keys are taken from the settings dict, the rest from argument defaults.
        """
        kwargs = pluck_kwargs_from(self._settings, for_func=handler_cls.__init__)

        # Remember them: the rest are typos
        self._all_known_kwargs_names.update(kwargs.keys())
        logger.debug('Settings for %s: %r', handler_cls.handler_name, kwargs)

        # Done
        return kwargs  # for the handler's __init__()

    def raise_if_invalid_settings(self, owner: object, own_settings: Iterable[str]):
        """ Check whether there were any typos in setting names

            After all handlers were initialized, we know every kwarg they accept.
            If a provided key is neither a handler kwarg nor a grid setting, there must be a typo.

            :param own_settings: Names of the settings used by the owner itself
            :raises: KeyError: Invalid settings provided
        """
        all_known_keys = self._all_known_kwargs_names | set(own_settings)
        invalid_keys = set(self._settings.keys()) - all_known_keys

        if invalid_keys:
            raise KeyError('Invalid settings were provided for {!r}: {}'
                           .format(owner, ','.join(sorted(invalid_keys))))

    def __repr__(self):
        return repr('{}({})'.format(self.__class__.__name__, self._settings))
