from .counting_query_wrapper import CountingQuery
from .method_decorator import method_decorator, method_decorator_meta
from .settings_dict import GridSettingsDict, DEFAULT_COUNTS, DEFAULT_LIMIT, NON_LATIN_EXCLUDED_COLUMNS
from .settings_handler import GridSettingsHandler
from .strings import camel, plural, model_path_name
