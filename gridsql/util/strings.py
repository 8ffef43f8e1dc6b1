import re


_word_separators = re.compile(r'[-_\s]+')


def camel(value: str) -> str:
    """ Convert a request key into a camelCase name

        Example:
            camel('catalog_id') -> 'catalogId'
            camel('catalog-id') -> 'catalogId'
            camel('catalogId') -> 'catalogId'
    """
    studly = ''.join(word[:1].upper() + word[1:]
                     for word in _word_separators.split(value.strip()))
    return studly[:1].lower() + studly[1:]


def plural(value: str) -> str:
    """ Naive English plural: good enough for building URL paths out of model names """
    if not value:
        return value
    if value[-1] == 'y' and value[-2:-1] not in ('a', 'e', 'i', 'o', 'u'):
        return value[:-1] + 'ies'
    if value.endswith(('s', 'x', 'z', 'ch', 'sh')):
        return value + 'es'
    return value + 's'


def model_path_name(model: type) -> str:
    """ Get the URL path name for a model: `UserProfile` -> `userprofiles` """
    return plural(camel(model.__name__)).lower()
