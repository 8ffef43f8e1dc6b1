from typing import Tuple
from functools import partial, lru_cache, update_wrapper


class method_decorator_meta(type):
    def __instancecheck__(cls, obj):
        """ isinstance() that sees through other decorators, as long as they've used update_wrapper() """
        if obj is None:
            return False
        return issubclass(type(obj), cls) \
               or isinstance(getattr(obj, '__wrapped__', None), cls)


class method_decorator(metaclass=method_decorator_meta):
    """ A class-based method decorator: it marks methods, and keeps metadata about them

        Subclass it, receive arguments in __init__(), and then collect the marked methods of a class:

            class tagged(method_decorator):
                def __init__(self, tag):
                    super().__init__()
                    self.tag = tag

            class A:
                @tagged('x')
                def f(self): ...

            tagged.all_decorators_from(A)  # -> (@tagged(f),)

        The decorator object stays in the class' __dict__, and works as a descriptor:
        `A().f()` calls the method as usual.
    """

    #: The wrapped function gets an attribute with this name that points to the decorator object.
    #: Set to `None` to skip it.
    METHOD_PROPERTY_NAME = 'method_decorator'

    def __init__(self):
        #: The decorated function
        self.method = None
        #: Its name
        self.method_name = None

    def __call__(self, method):
        if self.method is not None:
            raise RuntimeError('@{} has already decorated {}(); use a new one'
                               .format(self.__class__.__name__, self.method_name))

        self.method = method
        self.method_name = method.__name__

        if self.METHOD_PROPERTY_NAME:
            setattr(method, self.METHOD_PROPERTY_NAME, self)

        update_wrapper(self, method)
        return self

    def __get__(self, instance, owner):
        # On the class: the decorator itself. On an object: the bound method.
        if instance is None:
            return self
        return partial(self.method, instance)

    def __repr__(self):
        return '@{}({})'.format(self.__class__.__name__, self.method_name)

    @classmethod
    def is_decorated(cls, method) -> bool:
        """ Is `method` decorated with @cls? """
        return isinstance(method, cls)

    @classmethod
    @lru_cache(256)
    def all_decorators_from(cls, Klass: type) -> Tuple['method_decorator']:
        """ Collect the decorator objects from a class and its bases, in definition order (cached)

            A name redefined in a subclass replaces the parent's definition, decorated or not.
        """
        if not isinstance(Klass, type):
            raise ValueError('Expected a class, got {!r}'.format(Klass))

        found = {}
        for K in reversed(Klass.__mro__):
            for name, attr in vars(K).items():
                if cls.is_decorated(attr):
                    found[name] = attr
                else:
                    found.pop(name, None)
        return tuple(found.values())
