"""
GridSQL turns the request parameters of a data grid into a [SqlAlchemy](http://www.sqlalchemy.org/) query.

The main use case is an admin UI table: every time the UI needs some *sorting*, *filtering*,
*searching*, *pagination*, or an *export* of the whole table, you won't have to write
a single line of repetitive code!

The UI sends flat request parameters:

```
GET /articles?page=2&count=25&sort=title&by=desc&search=python&theme=sci-fi
```

and the GridView builds the query, executes it, and gives you back the headers,
the rows, and the pagination info:

```python
grid = Article.gridview(ssn, GridSettingsDict(search_input=True))
result = grid.get(request.args)
return jsonify(result.to_dict())
```
"""

# Exceptions that are used here and there
from .exc import *

# GridSQL needs some information about your models: their columns, and the grid capabilities they declare.
# All this is handled by the following class:
from .bag import ModelPropertyBags

# The heart of GridSQL are the handlers:
# that's where request parameters are converted to actual SqlAlchemy queries!
from . import handlers

# Request parameters, columns, results
from .params import RequestParameters
from .columns import Column, ColumnRegistry, Button
from .result import GridResult, PaginationDescriptor
from .pagination import Pagination
from .export import ExportData

# GridView is the man that reads your request and applies the handlers to the query
from .grid import GridView

# SqlAlchemy mixin that declares grid capabilities on your models, and defines .gridview() on them
# That's just for your convenience.
from .sa import GridSqlBase, grid_scope

# Helpers
# `Query` object wrapper that is able to query and count() at the same time
from gridsql.util import CountingQuery
# Settings object for GridView
from gridsql.util import GridSettingsDict
