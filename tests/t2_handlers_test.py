import unittest
from collections import OrderedDict

from sqlalchemy.orm import Query

from gridsql import ModelPropertyBags
from gridsql.handlers import *
from gridsql.exc import InvalidQueryError
from .models import *
from .util import stmt2sql, q2sql, TestQueryStringsMixin


class HandlersTest(TestQueryStringsMixin, unittest.TestCase):
    """ Test individual handlers """

    longMessage = True
    maxDiff = None

    def test_filter(self):
        Article_filter = lambda **kw: GridScopeFilter(Article, ModelPropertyBags.for_model(Article), **kw)

        # === Test: input() can be called only once
        with self.assertRaises(RuntimeError):
            Article_filter().input(None).input(None)

        # === Test: empty
        f = Article_filter().input(None)
        self.assertEqual((f.scoped, f.filtered, f.ignored), ([], [], []))
        q = f.alter_query(Query([Article]))
        self.assertNotIn('WHERE', q2sql(q))

        # === Test: column filters
        f = Article_filter().input(OrderedDict([
            ('theme', ' sci-fi '),
            ('title', 'foo'),
        ]))
        self.assertEqual(f.filtered, [('theme', 'sci-fi'), ('title', 'foo')])
        self.assertQuery(f.alter_query(Query([Article])),
                         'FROM a',
                         'WHERE a.theme LIKE sci-fi% AND a.title LIKE foo%')
        self.assertEqual(stmt2sql(f.compile_criterion('title', 'foo')), 'a.title LIKE foo%')

        # === Test: zero is a valid value; empty values are not
        f = Article_filter().input(OrderedDict([
            ('uid', 0),
            ('id', '0'),
            ('title', ''),
            ('theme', None),
            ('body', ['list']),
        ]))
        self.assertEqual(f.filtered, [('uid', '0'), ('id', '0')])
        self.assertQuery(f.alter_query(Query([Article])),
                         'WHERE CAST(a.uid AS VARCHAR) LIKE 0% AND CAST(a.id AS VARCHAR) LIKE 0%')

        # === Test: text operators on other column types: CAST
        self.assertEqual(stmt2sql(Article_filter().compile_criterion('uid', '1')),
                         'CAST(a.uid AS VARCHAR) LIKE 1%')
        self.assertEqual(stmt2sql(Article_filter(filter_operator='not like').compile_criterion('created_at', '2020')),
                         'CAST(a.created_at AS VARCHAR) NOT LIKE 2020%')
        # Other operators compare the column as it is
        self.assertEqual(stmt2sql(Article_filter(filter_operator='=', filter_after_value='').compile_criterion('uid', '1')),
                         'a.uid = 1')
        # Text columns are never CAST
        self.assertEqual(stmt2sql(Article_filter().compile_criterion('body', 'x')), 'a.body LIKE x%')

        # === Test: unknown keys are ignored
        f = Article_filter().input(dict(NOPE='1', user='1', comments='1'))
        self.assertEqual(f.filtered, [])
        self.assertEqual(sorted(f.ignored), ['NOPE', 'comments', 'user'])
        self.assertNotIn('WHERE', q2sql(f.alter_query(Query([Article]))))

        # === Test: scopes
        f = Article_filter().input(OrderedDict([
            ('author_name', 'alice'),
            ('theme', 'drama'),
        ]))
        self.assertEqual(f.scoped, [('author_name', 'alice')])
        self.assertEqual(f.filtered, [('theme', 'drama')])
        self.assertEqual(f.get_final_input_value(), dict(author_name='alice', theme='drama'))

        qs = self.assertQuery(f.alter_query(Query([Article])),
                              'FROM a JOIN u ON u.id = a.uid',
                              'WHERE u.name = alice AND a.theme LIKE drama%')
        # The scope alone builds the condition: no column is compared to the key
        self.assertNotIn('author_name', qs)
        # Only the model is selected
        self.assertSelectedColumns(qs, 'a.id', 'a.uid', 'a.title', 'a.body', 'a.theme', 'a.created_at')

        # Scope with a camelCase key and a custom name
        f = Article_filter().input(dict(longTitle='5'))
        self.assertEqual(f.scoped, [('longTitle', '5')])
        self.assertQuery(f.alter_query(Query([Article])),
                         'WHERE length(a.title) >= 5')

        # === Test: the scope receives the value untouched
        received = []

        bags = ModelPropertyBags(Article)  # not cached: we're going to modify it
        bags.scopes = dict(theme=lambda query, value: received.append(value) or query)
        f = GridScopeFilter(Article, bags).input(dict(theme=' x '))
        self.assertEqual(f.scoped, [('theme', ' x ')])
        q = f.alter_query(Query([Article]))
        self.assertEqual(received, [' x '])
        self.assertNotIn('WHERE', q2sql(q))

        # === Test: settings
        f = Article_filter(filter_operator='=', filter_after_value='').input(dict(theme='drama'))
        self.assertQuery(f.alter_query(Query([Article])),
                         'WHERE a.theme = drama')

        f = Article_filter(filter_operator='ILIKE', filter_before_value='%').input(dict(theme='drama'))
        self.assertQuery(f.alter_query(Query([Article])),
                         'WHERE a.theme ILIKE %drama%')

        # === Test: booleans
        f = Article_filter().input(dict(theme=True))
        self.assertEqual(f.filtered, [('theme', '1')])

        # === Test: unknown operator
        with self.assertRaises(InvalidQueryError):
            Article_filter(filter_operator='$regex')

    def test_filter_operators(self):
        title = Article.title
        self.assertEqual(stmt2sql(lookup_operator('like')(title, 'a%')), 'a.title LIKE a%')
        self.assertEqual(stmt2sql(lookup_operator('not like')(title, 'a%')), 'a.title NOT LIKE a%')
        self.assertEqual(stmt2sql(lookup_operator('=')(title, 'a')), 'a.title = a')
        self.assertEqual(stmt2sql(lookup_operator('!=')(title, 'a')), 'a.title != a')
        self.assertEqual(stmt2sql(lookup_operator('<>')(title, 'a')), 'a.title != a')
        self.assertEqual(stmt2sql(lookup_operator(' >= ')(title, 'a')), 'a.title >= a')

        self.assertTrue(is_filter_value(0))
        self.assertTrue(is_filter_value('0'))
        self.assertTrue(is_filter_value(1.5))
        self.assertFalse(is_filter_value(''))
        self.assertFalse(is_filter_value(None))
        self.assertFalse(is_filter_value(False))
        self.assertFalse(is_filter_value({}))

    def test_search(self):
        Article_search = lambda **kw: GridSearch(Article, ModelPropertyBags.for_model(Article), **kw)
        User_search = lambda **kw: GridSearch(User, ModelPropertyBags.for_model(User), **kw)
        Product_search = lambda **kw: GridSearch(Product, ModelPropertyBags.for_model(Product), **kw)

        # === Test: input() can be called only once
        with self.assertRaises(RuntimeError):
            Article_search().input('').input('')

        # === Test: empty search
        s = Article_search().input('   ')
        self.assertEqual(s.search_columns, [])
        self.assertIsNone(s.compile_statement())
        self.assertNotIn('WHERE', q2sql(s.alter_query(Query([Article]))))

        # === Test: strict: the declared fields, in a group
        s = Article_search().input(' foo ')
        self.assertEqual(s.search, 'foo')
        self.assertEqual(s.search_columns, ['title', 'body'])
        self.assertQuery(s.alter_query(Query([Article])),
                         'WHERE (a.title LIKE foo% OR a.body LIKE foo%)')

        # The group is AND-ed with other conditions
        q = Query([Article]).filter(Article.theme == 'drama')
        self.assertQuery(Article_search().input('foo').alter_query(q),
                         'WHERE a.theme = drama AND (a.title LIKE foo% OR a.body LIKE foo%)')

        # === Test: strict, no declared fields: nothing is searched
        s = User_search().input('foo')
        self.assertEqual(s.search_columns, [])
        self.assertNotIn('WHERE', q2sql(s.alter_query(Query([User]))))

        # === Test: explicit field
        s = Article_search().input('foo', field='theme')
        self.assertEqual(s.search_columns, ['theme'])
        self.assertQuery(s.alter_query(Query([Article])),
                         'WHERE a.theme LIKE foo%')

        # Invalid explicit field: falls through
        s = Article_search().input('foo', field='NOPE')
        self.assertIsNone(s.field)
        self.assertEqual(s.search_columns, ['title', 'body'])

        # === Test: loose: all columns
        s = User_search(strict=False).input('foo')
        self.assertEqual(s.search_columns, ['id', 'name', 'email', 'password', 'secret'])

        # Loose, non-latin text: columns that can't match are skipped
        s = Product_search(strict=False).input('привет')
        self.assertEqual(s.search_columns, ['name', 'description'])
        self.assertQuery(s.alter_query(Query([Product])),
                         'WHERE (p.name LIKE привет% OR p.description LIKE привет%)')

        # Loose, latin text: nothing is skipped
        s = Product_search(strict=False).input('foo')
        self.assertEqual(s.search_columns, ['id', 'name', 'description', 'created_at', 'updated_at'])
        self.assertQuery(s.alter_query(Query([Product])),
                         'CAST(p.id AS VARCHAR) LIKE foo%',
                         'p.name LIKE foo%',
                         'CAST(p.created_at AS VARCHAR) LIKE foo%')

        # Custom list of excluded columns
        s = Product_search(strict=False, non_latin_excluded_columns=('description',)).input('привет')
        self.assertEqual(s.search_columns, ['id', 'name', 'created_at', 'updated_at'])

        # === Test: a single column: no group
        s = Article_search().input('foo', field='title')
        self.assertEqual(stmt2sql(s.compile_statement()), 'a.title LIKE foo%')

        # === Test: is_non_latin()
        self.assertTrue(is_non_latin('привет'))
        self.assertTrue(is_non_latin('привет!'))
        self.assertFalse(is_non_latin('привет1'))
        self.assertFalse(is_non_latin('hello'))

    def test_sort(self):
        Article_sort = lambda **kw: GridSort(Article, ModelPropertyBags.for_model(Article), **kw)
        Setting_sort = lambda **kw: GridSort(Setting, ModelPropertyBags.for_model(Setting), **kw)

        # === Test: input() can be called only once
        with self.assertRaises(RuntimeError):
            Article_sort().input(None).input(None)

        # === Test: no input
        s = Article_sort().input(None)
        self.assertIsNone(s.sort_name)
        self.assertEqual(s.compile_columns(), [])
        self.assertNotIn('ORDER BY', q2sql(s.alter_query(Query([Article]))))

        # === Test: valid column
        s = Article_sort().input('title', 'desc')
        self.assertEqual(s.sort_name, 'title')
        self.assertQuery(s.alter_query(Query([Article])), 'ORDER BY a.title DESC')

        s = Article_sort().input('title', 'ASC')
        self.assertQuery(s.alter_query(Query([Article])), 'ORDER BY a.title ASC')

        # === Test: invalid column: the default one is used
        s = Article_sort().input('ghost_field', 'desc')
        self.assertEqual(s.sort_name, 'id')
        self.assertQuery(s.alter_query(Query([Article])), 'ORDER BY a.id DESC')

        # Relationships are not columns
        s = Article_sort(sort_name_default='title').input('user')
        self.assertEqual(s.sort_name, 'title')

        # A model without the default column is not sorted at all
        s = Setting_sort().input('ghost_field')
        self.assertIsNone(s.sort_name)
        self.assertNotIn('ORDER BY', q2sql(s.alter_query(Query([Setting]))))

        s = Setting_sort(sort_name_default='key').input('ghost_field')
        self.assertEqual(s.sort_name, 'key')

        # === Test: invalid direction
        with self.assertRaises(InvalidQueryError):
            Article_sort().input('id', 'sideways').compile_columns()

        with self.assertRaises(InvalidQueryError):
            Article_sort().input('id', None).alter_query(Query([Article]))

    def test_limit(self):
        User_limit = lambda **kw: GridLimit(User, ModelPropertyBags.for_model(User), **kw)

        # === Test: input() can be called only once
        with self.assertRaises(RuntimeError):
            User_limit().input().input()

        # === Test: no input: the first allowed count
        l = User_limit().input()
        self.assertEqual((l.page, l.limit, l.offset), (1, 10, 0))

        l = User_limit(counts=OrderedDict([(25, 'twenty five'), (50, 'fifty')])).input()
        self.assertEqual(l.limit, 25)

        # === Test: allowed counts
        l = User_limit().input(count=25)
        self.assertEqual(l.limit, 25)

        l = User_limit().input(count='100')
        self.assertEqual(l.limit, 100)

        # === Test: counts that are not allowed fall back to 10, whatever the counts are
        for count in (999, '999', 'abc', True, [25], 0, -10):
            l = User_limit().input(count=count)
            self.assertEqual(l.limit, 10, count)

        l = User_limit(counts={25: 25, 50: 50}).input(count=999)
        self.assertEqual(l.limit, 10)

        # No counts at all
        l = User_limit(counts={}).input()
        self.assertEqual(l.limit, 10)

        # === Test: pages
        l = User_limit().input(page=3, count=25)
        self.assertEqual((l.page, l.limit, l.offset), (3, 25, 50))
        self.assertEqual(l.get_final_input_value(), dict(page=3, limit=25))
        self.assertQuery(l.alter_query(Query([User])), 'LIMIT 25 OFFSET 50')

        l = User_limit().input(page=0)
        self.assertEqual(l.page, 1)

        # First page: no OFFSET
        l = User_limit().input(page=1)
        qs = q2sql(l.alter_query(Query([User])))
        self.assertIn('LIMIT 10', qs)
        self.assertNotIn('OFFSET', qs)

        # Extra rows: to look beyond the page
        l = User_limit().input(page=2)
        self.assertQuery(l.alter_query(Query([User]), extra_rows=1), 'LIMIT 11 OFFSET 10')

        # === Test: a page too far: the OFFSET has to fit into a 64-bit integer
        for count in (10, 200):
            l = User_limit().input(page=99999999999999999999, count=count)
            self.assertEqual(l.page, l.max_page)
            self.assertLessEqual(l.offset + l.limit + 1, 2 ** 63 - 1)
            self.assertGreater(l.offset + 2 * l.limit + 1, 2 ** 63 - 1)

        # Pages that fit are left alone
        l = User_limit().input(page=10 ** 15)
        self.assertEqual(l.page, 10 ** 15)
