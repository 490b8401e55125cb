"""
Dialect-aware SQL expressions used by movie search.

PostgreSQL gets its native text search and array operators. Other dialects
call functions of the same name, which the test suite registers on SQLite
connections (see app.database.register_sqlite_functions).
"""
from sqlalchemy import Boolean
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import FunctionElement


class title_matches(FunctionElement):
    """title_matches(column, query): every word of `query` appears in `column`"""
    type = Boolean()
    name = "title_matches"
    inherit_cache = True


class contains_all(FunctionElement):
    """contains_all(column, values): `column` holds every element of `values`"""
    type = Boolean()
    name = "contains_all"
    inherit_cache = True


@compiles(title_matches, "postgresql")
def _pg_title_matches(element, compiler, **kw):
    title, query = element.clauses
    return "to_tsvector('simple', %s) @@ plainto_tsquery('simple', %s)" % (
        compiler.process(title, **kw),
        compiler.process(query, **kw),
    )


@compiles(contains_all, "postgresql")
def _pg_contains_all(element, compiler, **kw):
    column, values = element.clauses
    return "%s @> %s" % (compiler.process(column, **kw), compiler.process(values, **kw))


@compiles(title_matches)
@compiles(contains_all)
def _default_function(element, compiler, **kw):
    return "%s(%s)" % (element.name, compiler.process(element.clauses, **kw))
