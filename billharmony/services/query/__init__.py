from billharmony.services.query.interpreter import QueryInterpreter
from billharmony.services.query.keywords import DEFAULT_TABLES, QueryTables

__all__ = ["DEFAULT_TABLES", "QueryInterpreter", "QueryTables"]
