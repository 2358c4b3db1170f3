# mappify - a small ORM over a single SQL connection
from mappify.base import Model
from mappify.session import Session
from mappify.query import Query
from mappify.database import DatabaseEngine, QueryResult
from mappify.where import compile_where, CompiledQuery
from mappify.filters import col, and_, or_
from mappify.orm_types import Column, Text, Number, Real, Boolean, HasOne, HasMany, BelongsTo, BelongsToMany
from mappify.generator import SchemaGenerator
from mappify.exceptions import (
    MappifyError, ValidationError, NotFoundError, AssociationError,
    SessionError, DatabaseError, TransactionError,
)

__version__ = "0.1.0"
__all__ = [
    "Model", "Session", "Query", "DatabaseEngine", "QueryResult",
    "compile_where", "CompiledQuery", "col", "and_", "or_",
    "Column", "Text", "Number", "Real", "Boolean",
    "HasOne", "HasMany", "BelongsTo", "BelongsToMany", "SchemaGenerator",
    "MappifyError", "ValidationError", "NotFoundError", "AssociationError",
    "SessionError", "DatabaseError", "TransactionError",
]
