"""
Compiler for the nested ``where`` mini-language.

    compile_where({"price": {"gt": 100, "lt": 200}, "or": [{"name": "A"}, {"name": "B"}]})
    -> CompiledQuery(sql='"price" > ? AND "price" < ? AND ("name" = ? OR "name" = ?)',
                     params=(100, 200, 'A', 'B'))

Every value is bound as a parameter, so the number of ``?`` placeholders in
``sql`` always equals ``len(params)``.
"""
from collections import namedtuple
from collections.abc import Mapping, Sequence

from mappify.builder import quote_identifier
from mappify.conditions import (
    CONDITIONS, COMPARISON_OPS, SET_OPS, RANGE_OPS, NULL_OPS, LOGICAL_OPS, NEGATION_OP,
)
from mappify.exceptions import ValidationError

CompiledQuery = namedtuple("CompiledQuery", ["sql", "params"])


def _is_sequence(value):
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def compile_where(where):
    """Compile a filter expression into ``CompiledQuery(sql, params)``.

    An empty or missing expression compiles to an empty fragment; callers
    decide whether that means "match everything" or is an error.
    """
    if not where:
        return CompiledQuery("", ())
    if not isinstance(where, Mapping):
        raise ValidationError(f"where must be a mapping, got {type(where).__name__}")

    parts, params = _compile_mapping(where)
    return CompiledQuery(" AND ".join(parts), tuple(params))


def _compile_mapping(where):
    parts, params = [], []
    for key, value in where.items():
        if key in LOGICAL_OPS:
            sub_parts, sub_params = _compile_group(key, value)
        elif key == NEGATION_OP:
            sub_parts, sub_params = _compile_negation(value)
        else:
            sub_parts, sub_params = _compile_column(key, value)
        parts.extend(sub_parts)
        params.extend(sub_params)
    return parts, params


def _compile_group(logic, items):
    if not _is_sequence(items) or not items:
        raise ValidationError(f"'{logic}' expects a non-empty list of conditions")

    parts, params = [], []
    for item in items:
        if not isinstance(item, Mapping) or not item:
            raise ValidationError(f"Every '{logic}' entry must be a non-empty mapping, got {item!r}")
        sub_parts, sub_params = _compile_mapping(item)
        if len(sub_parts) > 1:
            parts.append("(" + " AND ".join(sub_parts) + ")")
        else:
            parts.append(sub_parts[0])
        params.extend(sub_params)

    joined = f" {CONDITIONS[logic]} ".join(parts)
    return [f"({joined})"], params


def _compile_negation(value):
    if not isinstance(value, Mapping) or not value:
        raise ValidationError("'not' expects a non-empty mapping of conditions")
    parts, params = _compile_mapping(value)
    return [f"{CONDITIONS[NEGATION_OP]} ({' AND '.join(parts)})"], params


def _compile_column(column, value):
    col = quote_identifier(column)

    if isinstance(value, Mapping):
        if not value:
            raise ValidationError(f"Empty operator mapping for column '{column}'")
        parts, params = [], []
        for op, operand in value.items():
            sql, op_params = _compile_operator(column, col, op, operand)
            parts.append(sql)
            params.extend(op_params)
        return parts, params

    if value is None:
        return [f"{col} IS NULL"], []
    if _is_sequence(value):
        raise ValidationError(
            f"Column '{column}' got a list; use {{'in': [...]}} or {{'between': [a, b]}}"
        )
    return [f"{col} = ?"], [value]


def _compile_operator(column, col, op, operand):
    if op not in CONDITIONS:
        raise ValidationError(f"Unknown operator '{op}' for column '{column}'")
    if op in LOGICAL_OPS:
        raise ValidationError(
            f"'{op}' cannot be used as a column operator ('{column}'); group conditions "
            f"with a top-level '{op}' list instead"
        )
    token = CONDITIONS[op]

    if op in COMPARISON_OPS:
        if isinstance(operand, Mapping) or _is_sequence(operand):
            raise ValidationError(f"'{op}' on '{column}' expects a single value, got {operand!r}")
        if operand is None:
            # "= NULL" never matches
            if op == "eq":
                return f"{col} IS NULL", []
            if op == "ne":
                return f"{col} IS NOT NULL", []
            raise ValidationError(f"'{op}' on '{column}' cannot compare with None")
        return f"{col} {token} ?", [operand]

    if op in SET_OPS:
        if not _is_sequence(operand):
            raise ValidationError(f"'{op}' on '{column}' expects a list, got {operand!r}")
        if not operand:
            # IN () is not valid SQL
            return ("1 = 0" if op == "in" else "1 = 1"), []
        placeholders = ", ".join("?" for _ in operand)
        return f"{col} {token} ({placeholders})", list(operand)

    if op in RANGE_OPS:
        if not _is_sequence(operand) or len(operand) != 2:
            raise ValidationError(f"'{op}' on '{column}' expects exactly two values, got {operand!r}")
        return f"{col} {token} ? AND ?", [operand[0], operand[1]]

    if op in NULL_OPS:
        if operand is not True:
            raise ValidationError(f"'{op}' on '{column}' only accepts True, got {operand!r}")
        return f"{col} {token}", []

    # op == "not": negate whatever the operand compiles to for this column
    parts, params = _compile_column(column, operand)
    return f"{token} ({' AND '.join(parts)})", params
