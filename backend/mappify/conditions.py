# Operator vocabulary of the `where` mini-language, mapped to SQL tokens.
CONDITIONS = {
    "eq": "=",
    "ne": "<>",
    "gt": ">",
    "lt": "<",
    "gte": ">=",
    "lte": "<=",
    "like": "LIKE",
    "notLike": "NOT LIKE",
    "in": "IN",
    "notIn": "NOT IN",
    "and": "AND",
    "or": "OR",
    "between": "BETWEEN",
    "notBetween": "NOT BETWEEN",
    "isNull": "IS NULL",
    "isNotNull": "IS NOT NULL",
    "not": "NOT",
}

COMPARISON_OPS = frozenset({"eq", "ne", "gt", "lt", "gte", "lte", "like", "notLike"})
SET_OPS = frozenset({"in", "notIn"})
RANGE_OPS = frozenset({"between", "notBetween"})
NULL_OPS = frozenset({"isNull", "isNotNull"})
LOGICAL_OPS = frozenset({"and", "or"})
NEGATION_OP = "not"