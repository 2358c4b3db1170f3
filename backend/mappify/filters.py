"""
Expression helpers that build ``where`` mappings, similar to SQLAlchemy.

    (col('age') > 3) & col('name').like('%e%')
    -> {'and': [{'age': {'gt': 3}}, {'name': {'like': '%e%'}}]}

Every finder accepts either form for ``where``.
"""


class FilterExpression:
    """Base class for all filter expressions"""

    def to_where(self):
        raise NotImplementedError

    def __and__(self, other):
        return CombinedFilter(self, other, logic='and')

    def __or__(self, other):
        return CombinedFilter(self, other, logic='or')

    def __invert__(self):
        """Negate a filter using the ~ operator"""
        return NotFilter(self)


class ColumnFilter:
    """A column that can be used in filter expressions"""
    def __init__(self, column_name):
        self.column_name = column_name

    def _op(self, op, value):
        return ComparisonFilter(self.column_name, op, value)

    def __eq__(self, other):
        return self._op('eq', other)

    def __ne__(self, other):
        return self._op('ne', other)

    def __lt__(self, other):
        return self._op('lt', other)

    def __le__(self, other):
        return self._op('lte', other)

    def __gt__(self, other):
        return self._op('gt', other)

    def __ge__(self, other):
        return self._op('gte', other)

    __hash__ = None

    def in_(self, values):
        return self._op('in', list(values))

    def not_in(self, values):
        return self._op('notIn', list(values))

    def like(self, pattern):
        return self._op('like', pattern)

    def not_like(self, pattern):
        return self._op('notLike', pattern)

    def is_null(self):
        return self._op('isNull', True)

    def is_not_null(self):
        return self._op('isNotNull', True)

    def between(self, lower, upper):
        return self._op('between', [lower, upper])

    def not_between(self, lower, upper):
        return self._op('notBetween', [lower, upper])


class ComparisonFilter(FilterExpression):
    def __init__(self, column_name, op, value):
        self.column_name = column_name
        self.op = op
        self.value = value

    def to_where(self):
        return {self.column_name: {self.op: self.value}}

    def __repr__(self):
        return f"<ComparisonFilter {self.column_name} {self.op} {self.value!r}>"


class NotFilter(FilterExpression):
    def __init__(self, filter_expr):
        self.filter_expr = filter_expr

    def to_where(self):
        return {'not': self.filter_expr.to_where()}


class CombinedFilter(FilterExpression):
    """Combines multiple filters with AND or OR logic"""
    def __init__(self, *filters, logic='and'):
        self.logic = logic.lower()
        if self.logic not in ('and', 'or'):
            raise ValueError("Logic must be 'and' or 'or'")
        flat = []
        for f in filters:
            # (a & b) & c -> and_(a, b, c)
            if isinstance(f, CombinedFilter) and f.logic == self.logic:
                flat.extend(f.filters)
            else:
                flat.append(f)
        self.filters = tuple(flat)

    def to_where(self):
        return {self.logic: [f.to_where() for f in self.filters]}


def col(column_name):
    """Create a ColumnFilter to start building filter expressions"""
    return ColumnFilter(column_name)


def and_(*filters):
    return CombinedFilter(*filters, logic='and')


def or_(*filters):
    return CombinedFilter(*filters, logic='or')
