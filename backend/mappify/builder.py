import re

from mappify.exceptions import ValidationError

_SAFE_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
# "price DESC, name" / "category" -- raw ORDER BY / GROUP BY lists
_SAFE_CLAUSE = re.compile(
    r"^\s*[A-Za-z_][A-Za-z0-9_.]*(\s+(ASC|DESC))?(\s*,\s*[A-Za-z_][A-Za-z0-9_.]*(\s+(ASC|DESC))?)*\s*$",
    re.IGNORECASE,
)


def quote_identifier(identifier):
    if not identifier or not _SAFE_IDENT.match(str(identifier)):
        raise ValidationError(f"Unsafe SQL identifier: {identifier!r}")
    return f'"{identifier}"'


def check_clause(clause, kind):
    if not _SAFE_CLAUSE.match(clause):
        raise ValidationError(f"Unsafe {kind} clause: {clause!r}")
    return clause.strip()


class QueryBuilder:
    """Assembles complete statements. WHERE fragments come precompiled."""

    def _quote(self, identifier):
        return quote_identifier(identifier)

    def build_select(self, table_name, columns=None, where=None, order=None, group=None,
                     limit=None, offset=None):
        table = self._quote(table_name)
        cols = ", ".join(self._quote(c) for c in columns) if columns else "*"
        sql = f"SELECT {cols} FROM {table}"
        params = []

        if where is not None and where.sql:
            sql += f" WHERE {where.sql}"
            params.extend(where.params)
        if group:
            sql += f" GROUP BY {check_clause(group, 'GROUP BY')}"
        if order:
            sql += f" ORDER BY {check_clause(order, 'ORDER BY')}"

        if limit is not None:
            sql += f" LIMIT {int(limit)}"
            if offset is not None:
                sql += f" OFFSET {int(offset)}"
        elif offset is not None:
            sql += f" LIMIT -1 OFFSET {int(offset)}"

        return sql, tuple(params)

    def build_insert(self, table_name, data):
        table = self._quote(table_name)
        if not data:
            return f"INSERT INTO {table} DEFAULT VALUES", ()
        fields = list(data.keys())
        quoted_fields = [self._quote(f) for f in fields]
        placeholders = ", ".join("?" for _ in fields)
        values = [data[f] for f in fields]
        sql = f"INSERT INTO {table} ({', '.join(quoted_fields)}) VALUES ({placeholders})"
        return sql, tuple(values)

    def build_update(self, table_name, data, pk_value, pk_column="id"):
        if pk_value is None:
            raise ValidationError("UPDATE needs a primary key value for its WHERE clause")
        if not data:
            raise ValidationError(f"Nothing to update in {table_name}")
        table = self._quote(table_name)
        set_parts = []
        params = []
        for col, val in data.items():
            set_parts.append(f"{self._quote(col)} = ?")
            params.append(val)
        params.append(pk_value)
        sql = f"UPDATE {table} SET {', '.join(set_parts)} WHERE {self._quote(pk_column)} = ?"
        return sql, tuple(params)

    def build_delete(self, table_name, pk_value, pk_column="id"):
        if pk_value is None:
            raise ValidationError("DELETE needs a primary key value for its WHERE clause")
        table = self._quote(table_name)
        sql = f"DELETE FROM {table} WHERE {self._quote(pk_column)} = ?"
        return sql, (pk_value,)
