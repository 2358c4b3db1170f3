from mappify.builder import quote_identifier
from mappify.logger import get_logger

logger = get_logger(__name__)


class SchemaGenerator:
    TYPE_MAP = {str: "TEXT", int: "INTEGER", float: "REAL", bool: "INTEGER"}

    def generate_create_table(self, mapper):
        column_defs = []
        for name, col in mapper.columns.items():
            sql_type = self.TYPE_MAP.get(col.dtype, "TEXT")

            constraints = []
            if name == mapper.pk:
                constraints.append("PRIMARY KEY AUTOINCREMENT" if col.dtype is int else "PRIMARY KEY")
            if not col.nullable:
                constraints.append("NOT NULL")
            if col.unique and name != mapper.pk:
                constraints.append("UNIQUE")

            column_defs.append(f"{quote_identifier(name)} {sql_type} {' '.join(constraints)}".strip())

        table = quote_identifier(mapper.table_name)
        return f"CREATE TABLE IF NOT EXISTS {table} ({', '.join(column_defs)});"

    def create_all(self, engine, models, drop_first=False):
        for model in models:
            mapper = model._mapper
            if drop_first:
                engine.query(f"DROP TABLE IF EXISTS {quote_identifier(mapper.table_name)}")
            engine.query(self.generate_create_table(mapper))
            logger.debug("Created table %s", mapper.table_name)
