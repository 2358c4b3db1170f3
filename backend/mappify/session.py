from mappify.associations import Populator
from mappify.builder import QueryBuilder
from mappify.logger import get_logger
from mappify.query import Query

logger = get_logger(__name__)


class Session:
    """Handle that binds models to one DatabaseEngine (or any object with the same ``query`` API)."""

    def __init__(self, engine):
        self.engine = engine
        self.query_builder = QueryBuilder()
        self.populator = Populator(self)

    def query(self, model_class):
        return Query(model_class, self)

    def add(self, instance):
        current = instance._session
        if current is not None and current is not self:
            logger.debug("Rebinding %r to a new session", instance)
        object.__setattr__(instance, '_session', self)
        return instance

    def create(self, model_class, **data):
        instance = self.add(model_class(**data))
        instance.save()
        return instance

    def begin(self):
        self.engine.begin()

    def commit(self):
        self.engine.commit()

    def rollback(self):
        self.engine.rollback()

    def transaction(self):
        """``with session.transaction(): ...`` commits on success, rolls back on error."""
        return self.engine.transaction()

    def close(self):
        self.engine.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type and getattr(self.engine, "in_transaction", False):
            self.rollback()
        self.close()
