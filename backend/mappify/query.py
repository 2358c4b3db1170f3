from collections.abc import Mapping

from mappify.conditions import LOGICAL_OPS, NEGATION_OP
from mappify.exceptions import NotFoundError, ValidationError
from mappify.logger import get_logger
from mappify.options import parse_options
from mappify.where import compile_where

logger = get_logger(__name__)


def _equality_values(where):
    """Column values pinned by ``where``: plain scalars and ``eq`` operands, also inside ``and`` groups."""
    data = {}
    for key, value in where.items():
        if key == "and":
            for item in value:
                if isinstance(item, Mapping):
                    data.update(_equality_values(item))
        elif key in LOGICAL_OPS or key == NEGATION_OP:
            continue
        elif not isinstance(value, Mapping):
            data[key] = value
        elif "eq" in value:
            data[key] = value["eq"]
    return data


class Query:
    """Finder operations for one model class, run through ``session``.

    Lenient finders (``find_one``, ``find_all``, ``find_by_id``,
    ``find_by_id_and_update``) report a miss with ``None`` or ``[]``.
    Strict ones (``find_one_and_update``, ``find_one_and_delete``,
    ``find_by_id_and_delete``) raise NotFoundError.
    """

    def __init__(self, model_class, session):
        self.model_class = model_class
        self.session = session
        self.mapper = model_class._mapper

    def __repr__(self):
        return f"<Query {self.model_class.__name__}>"

    def _run(self, opts, limit=None, offset=None):
        compiled = compile_where(opts.where)
        sql, params = self.session.query_builder.build_select(
            self.mapper.table_name,
            columns=opts.attributes,
            where=compiled,
            order=opts.order,
            group=opts.group,
            limit=limit,
            offset=offset,
        )
        rows = self.session.engine.query(sql, params)
        exclude = set(opts.exclude)
        return [self.model_class._hydrate(row, self.session, exclude) for row in rows]

    def _with_pk(self, opts):
        # The strict finders write back by primary key, so it is always selected.
        pk = self.mapper.pk
        update = {"exclude": [name for name in opts.exclude if name != pk]}
        if opts.attributes is not None and pk not in opts.attributes:
            update["attributes"] = [pk, *opts.attributes]
        return opts.model_copy(update=update)

    def fetch(self):
        """Every row of the table, no options."""
        sql, params = self.session.query_builder.build_select(self.mapper.table_name)
        rows = self.session.engine.query(sql, params)
        return [self.model_class._hydrate(row, self.session) for row in rows]

    def find_one(self, options=None, **kwargs):
        opts = parse_options(options, **kwargs)
        if not opts.where:
            raise ValidationError(f"{self.model_class.__name__}.find_one requires a non-empty 'where'")
        results = self._run(opts, limit=1)
        return results[0] if results else None

    def find_all(self, options=None, **kwargs):
        opts = parse_options(options, **kwargs)
        return self._run(opts, limit=opts.limit, offset=opts.sql_offset)

    def find_by_id(self, pk):
        if pk is None:
            raise ValidationError(f"{self.model_class.__name__}.find_by_id requires an id")
        return self.find_one(where={self.mapper.pk: pk})

    def find_or_create(self, options, defaults=None):
        """Return ``(instance, created)``.

        On a miss the new row is built from the equality conditions of
        ``where`` merged with ``defaults``.
        """
        opts = parse_options(options)
        instance = self.find_one(opts)
        if instance is not None:
            return instance, False

        data = _equality_values(opts.where)
        data.update(defaults or {})
        instance = self.session.add(self.model_class(**data))
        instance.save()
        logger.debug("find_or_create created %r", instance)
        return instance, True

    def find_by_id_and_delete(self, pk):
        instance = self.find_by_id(pk)
        if instance is None:
            raise NotFoundError(f"{self.model_class.__name__} with {self.mapper.pk}={pk!r} not found")
        return instance.delete()

    def find_one_and_delete(self, options=None, **kwargs):
        opts = self._with_pk(parse_options(options, **kwargs))
        instance = self.find_one(opts)
        if instance is None:
            raise NotFoundError(f"No {self.model_class.__name__} matches {opts.where!r}")
        return instance.delete()

    def find_one_and_update(self, options, data):
        opts = self._with_pk(parse_options(options))
        instance = self.find_one(opts)
        if instance is None:
            raise NotFoundError(f"No {self.model_class.__name__} matches {opts.where!r}")
        instance.set_properties(data)
        instance.update()
        return instance

    def find_by_id_and_update(self, pk, data):
        instance = self.find_by_id(pk)
        if instance is None:
            return None
        instance.set_properties(data)
        instance.update()
        return instance
