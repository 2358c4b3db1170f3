from mappify.exceptions import SessionError
from mappify.mapper import Mapper
from mappify.orm_types import HasOne, HasMany, BelongsTo, BelongsToMany
from mappify.states import ObjectState


class Model:
    """Base class for mapped entities.

    Columns are declared as class attributes (``name = Text()``), associations
    either as class attributes (``posts = HasMany("Post", foreign_key="user_id")``)
    or from the ``associations()`` hook. Both are collected once per class.
    """
    _registry = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        meta_cls = getattr(cls, "Meta", None)
        meta_attrs = {}
        if meta_cls:
            for attr in dir(meta_cls):
                if not attr.startswith('_'):
                    meta_attrs[attr] = getattr(meta_cls, attr)

        cls._mapper = Mapper(cls, meta_attrs)
        Model._registry[cls] = cls._mapper

    def __init__(self, **properties):
        object.__setattr__(self, '_orm_state', ObjectState.TRANSIENT)
        object.__setattr__(self, '_session', None)
        self.set_properties(properties)

    def __repr__(self):
        pk_val = self.pk_value
        return f"<{self.__class__.__name__}(id={'New' if pk_val is None else pk_val})>"

    @classmethod
    def associations(cls):
        """Hook for declaring associations in code; runs once per class."""

    @classmethod
    def has_one(cls, target, as_, foreign_key):
        return cls._mapper.register_association(as_, HasOne(target, foreign_key))

    @classmethod
    def has_many(cls, target, as_, foreign_key):
        return cls._mapper.register_association(as_, HasMany(target, foreign_key))

    @classmethod
    def belongs_to(cls, target, as_, foreign_key, key="id"):
        return cls._mapper.register_association(as_, BelongsTo(target, foreign_key, key=key))

    @classmethod
    def belongs_to_many(cls, target, as_, through, foreign_key, other_key, key="id"):
        return cls._mapper.register_association(
            as_, BelongsToMany(target, through, foreign_key, other_key, key=key)
        )

    @classmethod
    def _hydrate(cls, row, session, exclude=()):
        obj = cls(**{k: v for k, v in row.items() if k not in exclude})
        object.__setattr__(obj, '_orm_state', ObjectState.PERSISTENT)
        object.__setattr__(obj, '_session', session)
        return obj

    @property
    def pk_value(self):
        return getattr(self, self._mapper.pk)

    @property
    def is_new(self):
        return self.pk_value is None

    def set_properties(self, properties):
        for key, value in properties.items():
            setattr(self, key, value)

    def to_dict(self):
        """Loaded columns plus anything else assigned to the instance, minus loaded relations."""
        mapper = self._mapper
        data = {name: self.__dict__[name] for name in mapper.columns if name in self.__dict__}
        for key, value in self.__dict__.items():
            if not key.startswith('_') and key not in data and key not in mapper.associations:
                data[key] = value
        return data

    def _require_session(self):
        session = self._session
        if session is None:
            raise SessionError(
                f"{self!r} is not bound to a session; use session.add() or session.create()"
            )
        return session

    def save(self):
        """INSERT this instance and return its new primary key."""
        session = self._require_session()
        mapper = self._mapper
        data = mapper.insert_data(self)
        sql, params = session.query_builder.build_insert(mapper.table_name, data)
        result = session.engine.query(sql, params)

        if self.pk_value is None:
            setattr(self, mapper.pk, result.insert_id)
        object.__setattr__(self, '_orm_state', ObjectState.PERSISTENT)
        return self.pk_value

    create = save

    def update(self):
        """Write every loaded column back to the row with this primary key."""
        session = self._require_session()
        mapper = self._mapper
        sql, params = session.query_builder.build_update(
            mapper.table_name, mapper.update_data(self), self.pk_value, pk_column=mapper.pk
        )
        result = session.engine.query(sql, params)
        return result.affected_rows > 0

    def delete(self):
        session = self._require_session()
        mapper = self._mapper
        sql, params = session.query_builder.build_delete(
            mapper.table_name, self.pk_value, pk_column=mapper.pk
        )
        result = session.engine.query(sql, params)
        if result.affected_rows > 0:
            object.__setattr__(self, '_orm_state', ObjectState.DELETED)
            return True
        return False

    def populate(self, relation, attributes=None, exclude=None):
        """Load the association ``relation`` onto this instance and return the instance."""
        session = self._require_session()
        return session.populator.populate(self, relation, attributes=attributes, exclude=exclude)

    def attach(self, target, relation):
        """Link ``target`` to this instance through a hasOne/hasMany association and persist it."""
        session = self._require_session()
        return session.populator.attach(self, target, relation)
