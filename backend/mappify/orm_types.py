class Column:
    """A declared, persisted field. Declaration order is column order."""

    def __init__(self, dtype, pk=False, nullable=True, unique=False, default=None):
        self.dtype = dtype
        self.pk = pk
        self.nullable = nullable
        self.unique = unique
        self.default = default
        self.name = None

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        # Only reached while the instance has no value of its own for this field.
        return None

    def get_default(self):
        return self.default() if callable(self.default) else self.default

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name}{' pk' if self.pk else ''}>"


class Text(Column):
    def __init__(self, pk=False, nullable=True, unique=False, default=None):
        super().__init__(str, pk, nullable, unique, default)

class Number(Column):
    def __init__(self, pk=False, nullable=True, unique=False, default=None):
        super().__init__(int, pk, nullable, unique, default)

class Real(Column):
    def __init__(self, pk=False, nullable=True, unique=False, default=None):
        super().__init__(float, pk, nullable, unique, default)

class Boolean(Column):
    def __init__(self, pk=False, nullable=True, unique=False, default=None):
        super().__init__(bool, pk, nullable, unique, default)


class Association:
    """Relation descriptor. ``target`` may be a model class or a class/table name."""
    kind = None

    def __init__(self, target, foreign_key):
        self.target = target
        self.foreign_key = foreign_key
        self.alias = None
        self._resolved_target = None

    def __set_name__(self, owner, name):
        self.alias = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return None

    @property
    def target_model(self):
        return self._resolved_target

    def _target_name(self):
        return getattr(self._resolved_target, "__name__", self.target)

    def __repr__(self):
        return f"<{self.kind} {self.alias} target={self._target_name()} foreign_key={self.foreign_key}>"


class HasOne(Association):
    """One related row; the foreign key lives on the target."""
    kind = "hasOne"


class HasMany(Association):
    """Many related rows; the foreign key lives on the target."""
    kind = "hasMany"


class BelongsTo(Association):
    """The foreign key lives on this model and points at ``key`` of the target."""
    kind = "belongsTo"

    def __init__(self, target, foreign_key, key="id"):
        super().__init__(target, foreign_key)
        self.key = key


class BelongsToMany(Association):
    """Many-to-many through a join model holding ``foreign_key`` (this side) and ``other_key``."""
    kind = "belongsToMany"

    def __init__(self, target, through, foreign_key, other_key, key="id"):
        super().__init__(target, foreign_key)
        self.through = through
        self.other_key = other_key
        self.key = key
        self._resolved_through = None

    @property
    def through_model(self):
        return self._resolved_through

    def __repr__(self):
        through = getattr(self._resolved_through, "__name__", self.through)
        return (f"<{self.kind} {self.alias} target={self._target_name()} through={through} "
                f"foreign_key={self.foreign_key} other_key={self.other_key}>")
