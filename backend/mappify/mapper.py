import re

from mappify.exceptions import AssociationError, ValidationError
from mappify.orm_types import Column, Number, Association, BelongsToMany
from mappify.logger import get_logger

logger = get_logger(__name__)


def pluralize(word):
    if re.search(r"[^aeiou]y$", word):
        return word[:-1] + "ies"
    if re.search(r"(s|x|z|ch|sh)$", word):
        return word + "es"
    return word + "s"


class Mapper:
    """Metadata for one model class, built once when the class is defined."""

    def __init__(self, cls, meta_attrs=None):
        self.cls = cls
        self.meta = meta_attrs or {}
        self.columns = {}
        self.pk = None
        self.associations = {}
        self._finalized = False

        self._resolve_table_name()
        self._resolve_columns()
        self._resolve_pk()
        self._resolve_declared_associations()

    def __repr__(self):
        cols = ", ".join(self.columns.keys())
        return (f"<Mapper class={self.cls.__name__} table={self.table_name} "
                f"columns=[{cols}] pk={self.pk} associations={list(self.associations)}>")

    def _resolve_table_name(self):
        self.table_name = (
            self.meta.get("table_name")
            or self.cls.__dict__.get("__tablename__")
            or pluralize(self.cls.__name__.lower())
        )

    def _resolve_columns(self):
        # Parent model columns first, then the class's own, in declaration order.
        for klass in reversed(self.cls.__mro__):
            for name, col in klass.__dict__.items():
                if isinstance(col, Column):
                    self.columns[name] = col

    def _resolve_pk(self):
        pk_cols = [name for name, col in self.columns.items() if col.pk]
        if len(pk_cols) > 1:
            raise ValidationError(f"Class {self.cls.__name__} declares more than one primary key: {pk_cols}")
        if pk_cols:
            self.pk = pk_cols[0]
            return

        if "id" in self.columns:
            self.columns["id"].pk = True
        else:
            implicit = Number(pk=True)
            implicit.__set_name__(self.cls, "id")
            setattr(self.cls, "id", implicit)
            self.columns = {"id": implicit, **self.columns}
        self.pk = "id"

    def _resolve_declared_associations(self):
        for klass in reversed(self.cls.__mro__):
            for name, assoc in klass.__dict__.items():
                if isinstance(assoc, Association):
                    # Inherited descriptors are shared objects; redeclaring by name overrides.
                    self.associations[name] = assoc

    def register_association(self, alias, assoc):
        if not alias:
            raise AssociationError(f"{self.cls.__name__}: an association needs an alias")
        if alias in self.associations:
            raise AssociationError(f"{self.cls.__name__} already has an association named '{alias}'")
        if alias in self.columns:
            raise AssociationError(f"{self.cls.__name__}: alias '{alias}' clashes with a column")
        assoc.alias = alias
        self.associations[alias] = assoc
        if self._finalized:
            self._resolve_association(assoc)
        return assoc

    def get_association(self, alias):
        self.finalize()
        try:
            return self.associations[alias]
        except KeyError:
            raise AssociationError(
                f"{self.cls.__name__} has no association named '{alias}'"
            ) from None

    def finalize(self):
        """Run the ``associations()`` hook once and resolve every association target."""
        if self._finalized:
            return
        self._finalized = True
        try:
            self.cls.associations()
            for assoc in self.associations.values():
                self._resolve_association(assoc)
        except Exception:
            self._finalized = False
            raise
        logger.debug("Finalized %r", self)

    def _resolve_association(self, assoc):
        assoc._resolved_target = self._resolve_target_class(assoc.target)
        if isinstance(assoc, BelongsToMany):
            assoc._resolved_through = self._resolve_target_class(assoc.through)

    def _resolve_target_class(self, target):
        if isinstance(target, type) and hasattr(target, "_mapper"):
            return target
        if isinstance(target, str):
            from mappify.base import Model
            candidates = [
                cls for cls in Model._registry
                if cls.__name__ == target or cls._mapper.table_name == target
            ]
            # Same-module definitions first, then the most recently defined one.
            local = [cls for cls in candidates if cls.__module__ == self.cls.__module__]
            if local or candidates:
                return (local or candidates)[-1]
        raise AssociationError(f"Cannot resolve association target {target!r} for {self.cls.__name__}")

    def insert_data(self, entity):
        """Declared columns set on ``entity``, falling back to column defaults."""
        data = {}
        for name, col in self.columns.items():
            if name in entity.__dict__:
                value = entity.__dict__[name]
                if name == self.pk and value is None:
                    continue
                data[name] = value
            elif col.default is not None:
                value = col.get_default()
                entity.__dict__[name] = value
                data[name] = value
        return data

    def update_data(self, entity):
        # Columns left out by `attributes`/`exclude` are not written back as NULL.
        return {
            name: entity.__dict__[name]
            for name in self.columns
            if name != self.pk and name in entity.__dict__
        }
