from mappify.exceptions import AssociationError, ValidationError
from mappify.logger import get_logger

logger = get_logger(__name__)


class Populator:
    """Resolves association aliases into related instances with follow-up queries."""

    def __init__(self, session):
        self.session = session
        self._loaders = {
            "hasOne": self._load_has_one,
            "hasMany": self._load_has_many,
            "belongsTo": self._load_belongs_to,
            "belongsToMany": self._load_belongs_to_many,
        }

    def populate(self, instance, alias, attributes=None, exclude=None):
        assoc = instance._mapper.get_association(alias)
        shape = {"attributes": attributes, "exclude": exclude}
        value = self._loaders[assoc.kind](instance, assoc, shape)
        instance.__dict__[alias] = value
        return instance

    def _owner_pk(self, instance, assoc):
        pk_val = instance.pk_value
        if pk_val is None:
            raise ValidationError(f"Cannot load '{assoc.alias}' of unsaved {instance!r}")
        return pk_val

    def _load_has_one(self, instance, assoc, shape):
        where = {assoc.foreign_key: self._owner_pk(instance, assoc)}
        return self.session.query(assoc.target_model).find_one(where=where, **shape)

    def _load_has_many(self, instance, assoc, shape):
        where = {assoc.foreign_key: self._owner_pk(instance, assoc)}
        return self.session.query(assoc.target_model).find_all(where=where, **shape)

    def _load_belongs_to(self, instance, assoc, shape):
        fk_val = getattr(instance, assoc.foreign_key, None)
        if fk_val is None:
            return None
        return self.session.query(assoc.target_model).find_one(where={assoc.key: fk_val}, **shape)

    def _load_belongs_to_many(self, instance, assoc, shape):
        # One scan of the join table, then one lookup per join row (N+1).
        join_rows = self.session.query(assoc.through_model).find_all(
            where={assoc.foreign_key: self._owner_pk(instance, assoc)}
        )
        target_query = self.session.query(assoc.target_model)
        related = []
        for join_row in join_rows:
            other_id = getattr(join_row, assoc.other_key, None)
            if other_id is None:
                continue
            found = target_query.find_one(where={assoc.key: other_id}, **shape)
            if found is not None:
                related.append(found)
        logger.debug("Loaded %d %s through %d join rows", len(related), assoc.alias, len(join_rows))
        return related

    def attach(self, instance, target, alias):
        assoc = instance._mapper.get_association(alias)
        if assoc.kind not in ("hasOne", "hasMany"):
            raise AssociationError(f"attach() only supports hasOne/hasMany, '{alias}' is {assoc.kind}")
        if not isinstance(target, assoc.target_model):
            raise AssociationError(
                f"'{alias}' expects a {assoc.target_model.__name__}, got {type(target).__name__}"
            )

        setattr(target, assoc.foreign_key, self._owner_pk(instance, assoc))
        if target._session is None:
            self.session.add(target)
        if target.is_new:
            target.save()
        else:
            target.update()

        if assoc.kind == "hasMany":
            current = instance.__dict__.get(alias)
            if isinstance(current, list):
                current.append(target)
            else:
                instance.__dict__[alias] = [target]
        else:
            instance.__dict__[alias] = target
        return instance
