""":mod:`sqlalchemy_imagevariants.record` --- Model record access
~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

The model that variants are recorded onto holds one sub-record per
transform name.  Both of the model and its sub-records can be either
mappings or plain objects, so all of these work::

    model = {'thumbnail': {}, 'large': {}}
    model = user.variants  # a dict collection of Variant entities
    model = SimpleNamespace(thumbnail=SimpleNamespace(url=None))

"""
import collections.abc

__all__ = 'MISSING', 'get_field', 'get_record', 'set_fields'


#: Stands for a field the record doesn't have yet.
MISSING = object()


def get_record(model, name):
    """Gets the sub-record of the ``model`` for the transform ``name``.

    :param model: the model which holds sub-records
    :param name: the transform name
    :type name: :class:`str`
    :returns: the sub-record
    :raise LookupError: when there's no such sub-record

    """
    if isinstance(model, collections.abc.Mapping):
        return model[name]
    try:
        return getattr(model, name)
    except AttributeError:
        raise LookupError('{0!r} has no record for the transform '
                          '{1!r}'.format(model, name))


def get_field(record, field, default=None):
    """Gets the ``field`` value of the ``record``, or ``default``
    if it's not set.

    """
    if isinstance(record, collections.abc.Mapping):
        return record.get(field, default)
    return getattr(record, field, default)


def set_fields(record, fields):
    """Writes all ``fields`` onto the ``record`` at once.  If any of them
    fails to be written, fields written so far are restored to their
    previous values before the error propagates.

    :param record: the sub-record to update
    :param fields: field names to their values
    :type fields: :class:`collections.abc.Mapping`

    """
    mapping = isinstance(record, collections.abc.MutableMapping)
    written = []
    try:
        for field, value in fields.items():
            previous = get_field(record, field, MISSING)
            if mapping:
                record[field] = value
            else:
                setattr(record, field, value)
            written.append((field, previous))
    except Exception:
        for field, previous in reversed(written):
            if previous is not MISSING:
                if mapping:
                    record[field] = previous
                else:
                    setattr(record, field, previous)
            elif mapping:
                del record[field]
            else:
                delattr(record, field)
        raise
