import collections

from pytest import raises

from sqlalchemy_imagevariants.record import get_field, get_record, set_fields
from sqlalchemy_imagevariants.schema import (IMAGE_FIELD_NAMES,
                                             file_field_schema,
                                             image_field_schema,
                                             variant_field_schema)


class Record(object):
    url = None


def test_get_record():
    thumbnail = {}
    assert get_record({'thumbnail': thumbnail}, 'thumbnail') is thumbnail
    model = Record()
    model.thumbnail = thumbnail
    assert get_record(model, 'thumbnail') is thumbnail
    with raises(LookupError):
        get_record({}, 'thumbnail')
    with raises(LookupError):
        get_record(Record(), 'thumbnail')


def test_get_field():
    assert get_field({'url': 'a'}, 'url') == 'a'
    assert get_field({}, 'url') is None
    assert get_field(Record(), 'url') is None
    assert get_field(Record(), 'width', 0) == 0


def test_set_fields():
    fields = collections.OrderedDict([('url', 'a'), ('width', 1)])
    record = {'url': None, 'height': 2}
    set_fields(record, fields)
    assert record == {'url': 'a', 'width': 1, 'height': 2}
    record = Record()
    set_fields(record, fields)
    assert record.url == 'a'
    assert record.width == 1


def test_variant_field_schema():
    assert list(file_field_schema()) == ['name', 'path', 'size', 'type',
                                         'url']
    assert tuple(image_field_schema()) == IMAGE_FIELD_NAMES
    assert list(variant_field_schema()) == (list(file_field_schema()) +
                                            list(IMAGE_FIELD_NAMES))
    assert variant_field_schema() is not variant_field_schema()


class RejectingDict(dict):

    def __setitem__(self, key, value):
        if key == 'url':
            raise ValueError('url is not allowed')
        super(RejectingDict, self).__setitem__(key, value)


def test_set_fields_restores_mapping():
    fields = collections.OrderedDict([('width', 1), ('height', 2),
                                      ('url', 'a')])
    record = RejectingDict(width=0)
    with raises(ValueError):
        set_fields(record, fields)
    assert record == {'width': 0}


def test_set_fields_restores_object():
    fields = collections.OrderedDict([('width', 1), ('height', 2),
                                      ('url', 'a')])

    class RejectingRecord(Record):

        def __setattr__(self, name, value):
            if name == 'url':
                raise ValueError('url is not allowed')
            super(RejectingRecord, self).__setattr__(name, value)

    record = RejectingRecord()
    record.width = 0
    with raises(ValueError):
        set_fields(record, fields)
    assert vars(record) == {'width': 0}
