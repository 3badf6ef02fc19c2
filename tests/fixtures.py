from marcreader.marc import ControlField, DataField, SubField
from marcreader.record import Record

LEADER = "00000nam a2200000 i 4500"


def sample_fields():
    return [
        ControlField('001', '12345'),
        ControlField('008', '200101s2020    fi |||||||||||||||||fin||'),
        DataField('245', '1', '0', [
            SubField('6', '880-01'),
            SubField('a', 'Title '),
            SubField('k', 'Form'),
            SubField('k', 'Another'),
            SubField('p', 'Part'),
        ]),
        DataField('650', ' ', '7', [
            SubField('a', 'Cataloging'),
            SubField('0', 'http://example.org/subject/1'),
        ]),
        DataField('700', '1', ' ', [SubField('a', 'Smith'), SubField('b', 'John')]),
        DataField('700', '1', ' ', [SubField('a', 'Doe'), SubField('e', 'editor')]),
        DataField('880', '1', '0', [
            SubField('6', '245-01/(N/r'),
            SubField('a', 'Заглавие'),
            SubField('p', 'Часть'),
        ]),
        DataField('880', '1', ' ', [SubField('6', '700-02/(N'), SubField('a', 'Смит')]),
        DataField('901', ' ', ' ', [SubField('a', 'local note')]),
    ]


def sample_record(registry=None) -> Record:
    return Record({'leader': LEADER, 'fields': sample_fields()}, registry=registry)
