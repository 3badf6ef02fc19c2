import unittest

from fixtures import LEADER, sample_record
from marcreader.marc import ControlField, DataField, SubField
from marcreader.record import Record


class TestGetFields(unittest.TestCase):
    def setUp(self):
        self.record = Record({'leader': LEADER, 'fields': [
            ControlField('001', '12345'),
            DataField('245', '1', '0', [SubField('a', 'Title'), SubField('k', 'Form')]),
        ]})

    def test_subfield_codes(self):
        fields = self.record.get_fields('245', ['a'])
        self.assertEqual(len(fields), 1)
        self.assertEqual(fields[0].tag, '245')
        self.assertEqual((fields[0].ind1, fields[0].ind2), ('1', '0'))
        self.assertEqual(fields[0].subfields, [SubField('a', 'Title')])

    def test_no_surviving_subfields_drops_field(self):
        self.assertEqual(self.record.get_fields('245', ['z']), [])
        self.assertIsNone(self.record.get_field('245', ['z']))

    def test_all_subfields(self):
        self.assertEqual(self.record.get_field('245').subfields, [SubField('a', 'Title'), SubField('k', 'Form')])
        self.assertEqual(self.record.get_field('245', []).subfields, [SubField('a', 'Title'), SubField('k', 'Form')])

    def test_control_field_value(self):
        self.assertEqual(self.record.get_fields('001'), ['12345'])
        self.assertEqual(self.record.get_field('001', ['a']), '12345')

    def test_missing_tag(self):
        self.assertEqual(self.record.get_fields('100'), [])
        self.assertIsNone(self.record.get_field('100'))

    def test_empty_tag_matches_all(self):
        fields = self.record.get_fields('')
        self.assertEqual(fields[0], '12345')
        self.assertEqual(fields[1].tag, '245')

    def test_results_are_copies(self):
        field = self.record.get_field('245')
        field.subfields[0].data = 'Changed'
        field.subfields.append(SubField('z', 'x'))
        self.assertEqual(self.record.get_subfield(self.record.get_field('245'), 'a'), 'Title')
        self.assertEqual(len(self.record.fields[1].subfields), 2)

    def test_empty_data_field_is_absent(self):
        record = Record({'leader': LEADER, 'fields': [DataField('500', ' ', ' ')]})
        self.assertEqual(record.get_fields('500'), [])
        self.assertEqual(record.get_all_fields(), [])
        self.assertEqual(record.get_fields_subfields('500', []), [])


class TestGetAllFields(unittest.TestCase):
    def test_all_fields(self):
        record = sample_record()
        fields = record.get_all_fields()
        self.assertEqual([field.tag for field in fields], [field.tag for field in record.fields])
        self.assertEqual(fields[0], ControlField('001', '12345'))
        self.assertEqual(fields[2].subfields[1], SubField('a', 'Title '))


class TestSubfields(unittest.TestCase):
    def setUp(self):
        self.record = sample_record()
        self.field = self.record.get_field('245')

    def test_get_subfield(self):
        self.assertEqual(self.record.get_subfield(self.field, 'a'), 'Title')
        self.assertEqual(self.record.get_subfield(self.field, 'k'), 'Form')
        self.assertEqual(self.record.get_subfield(self.field, 'z'), '')

    def test_get_subfield_of_missing_field(self):
        self.assertEqual(self.record.get_subfield(self.record.get_field('100'), 'a'), '')
        self.assertEqual(self.record.get_subfields(None), [])

    def test_get_subfields(self):
        self.assertEqual(self.record.get_subfields(self.field, 'k'), ['Form', 'Another'])
        self.assertEqual(self.record.get_subfields(self.field), ['880-01', 'Title', 'Form', 'Another', 'Part'])
        self.assertEqual(self.record.get_subfields(self.field, 'x'), [])


class TestFieldsSubfields(unittest.TestCase):
    def setUp(self):
        self.record = sample_record()

    def test_joined_per_field(self):
        self.assertEqual(self.record.get_fields_subfields('700', ['a', 'b']), ['Smith John', 'Doe'])

    def test_custom_separator(self):
        self.assertEqual(self.record.get_fields_subfields('700', ['a', 'b', 'e'], ', '), ['Smith, John', 'Doe, editor'])

    def test_separator_disabled(self):
        self.assertEqual(self.record.get_fields_subfields('700', ['a', 'b'], None), ['Smith', 'John', 'Doe'])

    def test_all_codes(self):
        self.assertEqual(self.record.get_fields_subfields('245', []), ['880-01 Title  Form Another Part'])

    def test_control_fields_are_skipped(self):
        self.assertEqual(self.record.get_fields_subfields('001', []), [])

    def test_no_matching_subfields(self):
        self.assertEqual(self.record.get_fields_subfields('700', ['z']), [])
        self.assertEqual(self.record.get_fields_subfields('700', ['z'], None), [])

    def test_values_are_not_trimmed(self):
        self.assertEqual(self.record.get_fields_subfields('245', ['a']), ['Title '])


if __name__ == '__main__':
    unittest.main()
