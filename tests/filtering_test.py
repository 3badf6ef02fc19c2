import unittest

from fixtures import LEADER, sample_fields, sample_record
from marcreader.exceptions import InvalidFilterRule
from marcreader.filtering import FilterRule, tag_number
from marcreader.marc import ControlField, DataField, SubField
from marcreader.record import Record


class TestFilterRule(unittest.TestCase):
    def test_tag_number(self):
        self.assertEqual(tag_number('245'), 245)
        self.assertEqual(tag_number('008'), 8)
        self.assertEqual(tag_number('1ab'), 1)
        self.assertEqual(tag_number('abc'), 0)

    def test_applies_to_uses_search(self):
        self.assertTrue(FilterRule('9..').applies_to('901'))
        self.assertTrue(FilterRule('0').applies_to('650'))
        self.assertFalse(FilterRule('^9').applies_to('490'))

    def test_subfield_rules_skip_tags_below_ten(self):
        # Subfield rules never apply to tags whose numeric value is below 10.
        rule = FilterRule('...', '0')
        self.assertFalse(rule.applies_to('001'))
        self.assertFalse(rule.applies_to('abc'))
        self.assertTrue(rule.applies_to('010'))
        self.assertTrue(FilterRule('...').applies_to('001'))

    def test_from_dict(self):
        rule = FilterRule.from_dict({'tag': '650', 'subfields': '[02]'})
        self.assertEqual(rule.tag.pattern, '650')
        self.assertEqual(rule.subfields.pattern, '[02]')
        self.assertIsNone(FilterRule.from_dict({'tag': '9..'}).subfields)

    def test_invalid_rules(self):
        with self.assertRaises(InvalidFilterRule):
            FilterRule('[')
        with self.assertRaises(InvalidFilterRule):
            FilterRule.from_dict({'subfields': 'a'})
        with self.assertRaises(InvalidFilterRule):
            FilterRule.from_dict({'tag': '245', 'subfields': ['a']})


class TestFilteredRecord(unittest.TestCase):
    def setUp(self):
        self.record = sample_record()

    def test_delete_whole_field(self):
        filtered = self.record.get_filtered_record([FilterRule('9..')])
        self.assertNotIn('901', filtered)
        self.assertEqual(filtered.get_field('245'), self.record.get_field('245'))
        self.assertEqual(len(filtered.fields), len(self.record.fields) - 1)

    def test_rules_as_dicts(self):
        filtered = self.record.get_filtered_record([{'tag': '9..'}])
        self.assertNotIn('901', filtered)

    def test_delete_subfields(self):
        filtered = self.record.get_filtered_record([{'tag': '...', 'subfields': '0'}])
        self.assertEqual(filtered.get_field('650').subfields, [SubField('a', 'Cataloging')])
        self.assertEqual(filtered.get_field('001'), '12345')
        self.assertEqual(filtered.get_field('008'), self.record.get_field('008'))
        self.assertEqual(filtered.get_field('245'), self.record.get_field('245'))

    def test_field_without_remaining_subfields_is_dropped(self):
        filtered = self.record.get_filtered_record([{'tag': '901', 'subfields': 'a'}])
        self.assertNotIn('901', filtered)

    def test_cumulative_rules(self):
        filtered = self.record.get_filtered_record([
            {'tag': '245', 'subfields': 'k'},
            {'tag': '2', 'subfields': '[6p]'},
        ])
        self.assertEqual(filtered.get_field('245').subfields, [SubField('a', 'Title ')])

    def test_cumulative_rules_drop_field(self):
        filtered = self.record.get_filtered_record([
            {'tag': '700', 'subfields': 'a'},
            {'tag': '700', 'subfields': '[be]'},
        ])
        self.assertNotIn('700', filtered)

    def test_whole_field_rule_after_subfield_rule(self):
        filtered = self.record.get_filtered_record([
            {'tag': '650', 'subfields': '0'},
            {'tag': '650'},
        ])
        self.assertNotIn('650', filtered)

    def test_control_field_removed_by_tag_rule(self):
        filtered = self.record.get_filtered_record([{'tag': '00[18]'}])
        self.assertEqual(filtered.control_fields, [])
        self.assertIn('245', filtered)

    def test_order_and_leader_are_kept(self):
        filtered = self.record.get_filtered_record([{'tag': '650'}])
        self.assertEqual(filtered.leader, LEADER)
        self.assertEqual([field.tag for field in filtered],
                         ['001', '008', '245', '700', '700', '880', '880', '901'])

    def test_no_rules(self):
        filtered = self.record.get_filtered_record([])
        self.assertEqual(filtered.fields, self.record.fields)
        self.assertEqual(filtered.warnings, [])

    def test_independent_copy(self):
        filtered = self.record.get_filtered_record([{'tag': '9..'}])
        filtered.fields[2].subfields[1].data = 'Changed'
        filtered.fields[2].subfields.pop()
        filtered.fields[0].data = '99999'
        self.assertEqual(self.record.fields, sample_fields())

    def test_short_data_field_tag_keeps_subfields(self):
        record = Record({'leader': LEADER, 'fields': [
            DataField('009', ' ', ' ', [SubField('0', 'kept')]),
            DataField('500', ' ', ' ', [SubField('0', 'removed'), SubField('a', 'Note')]),
        ]})
        filtered = record.get_filtered_record([{'tag': '...', 'subfields': '0'}])
        self.assertEqual(filtered.fields, [
            DataField('009', ' ', ' ', [SubField('0', 'kept')]),
            DataField('500', ' ', ' ', [SubField('a', 'Note')]),
        ])

    def test_source_control_field_untouched(self):
        record = Record({'leader': LEADER, 'fields': [ControlField('001', 'x')]})
        filtered = record.get_filtered_record([{'tag': '001'}])
        self.assertEqual(filtered.fields, [])
        self.assertEqual(record.fields, [ControlField('001', 'x')])


if __name__ == '__main__':
    unittest.main()
