import logging
import re
from collections.abc import Iterable, Mapping

from marcreader.exceptions import InvalidFilterRule
from marcreader.marc import ControlField, DataField, SubField, Field

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r'\s*[+-]?\d+')


class FilterRule:
    """Removes fields or subfields when producing a filtered record.

    ``tag`` is a regular expression searched in the field tag. ``subfields`` is
    a regular expression searched in each subfield code; when it is None the
    whole field is removed.

        FilterRule('9..')            # drop all 9XX fields
        FilterRule('...', '0')       # drop $0 from every data field
    """

    def __init__(self, tag: str, subfields: str | None = None) -> None:
        try:
            self.tag = re.compile(tag)
            self.subfields = re.compile(subfields) if subfields is not None else None
        except re.error as e:
            raise InvalidFilterRule(f"Invalid filtering rule pattern: {e}") from e

    @classmethod
    def from_dict(cls, obj: Mapping) -> 'FilterRule':
        if not isinstance(obj, Mapping) or not isinstance(obj.get('tag'), str):
            raise InvalidFilterRule(f"Filtering rule must have a 'tag' pattern: {obj!r}")
        subfields = obj.get('subfields')
        if subfields is not None and not isinstance(subfields, str):
            raise InvalidFilterRule(f"Filtering rule 'subfields' must be a pattern: {obj!r}")
        return cls(obj['tag'], subfields)

    def applies_to(self, tag: str) -> bool:
        # Subfield rules are never applied to tags numerically below 10.
        return self.tag.search(tag) is not None and (self.subfields is None or tag_number(tag) >= 10)

    def __repr__(self) -> str:
        subfields = self.subfields.pattern if self.subfields is not None else None
        return f"FilterRule({self.tag.pattern!r}, {subfields!r})"


def tag_number(tag: str) -> int:
    match = _LEADING_INT.match(tag)
    return int(match.group()) if match else 0


def as_rules(rules: Iterable[FilterRule | Mapping]) -> list[FilterRule]:
    return [rule if isinstance(rule, FilterRule) else FilterRule.from_dict(rule) for rule in rules]


def get_rules_for_tag(rules: list[FilterRule], tag: str) -> list[FilterRule]:
    return [rule for rule in rules if rule.applies_to(tag)]


def filter_subfields(rules: list[FilterRule], subfields: list[SubField]) -> list[SubField]:
    for rule in rules:
        if rule.subfields is None:
            return []

        remaining = [subfield for subfield in subfields if rule.subfields.search(subfield.code) is None]
        if not remaining:
            return []
        subfields = remaining

    return subfields


def filter_fields(fields: Iterable[Field], rules: Iterable[FilterRule | Mapping]) -> list[Field]:
    """Return copies of ``fields`` with the filtering rules applied."""
    rules = as_rules(rules)
    result = []

    for field in fields:
        field_rules = get_rules_for_tag(rules, field.tag)
        if not field_rules:
            result.append(field.copy())
            continue

        if isinstance(field, ControlField):
            logger.debug("Dropping control field %s", field.tag)
            continue

        subfields = filter_subfields(field_rules, field.subfields)
        if not subfields:
            logger.debug("Dropping field %s, no subfields left", field.tag)
            continue

        result.append(DataField(field.tag, field.ind1, field.ind2, [subfield.copy() for subfield in subfields]))

    return result
