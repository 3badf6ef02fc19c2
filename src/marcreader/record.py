from __future__ import annotations

import logging
import typing
from collections.abc import Iterable, Iterator, Mapping

from marcreader.constants import LEADER_LEN, LINKAGE_CODE
from marcreader.exceptions import InvalidStructure
from marcreader.filtering import FilterRule, filter_fields
from marcreader.linkage import Linkage, parse_linkage_field
from marcreader.marc import ControlField, DataField, LinkedField, SubField, Field

if typing.TYPE_CHECKING:
    from marcreader.serialization import CodecRegistry

logger = logging.getLogger(__name__)


def normalize_leader(leader: str) -> str:
    """Pad or cut the leader to 24 characters and zero the record length and
    base address of data, which are meaningless outside ISO2709."""
    leader = leader[:LEADER_LEN].ljust(LEADER_LEN)
    return '00000' + leader[5:12] + '00000' + leader[17:]


def _select_subfields(field: DataField, subfield_codes: Iterable[str] | None) -> list[SubField]:
    return [
        subfield.copy() for subfield in field.subfields
        if not subfield_codes or subfield.code in subfield_codes
    ]


class Record:
    """A MARC record: a leader and an ordered list of control and data fields.

    ``data`` is either a serialized record in one of the registered formats
    (``str`` or ``bytes``, format detected automatically) or a mapping with
    ``leader`` and ``fields`` that is adopted as is.
    """

    def __init__(self, data: str | bytes | Mapping, registry: CodecRegistry | None = None) -> None:
        self.registry = registry
        self.leader = ''
        self.fields: list[Field] = []
        self._warnings: list[str] = []
        self.set_data(data)

    def set_data(self, data: str | bytes | Mapping) -> None:
        if isinstance(data, Mapping):
            leader = data.get('leader')
            fields = data.get('fields')
            if not isinstance(leader, str) or not isinstance(fields, (list, tuple)):
                raise InvalidStructure('Invalid data format provided: expected a leader string and a list of fields')
            for field in fields:
                if not isinstance(field, (ControlField, DataField)):
                    raise InvalidStructure(f"Invalid field in data: {field!r}")
            self.leader = leader
            self.fields = [field.copy() for field in fields]
            self._warnings = []
            return

        codec = self.get_registry().detect(data)
        logger.debug("Parsing record as %s", codec.name)
        parsed, warnings = codec.parse(data)
        self._set_parsed(parsed.leader, parsed.fields, warnings)

    def _set_parsed(self, leader: str, fields: list[Field], warnings: list[str]) -> None:
        self.fields = list(fields)
        self._warnings = list(warnings)
        self.leader = normalize_leader(leader) if leader else leader

    @classmethod
    def from_parsed(cls, leader: str, fields: list[Field], warnings: list[str] | None = None,
                    registry: CodecRegistry | None = None) -> Record:
        """Build a record from reader output, normalizing it like raw input."""
        record = cls({'leader': '', 'fields': []}, registry=registry)
        record._set_parsed(leader, fields, warnings or [])
        return record

    def get_registry(self) -> CodecRegistry:
        if self.registry is not None:
            return self.registry
        # serialization imports this module
        from marcreader.serialization import default_registry
        return default_registry()

    def to_format(self, format_name: str) -> str | bytes:
        return self.get_registry().get(format_name).serialize(self)

    @property
    def warnings(self) -> list[str]:
        return list(self._warnings)

    @property
    def control_fields(self) -> list[ControlField]:
        return [field for field in self.fields if isinstance(field, ControlField)]

    @property
    def data_fields(self) -> list[DataField]:
        return [field for field in self.fields if isinstance(field, DataField)]

    def get_field(self, field_tag: str, subfield_codes: Iterable[str] | None = None) -> str | DataField | None:
        results = self.get_fields(field_tag, subfield_codes)
        return results[0] if results else None

    def get_fields(self, field_tag: str, subfield_codes: Iterable[str] | None = None) -> list[str | DataField]:
        """Return data fields with only the requested subfields, and the values
        of control fields. An empty tag matches every field.

        Data fields left without any subfields are not returned.
        """
        subfield_codes = list(subfield_codes) if subfield_codes else None
        result = []

        for field in self.fields:
            if field_tag and field_tag != field.tag:
                continue
            if isinstance(field, ControlField):
                result.append(field.data)
                continue
            subfields = _select_subfields(field, subfield_codes)
            if subfields:
                result.append(DataField(field.tag, field.ind1, field.ind2, subfields))

        return result

    def get_all_fields(self) -> list[ControlField | DataField]:
        result = []

        for field in self.fields:
            if isinstance(field, ControlField) or field.subfields:
                result.append(field.copy())

        return result

    def get_subfield(self, field: DataField | None, subfield_code: str) -> str:
        for current in getattr(field, 'subfields', None) or []:
            if current.code == subfield_code:
                return current.data.strip()

        return ''

    def get_subfields(self, field: DataField | None, subfield_code: str = '') -> list[str]:
        return [
            current.data.strip() for current in getattr(field, 'subfields', None) or []
            if '' == subfield_code or current.code == subfield_code
        ]

    def get_fields_subfields(self, field_tag: str, subfield_codes: Iterable[str], separator: str | None = ' ') -> list[str]:
        """Return values of the given subfields of every ``field_tag`` field.

        With a separator, the values of each field are joined into one entry
        per field. With ``separator=None`` every subfield value is its own entry.
        """
        subfield_codes = list(subfield_codes)
        result = []

        for field in self.get_internal_fields(field_tag):
            if not isinstance(field, DataField):
                continue
            values = [
                subfield.data for subfield in field.subfields
                if not subfield_codes or subfield.code in subfield_codes
            ]
            if separator is None:
                result.extend(values)
            elif values:
                result.append(separator.join(values))

        return result

    def get_linked_field(self, field_tag: str, linked_field_tag: str, occurrence: str = '',
                         subfield_codes: Iterable[str] | None = None) -> LinkedField | None:
        for field in self.get_linked_fields(field_tag, linked_field_tag, subfield_codes):
            if not occurrence or occurrence == field.link.occurrence:
                return field
        return None

    def get_linked_fields(self, field_tag: str, linked_field_tag: str,
                          subfield_codes: Iterable[str] | None = None) -> list[LinkedField]:
        """Return ``field_tag`` fields (e.g. 880) whose $6 links to ``linked_field_tag``."""
        subfield_codes = list(subfield_codes) if subfield_codes else None
        result = []

        for field in self.get_internal_fields(field_tag):
            if not isinstance(field, DataField):
                continue
            link = parse_linkage_field(self.get_internal_subfield(field, LINKAGE_CODE))
            if link.field != linked_field_tag:
                continue
            subfields = _select_subfields(field, subfield_codes)
            if subfields:
                result.append(LinkedField(field.tag, field.ind1, field.ind2, subfields, link))

        return result

    def get_linked_fields_subfields(self, field_tag: str, linked_field_tag: str, subfield_codes: Iterable[str],
                                    separator: str | None = ' ') -> list[str]:
        result = []
        for field in self.get_linked_fields(field_tag, linked_field_tag, subfield_codes):
            subfields = self.get_subfields(field)
            if separator is not None:
                result.append(separator.join(subfields))
            else:
                result.extend(subfields)
        return result

    def get_field_link(self, field: DataField | None) -> Linkage:
        return parse_linkage_field(self.get_subfield(field, LINKAGE_CODE))

    def parse_linkage_field(self, link: str) -> Linkage:
        return parse_linkage_field(link)

    def get_filtered_record(self, rules: Iterable[FilterRule | Mapping]) -> Record:
        """Return an independent copy of the record without the fields and
        subfields matched by ``rules``.

            record.get_filtered_record([{'tag': '9..'}, {'tag': '...', 'subfields': '0'}])
        """
        return Record(
            {
                'leader': self.leader,
                'fields': filter_fields(self.fields, rules)
            },
            registry=self.registry
        )

    def get_internal_fields(self, tag: str) -> list[Field]:
        return [field for field in self.fields if field.tag == tag]

    def get_internal_subfield(self, field: DataField, subfield_code: str) -> str:
        for subfield in field.subfields:
            if subfield.code == subfield_code:
                return subfield.data.strip()
        return ''

    def __getitem__(self, key) -> list[Field] | None:
        res = self.get_internal_fields(key)
        return res if len(res) > 0 else None

    def __contains__(self, key) -> bool:
        for field in self.fields:
            if field.tag == key:
                return True

        return False

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __str__(self) -> str:
        res = f"=LDR {self.leader}"
        for field in self.fields:
            res += f"\n={field}"
        return res
