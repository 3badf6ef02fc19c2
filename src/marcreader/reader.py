import io
import json
import logging
import xml.etree.ElementTree as ET
from collections.abc import Mapping

import yaml

from marcreader.constants import US, FT, RT, LEADER_LEN, DIRECTORY_ENTRY_LEN
from marcreader.exceptions import ParseError
from marcreader.marc import ControlField, DataField, SubField, Field
from marcreader.record import Record

logger = logging.getLogger(__name__)

Parsed = tuple[str, list[Field], list[str]]


def _warn(warnings: list[str], message: str) -> None:
    logger.warning(message)
    warnings.append(message)


def is_control_tag(tag: str) -> bool:
    return tag.isdecimal() and int(tag) < 10


def _decode(data: bytes, encoding: str, tag: str, warnings: list[str]) -> str:
    try:
        return data.decode(encoding)
    except UnicodeDecodeError:
        _warn(warnings, f"Invalid {encoding} data in field {tag}")
        return data.decode(encoding, errors='replace')


def _parse_data_field(tag: str, field_bytes: bytes, encoding: str, warnings: list[str]) -> DataField:
    parts = field_bytes.split(US)
    indicators = _decode(parts[0], encoding, tag, warnings).ljust(2)
    field = DataField(tag, indicators[0], indicators[1])

    for part in parts[1:]:
        if not part:
            _warn(warnings, f"Empty subfield in field {tag}")
            continue
        text = _decode(part, encoding, tag, warnings)
        field.subfields.append(SubField(text[0], text[1:]))

    return field


def parse_iso2709(data: bytes, force_utf8_encoding: bool = False) -> Parsed:
    """Parse one ISO2709 record.

    Damage that still leaves something readable is reported as warnings.
    """
    warnings: list[str] = []
    if len(data) < LEADER_LEN:
        raise ParseError(f"Record too short: {len(data)} bytes")

    leader = data[:LEADER_LEN].decode('iso-8859-1')
    encoding = 'utf-8' if leader[9:10] == 'a' or force_utf8_encoding else 'iso-8859-1'

    if data.endswith(RT):
        data = data[:-1]
    else:
        _warn(warnings, "Missing record terminator")

    base_address = leader[12:17]
    if not base_address.isdecimal() or not LEADER_LEN < int(base_address) <= len(data):
        _warn(warnings, f"Invalid base address of data '{base_address}', using end of directory")
        directory_end = data.find(FT, LEADER_LEN)
        if directory_end < 0:
            raise ParseError("Cannot locate the end of the directory")
        base = directory_end + 1
    else:
        base = int(base_address)

    directory = data[LEADER_LEN:base - 1]
    if len(directory) % DIRECTORY_ENTRY_LEN:
        _warn(warnings, f"Invalid directory length {len(directory)}")

    fields: list[Field] = []
    for pos in range(0, len(directory) - DIRECTORY_ENTRY_LEN + 1, DIRECTORY_ENTRY_LEN):
        entry = directory[pos:pos + DIRECTORY_ENTRY_LEN].decode('iso-8859-1')
        tag = entry[0:3]
        length = entry[3:7]
        start = entry[7:12]
        if not length.isdecimal() or not start.isdecimal():
            _warn(warnings, f"Invalid directory entry '{entry}'")
            continue

        field_bytes = data[base + int(start):base + int(start) + int(length)]
        if field_bytes.endswith(FT):
            field_bytes = field_bytes[:-1]
        else:
            _warn(warnings, f"Invalid field {tag} data (no end of field marker)")

        if is_control_tag(tag):
            fields.append(ControlField(tag, _decode(field_bytes, encoding, tag, warnings)))
        else:
            fields.append(_parse_data_field(tag, field_bytes, encoding, warnings))

    return leader, fields, warnings


def _marc_json_data_field(tag: str, field_obj, warnings: list[str]) -> DataField | None:
    if not isinstance(field_obj, Mapping):
        _warn(warnings, f"Invalid field {tag}: {field_obj!r}")
        return None

    field = DataField(tag, field_obj.get('ind1') or ' ', field_obj.get('ind2') or ' ')
    subfields = field_obj.get('subfields') or []

    if isinstance(subfields, Mapping):
        for code, values in subfields.items():
            if not isinstance(values, list):
                values = [values]
            for value in values:
                field.subfields.append(SubField(code, str(value)))
    else:
        for subfield_obj in subfields:
            if not isinstance(subfield_obj, Mapping):
                _warn(warnings, f"Invalid subfield in field {tag}: {subfield_obj!r}")
                continue
            for code, value in subfield_obj.items():
                field.subfields.append(SubField(code, str(value)))

    return field


def parse_marc_json(record_obj) -> Parsed:
    """Parse a MARC-in-JSON object, in either the list or the tag-keyed layout."""
    if not isinstance(record_obj, Mapping) or not isinstance(record_obj.get('leader'), str):
        raise ParseError('MARC-in-JSON record must be an object with a leader string')

    warnings: list[str] = []
    fields: list[Field] = []
    entries = []

    if isinstance(record_obj.get('fields'), list):
        for field_obj in record_obj['fields']:
            if not isinstance(field_obj, Mapping) or len(field_obj) != 1:
                _warn(warnings, f"Invalid field entry: {field_obj!r}")
                continue
            entries.extend(field_obj.items())
    elif isinstance(record_obj.get('fields'), Mapping):
        for tag, field_objs in record_obj['fields'].items():
            if not isinstance(field_objs, list):
                field_objs = [field_objs]
            entries.extend((tag, field_obj) for field_obj in field_objs)
    else:
        raise ParseError('MARC-in-JSON record has no fields')

    for tag, field_obj in entries:
        tag = str(tag)
        if isinstance(field_obj, str):
            fields.append(ControlField(tag, field_obj))
            continue
        field = _marc_json_data_field(tag, field_obj, warnings)
        if field is not None:
            fields.append(field)

    return record_obj['leader'], fields, warnings


def _local_name(element: ET.Element) -> str:
    return element.tag.rsplit('}', 1)[-1]


def find_record_elements(root: ET.Element) -> list[ET.Element]:
    if _local_name(root) == 'record':
        return [root]
    return [child for child in root if _local_name(child) == 'record']


def parse_marc_xml(record_tag: ET.Element) -> Parsed:
    warnings: list[str] = []
    leader = ''
    fields: list[Field] = []

    # Children are read in document order so that field order is kept.
    for child in record_tag:
        name = _local_name(child)
        if name == 'leader':
            leader = child.text or ''
        elif name == 'controlfield':
            fields.append(ControlField(child.attrib.get('tag', ''), child.text or ''))
        elif name == 'datafield':
            field = DataField(child.attrib.get('tag', ''), child.attrib.get('ind1', ' '), child.attrib.get('ind2', ' '))
            for subfield_tag in child:
                if _local_name(subfield_tag) != 'subfield':
                    continue
                if 'code' not in subfield_tag.attrib:
                    _warn(warnings, f"Subfield without code in field {field.tag}")
                    continue
                field.subfields.append(SubField(subfield_tag.attrib['code'], subfield_tag.text or ''))
            fields.append(field)
        else:
            _warn(warnings, f"Unexpected element '{name}' in record")

    return leader, fields, warnings


def parse_xml_root(data: str) -> ET.Element:
    try:
        return ET.fromstring(data)
    except ET.ParseError as e:
        raise ParseError(f"Invalid MARCXML: {e}") from e


class MarcJsonReader:
    def __init__(self, f) -> None:
        try:
            self.json = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid MARC-in-JSON: {e}") from e
        if not isinstance(self.json, list):
            self.json = [self.json]

    def __next(self, i) -> Record:
        return Record.from_parsed(*parse_marc_json(self.json[i]))

    def __iter__(self):
        for i in range(len(self.json)):
            yield self.__next(i)


class MarcXmlReader:
    def __init__(self, data) -> None:
        self.root = parse_xml_root(data if isinstance(data, str) else data.read())
        self.record_tags = find_record_elements(self.root)

    def __next(self, i) -> Record:
        return Record.from_parsed(*parse_marc_xml(self.record_tags[i]))

    def __iter__(self):
        for i in range(len(self.record_tags)):
            yield self.__next(i)


class MarcYamlReader:
    """Reads the records of a multi-document YAML stream."""

    def __init__(self, f) -> None:
        try:
            self.documents = [document for document in yaml.safe_load_all(f) if document is not None]
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}") from e

    def __iter__(self):
        for document in self.documents:
            yield Record.from_parsed(*parse_marc_json(document))


class MarcStreamReader:
    """Reads consecutive ISO2709 records from a binary file."""

    def __init__(self, f, force_utf8_encoding=False) -> None:
        self.__bytes: bytes = f.read()
        self.__bytes_len = len(self.__bytes)
        self.__buf = io.BytesIO(self.__bytes)
        self.force_utf8_encoding = force_utf8_encoding

    def read_next(self) -> Record | None:
        start = self.__buf.tell()
        leader_bytes = self.__buf.read(LEADER_LEN)
        if not leader_bytes.strip():
            return None

        rec_len = leader_bytes[0:5]
        if rec_len.isdigit() and int(rec_len) > LEADER_LEN:
            rec_bytes = leader_bytes + self.__buf.read(int(rec_len) - LEADER_LEN)
        else:
            # Unusable record length, fall back to the record terminator.
            end = self.__bytes.find(RT, start)
            end = self.__bytes_len if end < 0 else end + 1
            rec_bytes = self.__bytes[start:end]
            self.__buf.seek(end)

        return Record.from_parsed(*parse_iso2709(rec_bytes, self.force_utf8_encoding))

    def __iter__(self):
        while self.__buf.tell() < self.__bytes_len:
            record = self.read_next()
            if record is None:
                break
            yield record


def read_marc_stream_from_path(path: str, force_utf8_encoding=False) -> list[Record]:
    with open(path, "rb") as f:
        return list(MarcStreamReader(f, force_utf8_encoding))


def read_marc_json_from_path(path: str, encoding="utf-8") -> list[Record]:
    with open(path, "r", encoding=encoding) as f:
        return list(MarcJsonReader(f))


def read_marc_yaml_from_path(path: str, encoding="utf-8") -> list[Record]:
    with open(path, "r", encoding=encoding) as f:
        return list(MarcYamlReader(f))


def read_marc_xml_from_path(path: str, encoding="utf-8") -> list[Record]:
    with open(path, "r", encoding=encoding) as f:
        return list(MarcXmlReader(f))
