import io
import json
import xml.etree.ElementTree as ET

import yaml

from marcreader.constants import US, FT, RT, LEADER_LEN, MARCXML_NS
from marcreader.exceptions import SerializeError
from marcreader.marc import ControlField
from marcreader.record import Record


def record_to_marc_json(record: Record, layout_format: int = 1) -> dict:
    """Build the MARC-in-JSON object of a record.

    Layout 1 keeps field order (a list of single-key objects), layout 2 groups
    fields under their tags.
    """
    obj = {
        'leader': record.leader,
        'fields': [] if layout_format == 1 else {}
    }

    for field in record.fields:
        if isinstance(field, ControlField):
            field_obj = field.data
        elif layout_format == 1:
            field_obj = {
                'ind1': field.ind1,
                'ind2': field.ind2,
                'subfields': [{subfield.code: subfield.data} for subfield in field.subfields]
            }
        else:
            field_obj = {'ind1': field.ind1, 'ind2': field.ind2, 'subfields': {}}
            for subfield in field.subfields:
                field_obj['subfields'].setdefault(subfield.code, []).append(subfield.data)

        if layout_format == 1:
            obj['fields'].append({field.tag: field_obj})
        else:
            obj['fields'].setdefault(field.tag, []).append(field_obj)

    return obj


class MarcJsonWriter:
    def __init__(self, f, layout_format: int = 1, indent: int | None = None):
        self.f = f
        self.format = layout_format
        self.indent = indent

    def _to_obj(self, record: Record) -> dict:
        return record_to_marc_json(record, self.format)

    def write(self, record: Record):
        json.dump(self._to_obj(record), self.f, indent=self.indent, ensure_ascii=False)

    def write_all(self, records: list[Record]):
        json.dump([self._to_obj(record) for record in records], self.f, indent=self.indent, ensure_ascii=False)


class MarcYamlWriter(MarcJsonWriter):
    def write(self, record: Record):
        yaml.safe_dump(self._to_obj(record), self.f, indent=self.indent, sort_keys=False, allow_unicode=True,
                       explicit_start=True)

    def write_all(self, records: list[Record]):
        yaml.safe_dump_all([self._to_obj(record) for record in records], self.f, indent=self.indent,
                           sort_keys=False, allow_unicode=True, explicit_start=True)


class MarcXmlWriter:
    def __init__(self, f, indent: int | None = None, xml_declaration=True, use_marc_namespace=False) -> None:
        self.f = f
        self.xml_declaration = xml_declaration
        self.indent = indent
        self.namespace = 'marc:' if use_marc_namespace else ''
        self.collection_tag = ET.Element(f'{self.namespace}collection')
        if use_marc_namespace:
            self.collection_tag.attrib['xmlns:marc'] = MARCXML_NS
        else:
            self.collection_tag.attrib['xmlns'] = MARCXML_NS

    def write(self, record: Record):
        record_tag = ET.SubElement(self.collection_tag, f'{self.namespace}record')
        leader_tag = ET.SubElement(record_tag, f'{self.namespace}leader')
        leader_tag.text = record.leader

        for field in record.fields:
            if isinstance(field, ControlField):
                field_tag = ET.SubElement(record_tag, f'{self.namespace}controlfield')
                field_tag.attrib['tag'] = field.tag
                field_tag.text = field.data
                continue

            field_tag = ET.SubElement(record_tag, f'{self.namespace}datafield')
            field_tag.attrib['tag'] = field.tag
            field_tag.attrib['ind1'] = field.ind1
            field_tag.attrib['ind2'] = field.ind2

            for subfield in field.subfields:
                subfield_tag = ET.SubElement(field_tag, f'{self.namespace}subfield')
                subfield_tag.attrib['code'] = subfield.code
                subfield_tag.text = subfield.data

    def write_all(self, *records):
        for record in records:
            self.write(record)

    def flush(self):
        if self.indent is not None:
            ET.indent(self.collection_tag, space=''.join([" "] * self.indent))

        self.f.write(ET.tostring(self.collection_tag, xml_declaration=self.xml_declaration, encoding="unicode"))


class MarcStreamWriter:
    def __init__(self, f, force_utf8_encoding=False) -> None:
        self.f = f
        self.force_utf8_encoding = force_utf8_encoding

    def _encode(self, record: Record) -> bytes:
        dir_buf = io.BytesIO()
        data_buf = io.BytesIO()

        ldr = record.leader[:LEADER_LEN].ljust(LEADER_LEN)
        encoding = "iso8859-1"
        if self.force_utf8_encoding or ldr[9] == 'a':
            ldr = ldr[:9] + 'a' + ldr[10:]
            encoding = 'utf-8'

        previous = 0
        for field in record.fields:
            try:
                if isinstance(field, ControlField):
                    data_buf.write(field.data.encode(encoding))
                else:
                    data_buf.write(field.ind1.encode(encoding))
                    data_buf.write(field.ind2.encode(encoding))
                    for subfield in field.subfields:
                        data_buf.write(US)
                        data_buf.write(subfield.code.encode(encoding))
                        data_buf.write(subfield.data.encode(encoding))
            except UnicodeEncodeError as e:
                raise SerializeError(f"Field {field.tag} cannot be encoded as {encoding}: {e}") from e
            data_buf.write(FT)

            length = data_buf.tell() - previous
            if length > 9999:
                raise SerializeError(f"Field {field.tag} is too long for ISO2709 ({length} bytes)")
            dir_buf.write(f"{field.tag[:3].rjust(3, '0')}{length:04d}{previous:05d}".encode('iso8859-1'))
            previous = data_buf.tell()

        dir_buf.write(FT)

        base_address = LEADER_LEN + dir_buf.tell()
        record_len = base_address + data_buf.tell() + 1
        if record_len > 99999:
            raise SerializeError(f"Record is too long for ISO2709 ({record_len} bytes)")

        # Indicator count, subfield code length and entry map are fixed by ISO2709.
        leader = f"{record_len:05d}{ldr[5:10]}22{base_address:05d}{ldr[17:20]}4500"

        return leader.encode('iso8859-1') + dir_buf.getvalue() + data_buf.getvalue() + RT

    def write(self, record: Record):
        self.f.write(self._encode(record))

    def write_all(self, *records):
        for record in records:
            self.write(record)


def write_marc_json_to_path(path: str, records: list[Record] | Record, encoding="utf-8", writer_getter=None):
    with open(path, "w", encoding=encoding) as f:
        writer = writer_getter(f) if writer_getter is not None else MarcJsonWriter(f)
        if isinstance(records, Record):
            writer.write(records)
        else:
            writer.write_all(records)


def write_marc_yaml_to_path(path: str, records: list[Record] | Record, encoding="utf-8", writer_getter=None):
    with open(path, "w", encoding=encoding) as f:
        writer = writer_getter(f) if writer_getter is not None else MarcYamlWriter(f)
        if isinstance(records, Record):
            writer.write(records)
        else:
            writer.write_all(records)


def write_marc_xml_to_path(path: str, records: list[Record] | Record, encoding="utf-8", writer_getter=None):
    with open(path, "w", encoding=encoding) as f:
        writer = writer_getter(f) if writer_getter is not None else MarcXmlWriter(f)
        if isinstance(records, Record):
            writer.write(records)
        else:
            writer.write_all(*records)

        writer.flush()


def write_marc_stream_to_path(path: str, records: list[Record] | Record, writer_getter=None):
    with open(path, "wb") as f:
        writer = writer_getter(f) if writer_getter is not None else MarcStreamWriter(f)
        if isinstance(records, Record):
            writer.write(records)
        else:
            writer.write_all(*records)
