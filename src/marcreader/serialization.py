"""Codecs converting records from and to their serialized formats.

A codec implements ``can_parse``, ``parse`` and ``serialize``. Codecs are
looked up by name in a ``CodecRegistry``; raw input is given to the first
registered codec that claims it. The registry is set up once and frozen
before records use it: ``default_registry()`` holds the built-in ISO2709,
JSON (MARC-in-JSON), MARCXML and YAML codecs.
"""
import io
import json
import logging
import threading

import yaml

from marcreader.exceptions import ParseError, RegistryFrozen, UnknownFormat, UnrecognizedFormat
from marcreader.reader import parse_iso2709, parse_marc_json, parse_marc_xml, parse_xml_root, find_record_elements
from marcreader.record import Record
from marcreader.writer import MarcStreamWriter, MarcXmlWriter, record_to_marc_json

logger = logging.getLogger(__name__)


def _as_text(raw: str | bytes) -> str | None:
    if isinstance(raw, str):
        return raw
    if not isinstance(raw, bytes):
        return None
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError:
        return None


class Codec:
    name: str = ''

    def can_parse(self, raw: str | bytes) -> bool:
        raise NotImplementedError

    def parse(self, raw: str | bytes) -> tuple[Record, list[str]]:
        raise NotImplementedError

    def serialize(self, record: Record) -> str | bytes:
        raise NotImplementedError

    @staticmethod
    def _record(leader: str, fields, warnings) -> tuple[Record, list[str]]:
        return Record({'leader': leader, 'fields': fields}), warnings


class Iso2709(Codec):
    name = 'ISO2709'

    def __init__(self, force_utf8_encoding: bool = False) -> None:
        self.force_utf8_encoding = force_utf8_encoding

    def can_parse(self, raw: str | bytes) -> bool:
        if not isinstance(raw, (str, bytes)):
            return False
        head = raw[:5]
        if isinstance(head, bytes):
            head = head.decode('iso-8859-1')
        return len(head) == 5 and head.isdecimal()

    def parse(self, raw: str | bytes) -> tuple[Record, list[str]]:
        if isinstance(raw, str):
            raw = raw.encode('utf-8')
        return self._record(*parse_iso2709(raw, self.force_utf8_encoding))

    def serialize(self, record: Record) -> bytes:
        buf = io.BytesIO()
        MarcStreamWriter(buf, force_utf8_encoding=self.force_utf8_encoding).write(record)
        return buf.getvalue()


class MarcInJson(Codec):
    name = 'JSON'

    def can_parse(self, raw: str | bytes) -> bool:
        text = _as_text(raw)
        return text is not None and text.lstrip().startswith('{')

    def parse(self, raw: str | bytes) -> tuple[Record, list[str]]:
        try:
            obj = json.loads(raw)
        except ValueError as e:
            raise ParseError(f"Invalid MARC-in-JSON: {e}") from e
        return self._record(*parse_marc_json(obj))

    def serialize(self, record: Record) -> str:
        return json.dumps(record_to_marc_json(record), ensure_ascii=False)


class MarcXml(Codec):
    name = 'MARCXML'

    def can_parse(self, raw: str | bytes) -> bool:
        text = _as_text(raw)
        return text is not None and text.lstrip().startswith('<')

    def parse(self, raw: str | bytes) -> tuple[Record, list[str]]:
        records = find_record_elements(parse_xml_root(raw))
        if not records:
            raise ParseError('No record found in MARCXML')
        leader, fields, warnings = parse_marc_xml(records[0])
        if len(records) > 1:
            message = f"{len(records) - 1} additional records ignored"
            logger.warning(message)
            warnings.append(message)
        return self._record(leader, fields, warnings)

    def serialize(self, record: Record) -> str:
        buf = io.StringIO()
        writer = MarcXmlWriter(buf, xml_declaration=False)
        writer.write(record)
        writer.flush()
        return buf.getvalue()


class MarcYaml(Codec):
    name = 'YAML'

    def can_parse(self, raw: str | bytes) -> bool:
        text = _as_text(raw)
        if text is None:
            return False
        text = text.lstrip()
        return text.startswith('---') or text.startswith('leader:')

    def parse(self, raw: str | bytes) -> tuple[Record, list[str]]:
        try:
            obj = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML record: {e}") from e
        return self._record(*parse_marc_json(obj))

    def serialize(self, record: Record) -> str:
        return yaml.safe_dump(record_to_marc_json(record), sort_keys=False, allow_unicode=True, explicit_start=True)


class CodecRegistry:
    def __init__(self, codecs=None) -> None:
        self._codecs: dict[str, Codec] = {}
        self._frozen = False
        for codec in codecs or []:
            self.register(codec)

    def register(self, codec: Codec, name: str | None = None) -> None:
        if self._frozen:
            raise RegistryFrozen('Codecs cannot be registered after the registry is frozen')
        name = name or codec.name
        if name in self._codecs:
            raise ValueError(f"Codec '{name}' is already registered")
        self._codecs[name] = codec

    def freeze(self) -> 'CodecRegistry':
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Codec:
        try:
            return self._codecs[name]
        except KeyError:
            raise UnknownFormat(f"Unknown MARC format '{name}' requested") from None

    def detect(self, raw: str | bytes) -> Codec:
        for codec in self._codecs.values():
            if codec.can_parse(raw):
                return codec
        raise UnrecognizedFormat('MARC record format not recognized')

    def names(self) -> list[str]:
        return list(self._codecs)

    def __contains__(self, name) -> bool:
        return name in self._codecs

    def __iter__(self):
        return iter(self._codecs.values())


_default_registry: CodecRegistry | None = None
_default_registry_lock = threading.Lock()


def default_registry() -> CodecRegistry:
    global _default_registry

    with _default_registry_lock:
        if _default_registry is None:
            _default_registry = CodecRegistry([
                Iso2709(force_utf8_encoding=True),
                MarcInJson(),
                MarcXml(),
                MarcYaml(),
            ]).freeze()
            logger.debug("Default codec registry: %s", ', '.join(_default_registry.names()))
    return _default_registry
