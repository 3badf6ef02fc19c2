"""Read, query and filter MARC bibliographic records."""
import logging

from marcreader.exceptions import (
    MarcError, InvalidStructure, UnrecognizedFormat, UnknownFormat,
    ParseError, SerializeError, RegistryFrozen, InvalidFilterRule
)
from marcreader.marc import SubField, ControlField, DataField, LinkedField
from marcreader.linkage import Linkage, parse_linkage_field
from marcreader.filtering import FilterRule
from marcreader.record import Record, normalize_leader

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.3.0"
__all__ = [
    'Record', 'normalize_leader', 'SubField', 'ControlField', 'DataField',
    'LinkedField', 'Linkage', 'parse_linkage_field', 'FilterRule',
    'MarcError', 'InvalidStructure', 'UnrecognizedFormat', 'UnknownFormat',
    'ParseError', 'SerializeError', 'RegistryFrozen', 'InvalidFilterRule',
]
