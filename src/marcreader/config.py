"""Loading of named filtering rule sets from YAML or JSON files.

    public:
      - tag: '9..'
      - tag: '...'
        subfields: '0'
    opac:
      $ref: public
"""
import json
import logging
import os
from collections.abc import Mapping

import yaml

from marcreader.exceptions import InvalidFilterRule
from marcreader.filtering import FilterRule

logger = logging.getLogger(__name__)


def _load_document(path: str):
    with open(path, "r", encoding="utf-8") as f:
        if os.path.splitext(path)[1].lower() == '.json':
            return json.load(f)
        return yaml.safe_load(f)


def parse_filter_rule_sets(document, builtin_sets: Mapping | None = None) -> dict[str, list[FilterRule]]:
    if document is None:
        document = {}
    if not isinstance(document, Mapping):
        raise InvalidFilterRule('Filtering configuration must map rule set names to rules')

    sets = dict(document)
    for key in builtin_sets or {}:
        if key not in sets:
            sets[key] = builtin_sets[key]

    def resolve(name, seen):
        obj = sets[name]
        if isinstance(obj, Mapping) and '$ref' in obj:
            ref = obj['$ref']
            if ref in seen:
                raise InvalidFilterRule(f"Circular reference in rule set '{name}'")
            if ref not in sets:
                raise InvalidFilterRule(f"Rule set '{name}' refers to unknown set '{ref}'")
            return resolve(ref, seen | {ref})
        if not isinstance(obj, list):
            raise InvalidFilterRule(f"Rule set '{name}' must be a list of rules")
        return [rule if isinstance(rule, FilterRule) else FilterRule.from_dict(rule) for rule in obj]

    return {name: resolve(name, {name}) for name in sets}


def load_filter_rule_sets(path: str, builtin_sets: Mapping | None = None) -> dict[str, list[FilterRule]]:
    rule_sets = parse_filter_rule_sets(_load_document(path), builtin_sets)
    logger.debug("Loaded filtering rule sets from %s: %s", path, ', '.join(rule_sets))
    return rule_sets


def load_filter_rules(path: str, name: str, builtin_sets: Mapping | None = None) -> list[FilterRule]:
    rule_sets = load_filter_rule_sets(path, builtin_sets)
    if name not in rule_sets:
        raise InvalidFilterRule(f"No rule set '{name}' in {path}")
    return rule_sets[name]
