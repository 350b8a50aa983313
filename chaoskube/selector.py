"""
Selector expressions over string to string mappings.

The grammar follows Kubernetes label selectors. A selector is a comma
separated list of requirements, all of which must hold for a mapping to
match:

  key               the key exists
  !key              the key does not exist
  key=value         the key exists and has the given value (also key==value)
  key!=value        the key is absent or has a different value
  key in (a, b)     the key exists and its value is one of the set
  key notin (a, b)  the key is absent or its value is not in the set

The same predicate is used for labels, annotations and namespaces, the latter
by matching against a synthetic {"namespace": <name>} mapping.

An empty selector has no requirements and matches everything.
"""
import re

from collections import namedtuple
from logzero import logger

from typing import Dict, List, Tuple

EXISTS = 'exists'
DOES_NOT_EXIST = '!'
EQUALS = '='
NOT_EQUALS = '!='
IN = 'in'
NOT_IN = 'notin'

Requirement = namedtuple('Requirement', ['key', 'operator', 'values'])

_name = r'[A-Za-z0-9]([-A-Za-z0-9_.]{0,61}[A-Za-z0-9])?'
_dns_subdomain = r'[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*'
_key_re = re.compile(r'^({}/)?{}$'.format(_dns_subdomain, _name))
_value_re = re.compile(r'^({})?$'.format(_name))

_set_re = re.compile(r'^(?P<key>[^\s!=(),]+)\s+(?P<op>in|notin)\s*\((?P<values>[^()]*)\)$')
_equality_re = re.compile(r'^(?P<key>[^\s!=(),]+)\s*(?P<op>==|!=|=)\s*(?P<value>[^\s!=(),]*)$')
_not_exists_re = re.compile(r'^!\s*(?P<key>[^\s!=(),]+)$')
_exists_re = re.compile(r'^(?P<key>[^\s!=(),]+)$')


def _validate_key(key: str) -> str:
    if len(key) > 253 + 1 + 63 or not _key_re.match(key):
        raise ValueError("invalid selector key: '{}'".format(key))
    return key


def _validate_value(value: str) -> str:
    if not _value_re.match(value):
        raise ValueError("invalid selector value: '{}'".format(value))
    return value


def _split_requirements(text: str) -> List[str]:
    # Commas inside parentheses separate set values, not requirements
    parts = []
    depth = 0
    current = ''
    for char in text:
        if char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth < 0:
                raise ValueError("unbalanced parentheses in selector: "
                                 "'{}'".format(text))
        if char == ',' and depth == 0:
            parts.append(current)
            current = ''
        else:
            current += char
    if depth != 0:
        raise ValueError("unbalanced parentheses in selector: "
                         "'{}'".format(text))
    parts.append(current)
    return parts


def _parse_requirement(text: str) -> Requirement:
    text = text.strip()
    if not text:
        raise ValueError("empty requirement in selector")

    match = _set_re.match(text)
    if match:
        values = [v.strip() for v in match.group('values').split(',')]
        if values == ['']:
            raise ValueError("empty value set in requirement: "
                             "'{}'".format(text))
        return Requirement(_validate_key(match.group('key')),
                           IN if match.group('op') == 'in' else NOT_IN,
                           frozenset(_validate_value(v) for v in values))

    match = _equality_re.match(text)
    if match:
        operator = NOT_EQUALS if match.group('op') == '!=' else EQUALS
        return Requirement(_validate_key(match.group('key')), operator,
                           frozenset([_validate_value(match.group('value'))]))

    match = _not_exists_re.match(text)
    if match:
        return Requirement(_validate_key(match.group('key')), DOES_NOT_EXIST,
                           frozenset())

    match = _exists_re.match(text)
    if match:
        return Requirement(_validate_key(match.group('key')), EXISTS,
                           frozenset())

    raise ValueError("unable to parse requirement: '{}'".format(text))


def _requirement_matches(requirement: Requirement,
                         mapping: Dict[str, str]) -> bool:
    key, operator, values = requirement
    present = key in mapping
    if operator == EXISTS:
        return present
    if operator == DOES_NOT_EXIST:
        return not present
    if operator in (EQUALS, IN):
        return present and mapping[key] in values
    # NOT_EQUALS and NOT_IN
    return not present or mapping[key] not in values


def _requirement_str(requirement: Requirement) -> str:
    key, operator, values = requirement
    if operator == EXISTS:
        return key
    if operator == DOES_NOT_EXIST:
        return '!' + key
    if operator in (EQUALS, NOT_EQUALS):
        return '{}{}{}'.format(key, operator, next(iter(values)))
    return '{} {} ({})'.format(key, operator, ','.join(sorted(values)))


class Selector(object):
    """
    An immutable predicate over a mapping of strings to strings.
    """

    def __init__(self, requirements: Tuple[Requirement, ...] = ()):
        self._requirements = tuple(sorted(requirements,
                                          key=lambda r: (r.key, r.operator)))

    def empty(self) -> bool:
        return not self._requirements

    def matches(self, mapping: Dict[str, str]) -> bool:
        if mapping is None:
            mapping = {}
        return all(_requirement_matches(r, mapping)
                   for r in self._requirements)

    def __eq__(self, other):
        return (isinstance(other, Selector) and
                self._requirements == other._requirements)

    def __hash__(self):
        return hash(self._requirements)

    def __str__(self):
        return ','.join(_requirement_str(r) for r in self._requirements)

    def __repr__(self):
        return "Selector('{}')".format(self)


def everything() -> Selector:
    """
    Return a selector that matches every mapping.

    :return: Selector
    """
    return Selector()


def parse_selector(text: str) -> Selector:
    """
    Parse a textual selector expression, e.g. "tier=frontend,!canary".

    An empty or whitespace only string yields a selector that matches
    everything. Malformed text raises ValueError.

    :param text: The selector expression.
        Required.
    :type text: str
    :return: Selector
    """
    if text is None or not text.strip():
        return everything()

    requirements = [_parse_requirement(part)
                    for part in _split_requirements(text)]
    selector = Selector(tuple(requirements))
    logger.debug("Parsed selector '%s' into %s", text, repr(selector))
    return selector
