"""Per-type rule predicates and rule statistics."""

from __future__ import annotations

import ipaddress
import re
from typing import Callable, Iterable

from singbox_rules.models import RuleStats, RuleType, ValidatedRuleSet

_LABEL = r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
_DOMAIN_RE = re.compile(rf"{_LABEL}(?:\.{_LABEL})*")
_IPV4_CIDR_RE = re.compile(r"(?:\d{1,3}\.){3}\d{1,3}/\d{1,2}", re.ASCII)
_IPV6_CIDR_RE = re.compile(
    r"(?:"
    r"(?:[0-9a-fA-F]{1,4}:){7}[0-9a-fA-F]{1,4}"
    r"|(?:[0-9a-fA-F]{1,4}:){1,7}:"
    r"|(?:[0-9a-fA-F]{1,4}:){1,6}:[0-9a-fA-F]{1,4}"
    r"|(?:[0-9a-fA-F]{1,4}:){1,5}(?::[0-9a-fA-F]{1,4}){1,2}"
    r"|(?:[0-9a-fA-F]{1,4}:){1,4}(?::[0-9a-fA-F]{1,4}){1,3}"
    r"|(?:[0-9a-fA-F]{1,4}:){1,3}(?::[0-9a-fA-F]{1,4}){1,4}"
    r"|(?:[0-9a-fA-F]{1,4}:){1,2}(?::[0-9a-fA-F]{1,4}){1,5}"
    r"|[0-9a-fA-F]{1,4}:(?::[0-9a-fA-F]{1,4}){1,6}"
    r"|:(?:(?::[0-9a-fA-F]{1,4}){1,7}|:)"
    r")/\d{1,3}",
    re.ASCII,
)
_PROCESS_NAME_RE = re.compile(r"[a-zA-Z0-9_.-]+")


def is_valid_domain(value: object) -> bool:
    if not value or not isinstance(value, str):
        return False
    domain = value[1:] if value.startswith(".") else value
    return _DOMAIN_RE.fullmatch(domain) is not None


def is_valid_cidr(value: object) -> bool:
    if not value or not isinstance(value, str):
        return False
    if not (_IPV4_CIDR_RE.fullmatch(value) or _IPV6_CIDR_RE.fullmatch(value)):
        return False
    # shape alone lets 999.1.1.1/33 through; bounds come from ipaddress
    try:
        ipaddress.ip_network(value, strict=False)
    except ValueError:
        return False
    return True


def is_valid_process_name(value: object) -> bool:
    if not value or not isinstance(value, str):
        return False
    return _PROCESS_NAME_RE.fullmatch(value) is not None


VALIDATORS: dict[str, Callable[[object], bool]] = {
    RuleType.DOMAIN_SUFFIX.value: is_valid_domain,
    RuleType.IP_CIDR.value: is_valid_cidr,
    RuleType.PROCESS_NAME.value: is_valid_process_name,
}


def rule_type_key(rule_type: object) -> str:
    if isinstance(rule_type, RuleType):
        return rule_type.value
    return str(rule_type)


def is_valid_rule(rule: str, rule_type: str) -> bool:
    validator = VALIDATORS.get(rule_type_key(rule_type))
    if validator is None:
        # unknown types are accepted as-is
        return True
    return validator(rule)


def filter_valid_rules(rules: Iterable[str], rule_type: str) -> list[str]:
    return [rule for rule in rules if is_valid_rule(rule, rule_type)]


def invalid_rules(rules: Iterable[str], rule_type: str) -> list[str]:
    return [rule for rule in rules if not is_valid_rule(rule, rule_type)]


def get_rule_stats(rules: Iterable[str]) -> RuleStats:
    total = empty = duplicate = valid = 0
    seen: set[str] = set()
    for rule in rules:
        total += 1
        if not rule or not rule.strip():
            empty += 1
        elif rule in seen:
            duplicate += 1
        else:
            seen.add(rule)
            valid += 1
    return RuleStats(total=total, empty=empty, duplicate=duplicate, valid=valid)


def count_duplicates(rules: Iterable[str]) -> int:
    seen: set[str] = set()
    duplicates = 0
    for rule in rules:
        if rule in seen:
            duplicates += 1
        else:
            seen.add(rule)
    return duplicates


def validate_rule_set(rules: list[str], rule_type: str) -> ValidatedRuleSet:
    valid = filter_valid_rules(rules, rule_type)
    return ValidatedRuleSet(
        type=rule_type_key(rule_type),
        valid_rules=valid,
        invalid_count=len(rules) - len(valid),
        duplicate_count=count_duplicates(rules),
    )
