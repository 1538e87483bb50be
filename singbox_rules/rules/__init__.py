from singbox_rules.rules.parser import iter_rule_lines, parse_text_file
from singbox_rules.rules.validators import (
    count_duplicates,
    filter_valid_rules,
    get_rule_stats,
    invalid_rules,
    is_valid_cidr,
    is_valid_domain,
    is_valid_process_name,
    is_valid_rule,
    validate_rule_set,
)

__all__ = [
    "count_duplicates",
    "filter_valid_rules",
    "get_rule_stats",
    "invalid_rules",
    "is_valid_cidr",
    "is_valid_domain",
    "is_valid_process_name",
    "is_valid_rule",
    "iter_rule_lines",
    "parse_text_file",
    "validate_rule_set",
]
