"""
Rule lookup by rule name, the identity key used when two table versions are compared.
"""
import logging
from typing import Dict, List, Tuple

from ..table_model.table_schema import Rule

logger = logging.getLogger(__name__)


def rule_key(rule: Rule) -> str:
    return rule.rule_name


def build_rule_index(rules: List[Rule], side: str = '') -> Tuple[Dict[str, Rule], int]:
    """
    Return (index, duplicate_count) where index maps rule name -> rule.
    Names are not unique by construction; a repeated name overwrites the earlier
    entry, so the last rule with that name is the one compared.
    """
    index = {}
    duplicates = 0
    for rule in rules:
        key = rule_key(rule)
        if key in index:
            duplicates += 1
        index[key] = rule
    if duplicates:
        where = f" in {side} table" if side else ''
        logger.warning(f"Detected {duplicates} duplicate rule name(s){where}; last occurrence per name is compared")
    return index, duplicates
