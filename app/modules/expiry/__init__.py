"""Expiry alerting: rule evaluation, recipients, deduplication and warnings."""

from modules.expiry.dedup import Deduplicator
from modules.expiry.evaluator import RuleEvaluator, classify, effective_rule
from modules.expiry.recipients import RecipientResolver
from modules.expiry.rules import RuleService, RuleUpsert, StatsRow
from modules.expiry.warnings import ExpiryWarningMailer

__all__ = [
    "Deduplicator",
    "ExpiryWarningMailer",
    "RecipientResolver",
    "RuleEvaluator",
    "RuleService",
    "RuleUpsert",
    "StatsRow",
    "classify",
    "effective_rule",
]
