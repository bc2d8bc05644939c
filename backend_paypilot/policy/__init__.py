"""
Decision policy — turns a risk score into the final decision shown to the user.

Pluggable: a remote rule service over HTTP (webhook) or in-process tier rules.
"""

from backend_paypilot.policy.base import DecisionPolicy, PolicyDecision
from backend_paypilot.policy.rules import RuleDecisionPolicy
from backend_paypilot.policy.webhook import WebhookDecisionPolicy

__all__ = [
    "DecisionPolicy",
    "PolicyDecision",
    "RuleDecisionPolicy",
    "WebhookDecisionPolicy",
]
