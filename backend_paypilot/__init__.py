"""
Backend PayPilot — pre-transaction financial risk gate.

Scores a proposed spend against the user's financial context and override
history, asks a decision policy for ALLOW / WARN / BLOCK, and keeps a
per-user trust score that decays on overrides and recovers after a quiet period.
"""

__version__ = "0.1.0"
