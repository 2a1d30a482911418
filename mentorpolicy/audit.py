"""Audit logging utilities for authorization decisions."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger("mentorpolicy.audit")


class DecisionRecord(BaseModel):
    """One allow/deny decision made by the policy service."""

    subject_id: Optional[str] = None
    resource_type: Optional[str] = None
    action: str
    allowed: bool
    reason: Optional[str] = Field(
        default=None, description="Why the decision short-circuited, if it did"
    )
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AuditLog(Protocol):
    """Records authorization decisions."""

    async def record(self, decision: DecisionRecord) -> None:
        """Persist an audit log entry."""


class LoggingAuditLog(AuditLog):
    """Write each decision as a single log line."""

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    async def record(self, decision: DecisionRecord) -> None:
        logger.log(
            self.level,
            "decision subject=%s resource=%s action=%s allowed=%s reason=%s",
            decision.subject_id,
            decision.resource_type,
            decision.action,
            decision.allowed,
            decision.reason or "-",
        )


class InMemoryAuditLog(AuditLog):
    """Keep decisions in a list; handy for tests and one-off inspection."""

    def __init__(self) -> None:
        self.records: list[DecisionRecord] = []

    async def record(self, decision: DecisionRecord) -> None:
        self.records.append(decision)
