"""Subscription and trial limit data models."""

import math
from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field

SubscriptionStatus = Literal["active", "expired", "cancelled"]

MAX_TRIAL_ACCOUNTS = 1
MAX_TRIAL_TRADES = 10
EXPIRING_SOON_DAYS = 7


class Subscription(BaseModel):
    """Represents a journal subscription of a user."""

    id: str = Field(..., description="Subscription identifier")
    user_id: str = Field(..., description="Subscribed user")
    plan_name: str = Field(..., min_length=1, description="Plan name")
    start_date: datetime = Field(..., description="Start of the paid period")
    end_date: datetime = Field(..., description="End of the paid period")
    status: SubscriptionStatus = Field(default="active", description="Subscription status")

    model_config = {"frozen": True}

    def days_remaining(self, moment: datetime) -> int:
        """Whole days left until the end date, counting a started day as one."""
        return max(0, math.ceil((self.end_date - moment).total_seconds() / 86400))

    def is_expiring_soon(self, moment: datetime) -> bool:
        return self.days_remaining(moment) <= EXPIRING_SOON_DAYS


class TrialLimits(BaseModel):
    """What a user may still create under the trial tier."""

    has_subscription: bool = Field(..., description="Whether a subscription is active")
    account_count: int = Field(..., ge=0, description="Existing accounts")
    trade_count: int = Field(..., ge=0, description="Existing trade entries")
    can_add_account: bool = Field(..., description="Whether another account is allowed")
    can_add_trade: bool = Field(..., description="Whether another trade is allowed")
    max_accounts: int = Field(default=MAX_TRIAL_ACCOUNTS, description="Trial account cap")
    max_trades: int = Field(default=MAX_TRIAL_TRADES, description="Trial trade cap")

    model_config = {"frozen": True}

    @classmethod
    def evaluate(
        cls, has_subscription: bool, account_count: int, trade_count: int
    ) -> "TrialLimits":
        """Build limits from counts; subscribers are never limited."""
        return cls(
            has_subscription=has_subscription,
            account_count=account_count,
            trade_count=trade_count,
            can_add_account=has_subscription or account_count < MAX_TRIAL_ACCOUNTS,
            can_add_trade=has_subscription or trade_count < MAX_TRIAL_TRADES,
        )
