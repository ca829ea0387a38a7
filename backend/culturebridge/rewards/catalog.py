"""CBT reward catalog: trigger kinds, prices and global economy controls."""

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from culturebridge.core.app_exceptions import CatalogConfigError, UnknownRewardKind
from culturebridge.core.config import settings

CBT_QUANT = Decimal("0.01")
ALLOCATION_TOLERANCE = 1e-9


def to_cbt(value: Decimal | int | float | str) -> Decimal:
    """Round a CBT amount to two decimals."""
    return Decimal(str(value)).quantize(CBT_QUANT, rounding=ROUND_HALF_UP)


class RewardKind(str, Enum):
    """Reward trigger kinds."""

    REGISTRATION = "REGISTRATION"
    DAILY_LOGIN = "DAILY_LOGIN"
    WEEKLY_LOGIN = "WEEKLY_LOGIN"
    MONTHLY_LOGIN = "MONTHLY_LOGIN"
    POST_CONTENT = "POST_CONTENT"
    VOICE_TRANSLATION = "VOICE_TRANSLATION"
    CHAT_MESSAGE = "CHAT_MESSAGE"
    VOICE_CALL_MINUTE = "VOICE_CALL_MINUTE"
    VIDEO_CALL_MINUTE = "VIDEO_CALL_MINUTE"
    CULTURAL_EXCHANGE = "CULTURAL_EXCHANGE"
    LANGUAGE_LEARNING = "LANGUAGE_LEARNING"
    LEARNING_REWARD = "LEARNING_REWARD"
    COURSE_COMPLETION = "COURSE_COMPLETION"
    TEST_PASS = "TEST_PASS"
    REFERRAL = "REFERRAL"
    REFERRAL_BONUS = "REFERRAL_BONUS"
    LIKE_RECEIVED = "LIKE_RECEIVED"
    COMMENT_RECEIVED = "COMMENT_RECEIVED"


@dataclass(frozen=True)
class RewardRule:
    """Pricing for one trigger kind."""

    kind: RewardKind
    usd_value: Decimal
    category: str
    description: str
    daily_count_limit: int | None = None


# Nominal USD values, pegged to the token price
DEFAULT_RULES: tuple[RewardRule, ...] = (
    RewardRule(RewardKind.REGISTRATION, Decimal("1.00"), "GENERAL", "Registration reward"),
    RewardRule(RewardKind.DAILY_LOGIN, Decimal("0.05"), "GENERAL", "Daily login reward", 1),
    RewardRule(RewardKind.WEEKLY_LOGIN, Decimal("0.75"), "GENERAL", "7-day login streak reward", 1),
    RewardRule(RewardKind.MONTHLY_LOGIN, Decimal("3.50"), "GENERAL", "30-day login streak reward", 1),
    RewardRule(RewardKind.POST_CONTENT, Decimal("0.25"), "CONTENT_CREATION", "Content post reward"),
    RewardRule(RewardKind.VOICE_TRANSLATION, Decimal("0.025"), "LEARNING_REWARD", "Voice translation reward", 30),
    RewardRule(RewardKind.CHAT_MESSAGE, Decimal("0.005"), "COMMUNITY_CONTRIBUTION", "Chat message reward", 50),
    RewardRule(RewardKind.VOICE_CALL_MINUTE, Decimal("0.025"), "COMMUNITY_CONTRIBUTION", "Voice call reward (per minute)"),
    RewardRule(RewardKind.VIDEO_CALL_MINUTE, Decimal("0.05"), "COMMUNITY_CONTRIBUTION", "Video call reward (per minute)"),
    RewardRule(RewardKind.CULTURAL_EXCHANGE, Decimal("0.50"), "CULTURAL_EXCHANGE", "Cultural exchange reward"),
    RewardRule(RewardKind.LANGUAGE_LEARNING, Decimal("0.15"), "LEARNING_REWARD", "Language learning reward"),
    RewardRule(RewardKind.LEARNING_REWARD, Decimal("0.25"), "LEARNING_REWARD", "Learning achievement reward"),
    RewardRule(RewardKind.COURSE_COMPLETION, Decimal("0.75"), "LEARNING_REWARD", "Course completion reward"),
    RewardRule(RewardKind.TEST_PASS, Decimal("1.25"), "LEARNING_REWARD", "Test pass reward"),
    RewardRule(RewardKind.REFERRAL, Decimal("1.00"), "REFERRAL", "Referral reward"),
    RewardRule(RewardKind.REFERRAL_BONUS, Decimal("0.50"), "REFERRAL", "Referred user learning bonus"),
    RewardRule(RewardKind.LIKE_RECEIVED, Decimal("0.01"), "COMMUNITY_CONTRIBUTION", "Like received reward", 100),
    RewardRule(RewardKind.COMMENT_RECEIVED, Decimal("0.015"), "COMMUNITY_CONTRIBUTION", "Comment received reward"),
)

DEFAULT_ALLOCATION: Mapping[str, float] = MappingProxyType(
    {
        "ECOSYSTEM_REWARDS": 0.40,
        "TEAM": 0.15,
        "INVESTORS": 0.20,
        "LIQUIDITY": 0.10,
        "MARKETING": 0.10,
        "RESERVE": 0.05,
    }
)

DEFAULT_UTILITY_PRICES: Mapping[str, Decimal] = MappingProxyType(
    {
        "PREMIUM_FEATURES": Decimal("10"),
        "VIRTUAL_GIFT_SMALL": Decimal("1"),
        "VIRTUAL_GIFT_MEDIUM": Decimal("5"),
        "VIRTUAL_GIFT_LARGE": Decimal("20"),
        "PREMIUM_COURSES": Decimal("50"),
        "NFT_MINTING": Decimal("25"),
        "GOVERNANCE_VOTING": Decimal("100"),
    }
)


@dataclass(frozen=True)
class RewardCatalog:
    """
    Static reward configuration.

    Token amounts are derived from each rule's USD value at the configured
    token price. The catalog has no behavior beyond lookup; call validate()
    once at process start.
    """

    token_price_usd: Decimal = Decimal("0.05")
    daily_reward_cap: Decimal = Decimal("50")
    rules: tuple[RewardRule, ...] = DEFAULT_RULES
    allocation: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_ALLOCATION))
    utility_prices: Mapping[str, Decimal] = field(default_factory=lambda: dict(DEFAULT_UTILITY_PRICES))
    total_supply: Decimal = Decimal("1000000000")
    token_decimals: int = 18
    burn_rate: float = 0.30
    staking_apy: float = 0.12
    minimum_staking_days: int = 30
    _by_kind: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_kind", {rule.kind.value: rule for rule in self.rules})

    def get(self, kind: RewardKind | str) -> RewardRule:
        """Look up the rule for a trigger kind."""
        key = kind.value if isinstance(kind, RewardKind) else str(kind)
        rule = self._by_kind.get(key)
        if rule is None:
            raise UnknownRewardKind(key)
        return rule

    def token_amount(self, kind: RewardKind | str) -> Decimal:
        """Nominal CBT amount for a trigger kind."""
        return to_cbt(self.get(kind).usd_value / self.token_price_usd)

    @property
    def ecosystem_reward_pool(self) -> Decimal:
        """CBT reserved for ecosystem rewards."""
        return to_cbt(self.total_supply * Decimal(str(self.allocation.get("ECOSYSTEM_REWARDS", 0))))

    def validate(self) -> None:
        """Fail fast on an incomplete or inconsistent catalog."""
        missing = [kind.value for kind in RewardKind if kind.value not in self._by_kind]
        if missing:
            raise CatalogConfigError(f"Reward catalog missing kinds: {', '.join(missing)}")
        if len(self._by_kind) != len(self.rules):
            raise CatalogConfigError("Reward catalog has duplicate kinds")
        if self.token_price_usd <= 0:
            raise CatalogConfigError("Token price must be positive")
        if self.daily_reward_cap < 0:
            raise CatalogConfigError("Daily reward cap must not be negative")
        for rule in self.rules:
            if rule.usd_value <= 0:
                raise CatalogConfigError(f"Reward value for {rule.kind.value} must be positive")
            if rule.daily_count_limit is not None and rule.daily_count_limit < 1:
                raise CatalogConfigError(f"Daily limit for {rule.kind.value} must be >= 1")
        share_total = math.fsum(self.allocation.values())
        if abs(share_total - 1.0) > ALLOCATION_TOLERANCE:
            raise CatalogConfigError(f"Token allocation shares sum to {share_total}, expected 1.0")
        if any(share < 0 for share in self.allocation.values()):
            raise CatalogConfigError("Token allocation shares must not be negative")
        if not 0 <= self.burn_rate <= 1:
            raise CatalogConfigError("Burn rate must be within [0, 1]")
        if self.minimum_staking_days < 0:
            raise CatalogConfigError("Minimum staking period must not be negative")
        if any(price <= 0 for price in self.utility_prices.values()):
            raise CatalogConfigError("Utility prices must be positive")


@lru_cache
def get_reward_catalog() -> RewardCatalog:
    """Process-wide catalog built from settings."""
    return RewardCatalog(
        token_price_usd=settings.CBT_TOKEN_PRICE_USD,
        daily_reward_cap=settings.DAILY_REWARD_CAP,
    )
