"""Tests for the reward catalog."""

from decimal import Decimal

import pytest

from culturebridge.core.app_exceptions import CatalogConfigError, UnknownRewardKind
from culturebridge.rewards.catalog import (
    DEFAULT_ALLOCATION,
    DEFAULT_RULES,
    RewardCatalog,
    RewardKind,
    to_cbt,
)


def test_default_catalog_is_valid():
    RewardCatalog().validate()


def test_every_kind_has_a_rule():
    catalog = RewardCatalog()
    for kind in RewardKind:
        assert catalog.get(kind).kind == kind


@pytest.mark.parametrize(
    "kind,expected",
    [
        (RewardKind.REGISTRATION, Decimal("20.00")),
        (RewardKind.DAILY_LOGIN, Decimal("1.00")),
        (RewardKind.CULTURAL_EXCHANGE, Decimal("10.00")),
        (RewardKind.LANGUAGE_LEARNING, Decimal("3.00")),
        (RewardKind.CHAT_MESSAGE, Decimal("0.10")),
    ],
)
def test_token_amount_is_usd_value_over_token_price(kind, expected):
    assert RewardCatalog().token_amount(kind) == expected


def test_token_amount_follows_token_price():
    catalog = RewardCatalog(token_price_usd=Decimal("0.01"))
    assert catalog.token_amount(RewardKind.DAILY_LOGIN) == Decimal("5.00")


def test_lookup_accepts_plain_strings():
    assert RewardCatalog().get("DAILY_LOGIN").kind == RewardKind.DAILY_LOGIN


def test_unknown_kind_raises():
    with pytest.raises(UnknownRewardKind) as exc_info:
        RewardCatalog().get("NOT_A_KIND")
    assert exc_info.value.code == "UNKNOWN_REWARD_KIND"
    assert exc_info.value.details == {"kind": "NOT_A_KIND"}


def test_only_login_and_chat_style_kinds_have_daily_count_limits():
    limits = {rule.kind: rule.daily_count_limit for rule in DEFAULT_RULES if rule.daily_count_limit}

    assert limits == {
        RewardKind.DAILY_LOGIN: 1,
        RewardKind.WEEKLY_LOGIN: 1,
        RewardKind.MONTHLY_LOGIN: 1,
        RewardKind.VOICE_TRANSLATION: 30,
        RewardKind.CHAT_MESSAGE: 50,
        RewardKind.LIKE_RECEIVED: 100,
    }


def test_ecosystem_pool_is_forty_percent_of_supply():
    assert RewardCatalog().ecosystem_reward_pool == Decimal("400000000.00")


def test_validate_rejects_missing_kind():
    catalog = RewardCatalog(rules=DEFAULT_RULES[:-1])
    with pytest.raises(CatalogConfigError, match="missing kinds"):
        catalog.validate()


def test_validate_rejects_duplicate_kind():
    catalog = RewardCatalog(rules=DEFAULT_RULES + (DEFAULT_RULES[0],))
    with pytest.raises(CatalogConfigError, match="duplicate"):
        catalog.validate()


def test_validate_rejects_allocation_not_summing_to_one():
    allocation = dict(DEFAULT_ALLOCATION)
    allocation["TEAM"] = 0.30
    with pytest.raises(CatalogConfigError, match="sum to"):
        RewardCatalog(allocation=allocation).validate()


def test_validate_rejects_non_positive_token_price():
    with pytest.raises(CatalogConfigError, match="Token price"):
        RewardCatalog(token_price_usd=Decimal("0")).validate()


def test_to_cbt_rounds_half_up():
    assert to_cbt("1.005") == Decimal("1.01")
    assert to_cbt(2) == Decimal("2.00")
