"""
CBT reward distribution.

- catalog: trigger kinds, USD-pegged values and economy controls
- core: multipliers, daily-cap clamping and the accounting window
- service: the reward engine that prices, caps and credits grants
"""

from culturebridge.rewards.catalog import RewardCatalog, RewardKind, get_reward_catalog
from culturebridge.rewards.service import RewardContext, RewardEngine, RewardGrant

__all__ = [
    "RewardCatalog",
    "RewardKind",
    "get_reward_catalog",
    "RewardContext",
    "RewardEngine",
    "RewardGrant",
]
