"""Quest tracking: acceptance, objective counters and one-time rewards."""

from .quest_tracker import ClaimResult, QuestTracker, RewardSummary

__all__ = ["ClaimResult", "QuestTracker", "RewardSummary"]
