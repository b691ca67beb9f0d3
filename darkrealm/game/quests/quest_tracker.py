"""Quest acceptance, objective tracking and reward payout.

Quest lifecycle:
- NOT_STARTED -> IN_PROGRESS on acceptance (level requirement checked)
- IN_PROGRESS -> COMPLETED once every objective counter reaches its count
- COMPLETED quests pay out exactly once when their rewards are claimed,
  which also moves the quest from the active log to the completed set
"""

from dataclasses import dataclass, replace
from typing import Iterable, Optional

from ...core.data import (
    Character,
    Item,
    ObjectiveType,
    Quest,
    QuestLog,
    QuestProgress,
    QuestStatus,
)
from ...core.errors import (
    InvalidInputError,
    InvalidStateTransitionError,
    NotFoundError,
    RequirementNotMetError,
)
from ..catalog import GameCatalog
from ..progression import ProgressionEngine


@dataclass(frozen=True)
class RewardSummary:
    """What a claim actually paid out."""
    experience: int = 0
    gold: int = 0
    items: tuple[Item, ...] = ()
    levels_gained: int = 0


@dataclass(frozen=True)
class ClaimResult:
    character: Character
    progress: QuestProgress
    rewards: RewardSummary


class QuestTracker:
    """Pure quest state transitions over character snapshots."""

    def __init__(self, progression: Optional[ProgressionEngine] = None, catalog: Optional[GameCatalog] = None):
        self.progression = progression or ProgressionEngine()
        self.catalog = catalog

    def accept_quest(self, character: Character, quest: Quest) -> QuestProgress:
        """
        Start a quest for a character.

        Returns:
            IN_PROGRESS progress with every counter at 0

        Raises:
            InvalidInputError: If the quest has no objectives
            InvalidStateTransitionError: If the quest is already active or completed
            RequirementNotMetError: If the character's level is too low
        """
        if not quest.objectives:
            raise InvalidInputError(f"Quest {quest.id} has no objectives")
        if quest.id in character.quests.active:
            raise InvalidStateTransitionError(f"Quest {quest.title} is already active")
        if quest.id in character.quests.completed:
            raise InvalidStateTransitionError(f"Quest {quest.title} has already been completed")
        if character.level < quest.level_requirement:
            raise RequirementNotMetError("level", quest.level_requirement, character.level)

        return QuestProgress(
            quest_id=quest.id,
            status=QuestStatus.IN_PROGRESS,
            objectives={objective.id: 0 for objective in quest.objectives},
            required={objective.id: objective.required for objective in quest.objectives},
        )

    @staticmethod
    def track(character: Character, progress: QuestProgress) -> Character:
        """Store progress in the character's active quest log."""
        active = dict(character.quests.active)
        active[progress.quest_id] = progress
        return replace(character, quests=replace(character.quests, active=active))

    def update_objective(self, progress: QuestProgress, objective_id: str, amount: int = 1) -> QuestProgress:
        """
        Advance one objective counter, clamped at its required count.

        The quest becomes COMPLETED once every counter is full. Completion
        only changes the status; rewards are paid by ``claim_rewards``.

        Raises:
            InvalidStateTransitionError: If the quest is not in progress
            InvalidInputError: If amount is negative
            NotFoundError: If the quest has no such objective
        """
        if progress.status != QuestStatus.IN_PROGRESS:
            raise InvalidStateTransitionError(
                f"Quest {progress.quest_id} is {progress.status.value}, not in progress"
            )
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise InvalidInputError(f"Objective amount must be a non-negative integer, got {amount!r}")
        if objective_id not in progress.required:
            raise NotFoundError("objective", objective_id)

        required = progress.required[objective_id]
        counters = dict(progress.objectives)
        counters[objective_id] = min(required, counters.get(objective_id, 0) + amount)

        updated = replace(progress, objectives=counters)
        if updated.is_complete:
            updated = replace(updated, status=QuestStatus.COMPLETED)
        return updated

    def record_progress(
        self,
        progress: QuestProgress,
        quest: Quest,
        objective_type: ObjectiveType,
        target: str,
        amount: int = 1
    ) -> QuestProgress:
        """Advance every objective of ``objective_type`` whose target matches.

        Targets compare case-insensitively. Progress that is not in progress
        is returned unchanged.
        """
        if quest.id != progress.quest_id:
            raise InvalidInputError(f"Progress for {progress.quest_id} does not belong to quest {quest.id}")

        wanted = target.strip().lower()
        for objective in quest.objectives:
            if progress.status != QuestStatus.IN_PROGRESS:
                break
            if objective.objective_type == objective_type and objective.target.lower() == wanted:
                progress = self.update_objective(progress, objective.id, amount)
        return progress

    def claim_rewards(self, character: Character, quest: Quest, progress: QuestProgress) -> ClaimResult:
        """
        Pay out a completed quest's rewards once.

        Experience goes through the progression engine, so a claim can level
        the character up. Reward items are created from the catalog.

        Raises:
            InvalidInputError: If progress belongs to another quest
            InvalidStateTransitionError: If the quest is not completed or its
                rewards were already claimed
        """
        if quest.id != progress.quest_id:
            raise InvalidInputError(f"Progress for {progress.quest_id} does not belong to quest {quest.id}")
        if progress.rewards_claimed or quest.id in character.quests.completed:
            raise InvalidStateTransitionError(f"Rewards for {quest.title} have already been claimed")
        if progress.status != QuestStatus.COMPLETED:
            raise InvalidStateTransitionError(f"Quest {quest.title} is not completed")

        items = self._reward_items(quest)
        result = self.progression.grant_experience(character, quest.rewards.experience)
        updated = result.character

        active = {quest_id: p for quest_id, p in updated.quests.active.items() if quest_id != quest.id}
        quest_log = QuestLog(active=active, completed=updated.quests.completed | {quest.id})
        updated = replace(
            updated,
            gold=updated.gold + quest.rewards.gold,
            inventory=updated.inventory + items,
            quests=quest_log,
        )

        return ClaimResult(
            character=updated,
            progress=replace(progress, rewards_claimed=True),
            rewards=RewardSummary(
                experience=quest.rewards.experience,
                gold=quest.rewards.gold,
                items=items,
                levels_gained=result.levels_gained,
            ),
        )

    def _reward_items(self, quest: Quest) -> tuple[Item, ...]:
        if not quest.rewards.items:
            return ()
        if self.catalog is None:
            raise NotFoundError("item", quest.rewards.items[0])
        return self.catalog.resolve_items(quest.rewards.items)

    @staticmethod
    def available_quests(character: Character, quests: Iterable[Quest]) -> list[Quest]:
        """Quests the character could accept right now."""
        return [
            quest for quest in quests
            if quest.level_requirement <= character.level
            and not character.quests.holds(quest.id)
            and quest.objectives
        ]
