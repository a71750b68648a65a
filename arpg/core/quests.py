"""Quest tracking: kill objectives, status lifecycle, and change notices.

Quest lifecycle: INACTIVE -> ACTIVE -> COMPLETED. Only ACTIVE quests make
progress. A quest completes once every one of its objectives reaches its
required amount. Matching kills keep counting on objectives that are
already done while the quest itself is still ACTIVE.

Runtime quests are deep copies of the static QuestDef, so resetting simply
re-copies from the definitions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from arpg.core.enums import ObjectiveType, QuestStatus
from arpg.core.listeners import Listeners, Subscription

if TYPE_CHECKING:
    from arpg.core.definitions import QuestDef

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Runtime quest model
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Objective:
    """A single objective: kill ``amount`` enemies of kind ``target``."""

    type: ObjectiveType
    target: str
    amount: int
    current: int = 0

    @property
    def done(self) -> bool:
        return self.current >= self.amount

    def advance(self, amount: int = 1) -> bool:
        """Advance progress. Returns True if this call finished it."""
        was_done = self.done
        self.current += amount
        return self.done and not was_done

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "target": self.target,
            "amount": self.amount,
            "current": self.current,
        }


@dataclass(slots=True)
class Quest:
    """A quest tracked at runtime."""

    quest_id: str
    title: str
    description: str
    status: QuestStatus
    objectives: list[Objective] = field(default_factory=list)
    xp_reward: int = 0
    gold_reward: int = 0

    @classmethod
    def from_def(cls, quest_id: str, qdef: QuestDef) -> Quest:
        return cls(
            quest_id=quest_id,
            title=qdef.title,
            description=qdef.description,
            status=qdef.status,
            objectives=[
                Objective(ObjectiveType(o.type), o.target, o.amount, o.current)
                for o in qdef.objectives
            ],
            xp_reward=qdef.xp_reward,
            gold_reward=qdef.gold_reward,
        )

    @property
    def is_complete(self) -> bool:
        return all(o.done for o in self.objectives)

    @property
    def progress_ratio(self) -> float:
        total = sum(o.amount for o in self.objectives)
        if total <= 0:
            return 1.0
        return sum(min(o.current, o.amount) for o in self.objectives) / total

    def to_dict(self) -> dict:
        return {
            "quest_id": self.quest_id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "objectives": [o.to_dict() for o in self.objectives],
            "xp_reward": self.xp_reward,
            "gold_reward": self.gold_reward,
        }


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------

class QuestTracker:
    """Owns every runtime quest and advances kill objectives."""

    __slots__ = ("_defs", "_quests", "_listeners")

    def __init__(self, definitions: dict[str, QuestDef]) -> None:
        self._defs = definitions
        self._quests: dict[str, Quest] = {
            qid: Quest.from_def(qid, qdef) for qid, qdef in definitions.items()
        }
        self._listeners: Listeners[QuestTracker] = Listeners("quests")

    def on_change(self, callback: Callable[[QuestTracker], None]) -> Subscription:
        return self._listeners.add(callback)

    def _notify_change(self) -> None:
        self._listeners.notify(self)

    # -- queries --

    def get_quest(self, quest_id: str) -> Quest | None:
        return self._quests.get(quest_id)

    def get_quest_status(self, quest_id: str) -> QuestStatus:
        quest = self._quests.get(quest_id)
        return quest.status if quest is not None else QuestStatus.INACTIVE

    def get_all_quests(self) -> list[Quest]:
        return list(self._quests.values())

    def get_active_quests(self) -> list[Quest]:
        return [q for q in self._quests.values() if q.status == QuestStatus.ACTIVE]

    # -- mutators --

    def start_quest(self, quest_id: str) -> bool:
        quest = self._quests.get(quest_id)
        if quest is None:
            logger.warning("Quest '%s' not found", quest_id)
            return False
        if quest.status != QuestStatus.INACTIVE:
            logger.debug("Quest '%s' already %s", quest_id, quest.status.value)
            return False
        quest.status = QuestStatus.ACTIVE
        logger.info("Quest started: %s", quest.title)
        self._notify_change()
        return True

    def on_enemy_killed(self, enemy_kind: str) -> list[str]:
        """Advance matching KILL objectives. Returns ids of quests completed now."""
        completed: list[str] = []

        for quest in self.get_active_quests():
            for objective in quest.objectives:
                if objective.type != ObjectiveType.KILL or objective.target != enemy_kind:
                    continue
                objective.advance()
                logger.debug("Quest '%s' progress: %s %d/%d", quest.quest_id,
                             objective.target, objective.current, objective.amount)

            if quest.status == QuestStatus.ACTIVE and quest.is_complete:
                quest.status = QuestStatus.COMPLETED
                completed.append(quest.quest_id)
                logger.info("Quest completed: %s", quest.title)

        self._notify_change()
        return completed

    def reset_quest(self, quest_id: str) -> bool:
        qdef = self._defs.get(quest_id)
        if qdef is None:
            return False
        self._quests[quest_id] = Quest.from_def(quest_id, qdef)
        self._notify_change()
        return True

    def reset_all(self) -> None:
        self._quests = {qid: Quest.from_def(qid, qdef) for qid, qdef in self._defs.items()}
        self._notify_change()

    def to_dict(self) -> dict:
        return {qid: q.to_dict() for qid, q in self._quests.items()}
