"""
Skill/constellation ledger.
Skill points per task are the task's lifetime record total minus what was spent on nodes.
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from sigil.constants import CONSTELLATIONS
from sigil.exceptions import SkillNotFoundException
from sigil.repositories.user_state_repository import UserStateRepository
from sigil.schemas import Constellation, SkillNode, UnlockResult, UserState
from sigil.services.aggregation_service import lifetime_sum

logger = logging.getLogger("sigil.skills")


def available_points(state: UserState, task_id: str) -> float:
    return lifetime_sum(state.records, task_id) - state.spent_skill_points.get(task_id, 0)


def find_node(skill_id: str) -> Optional[tuple]:
    """Return (constellation, node) for a node id, or None."""
    for constellation in CONSTELLATIONS:
        for node in constellation["nodes"]:
            if node["id"] == skill_id:
                return constellation, node
    return None


class SkillService:
    """Service for spending skill points on constellation nodes"""

    def __init__(self, db: Session):
        self.db = db
        self.state_repo = UserStateRepository()

    def get_available_points(self, user_id: str, task_id: str) -> float:
        return available_points(self.state_repo.load(self.db, user_id), task_id)

    def is_unlocked(self, user_id: str, skill_id: str) -> bool:
        return skill_id in self.state_repo.load(self.db, user_id).unlocked_skills

    def unlock(self, user_id: str, skill_id: str, task_id: str, cost: float) -> bool:
        """
        Unlock a node by spending `cost` points of `task_id`.

        Succeeds only if the node is not unlocked yet and the task has at
        least `cost` available points. The spend and the unlock are written
        together; a failed attempt writes nothing.

        Returns:
            True if the node was unlocked by this call
        """
        state = self.state_repo.load(self.db, user_id, for_update=True)

        if skill_id in state.unlocked_skills:
            logger.info(f"User {user_id}: skill {skill_id} already unlocked")
            return False

        points = available_points(state, task_id)
        if points < cost:
            logger.info(f"User {user_id}: not enough points for {skill_id} ({points} < {cost})")
            return False

        state.spent_skill_points[task_id] = state.spent_skill_points.get(task_id, 0) + cost
        state.unlocked_skills.append(skill_id)
        self.state_repo.save_fields(self.db, user_id, state, ["spent_skill_points", "unlocked_skills"])

        logger.info(f"User {user_id}: unlocked {skill_id} for {cost} {task_id} points")
        return True

    def unlock_node(self, user_id: str, skill_id: str) -> UnlockResult:
        """Unlock a constellation node by id, using the node's own task and cost."""
        found = find_node(skill_id)
        if found is None:
            raise SkillNotFoundException(skill_id)
        constellation, node = found

        unlocked = self.unlock(user_id, skill_id, constellation["task_id"], node["cost"])
        return UnlockResult(
            skill_id=skill_id,
            unlocked=unlocked,
            available_points=self.get_available_points(user_id, constellation["task_id"]),
        )

    def get_constellations(self, user_id: str) -> List[Constellation]:
        state = self.state_repo.load(self.db, user_id)
        unlocked = set(state.unlocked_skills)
        return [
            Constellation(
                task_id=c["task_id"],
                task_name=c["task_name"],
                task_color=c["task_color"],
                available_points=available_points(state, c["task_id"]),
                nodes=[SkillNode(**node, unlocked=node["id"] in unlocked) for node in c["nodes"]],
            )
            for c in CONSTELLATIONS
        ]
