# alumni/services/moderation.py
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from alumni.models.moderation_action import ModerationAction
from alumni.utils.pagination import paginate

logger = logging.getLogger(__name__)


def record_action(
    db: Session,
    *,
    community_id: Optional[int],
    actor_id: Optional[int],
    entity_type: str,
    entity_id: int,
    action: str,
    reason: Optional[str] = None,
) -> ModerationAction:
    """Append a moderation entry to the session. The caller commits."""
    entry = ModerationAction(
        community_id=community_id,
        actor_id=actor_id,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        reason=reason,
    )
    db.add(entry)
    logger.info(
        f"Moderation: {action} {entity_type}={entity_id} "
        f"community={community_id} actor={actor_id}"
    )
    return entry


class ModerationLogService:
    def __init__(self, db: Session):
        self.db = db

    def list_for_community(
        self,
        community_id: int,
        page: int = 1,
        size: int = 20,
        entity_type: Optional[str] = None,
    ) -> Tuple[List[ModerationAction], dict]:
        query = self.db.query(ModerationAction).filter(
            ModerationAction.community_id == community_id
        )
        if entity_type:
            query = query.filter(ModerationAction.entity_type == entity_type)
        query = query.order_by(ModerationAction.created_at.desc(), ModerationAction.id.desc())
        return paginate(query, page, size)
