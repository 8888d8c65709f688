"""initial community schema

Revision ID: a1c3e5f70001
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""

from typing import Sequence, Union

from alembic import op

from alumni.core.database import Base
from alumni.models import *  # noqa: F401,F403

# revision identifiers, used by Alembic.
revision: str = "a1c3e5f70001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Tenants, users, communities, memberships, posts, polls, comments,
    # likes, reports, categories and the moderation log
    Base.metadata.create_all(bind=op.get_bind())


def downgrade() -> None:
    Base.metadata.drop_all(bind=op.get_bind())
