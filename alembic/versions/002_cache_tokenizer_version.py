"""Record the tokenizer version on cached token streams.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Existing rows stay NULL and are re-extracted on next open
    with op.batch_alter_table("extracted_text_cache") as batch_op:
        batch_op.add_column(sa.Column("tokenizer_version", sa.String(length=32), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("extracted_text_cache") as batch_op:
        batch_op.drop_column("tokenizer_version")
