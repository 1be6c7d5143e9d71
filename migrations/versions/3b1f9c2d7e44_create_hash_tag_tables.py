"""Create hashes, tags and hash_tags tables

Revision ID: 3b1f9c2d7e44
Revises:
Create Date: 2026-10-18 10:12:05.114210

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b1f9c2d7e44'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Create hashes table
    op.create_table(
        'hashes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('value', sa.LargeBinary(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_hashes'),
        sa.UniqueConstraint('value', name='uq_hashes_value')
    )

    # Create tags table
    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_tags'),
        sa.UniqueConstraint('name', name='uq_tags_name')
    )

    # Create hash_tags junction table (append-only, no cascade rules)
    op.create_table(
        'hash_tags',
        sa.Column('hash_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['hash_id'], ['hashes.id'], name='fk_hash_tags_hash_id_hashes'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], name='fk_hash_tags_tag_id_tags'),
        sa.PrimaryKeyConstraint('hash_id', 'tag_id', name='pk_hash_tags')
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('hash_tags')
    op.drop_table('tags')
    op.drop_table('hashes')
