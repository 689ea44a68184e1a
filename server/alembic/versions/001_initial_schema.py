"""Initial database schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(320), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'])

    # Create pieces table
    op.create_table(
        'pieces',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('composer', sa.String(255), nullable=False),
        sa.Column('score_format', sa.String(20), nullable=False, server_default='mei'),
        sa.Column('score_data', sa.Text(), nullable=False),
        sa.Column('contributor_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['contributor_id'], ['users.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_pieces_id', 'pieces', ['id'])
    op.create_index('ix_pieces_title', 'pieces', ['title'])
    op.create_index('ix_pieces_composer', 'pieces', ['composer'])
    op.create_index('ix_pieces_contributor_id', 'pieces', ['contributor_id'])

    # Create schemata and their event slots
    op.create_table(
        'schemata',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('citation', sa.Text(), nullable=True),
        sa.Column('schema_type', sa.String(50), nullable=False),
        sa.Column('event_count', sa.Integer(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('contributor_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['contributor_id'], ['users.id'], ondelete='SET NULL'),
        sa.CheckConstraint('event_count > 0', name='ck_schemata_event_count'),
    )
    op.create_index('ix_schemata_id', 'schemata', ['id'])
    op.create_index('ix_schemata_name', 'schemata', ['name'])
    op.create_index('ix_schemata_active', 'schemata', ['active'])
    op.create_index('ix_schemata_contributor_id', 'schemata', ['contributor_id'])

    op.create_table(
        'schema_events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('schema_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('index', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(20), nullable=False),
        sa.Column('value', sa.String(50), nullable=False, server_default=''),
        sa.ForeignKeyConstraint(['schema_id'], ['schemata.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('schema_id', 'category', 'index', name='uq_schema_events_slot'),
    )
    op.create_index('ix_schema_events_id', 'schema_events', ['id'])
    op.create_index('ix_schema_events_schema_id', 'schema_events', ['schema_id'])

    # Create schema annotations of pieces
    op.create_table(
        'schema_pieces',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('schema_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('piece_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('contributor_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('measure_start', sa.Integer(), nullable=True),
        sa.Column('measure_end', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['schema_id'], ['schemata.id']),
        sa.ForeignKeyConstraint(['piece_id'], ['pieces.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['contributor_id'], ['users.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_schema_pieces_id', 'schema_pieces', ['id'])
    op.create_index('ix_schema_pieces_schema_id', 'schema_pieces', ['schema_id'])
    op.create_index('ix_schema_pieces_piece_id', 'schema_pieces', ['piece_id'])
    op.create_index('ix_schema_pieces_contributor_id', 'schema_pieces', ['contributor_id'])

    op.create_table(
        'event_placements',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('link_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('piece_location', sa.String(255), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['link_id'], ['schema_pieces.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['event_id'], ['schema_events.id']),
    )
    op.create_index('ix_event_placements_id', 'event_placements', ['id'])
    op.create_index('ix_event_placements_link_id', 'event_placements', ['link_id'])
    op.create_index('ix_event_placements_event_id', 'event_placements', ['event_id'])

    # Create comments table
    op.create_table(
        'comments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('piece_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('comment_type', sa.String(10), nullable=False, server_default='text'),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('uri', sa.String(2048), nullable=True),
        sa.Column('element_ids', sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql'), nullable=False, server_default='[]'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['piece_id'], ['pieces.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_comments_id', 'comments', ['id'])
    op.create_index('ix_comments_piece_id', 'comments', ['piece_id'])
    op.create_index('ix_comments_user_id', 'comments', ['user_id'])

    # Create music_sources table
    op.create_table(
        'music_sources',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('base_url', sa.String(2048), nullable=False),
        sa.Column('index_file', sa.String(512), nullable=True),
        sa.Column('composer', sa.String(255), nullable=False),
        sa.Column('score_format', sa.String(20), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('music_sources')
    op.drop_table('comments')
    op.drop_table('event_placements')
    op.drop_table('schema_pieces')
    op.drop_table('schema_events')
    op.drop_table('schemata')
    op.drop_table('pieces')
    op.drop_table('users')
