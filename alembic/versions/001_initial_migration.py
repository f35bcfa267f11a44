"""Initial migration: create user, generation, flashcard and generation_error_log tables

Revision ID: initial
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create user table
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)

    # Create generation table
    op.create_table(
        'generation',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('model', sa.String(), nullable=False),
        sa.Column('generated_count', sa.Integer(), nullable=False),
        sa.Column('accepted_unedited_count', sa.Integer(), nullable=True),
        sa.Column('accepted_edited_count', sa.Integer(), nullable=True),
        sa.Column('source_text_hash', sa.String(), nullable=False),
        sa.Column('source_text_length', sa.Integer(), nullable=False),
        sa.Column('generation_duration', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_generation_user_id'), 'generation', ['user_id'], unique=False)
    op.create_index(op.f('ix_generation_source_text_hash'), 'generation', ['source_text_hash'], unique=False)

    # Create flashcard table
    op.create_table(
        'flashcard',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('front', sa.String(length=200), nullable=False),
        sa.Column('back', sa.String(length=500), nullable=False),
        sa.Column('source', sa.String(length=16), nullable=False),
        sa.Column('generation_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.ForeignKeyConstraint(['generation_id'], ['generation.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_flashcard_user_id'), 'flashcard', ['user_id'], unique=False)
    op.create_index(op.f('ix_flashcard_generation_id'), 'flashcard', ['generation_id'], unique=False)

    # Create generation_error_log table
    op.create_table(
        'generation_error_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('model', sa.String(), nullable=False),
        sa.Column('source_text_hash', sa.String(), nullable=False),
        sa.Column('source_text_length', sa.Integer(), nullable=False),
        sa.Column('error_code', sa.String(), nullable=False),
        sa.Column('error_message', sa.String(length=500), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_generation_error_log_user_id'), 'generation_error_log', ['user_id'], unique=False)
    op.create_index(
        op.f('ix_generation_error_log_source_text_hash'), 'generation_error_log', ['source_text_hash'], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f('ix_generation_error_log_source_text_hash'), table_name='generation_error_log')
    op.drop_index(op.f('ix_generation_error_log_user_id'), table_name='generation_error_log')
    op.drop_table('generation_error_log')
    op.drop_index(op.f('ix_flashcard_generation_id'), table_name='flashcard')
    op.drop_index(op.f('ix_flashcard_user_id'), table_name='flashcard')
    op.drop_table('flashcard')
    op.drop_index(op.f('ix_generation_source_text_hash'), table_name='generation')
    op.drop_index(op.f('ix_generation_user_id'), table_name='generation')
    op.drop_table('generation')
    op.drop_index(op.f('ix_user_email'), table_name='user')
    op.drop_table('user')
