"""initial_schema

Revision ID: 3c1f0a9d7e21
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d7e21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False,
                  comment="User's email address (used for login)"),
        sa.Column('hashed_password', sa.String(length=255), nullable=False,
                  comment='Bcrypt hashed password'),
        sa.Column('username', sa.String(length=50), nullable=False,
                  comment='Unique public username'),
        sa.Column('bio', sa.Text(), nullable=True, comment='User biography'),
        sa.Column('avatar_url', sa.String(length=500), nullable=True,
                  comment='Path to the uploaded avatar image'),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('verification_token', sa.String(length=64), nullable=True,
                  comment='Pending email verification token'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('verification_token'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table(
        'favorite_books',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('book_id', sa.String(length=64), nullable=False,
                  comment='Catalog volume identifier'),
        sa.Column('position', sa.Integer(), nullable=False, comment='Rank from 1 to 4'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('user_id', 'book_id', name='uq_favorite_user_book'),
        sa.UniqueConstraint('user_id', 'position', name='uq_favorite_user_position'),
    )
    op.create_index(op.f('ix_favorite_books_id'), 'favorite_books', ['id'])
    op.create_index(op.f('ix_favorite_books_user_id'), 'favorite_books', ['user_id'])

    op.create_table(
        'collections',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('book_id', sa.String(length=64), nullable=False,
                  comment='Catalog volume identifier'),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('finish_date', sa.Date(), nullable=True,
                  comment='When the user finished the book'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('user_id', 'book_id', 'status',
                            name='uq_collection_user_book_status'),
    )
    op.create_index(op.f('ix_collections_id'), 'collections', ['id'])
    op.create_index(op.f('ix_collections_user_id'), 'collections', ['user_id'])
    op.create_index(op.f('ix_collections_book_id'), 'collections', ['book_id'])

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(),
                  sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('book_id', sa.String(length=64), nullable=False,
                  comment='Catalog volume identifier'),
        sa.Column('rating', sa.Float(), nullable=False,
                  comment='Rating from 0 to 5, half steps allowed'),
        sa.Column('comment', sa.Text(), nullable=True, comment='Review text'),
        sa.Column('finish_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('user_id', 'book_id', name='uq_review_user_book'),
        sa.CheckConstraint('rating >= 0 AND rating <= 5', name='ck_review_rating_range'),
    )
    op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'])
    op.create_index(op.f('ix_reviews_user_id'), 'reviews', ['user_id'])
    op.create_index(op.f('ix_reviews_book_id'), 'reviews', ['book_id'])


def downgrade() -> None:
    op.drop_table('reviews')
    op.drop_table('collections')
    op.drop_table('favorite_books')
    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
