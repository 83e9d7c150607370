"""Initial vacancies, candidates and applications tables

Revision ID: 001
Revises: 
Create Date: 2025-05-12 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'vacancies',
        sa.Column('vacancy_id', mysql.INTEGER(), autoincrement=True, nullable=False),
        sa.Column('title', mysql.VARCHAR(length=100), nullable=False),
        sa.Column('description', mysql.TEXT(), nullable=True),
        sa.Column('salary', mysql.DECIMAL(precision=10, scale=2), nullable=True),
        sa.Column('status', mysql.ENUM('open', 'closed', 'paused'), server_default='closed', nullable=True),
        sa.Column('creation_date', mysql.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.PrimaryKeyConstraint('vacancy_id')
    )

    op.create_table(
        'candidates',
        sa.Column('candidate_id', mysql.INTEGER(), autoincrement=True, nullable=False),
        sa.Column('name', mysql.VARCHAR(length=150), nullable=True),
        sa.Column('email', mysql.VARCHAR(length=255), nullable=True),
        sa.Column('phone', mysql.VARCHAR(length=30), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('occupation', mysql.VARCHAR(length=100), nullable=True),
        sa.Column('summary', mysql.TEXT(), nullable=True),
        sa.Column('experience', mysql.JSON(), nullable=True),
        sa.Column('skills', mysql.JSON(), nullable=True),
        sa.Column('languages', mysql.JSON(), nullable=True),
        sa.Column('education', mysql.JSON(), nullable=True),
        sa.Column('notes', mysql.TEXT(), nullable=True),
        sa.PrimaryKeyConstraint('candidate_id'),
        sa.UniqueConstraint('email', name='uq_candidates_email')
    )

    op.create_table(
        'applications',
        sa.Column('application_id', mysql.INTEGER(), autoincrement=True, nullable=False),
        sa.Column('application_date', mysql.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column(
            'status',
            mysql.ENUM('pending', 'interview', 'offered', 'accepted', 'rejected'),
            server_default='rejected',
            nullable=True
        ),
        sa.Column('ai_reason', mysql.TEXT(), nullable=True),
        sa.Column('candidate_id', mysql.INTEGER(), nullable=True),
        sa.Column('vacancy_id', mysql.INTEGER(), nullable=True),
        sa.PrimaryKeyConstraint('application_id'),
        sa.ForeignKeyConstraint(['candidate_id'], ['candidates.candidate_id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['vacancy_id'], ['vacancies.vacancy_id'], ondelete='SET NULL'),
        sa.UniqueConstraint('candidate_id', 'vacancy_id', name='uq_applications_candidate_vacancy')
    )


def downgrade() -> None:
    op.drop_table('applications')
    op.drop_table('candidates')
    op.drop_table('vacancies')
