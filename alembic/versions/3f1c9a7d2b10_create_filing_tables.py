"""create_filing_tables

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 10:12:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'documents',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('project_id', sa.String(), nullable=False),
        sa.Column('path', sa.String(), nullable=False, server_default=''),
        sa.Column('name', sa.String(), nullable=False, comment='Original filename'),
        sa.Column('display_name', sa.String(), nullable=False),
        sa.Column('storage_key', sa.String(), nullable=False),
        sa.Column('storage_bucket', sa.String(), nullable=False),
        sa.Column('url', sa.String(), nullable=True),
        sa.Column('size', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(), nullable=False),
        sa.Column('checksum', sa.String(length=64), nullable=False, comment='Content fingerprint used for deduplication'),
        sa.Column('processing_status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('metadata', postgresql.JSONB(), nullable=True, comment='Filing decision audit record'),
        sa.Column('tags', postgresql.JSONB(), nullable=True),
        sa.Column('deleted_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    )
    # Non-unique; soft-deleted rows keep their checksum
    op.create_index('ix_documents_project_checksum', 'documents', ['project_id', 'checksum'])
    op.create_index('ix_documents_project_path', 'documents', ['project_id', 'path'])

    op.create_table(
        'firms',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('project_id', sa.String(), nullable=False),
        sa.Column('entity', sa.String(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False),
        sa.Column('deleted_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('updated_by', sa.String(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
    )
    op.create_index('ix_firms_project_id', 'firms', ['project_id'])

    op.create_table(
        'document_queue',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('document_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('documents.id'), nullable=False, unique=True),
        sa.Column('status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('retry_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('processed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.CheckConstraint('retry_count >= 0', name='ck_document_queue_retry_count'),
    )
    op.create_index('ix_document_queue_status', 'document_queue', ['status'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_document_queue_status', table_name='document_queue')
    op.drop_table('document_queue')

    op.drop_index('ix_firms_project_id', table_name='firms')
    op.drop_table('firms')

    op.drop_index('ix_documents_project_path', table_name='documents')
    op.drop_index('ix_documents_project_checksum', table_name='documents')
    op.drop_table('documents')
