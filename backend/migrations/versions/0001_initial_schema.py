"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 00:00:00.000000

Creates the Estoque Fácil schema from scratch:
- users: accounts with approval/block state
- produtos: per-account inventory, prices in centavos
- vendas: sales, cascading from both users and produtos
- configuracoes: global key-value settings (profitMargin)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ============================================================================
    # users: accounts (tenants)
    # ============================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('document', sa.String(length=14), nullable=False),
        sa.Column('tipo_documento', sa.String(length=4), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        sa.Column('approved_by', sa.String(length=36), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_blocked', sa.Boolean(), nullable=False),
        sa.Column('block_reason', sa.Text(), nullable=True),
        sa.Column('blocked_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("tipo_documento IN ('cpf', 'cnpj')", name='ck_users_tipo_documento'),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('document'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_pending', 'users', ['is_approved', 'created_at'])

    # ============================================================================
    # produtos: inventory items
    # ============================================================================
    op.create_table(
        'produtos',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('supplier', sa.String(length=255), nullable=True),
        sa.Column('purchase_price_cents', sa.Integer(), nullable=False),
        sa.Column('suggested_price_cents', sa.BigInteger(), nullable=False),
        sa.Column('purchased_quantity', sa.Integer(), nullable=False),
        sa.Column('quantidade_disponivel', sa.Integer(), nullable=False),
        sa.Column('image', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('quantidade_disponivel >= 0', name='ck_produtos_disponivel_nonnegative'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_produtos_user_id', 'produtos', ['user_id'])
    op.create_index('ix_produtos_user_created', 'produtos', ['user_id', 'created_at'])

    # ============================================================================
    # vendas: sales
    # ============================================================================
    op.create_table(
        'vendas',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('quantidade_vendida', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('total_cents', sa.BigInteger(), nullable=False),
        sa.Column('sold_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.CheckConstraint('quantidade_vendida > 0', name='ck_vendas_quantidade_positive'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['produtos.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_vendas_user_id', 'vendas', ['user_id'])
    op.create_index('ix_vendas_product_id', 'vendas', ['product_id'])
    op.create_index('ix_vendas_user_sold_at', 'vendas', ['user_id', 'sold_at'])

    # ============================================================================
    # configuracoes: global settings
    # ============================================================================
    configuracoes = op.create_table(
        'configuracoes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('chave', sa.String(length=128), nullable=False),
        sa.Column('valor', sa.Text(), nullable=False),
        sa.Column('descricao', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('chave'),
        sqlite_autoincrement=True
    )

    op.bulk_insert(configuracoes, [
        {'chave': 'profitMargin', 'valor': '0.5', 'descricao': 'Margem de lucro padrão (50%)'},
    ])


def downgrade():
    """Drop all tables (destructive operation)."""
    op.drop_table('configuracoes')
    op.drop_table('vendas')
    op.drop_table('produtos')
    op.drop_table('users')
