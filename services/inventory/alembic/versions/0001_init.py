from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'inventory',
        sa.Column('id', sa.BigInteger, primary_key=True, autoincrement=True),
        # Product ID - owned by product-service, no foreign key across services
        sa.Column('product_id', sa.BigInteger, nullable=False),
        sa.Column('quantity', sa.Integer, nullable=False, server_default='0'),
        sa.UniqueConstraint('product_id', name='uq_inventory_product_id'),
        sa.CheckConstraint('quantity >= 0', name='ck_inventory_quantity_non_negative'),
    )

def downgrade():
    op.drop_table('inventory')
