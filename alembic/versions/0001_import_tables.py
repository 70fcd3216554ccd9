"""import jobs, assets and purchase order lines

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

import_item_type = postgresql.ENUM(
    "ASSET_CREATE", "PURCHASE_ORDER_LINE_CREATE", "ENTITY_PATCH",
    name="import_item_type", create_type=False
)
import_job_status = postgresql.ENUM(
    "PENDING", "PROCESSING", "COMPLETED", "FAILED",
    name="import_job_status", create_type=False
)


def upgrade():
    bind = op.get_bind()
    import_item_type.create(bind, checkfirst=True)
    import_job_status.create(bind, checkfirst=True)

    op.create_table(
        "import_jobs",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("company_id", sa.String(255), nullable=False),
        sa.Column("item_type", import_item_type, nullable=False),
        sa.Column("status", import_job_status, nullable=False),
        sa.Column("total_rows", sa.Integer, nullable=False),
        sa.Column("processed_rows", sa.Integer, nullable=False),
        sa.Column("successful_rows", sa.Integer, nullable=False),
        sa.Column("failed_rows", sa.Integer, nullable=False),
        sa.Column("progress", sa.Integer, nullable=False),
        sa.Column("error_details", postgresql.JSONB, nullable=False),
        sa.Column("result_data", postgresql.JSONB, nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
        sa.Column("started_at", sa.DateTime, nullable=True),
        sa.Column("completed_at", sa.DateTime, nullable=True),
    )
    op.create_index("ix_import_jobs_company_id", "import_jobs", ["company_id"])
    op.create_index("ix_import_jobs_status", "import_jobs", ["status"])
    op.create_index("idx_import_job_company_created", "import_jobs", ["company_id", "created_at"])
    op.create_index("idx_import_job_status_updated", "import_jobs", ["status", "updated_at"])

    op.create_table(
        "assets",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("company_id", sa.String(255), nullable=False),
        sa.Column("serial_number", sa.String(100), nullable=False),
        sa.Column("brand", sa.String(200)),
        sa.Column("model", sa.String(200)),
        sa.Column("product_type_id", sa.String(255)),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("processing_stage", sa.String(50)),
        sa.Column("cosmetic_grade", sa.String(50)),
        sa.Column("functional_status", sa.String(50)),
        sa.Column("cpu", sa.String(200)),
        sa.Column("ram", sa.String(100)),
        sa.Column("storage", sa.String(100)),
        sa.Column("screen_size", sa.String(50)),
        sa.Column("purchase_price", sa.Float),
        sa.Column("refurbishment_cost", sa.Float),
        sa.Column("sale_price", sa.Float),
        sa.Column("purchase_lot_id", sa.String(255)),
        sa.Column("location_id", sa.String(255)),
        sa.Column("processing_notes", sa.Text),
        sa.Column("attributes", postgresql.JSONB),
        sa.Column("created_at", sa.DateTime, nullable=False),
        sa.Column("updated_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_assets_company_id", "assets", ["company_id"])
    op.create_index("idx_asset_company_serial", "assets", ["company_id", "serial_number"], unique=True)
    op.create_index("idx_asset_company_status", "assets", ["company_id", "status"])

    op.create_table(
        "purchase_order_lines",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("company_id", sa.String(255), nullable=False),
        sa.Column("purchase_order_id", sa.String(255), nullable=False),
        sa.Column("product_type_id", sa.String(255)),
        sa.Column("brand", sa.String(200)),
        sa.Column("model", sa.String(200)),
        sa.Column("serial_number", sa.String(100)),
        sa.Column("description", sa.Text),
        sa.Column("quantity_ordered", sa.Integer, nullable=False),
        sa.Column("unit_cost", sa.Float, nullable=False),
        sa.Column("unit_cost_source", sa.Float),
        sa.Column("created_at", sa.DateTime, nullable=False),
    )
    op.create_index("ix_purchase_order_lines_company_id", "purchase_order_lines", ["company_id"])
    op.create_index("ix_purchase_order_lines_purchase_order_id", "purchase_order_lines", ["purchase_order_id"])
    op.create_index("idx_po_line_order", "purchase_order_lines", ["company_id", "purchase_order_id"])


def downgrade():
    op.drop_table("purchase_order_lines")
    op.drop_table("assets")
    op.drop_table("import_jobs")

    bind = op.get_bind()
    import_job_status.drop(bind, checkfirst=True)
    import_item_type.drop(bind, checkfirst=True)
