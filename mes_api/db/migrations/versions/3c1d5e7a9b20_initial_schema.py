"""Initial MES schema.

- tenants
- departments, sites
- users, roles, permissions, user_roles, role_permissions
- products, processes, equipments
- boms, bom_details, process_routings, process_routing_steps
- suppliers, customers
- work_orders, work_results, lots
- equipment_inspections, inspection_actions, gauges
- audit_logs

Tenant isolation is enforced by the application (every query filters on
tenant_id); no database policies are installed, so the schema runs on both
PostgreSQL and SQLite.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1d5e7a9b20"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def _tenant() -> sa.Column:
    return sa.Column(
        "tenant_id",
        sa.String(50),
        sa.ForeignKey("tenants.tenant_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _flag(name: str, default: str = "1") -> sa.Column:
    return sa.Column(name, sa.Boolean(), nullable=False, server_default=default)


def _fk(name: str, target: str, ondelete: str, nullable: bool = True, index: bool = False) -> sa.Column:
    return sa.Column(name, sa.Uuid(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable, index=index)


def _qty(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.Numeric(18, 6), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("tenant_id", sa.String(50), primary_key=True),
        sa.Column("tenant_name", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "departments",
        _id(),
        _tenant(),
        sa.Column("department_code", sa.String(50), nullable=False),
        sa.Column("department_name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        _flag("is_active"),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "department_code", name="uq_departments_tenant_department_code"),
    )

    op.create_table(
        "sites",
        _id(),
        _tenant(),
        sa.Column("site_code", sa.String(50), nullable=False),
        sa.Column("site_name", sa.Text(), nullable=False),
        sa.Column("site_type", sa.String(30), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("country", sa.String(50), nullable=True),
        sa.Column("region", sa.String(50), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("fax", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("manager_name", sa.Text(), nullable=True),
        sa.Column("manager_phone", sa.String(50), nullable=True),
        sa.Column("manager_email", sa.String(255), nullable=True),
        _flag("is_active"),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "site_code", name="uq_sites_tenant_site_code"),
    )

    # Security
    op.create_table(
        "users",
        _id(),
        _tenant(),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        _fk("department_id", "departments.id", "SET NULL"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "username", name="uq_users_tenant_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "roles",
        _id(),
        _tenant(),
        sa.Column("role_code", sa.String(50), nullable=False),
        sa.Column("role_name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _flag("is_active"),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "role_code", name="uq_roles_tenant_role_code"),
    )

    op.create_table(
        "permissions",
        _id(),
        sa.Column("permission_code", sa.String(100), nullable=False),
        sa.Column("permission_name", sa.Text(), nullable=False),
        sa.Column("module", sa.String(50), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("permission_code", name="uq_permissions_permission_code"),
    )

    op.create_table(
        "user_roles",
        _id(),
        _fk("user_id", "users.id", "CASCADE", nullable=False),
        _fk("role_id", "roles.id", "CASCADE", nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "role_id", name="uq_user_roles_user_role"),
    )

    op.create_table(
        "role_permissions",
        _id(),
        _fk("role_id", "roles.id", "CASCADE", nullable=False),
        _fk("permission_id", "permissions.id", "CASCADE", nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("role_id", "permission_id", name="uq_role_permissions_role_permission"),
    )

    # Master data
    op.create_table(
        "products",
        _id(),
        _tenant(),
        sa.Column("product_code", sa.String(50), nullable=False),
        sa.Column("product_name", sa.Text(), nullable=False),
        sa.Column("product_type", sa.String(30), nullable=True),
        sa.Column("specification", sa.Text(), nullable=True),
        sa.Column("unit", sa.String(20), nullable=False),
        sa.Column("standard_cycle_time", sa.Numeric(18, 6), nullable=True),
        _flag("is_active"),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "product_code", name="uq_products_tenant_product_code"),
    )

    op.create_table(
        "processes",
        _id(),
        _tenant(),
        sa.Column("process_code", sa.String(50), nullable=False),
        sa.Column("process_name", sa.Text(), nullable=False),
        sa.Column("process_type", sa.String(30), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        _flag("is_active"),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "process_code", name="uq_processes_tenant_process_code"),
    )

    op.create_table(
        "equipments",
        _id(),
        _tenant(),
        sa.Column("equipment_code", sa.String(50), nullable=False),
        sa.Column("equipment_name", sa.Text(), nullable=False),
        sa.Column("equipment_type", sa.String(30), nullable=True),
        _fk("site_id", "sites.id", "SET NULL"),
        sa.Column("manufacturer", sa.Text(), nullable=True),
        sa.Column("model_name", sa.Text(), nullable=True),
        sa.Column("serial_no", sa.String(100), nullable=True),
        sa.Column("install_date", sa.Date(), nullable=True),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        _flag("is_active"),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "equipment_code", name="uq_equipments_tenant_equipment_code"),
    )

    op.create_table(
        "boms",
        _id(),
        _tenant(),
        _fk("product_id", "products.id", "RESTRICT", nullable=False),
        sa.Column("bom_code", sa.String(50), nullable=False),
        sa.Column("bom_name", sa.Text(), nullable=False),
        sa.Column("version", sa.String(20), nullable=False),
        sa.Column("effective_date", sa.Date(), nullable=False),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        _flag("is_active"),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "bom_code", "version", name="uq_boms_tenant_code_version"),
    )

    op.create_table(
        "bom_details",
        _id(),
        _tenant(),
        _fk("bom_id", "boms.id", "CASCADE", nullable=False, index=True),
        sa.Column("sequence", sa.Integer(), nullable=False),
        _fk("material_product_id", "products.id", "RESTRICT", nullable=False),
        _fk("process_id", "processes.id", "SET NULL"),
        _qty("quantity"),
        sa.Column("unit", sa.String(20), nullable=False),
        sa.Column("usage_rate", sa.Numeric(9, 4), nullable=False),
        sa.Column("scrap_rate", sa.Numeric(9, 4), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "process_routings",
        _id(),
        _tenant(),
        _fk("product_id", "products.id", "RESTRICT", nullable=False),
        sa.Column("routing_code", sa.String(50), nullable=False),
        sa.Column("routing_name", sa.Text(), nullable=False),
        sa.Column("version", sa.String(20), nullable=False),
        sa.Column("effective_date", sa.Date(), nullable=False),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        _flag("is_active"),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "tenant_id", "routing_code", "version", name="uq_process_routings_tenant_code_version"
        ),
    )

    op.create_table(
        "process_routing_steps",
        _id(),
        _tenant(),
        _fk("routing_id", "process_routings.id", "CASCADE", nullable=False, index=True),
        sa.Column("sequence_order", sa.Integer(), nullable=False),
        _fk("process_id", "processes.id", "RESTRICT", nullable=False),
        sa.Column("standard_time", sa.Integer(), nullable=True),
        sa.Column("setup_time", sa.Integer(), nullable=True),
        sa.Column("wait_time", sa.Integer(), nullable=True),
        sa.Column("required_workers", sa.Integer(), nullable=True),
        _fk("equipment_id", "equipments.id", "SET NULL"),
        _flag("is_parallel", "0"),
        sa.Column("parallel_group", sa.Integer(), nullable=True),
        _flag("is_optional", "0"),
        _fk("alternate_process_id", "processes.id", "SET NULL"),
        _flag("quality_check_required", "0"),
        sa.Column("quality_standard", sa.Text(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
    )

    # Partners
    for table, prefix, extra in (
        ("suppliers", "supplier", [
            sa.Column("lead_time_days", sa.Integer(), nullable=True),
            sa.Column("rating", sa.String(10), nullable=True),
        ]),
        ("customers", "customer", [
            sa.Column("credit_limit", sa.Float(), nullable=True),
        ]),
    ):
        op.create_table(
            table,
            _id(),
            _tenant(),
            sa.Column(f"{prefix}_code", sa.String(50), nullable=False),
            sa.Column(f"{prefix}_name", sa.Text(), nullable=False),
            sa.Column(f"{prefix}_type", sa.String(30), nullable=True),
            sa.Column("business_number", sa.String(50), nullable=True),
            sa.Column("representative_name", sa.Text(), nullable=True),
            sa.Column("contact_person", sa.Text(), nullable=True),
            sa.Column("email", sa.String(255), nullable=True),
            sa.Column("phone", sa.String(50), nullable=True),
            sa.Column("address", sa.Text(), nullable=True),
            sa.Column("payment_terms", sa.Text(), nullable=True),
            *extra,
            _flag("is_active"),
            sa.Column("remarks", sa.Text(), nullable=True),
            *_timestamps(),
            sa.UniqueConstraint("tenant_id", f"{prefix}_code", name=f"uq_{table}_tenant_{prefix}_code"),
        )

    # Production
    op.create_table(
        "work_orders",
        _id(),
        _tenant(),
        sa.Column("work_order_no", sa.String(50), nullable=False),
        _fk("product_id", "products.id", "RESTRICT", nullable=False),
        _fk("process_id", "processes.id", "RESTRICT", nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        _qty("planned_quantity"),
        _qty("actual_quantity"),
        _qty("good_quantity"),
        _qty("defect_quantity"),
        sa.Column("planned_start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("planned_end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("actual_start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("priority", sa.Integer(), nullable=False),
        _fk("assigned_user_id", "users.id", "SET NULL"),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "work_order_no", name="uq_work_orders_tenant_work_order_no"),
    )

    op.create_table(
        "work_results",
        _id(),
        _tenant(),
        _fk("work_order_id", "work_orders.id", "CASCADE", nullable=False, index=True),
        sa.Column("result_date", sa.Date(), nullable=False),
        _qty("quantity"),
        _qty("good_quantity"),
        _qty("defect_quantity"),
        _fk("worker_id", "users.id", "SET NULL", index=True),
        sa.Column("work_start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("work_end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("defect_reason", sa.Text(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
    )

    # Inventory
    op.create_table(
        "lots",
        _id(),
        _tenant(),
        sa.Column("lot_no", sa.String(100), nullable=False),
        _fk("product_id", "products.id", "RESTRICT", nullable=False),
        sa.Column("lot_type", sa.String(30), nullable=True),
        _qty("initial_quantity"),
        _qty("current_quantity"),
        _qty("reserved_quantity"),
        sa.Column("unit", sa.String(20), nullable=False),
        sa.Column("manufacturing_date", sa.Date(), nullable=True),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("quality_status", sa.String(20), nullable=False),
        _fk("supplier_id", "suppliers.id", "SET NULL"),
        sa.Column("supplier_lot_no", sa.String(100), nullable=True),
        _fk("work_order_id", "work_orders.id", "SET NULL"),
        _fk("parent_lot_id", "lots.id", "SET NULL"),
        _flag("is_active"),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "lot_no", name="uq_lots_tenant_lot_no"),
    )

    # Equipment maintenance
    op.create_table(
        "equipment_inspections",
        _id(),
        _tenant(),
        _fk("equipment_id", "equipments.id", "CASCADE", nullable=False, index=True),
        sa.Column("inspection_no", sa.String(50), nullable=False),
        sa.Column("inspection_type", sa.String(30), nullable=False),
        sa.Column("inspection_date", sa.Date(), nullable=False),
        _fk("inspector_user_id", "users.id", "SET NULL"),
        sa.Column("result", sa.String(20), nullable=True),
        sa.Column("findings", sa.Text(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "tenant_id", "inspection_no", name="uq_equipment_inspections_tenant_inspection_no"
        ),
    )

    op.create_table(
        "inspection_actions",
        _id(),
        _tenant(),
        _fk("inspection_id", "equipment_inspections.id", "CASCADE", nullable=False, index=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        _fk("assigned_user_id", "users.id", "SET NULL"),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("completed_date", sa.Date(), nullable=True),
        sa.Column("result", sa.Text(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "gauges",
        _id(),
        _tenant(),
        sa.Column("gauge_code", sa.String(50), nullable=False),
        sa.Column("gauge_name", sa.Text(), nullable=False),
        sa.Column("gauge_type", sa.String(30), nullable=True),
        sa.Column("manufacturer", sa.Text(), nullable=True),
        sa.Column("model_name", sa.Text(), nullable=True),
        sa.Column("serial_no", sa.String(100), nullable=True),
        sa.Column("measurement_range", sa.Text(), nullable=True),
        sa.Column("accuracy", sa.Text(), nullable=True),
        sa.Column("calibration_cycle_days", sa.Integer(), nullable=True),
        sa.Column("last_calibration_date", sa.Date(), nullable=True),
        sa.Column("next_calibration_date", sa.Date(), nullable=True),
        sa.Column("calibration_status", sa.String(20), nullable=False),
        _fk("department_id", "departments.id", "SET NULL"),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tenant_id", "gauge_code", name="uq_gauges_tenant_gauge_code"),
    )

    # Audit
    op.create_table(
        "audit_logs",
        _id(),
        _tenant(),
        _fk("user_id", "users.id", "SET NULL", index=True),
        sa.Column("username", sa.String(100), nullable=True),
        sa.Column("action", sa.String(50), nullable=False, index=True),
        sa.Column("entity_type", sa.String(100), nullable=True),
        sa.Column("entity_id", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("old_value", sa.JSON(), nullable=True),
        sa.Column("new_value", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(50), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        _flag("success"),
        sa.Column("error_message", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_audit_logs_tenant_created_at", "audit_logs", ["tenant_id", "created_at"])
    op.create_index("ix_work_orders_tenant_status", "work_orders", ["tenant_id", "status"])


def downgrade() -> None:
    op.drop_index("ix_work_orders_tenant_status", table_name="work_orders")
    op.drop_index("ix_audit_logs_tenant_created_at", table_name="audit_logs")

    # Drop tables in reverse dependency order
    for table in (
        "audit_logs",
        "gauges",
        "inspection_actions",
        "equipment_inspections",
        "lots",
        "work_results",
        "work_orders",
        "customers",
        "suppliers",
        "process_routing_steps",
        "process_routings",
        "bom_details",
        "boms",
        "equipments",
        "processes",
        "products",
        "role_permissions",
        "permissions",
        "user_roles",
        "roles",
        "users",
        "sites",
        "departments",
        "tenants",
    ):
        op.drop_table(table)
