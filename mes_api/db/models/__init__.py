"""
ORM models for the MES domain: tenancy and security, organization, master
data (products, processes, BOMs, routings), partners, production, inventory,
equipment maintenance and auditing.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .tenancy import Tenant  # noqa: F401
from .security import (  # noqa: F401
    User,
    Role,
    Permission,
    UserRole,
    RolePermission,
)
from .organization import (  # noqa: F401
    Site,
    Department,
)
from .master_data import (  # noqa: F401
    Product,
    Process,
    Bom,
    BomDetail,
    ProcessRouting,
    ProcessRoutingStep,
)
from .partners import (  # noqa: F401
    Supplier,
    Customer,
)
from .production import (  # noqa: F401
    WorkOrder,
    WorkResult,
)
from .inventory import Lot  # noqa: F401
from .equipment import (  # noqa: F401
    Equipment,
    EquipmentInspection,
    InspectionAction,
    Gauge,
)
from .audit import AuditLog  # noqa: F401
