"""
API route modules, one subrouter per functional area:

- Auth: login, refresh, current user, password change
- Users / Roles / Permissions: administration
- Organization and Partners: sites, departments, suppliers, customers
- Master Data: products, processes, BOMs, routings
- Production: work orders and work results
- Inventory: lots
- Equipment: equipment, inspections, inspection actions, gauges
- Audit, Dashboard, Reports

Routers are included from mes_api.api.main (under the /api/v1 prefix).
"""
