"""
Cases app URL configuration.

All routes are registered under the ``/api/cases/`` prefix.

Route Hierarchy
---------------
  /api/cases/                              → list / create
  /api/cases/{id}/                         → retrieve / destroy (trashed only)
  GET  /api/cases/escalated/               → senior pool feed
  GET  /api/cases/history/?view=...        → active / archived / trash folders
  POST /api/cases/empty-trash/

  ── Lifecycle @actions (resource-level RPC) ─────────────────────
  POST /api/cases/{id}/accept/
  POST /api/cases/{id}/on-way/
  POST /api/cases/{id}/instructions/
  POST /api/cases/{id}/escalate/
  POST /api/cases/{id}/take-over/
  POST /api/cases/{id}/resolve/
  POST /api/cases/{id}/location/

  ── History @actions ────────────────────────────────────────────
  POST /api/cases/{id}/archive/
  POST /api/cases/{id}/trash/
  POST /api/cases/{id}/restore/

  GET  /api/cases/{id}/status-log/
"""

from rest_framework.routers import DefaultRouter

from .views import CaseViewSet

router = DefaultRouter()
router.register(
    prefix=r"cases",
    viewset=CaseViewSet,
    basename="case",
)

urlpatterns = router.urls
