"""
Taskboard Backend — API Routes Package
=======================================

Route Inventory:
    - projects.py: /api/v1/projects            (project CRUD)
    - tasks.py:    /api/v1/projects/{id}/tasks (task CRUD, status, bulk import)
    - system.py:   /api/v1/system              (recycle bin, audit log)
    - health.py:   /health, /version

Routes are thin: they extract request data, call a service and wrap the
result in the response envelope. Errors propagate to the handlers
registered in main.py.
"""
