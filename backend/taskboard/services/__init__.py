"""
Taskboard Backend — Services Layer
===================================

What:  Use cases sitting between routes (HTTP) and repositories (storage).

Service Inventory:
    - ProjectService:    project CRUD with partial updates
    - TaskService:       task CRUD scoped to a live project, status updates, bulk import
    - RecycleBinService: list / restore / hard delete, audit trail reads
    - UserService:       account records (hashing happens upstream)

Every mutating method opens a transaction, writes through the transaction's
repositories, appends the audit record through the same transaction and
commits. A failure anywhere before commit leaves nothing behind.
"""
