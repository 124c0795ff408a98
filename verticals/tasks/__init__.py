"""Tasks vertical: task tracking with attachments and realtime updates.

Puts the core patterns to work in one domain:
- Pydantic records persisted as one JSON document
- Single-writer snapshot repository (TaskStore)
- Attachment registry with upload size ceiling
- Task service orchestrating store, attachments and change notifier
- FastAPI router with a websocket change channel
"""
