"""
HTTP API

FastAPI application serving the feeds, anchor detail, likes and anchor
follows.

    api/
    ├── main.py           ← create_application(), lifespan (db + task runner)
    ├── routes.py         ← router registration
    ├── dependencies/     ← auth, db session, services, feed query parsing
    ├── handlers/         ← feed, anchor, user and health endpoints
    └── middleware/       ← exception → error envelope mapping

Run:
====
    uvicorn src.api.main:app --reload
"""
