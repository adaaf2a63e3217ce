"""Feature modules live here. Each module may define:

- models.py     (SQLAlchemy models using noteserver.core.database.Base)
- repository.py (data access)
- service.py    (business logic)
- router.py     (FastAPI APIRouter exported as `router`)
- gql.py        (GraphQL SchemaFragment exported as `fragment`)

Routers and schema fragments are auto-discovered; models are imported
before the schema is created.
"""
