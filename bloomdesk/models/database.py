"""
Database Handle

FLOW OVERVIEW
- `db` is shared by the user, studio, project, inventory, design and
  notification models.
- Bound to the app in create_app(); tables come from `flask init-db`
  or db.create_all() in tests.
"""

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
