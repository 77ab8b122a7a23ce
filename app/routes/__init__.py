"""Main routes package.

This package defines the primary Flask blueprint (`bp`) and imports the split
route modules so their @bp.route decorators are registered.

NOTE: The Flask app factory and database initialization live in `app/__init__.py`,
not inside the routes package.
"""

from flask import Blueprint

# Primary API blueprint
bp = Blueprint("main", __name__, url_prefix="/api")

# Import route modules to register routes on the blueprint.
# These imports must come AFTER `bp` is defined.
from . import clients  # noqa: F401,E402
from . import dashboard  # noqa: F401,E402
from . import backup  # noqa: F401,E402
from . import api  # noqa: F401,E402
