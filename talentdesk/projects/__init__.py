# Package
from flask import Blueprint

from talentdesk.logging_config import get_logger

logger = get_logger(__name__)

projects_bp = Blueprint("projects", __name__)

from talentdesk.projects import routes
