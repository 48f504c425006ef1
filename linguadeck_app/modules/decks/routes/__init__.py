# File: linguadeck_app/modules/decks/routes/__init__.py
from flask import Blueprint

decks_bp = Blueprint('decks', __name__)

from . import api  # noqa: E402,F401
