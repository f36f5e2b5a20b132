"""
Блюпринт кафедр
"""
from flask import Blueprint

kafedras_bp = Blueprint('kafedras', __name__, url_prefix='/kafedras')

from dekanat.kafedras import routes
