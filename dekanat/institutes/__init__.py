"""
Блюпринт институтов
"""
from flask import Blueprint

institutes_bp = Blueprint('institutes', __name__, url_prefix='/institutes')

from dekanat.institutes import routes
