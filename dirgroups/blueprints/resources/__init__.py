from .blueprint import register_blueprint
