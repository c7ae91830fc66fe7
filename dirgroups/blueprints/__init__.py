from flask import redirect, url_for
from .resources import register_blueprint as register_resources_blueprint
from .usergroups import register_blueprint as register_usergroups_blueprint

def register_index(app):
    @app.route("/")
    def index():
        return redirect(url_for("usergroups.backends"))

def register_blueprints(app):
    for callback in [
        register_resources_blueprint,
        register_usergroups_blueprint,
        register_index
    ]:
        callback(app)
