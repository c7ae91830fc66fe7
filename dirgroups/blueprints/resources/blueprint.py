import logging
import os
from flask import (
    Blueprint,
    Flask,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    url_for
)
from ldap import LDAPError
from dirgroups.extensions.config_store import ConfigError
from dirgroups.extensions.ezldap import LdapConnection, LdapResource, is_ldap_type
from .forms import LdapResourceForm

logger = logging.getLogger(__name__)


def register_blueprint(app:Flask):
    bp = blueprint = Blueprint(
        'resources',
        __name__,
        url_prefix="/resources",
        template_folder=os.path.join(os.path.dirname(__file__), "templates")
    )

    @bp.route("/")
    @app.admin_required
    def resources():
        """List configured resources"""
        resources_data = {}
        try:
            resources_data = current_app.resources.list_resource_configs()
        except ConfigError as e:
            flash(f"Failed to read resources: {str(e)}", "error")
            logger.error(f"Error reading resources: {e}")
        return render_template(
            "resources.html",
            resources=resources_data,
            is_ldap_type=is_ldap_type
        )

    @bp.route("/create", methods=["GET", "POST"])
    @app.admin_required
    def create_resource():
        """Create a new LDAP resource"""
        form = LdapResourceForm()

        if form.validate_on_submit():
            try:
                resource = LdapResource.from_config(form.name.data, form.to_config())
                current_app.resources.save_resource(resource)
                flash(f"Resource {resource.name} created successfully", "success")
                return redirect(url_for("resources.resources"))
            except (ValueError, OSError, ConfigError) as e:
                flash(f"Error creating resource: {str(e)}", "error")
                logger.error(f"Error creating resource {form.name.data}: {e}")

        return render_template("resource_form.html", form=form)

    @bp.route("/api/<name>/status")
    @app.admin_required
    def resource_status(name):
        """Bind against the resource and report the result"""
        try:
            resource = current_app.resources.create_resource(name)
        except LookupError as e:
            return jsonify({'error': str(e)}), 404
        try:
            connection = LdapConnection(resource, current_app.config["LDAP_NETWORK_TIMEOUT"])
            return jsonify(connection.get_connection_status())
        except LDAPError as e:
            return jsonify({'status': 'Failed', 'server': resource.uri, 'error': str(e)}), 502

    app.register_blueprint(bp)
    return bp
