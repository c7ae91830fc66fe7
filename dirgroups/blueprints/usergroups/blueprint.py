import functools
import logging
import os
from flask import (
    Blueprint,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    url_for
)
from dirgroups.extensions.config_store import ConfigError
from dirgroups.extensions.ezldap import NoLdapResourcesError
from dirgroups.extensions.usergroup import DirectoryFlavor, resolve
from .forms import UserGroupBackendForm, apply_resolution


logger = logging.getLogger(__name__)


def json_error_handler(func):
    """Decorator to catch exceptions and return JSON error response."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__name__} failed: {e}")
            return jsonify({'error': str(e)}), 500
    return wrapper


def resolve_form(form:UserGroupBackendForm, values=None) -> UserGroupBackendForm:
    """Run a resolution pass for the form's current selection and apply it"""
    resolution = resolve(
        form.flavor,
        current_app.resources,
        current_app.authentication,
        resource=form.resource.data,
        user_backend=form.user_backend.data
    )
    return apply_resolution(form, resolution, values)


def missing_resources_redirect(e:NoLdapResourcesError):
    flash(str(e), 'error')
    return redirect(url_for('resources.create_resource'))


def broken_config_redirect(e:ConfigError):
    flash(f'Failed to read configuration: {str(e)}', 'error')
    logger.error(f"Error reading configuration: {e}")
    return redirect(url_for('usergroups.backends'))


def register_blueprint(app):
    blueprint = Blueprint(
        'usergroups', __name__,
        url_prefix='/usergroups',
        template_folder=os.path.join(os.path.dirname(__file__), "templates")
    )

    @blueprint.route('/')
    @app.admin_required
    def backends():
        """List all user group backends"""
        backends_data = {}
        try:
            backends_data = current_app.usergroups.list_backend_configs()
        except ConfigError as e:
            flash(f'Failed to read user group backends: {str(e)}', 'error')
            logger.error(f"Error reading user group backends: {e}")

        return render_template('usergroup_backends.html', backends=backends_data)

    @blueprint.route('/create', methods=['GET', 'POST'])
    @app.admin_required
    def create_backend():
        """Create new user group backend"""
        form = UserGroupBackendForm()
        if request.method == 'GET':
            form.type.data = request.args.get('type', form.type.data)

        try:
            resolve_form(form, request.form if form.is_submitted() else None)
        except NoLdapResourcesError as e:
            return missing_resources_redirect(e)
        except ConfigError as e:
            return broken_config_redirect(e)

        if form.is_submitted() and not form.is_autosubmit and form.validate():
            try:
                current_app.usergroups.save_backend(form.name.data, form.to_config())
                flash(f'User group backend {form.name.data} created successfully', 'success')
                return redirect(url_for('usergroups.backends'))
            except (OSError, ConfigError) as e:
                flash(f'Error creating user group backend: {str(e)}', 'error')
                logger.error(f"Error creating user group backend {form.name.data}: {e}")

        form.autosubmit.data = ''
        return render_template('usergroup_backend_form.html', form=form, action='Create')

    @blueprint.route('/<name>/edit', methods=['GET', 'POST'])
    @app.admin_required
    def edit_backend(name):
        """Edit existing user group backend"""
        try:
            config = current_app.usergroups.get_backend(name)
        except ConfigError as e:
            return broken_config_redirect(e)
        if config is None:
            flash(f'User group backend {name} not found', 'error')
            return redirect(url_for('usergroups.backends'))

        form = UserGroupBackendForm()
        form.original_name = name
        if form.is_submitted():
            values = request.form
        else:
            values = config
            form.name.data = name
            form.type.data = config.get('backend')
            form.resource.data = config.get('resource')
            form.user_backend.data = config.get('user_backend')

        try:
            resolve_form(form, values)
        except NoLdapResourcesError as e:
            return missing_resources_redirect(e)
        except ConfigError as e:
            return broken_config_redirect(e)

        if form.is_submitted() and not form.is_autosubmit and form.validate():
            try:
                current_app.usergroups.save_backend(form.name.data, form.to_config(), replace=name)
                flash(f'User group backend {form.name.data} updated successfully', 'success')
                return redirect(url_for('usergroups.backends'))
            except (OSError, ConfigError) as e:
                flash(f'Error updating user group backend: {str(e)}', 'error')
                logger.error(f"Error updating user group backend {name}: {e}")

        form.autosubmit.data = ''
        return render_template(
            'usergroup_backend_form.html',
            form=form,
            action='Edit',
            backend_name=name
        )

    @blueprint.route('/<name>/delete', methods=['POST'])
    @app.admin_required
    @json_error_handler
    def delete_backend(name):
        """Delete user group backend"""
        if current_app.usergroups.remove_backend(name):
            return jsonify({'success': True, 'message': f'User group backend {name} deleted successfully'})
        return jsonify({'success': False, 'message': f'User group backend {name} not found'}), 404

    @blueprint.route('/api/defaults')
    @app.admin_required
    @json_error_handler
    def defaults_api():
        """Resolution for the given type, resource and user backend"""
        try:
            flavor = DirectoryFlavor.from_type(request.args.get('type', 'ldap'))
        except ValueError as e:
            return jsonify({'error': str(e)}), 400
        try:
            resolution = resolve(
                flavor,
                current_app.resources,
                current_app.authentication,
                resource=request.args.get('resource'),
                user_backend=request.args.get('user_backend')
            )
        except NoLdapResourcesError as e:
            return jsonify({'error': str(e)}), 409
        return jsonify(resolution.as_dict())

    app.register_blueprint(blueprint)
