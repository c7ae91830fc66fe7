import logging
import os

from .authentication import AuthenticationConfig
from .ezldap import ResourceRegistry
from .usergroup import UserGroupBackendStore


def setup_stores(app) -> None:
    """Attach the configuration stores to the app"""
    config_dir = app.config["CONFIG_DIR"]

    def path(key):
        return os.path.join(config_dir, app.config[key])

    app.resources = ResourceRegistry(path("RESOURCES_FILE"))
    app.authentication = AuthenticationConfig(path("AUTHENTICATION_FILE"), app.resources)
    app.usergroups = UserGroupBackendStore(path("GROUPS_FILE"))
    logging.info(f"Using configuration directory {config_dir}")
