import json
import logging
import logging.config
import os
import platform
import sys
from typing import Any
from importlib.metadata import version as package_version
from flask import Flask
from flask_login import LoginManager, current_user
from flask_wtf import CSRFProtect
from dirgroups.version import __version__
from dirgroups.environment import ENV_DEFAULTS, ENV_PARSING, ENV_NON_REQUIRED
from dirgroups.extensions import setup_stores
from dirgroups.extensions.common import split_list
from dirgroups.permissions import ProxyUser, setup_permissions

def _require_config(app, var_name):
    if (value := app.config.get(var_name)) is None:
        logging.error((msg := f"{var_name} environment variable cannot be empty"))
        raise ValueError(msg)
    return value

def setup_app_config(app: Flask, overrides:dict|None=None) -> None:
    overrides = overrides or {}
    for k, v in ENV_DEFAULTS.items():
        val = overrides[k] if k in overrides else os.environ.get(k, v)
        if val is not None and (parser := ENV_PARSING.get(k)):
            val = parser(val)
        app.config.update({k:val})
        if k in ENV_NON_REQUIRED:
            continue
        _require_config(app, k)
    app.config.update({k:v for k, v in overrides.items() if k not in ENV_DEFAULTS})
    trusted_proxies = split_list(app.config.get("TRUSTED_PROXY_IPS"))
    if not trusted_proxies:
        raise ValueError("TRUSTED_PROXY_IPS var cannot be empty")
    app.config["TRUSTED_PROXY_IPS"] = trusted_proxies
    app.secret_key = app.config["SECRET_KEY"]

def setup_logging(app: Flask) -> None:
    logging.basicConfig(
        level=logging.DEBUG
        if app.config.get("DEBUG")
        else logging.INFO
    )
    logging.config.dictConfig(app.config["LOG_CONFIG"])

def setup_spew(app: Flask) -> None:
    if app.config.get("DEBUG"):
        logging.info(
            "SYSTEM INFO:\n"
            +json.dumps(
                {
                    "OS": (platform.system(), platform.release(), platform.version()),
                    "Python Version": sys.version,
                    "Flask Version": package_version("flask"),
                    "App Version": __version__,
                },
                indent=2
            )
        )

def setup_user_login(app: Flask) -> None:
    login_manager = LoginManager()
    login_manager.init_app(app)
    @login_manager.user_loader
    def load_user(user_id):
        """Proxy users only live in the session"""
        return ProxyUser(user_id)

def setup_context_provider(app: Flask) -> None:
    @app.context_processor
    def provide_selection() -> dict[str, Any]:
        """
        Context processor which runs before any template is rendered
        Provides access to these values in all templates
        """
        return {
            "application_name": app.config.get("APPLICATION_NAME"),
            "username": getattr(current_user, "name", None),
            "version": __version__,
        }


def create_app(config:dict|None=None, **kw) -> Flask:
    app = Flask(
        __name__,
        static_folder='static',
        static_url_path='/static',
        **kw
    )

    setup_app_config(app, config)
    setup_logging(app)
    setup_spew(app)

    CSRFProtect(app)
    setup_stores(app)
    setup_user_login(app)
    setup_permissions(app)
    setup_context_provider(app)

    from dirgroups.blueprints import register_blueprints
    register_blueprints(app)

    return app

if __name__ == '__main__':
    create_app().run(debug=True)
