from dirgroups.extensions.common import parse_boolean

LOG_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "[%(asctime)s] %(levelname)s \
            %(name)s %(threadName)s in %(module)s: %(message)s",
        }
    },
    "handlers": {
        "wsgi": {
            "class": "logging.StreamHandler",
            "stream": "ext://flask.logging.wsgi_errors_stream",
            "formatter": "default",
        },
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        }
    },
    "loggers": {
        "__main__": {
            "level": "INFO",
            "handlers": ["wsgi", "console"],
            "propagate": False,
        },
        "werkzeug": {
            "level": "INFO",
            "handlers": ["wsgi", "console"],
            "propagate": False,
        }
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"]
    }
}

ENV_DEFAULTS = {
    "APPLICATION_NAME"              : "Directory Group Backends",
    "CONFIG_DIR"                    : "/config/dirgroups",
    "RESOURCES_FILE"                : "resources.yml",
    "AUTHENTICATION_FILE"           : "authentication.yml",
    "GROUPS_FILE"                   : "groups.yml",
    "SECRET_KEY"                    : None, # Required External
    "WTF_CSRF_ENABLED"              : "true",
    "TRUSTED_PROXY_IPS"             : "172.*,127.0.0.1",
    "ADMIN_GROUP"                   : "admins",
    "GROUPS_HEADER"                 : "Remote-Groups",
    "USERNAME_HEADER"               : "Remote-User",
    "LDAP_NETWORK_TIMEOUT"          : 5,
    "DEBUG"                         : "false",
    "LOG_CONFIG"                    : LOG_CONFIG,
}

ENV_PARSING = {
    "WTF_CSRF_ENABLED" : parse_boolean,
    "LDAP_NETWORK_TIMEOUT" : int,
    "DEBUG" : parse_boolean,
}

ENV_NON_REQUIRED  = [
    "APPLICATION_NAME"
]
