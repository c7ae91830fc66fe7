import logging
from fnmatch import fnmatch
from flask import Flask, abort, g, request, Response
from flask_login import UserMixin, current_user, login_user
from functools import wraps


class ProxyUser(UserMixin):
    """User identified by the reverse proxy, nothing is stored locally"""
    def __init__(self, name:str, groups:list[str]|None=None):
        self.id = name
        self.name = name
        self.groups = groups or []


def get_proxy_user_meta(
    req, conf:dict
) -> dict:
    meta = {
        k : req.headers.get(v, "")
        for k,v in conf.items()
    }
    if "groups" in meta:
        meta["groups"] = [
            grp.strip() for grp in meta["groups"].split(",") if grp.strip()
        ]
    return meta


def is_trusted_ip(remote_addr: str, trusted_ips: list[str]) -> bool:
    """Checks to see if the host router / proxy is trusted"""
    for ip in trusted_ips:
        if fnmatch(remote_addr or "", ip):
            return True
    return False


def setup_permissions(app:Flask) -> None:
    logger = logging.getLogger(__name__ + '.PERMISSIONS')

    def admin_required(func):
        """
        SSO integration.
        Limits access to Flask endpoints to members of the admin group
        as supplied by the reverse-proxy headers.
        """
        @wraps(func)
        def wrapped(*args, **kwargs) -> Response:
            remote_addr = request.remote_addr
            if not is_trusted_ip(remote_addr, app.config["TRUSTED_PROXY_IPS"]):
                logger.warning("Untrusted proxy: %s", remote_addr)
                abort(403)

            meta = get_proxy_user_meta(
                request,
                {
                    "user" : app.config["USERNAME_HEADER"],
                    "groups" : app.config["GROUPS_HEADER"],
                }
            )

            username = meta.get("user").strip()
            if not username:
                logger.warning("No %s header provided", app.config["USERNAME_HEADER"])
                abort(403)

            groups = meta.get("groups")
            if app.config["ADMIN_GROUP"] not in groups:
                logger.warning(
                    "[403] User '%s' (groups %s) attempted to access admin endpoint %s",
                    username, groups, request.path
                )
                abort(403)

            if not current_user.is_authenticated or current_user.get_id() != username:
                login_user(ProxyUser(username, groups))

            g.user = username
            g.groups = groups
            return func(*args, **kwargs)

        return wrapped

    # For use in blueprints etc
    app.admin_required = admin_required
