import pytest
import yaml

from dirgroups import create_app

RESOURCES = {
    "dc1": {"type": "ldap", "hostname": "host", "port": 389, "root_dn": "dc=example,dc=com"},
    "dc1-alias": {"type": "LDAP", "hostname": "host", "port": 389},
    "ad": {"type": "msldap", "hostname": "ad.example.com", "port": 636, "encryption": "ldaps"},
    "icingadb": {"type": "db", "hostname": "host", "port": 3306},
}

AUTHENTICATION = {
    "users1": {
        "backend": "ldap",
        "resource": "dc1",
        "base_dn": "ou=people,dc=example,dc=com",
        "user_class": "posixAccount",
        "user_name_attribute": "uid",
        "filter": "memberOf=cn=staff,ou=groups,dc=example,dc=com",
    },
    "users-alias": {"backend": "ldap", "resource": "dc1-alias"},
    "ad-users": {"backend": "msldap", "resource": "ad"},
    "autologin": {"backend": "external"},
}

ADMIN_HEADERS = {"Remote-User": "alice", "Remote-Groups": "users,admins"}


def write_config(path, data):
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)


@pytest.fixture
def config_dir(tmp_path):
    write_config(tmp_path / "resources.yml", RESOURCES)
    write_config(tmp_path / "authentication.yml", AUTHENTICATION)
    return tmp_path


@pytest.fixture
def app(config_dir):
    app = create_app({
        "CONFIG_DIR": str(config_dir),
        "SECRET_KEY": "unit-test-secret",
        "WTF_CSRF_ENABLED": False,
        "TRUSTED_PROXY_IPS": "127.0.0.1",
        "TESTING": True,
    })
    yield app


@pytest.fixture
def client(app):
    client = app.test_client()
    client.environ_base.update({
        "HTTP_REMOTE_USER": ADMIN_HEADERS["Remote-User"],
        "HTTP_REMOTE_GROUPS": ADMIN_HEADERS["Remote-Groups"],
    })
    return client
