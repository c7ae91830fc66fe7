import logging

from ..config_store import ConfigFile
from .defaults import ATTRIBUTE_FIELDS
from .resolver import NONE_USER_BACKEND

logger = logging.getLogger(__name__)

SECTION_KEYS = ('backend', 'resource', 'user_backend') + ATTRIBUTE_FIELDS


class UserGroupBackendStore:
    """Configured user group backends, one YAML section per backend"""
    def __init__(self, file):
        self.config = ConfigFile(file)

    def list_backend_configs(self) -> dict[str, dict]:
        return self.config.sections()

    def get_backend(self, name:str) -> dict | None:
        return self.config.get_section(name)

    def save_backend(self, name:str, values:dict, replace:str|None=None) -> dict:
        """Persist a backend, dropping empty optional values and unknown keys"""
        section = {}
        for key in SECTION_KEYS:
            value = values.get(key)
            if value in (None, ''):
                continue
            if key == 'user_backend' and value == NONE_USER_BACKEND:
                continue
            section[key] = value
        self.config.set_section(name, section, replace=replace)
        logger.info(f"Saved user group backend {name}")
        return section

    def remove_backend(self, name:str) -> bool:
        return self.config.remove_section(name)
