"""Handler to read and write sectioned YAML configuration files"""

import logging
import os
import yaml
from pathlib import Path


class ConfigError(Exception):
    """Raised when a configuration file cannot be parsed"""


def write_yaml(file:os.PathLike, data:dict) -> None:
    yaml_content = yaml.dump(data, default_flow_style=False, sort_keys=False)
    parent = os.path.dirname(file)
    if parent and not os.path.exists(parent):
        os.makedirs(parent)
    with open(file, 'w', encoding='utf-8') as f:
        f.write(yaml_content)


def load_yaml(file:os.PathLike, encoding='utf-8') -> dict:
    """Loads a YAML file into a Python dict, a missing file is empty"""
    if not os.path.exists(file):
        return {}
    if not os.path.isfile(file):
        raise IsADirectoryError(f"Expected YAML file, found dir - {file}")
    try:
        with open(file, 'r', encoding=encoding) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML file {file}: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping of sections in {file}")
    for name, section in data.items():
        if not isinstance(section, dict):
            raise ConfigError(f"Section {name!r} in {file} is not a mapping")
    return data


class ConfigFile:
    """
    A YAML file holding named sections, eg. resources or backends.
    The file is read again on every access so each request
    works on its own copy of the data.
    """
    def __init__(self, file:os.PathLike):
        self.file = Path(file)
        self.logger = logging.getLogger(__name__ + f'.ConfigFile.{self.file.name}')

    def sections(self) -> dict[str, dict]:
        """Return all sections in file order"""
        return {
            str(name): dict(section)
            for name, section in load_yaml(self.file).items()
        }

    def names(self) -> list[str]:
        return list(self.sections().keys())

    def has_section(self, name:str) -> bool:
        return name in self.sections()

    def get_section(self, name:str) -> dict | None:
        return self.sections().get(name)

    def set_section(self, name:str, values:dict, replace:str|None=None) -> None:
        """
        Create or update a section.
        When replace is given the section of that name is renamed,
        keeping its position in the file.
        """
        content = self.sections()
        if replace and replace != name and replace in content:
            content = {
                (name if key == replace else key): section
                for key, section in content.items()
            }
        content[name] = dict(values)
        self.logger.info(f"Writing section {name} to {self.file}")
        write_yaml(self.file, content)

    def remove_section(self, name:str) -> bool:
        content = self.sections()
        if content.pop(name, None) is None:
            return False
        self.logger.info(f"Removing section {name} from {self.file}")
        write_yaml(self.file, content)
        return True
