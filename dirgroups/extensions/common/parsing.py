"""Helpers to normalize loosely typed configuration values"""

TRUE_VALUES = ('true', '1', 'yes', 'on', 'enable', 'enabled')
FALSE_VALUES = ('false', '0', 'no', 'off', 'disable', 'disabled')


def parse_boolean(value) -> bool:
    """Parse an environment or config file value to Python bool"""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if value is None:
        raise ValueError("Invalid value for boolean parsing")
    value = str(value).strip().lower()
    if value in TRUE_VALUES:
        return True
    elif value in FALSE_VALUES:
        return False
    else:
        raise ValueError(f"Could not parse boolean value {value!r}")


def parse_port(value, default:int=None) -> int:
    """Parse a TCP port, falling back to default for empty values"""
    if value in (None, ""):
        if default is None:
            raise ValueError("Port is required")
        return default
    port = int(value)
    if not (1 <= port <= 65535):
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return port


def split_list(value) -> list[str]:
    """Split a comma separated string, dropping empty items"""
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [v.strip() for v in (value or "").split(",") if v.strip()]
