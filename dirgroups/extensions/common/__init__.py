from .parsing import parse_boolean, parse_port, split_list
