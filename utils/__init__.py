"""PortSweep Utils"""
from utils.logger    import get_logger, set_level, log
from utils.config    import load_config, ConfigError, DEFAULT_CONFIG
from utils.constants import PortState, SERVICE_TABLE, PORT_MIN, PORT_MAX
__all__ = ["get_logger", "set_level", "log",
           "load_config", "ConfigError", "DEFAULT_CONFIG",
           "PortState", "SERVICE_TABLE", "PORT_MIN", "PORT_MAX"]
