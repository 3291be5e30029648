"""
工具模块
"""

from .dates import change_time_zone, to_iso8601_string, to_unix_time, system_time_zones

__all__ = [
    'change_time_zone',
    'to_iso8601_string',
    'to_unix_time',
    'system_time_zones'
]
