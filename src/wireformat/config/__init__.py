"""
配置模块
"""

from .settings import SerializerSettings, get_settings, use_settings
from .validator import ConfigValidator

__all__ = [
    'SerializerSettings',
    'get_settings',
    'use_settings',
    'ConfigValidator'
]
