"""
wireformat - 多格式对象序列化库
二进制、XML和两种JSON格式的统一静态入口
"""

__version__ = "1.0.0"

from .serializer import Serializer, Format
from .core.annotations import ignore_member, rename_member, serializable
from .config.settings import SerializerSettings
from .exceptions import (
    WireFormatError, ConfigError, InvalidArgumentError,
    NotSerializableError, TypeMismatchError, MalformedInputError
)

__all__ = [
    'Serializer',
    'Format',
    'ignore_member',
    'rename_member',
    'serializable',
    'SerializerSettings',
    'WireFormatError',
    'ConfigError',
    'InvalidArgumentError',
    'NotSerializableError',
    'TypeMismatchError',
    'MalformedInputError'
]
