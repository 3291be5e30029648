"""
序列化模块
二进制、XML以及两种JSON格式的编解码器
"""

from .base import Serializer, Deserializer, JsonValue
from .binary_serializer import BinarySerializer
from .xml_serializer import XMLSerializer
from .contract_json_serializer import ContractJSONSerializer
from .script_json_serializer import ScriptJSONSerializer

__all__ = [
    'Serializer',
    'Deserializer',
    'JsonValue',
    'BinarySerializer',
    'XMLSerializer',
    'ContractJSONSerializer',
    'ScriptJSONSerializer'
]
