"""
序列化基类定义
"""
import base64
import enum
import json
import logging
import typing
from abc import ABC, abstractmethod
from collections import abc
from datetime import datetime, date, time
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, Union
from uuid import UUID

from ..core.binding import TypeBinder
from ..core.inspector import MemberDescriptor, describe_members
from ..exceptions import NotSerializableError, MalformedInputError, TypeMismatchError

logger = logging.getLogger(__name__)

# 动态解析结果：dict / list / str / int / float / bool / None 组成的树
JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]


def is_blank(source: Any) -> bool:
    """空值或空白字符串"""
    if source is None:
        return True
    return isinstance(source, (str, bytes, bytearray)) and not source.strip()


def is_plain_type(hint: Any) -> bool:
    """普通类（非泛型别名）"""
    return isinstance(hint, type) and typing.get_origin(hint) is None


class Serializer(ABC):
    """序列化器抽象基类"""

    @abstractmethod
    def serialize(self, obj: Any) -> Any:
        """将Python对象序列化为字节流或字符串，None返回None"""
        pass


class Deserializer(ABC):
    """反序列化器抽象基类"""

    @abstractmethod
    def deserialize(self, data: Any, return_type: Optional[Type] = None) -> Any:
        """从字节流或字符串反序列化，空输入返回None"""
        pass


class JSONSerializerBase(Serializer, Deserializer):
    """
    JSON序列化器公共实现
    子类通过 member_items() 决定对象成员如何写出
    """

    format_name = "json"
    case_sensitive = True

    def __init__(self):
        self.binder = TypeBinder(case_sensitive=self.case_sensitive, wire_format=self.format_name)

    # ========== 写出 ==========

    @abstractmethod
    def member_items(self, descriptors: List[MemberDescriptor]) -> List[tuple]:
        """从成员描述中选出要写出的 (键, 值) 列表"""
        pass

    def serialize_to_dict(self, obj: Any) -> Any:
        """把对象图转换为可直接写成JSON的结构"""
        return self._simplify(obj, set())

    def _simplify(self, obj: Any, active: set) -> Any:
        if isinstance(obj, enum.Enum):
            return self._simplify(obj.value, active)
        if obj is None or isinstance(obj, (bool, int, float, str)):
            return obj
        if isinstance(obj, Decimal):
            if not obj.is_finite():
                raise NotSerializableError("Decimal", reason=f"JSON不支持非有限数值: {obj}")
            return int(obj) if obj == obj.to_integral_value() else float(obj)
        if isinstance(obj, (datetime, date, time)):
            return obj.isoformat()
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, (bytes, bytearray)):
            return base64.b64encode(bytes(obj)).decode('ascii')

        # 容器与对象需要检查循环引用
        if id(obj) in active:
            raise NotSerializableError(type(obj).__name__, reason="对象图存在循环引用")
        active.add(id(obj))
        try:
            if isinstance(obj, abc.Mapping):
                return {str(key): self._simplify(value, active) for key, value in obj.items()}
            if isinstance(obj, (list, tuple, set, frozenset)):
                return [self._simplify(item, active) for item in obj]
            if not callable(obj) and (hasattr(obj, '__dict__') or hasattr(type(obj), '__slots__')):
                items = self.member_items(describe_members(obj))
                return {key: self._simplify(value, active) for key, value in items}
        finally:
            active.discard(id(obj))

        raise NotSerializableError(type(obj).__name__, reason=f"{self.format_name}不支持该类型")

    def dumps(self, data: Any) -> str:
        """紧凑格式写出，保留非ASCII字符，拒绝 NaN/Infinity"""
        try:
            return json.dumps(data, ensure_ascii=False, separators=(',', ':'), allow_nan=False)
        except ValueError as e:
            logger.warning(f"{self.format_name}序列化被拒绝: {e}")
            raise NotSerializableError("float", reason=f"JSON不支持非有限数值: {e}") from e

    # ========== 读取 ==========

    def loads(self, source: Union[str, bytes]) -> JsonValue:
        """解析JSON文本，语法错误转换为 MalformedInputError"""
        try:
            return json.loads(source)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"{self.format_name}解析失败: {e}")
            raise MalformedInputError(str(e), wire_format=self.format_name) from e

    def bind(self, data: JsonValue, return_type: Optional[Type]) -> Any:
        """把解析结果绑定到目标类型"""
        if return_type is None:
            return data
        result = self.binder.convert(data, return_type)
        if is_plain_type(return_type) and result is not None and not isinstance(result, return_type):
            raise TypeMismatchError(return_type.__name__, type(result).__name__)
        return result
