"""
二进制序列化器
使用pickle进行完整的对象图序列化，但不可读。
只有内置标量/容器、枚举以及带 @serializable 标记的类型可以写出和读回。
"""
import enum
import io
import logging
import pickle
from collections import Counter, OrderedDict, defaultdict, deque
from datetime import datetime, date, time, timedelta, timezone
from decimal import Decimal
from fractions import Fraction
from typing import Any, Optional, Type
from uuid import UUID, SafeUUID
from zoneinfo import ZoneInfo

from ..config.settings import get_settings
from ..core.annotations import is_serializable
from ..exceptions import NotSerializableError, MalformedInputError, TypeMismatchError
from .base import Serializer, Deserializer, is_plain_type

logger = logging.getLogger(__name__)

# 无需标记即可序列化的类型
ELIGIBLE_TYPES = frozenset([
    type(None), bool, int, float, complex, str, bytes, bytearray,
    list, tuple, dict, set, frozenset, range, slice,
    datetime, date, time, timedelta, timezone, ZoneInfo,
    Decimal, Fraction, UUID, SafeUUID,
    OrderedDict, defaultdict, deque, Counter,
])

# 允许出现在数据中的重建函数（非类型的全局对象）
RECONSTRUCTORS = (ZoneInfo._unpickle,)


def is_eligible_type(cls: type) -> bool:
    """类型是否允许二进制序列化"""
    if cls in ELIGIBLE_TYPES:
        return True
    if isinstance(cls, type) and issubclass(cls, enum.Enum):
        return True
    return isinstance(cls, type) and is_serializable(cls)


def is_reconstructor(obj: Any) -> bool:
    """对象是否为允许的重建函数"""
    if isinstance(obj, type) or not callable(obj):
        return False
    return any(obj == reconstructor for reconstructor in RECONSTRUCTORS)


class _MarkedPickler(pickle.Pickler):
    """拒绝未标记类型的Pickler"""

    def reducer_override(self, obj):
        if is_reconstructor(obj):
            return NotImplemented
        cls = obj if isinstance(obj, type) else type(obj)
        if not is_eligible_type(cls):
            raise NotSerializableError(
                f"{cls.__module__}.{cls.__qualname__}",
                reason="缺少 @serializable 标记"
            )
        return NotImplemented


class _MarkedUnpickler(pickle.Unpickler):
    """只解析允许序列化的类型"""

    def find_class(self, module, name):
        cls = super().find_class(module, name)
        if is_reconstructor(cls):
            return cls
        if not isinstance(cls, type) or not is_eligible_type(cls):
            raise NotSerializableError(f"{module}.{name}", reason="数据中引用了未标记的类型")
        return cls


class BinarySerializer(Serializer, Deserializer):
    """二进制序列化器（使用pickle）"""

    def __init__(self, protocol: Optional[int] = None):
        """
        初始化二进制序列化器

        Args:
            protocol: pickle协议版本，默认使用配置中的 binary_protocol
        """
        self.protocol = get_settings().binary_protocol if protocol is None else protocol

    def serialize(self, obj: Any) -> Optional[bytes]:
        """
        序列化为字节流

        Raises:
            NotSerializableError: 对象图中存在未标记的类型
        """
        if obj is None:
            return None

        buffer = io.BytesIO()
        try:
            _MarkedPickler(buffer, protocol=self.protocol).dump(obj)
        except NotSerializableError as e:
            logger.warning(f"二进制序列化被拒绝: {e.message}")
            raise
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise NotSerializableError(type(obj).__name__, reason=str(e)) from e

        data = buffer.getvalue()
        logger.debug(f"二进制序列化完成: {type(obj).__name__}, {len(data)}字节")
        return data

    def deserialize(self, data: Optional[bytes], return_type: Optional[Type] = None) -> Any:
        """
        从字节流反序列化

        Args:
            data: 字节流
            return_type: 期望类型，None时不检查

        Raises:
            TypeMismatchError: 结果与期望类型不兼容
            MalformedInputError: 字节流已损坏
        """
        if data is None:
            return None

        try:
            result = _MarkedUnpickler(io.BytesIO(data)).load()
        except NotSerializableError:
            raise
        except (pickle.UnpicklingError, EOFError, ValueError, TypeError,
                IndexError, KeyError, AttributeError, ImportError) as e:
            raise MalformedInputError(str(e) or type(e).__name__, wire_format="binary") from e

        if return_type is not None and is_plain_type(return_type) and not isinstance(result, return_type):
            raise TypeMismatchError(return_type.__name__, type(result).__name__)

        return result
