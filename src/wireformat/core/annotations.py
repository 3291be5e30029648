"""
成员注解
以 (类型, 成员名) 为键的旁路表，记录脚本风格JSON序列化时的忽略/重命名策略，
以及二进制序列化所需的可序列化标记
"""
import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Type, Callable

from ..config.validator import ConfigValidator
from ..exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

SERIALIZABLE_MARKER = "__wireformat_serializable__"


@dataclass(frozen=True)
class MemberPolicy:
    """单个成员的序列化策略"""
    ignore: bool = False
    rename_to: Optional[str] = None


class AnnotationRegistry:
    """注解注册表，在类定义时写入，运行时只读"""

    def __init__(self):
        """初始化注解注册表"""
        self._ignored: Dict[Tuple[type, str], bool] = {}
        self._renamed: Dict[Tuple[type, str], str] = {}
        self._lock = threading.Lock()
        self._validator = ConfigValidator()

    def register_ignore(self, cls: type, member: str) -> None:
        """
        为成员注册忽略标记

        Raises:
            InvalidArgumentError: 成员名无效或重复注册
        """
        self._validator.validate_wire_name(member, argument="member")
        key = (cls, member)
        with self._lock:
            if key in self._ignored:
                raise InvalidArgumentError(
                    f"成员已存在忽略标记: {cls.__name__}.{member}",
                    argument="member",
                    value=member
                )
            self._ignored[key] = True
        logger.debug(f"注册忽略标记: {cls.__name__}.{member}")

    def register_rename(self, cls: type, member: str, wire_name: str) -> None:
        """
        为成员注册传输名

        Raises:
            InvalidArgumentError: 名称为空或重复注册
        """
        self._validator.validate_wire_name(member, argument="member")
        self._validator.validate_wire_name(wire_name, argument="wire_name")
        key = (cls, member)
        with self._lock:
            if key in self._renamed:
                raise InvalidArgumentError(
                    f"成员已存在重命名标记: {cls.__name__}.{member}",
                    argument="wire_name",
                    value=wire_name
                )
            self._renamed[key] = wire_name
        logger.debug(f"注册重命名标记: {cls.__name__}.{member} -> {wire_name}")

    def get_policy(self, cls: type, member: str) -> MemberPolicy:
        """
        获取成员策略（沿MRO查找，子类优先）

        Args:
            cls: 值的运行时类型
            member: 成员名

        Returns:
            成员策略
        """
        ignore = False
        rename_to = None
        for klass in cls.__mro__:
            key = (klass, member)
            if not ignore and self._ignored.get(key):
                ignore = True
            if rename_to is None and key in self._renamed:
                rename_to = self._renamed[key]
        return MemberPolicy(ignore=ignore, rename_to=rename_to)

    def unregister(self, cls: type) -> None:
        """移除某个类型的全部注解"""
        with self._lock:
            for table in (self._ignored, self._renamed):
                for key in [k for k in table if k[0] is cls]:
                    del table[key]


# 创建默认实例
annotation_registry = AnnotationRegistry()


def ignore_member(*members: str) -> Callable[[Type], Type]:
    """
    类装饰器：脚本风格JSON序列化时忽略指定成员

    示例:
        @ignore_member("Password")
        class User: ...
    """
    if not members:
        raise InvalidArgumentError("至少需要指定一个成员名", argument="members")

    def decorator(cls: Type) -> Type:
        for member in members:
            annotation_registry.register_ignore(cls, member)
        return cls

    return decorator


def rename_member(member: str, wire_name: str) -> Callable[[Type], Type]:
    """
    类装饰器：脚本风格JSON序列化时使用自定义传输名

    示例:
        @rename_member("ObjectName", "name")
        class Item: ...
    """
    def decorator(cls: Type) -> Type:
        annotation_registry.register_rename(cls, member, wire_name)
        return cls

    return decorator


def serializable(cls: Type) -> Type:
    """类装饰器：标记类型可进行二进制序列化（不会被子类继承）"""
    setattr(cls, SERIALIZABLE_MARKER, cls)
    return cls


def is_serializable(cls: type) -> bool:
    """类型本身是否带有可序列化标记"""
    return cls.__dict__.get(SERIALIZABLE_MARKER) is cls
