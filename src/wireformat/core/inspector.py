"""
反射成员检查器
枚举对象的公开数据成员、当前值以及成员注解
"""
import dataclasses
import enum
import inspect
import logging
from dataclasses import dataclass
from typing import Any, ClassVar, List, Optional, get_origin

from .annotations import AnnotationRegistry, annotation_registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemberDescriptor:
    """单个公开数据成员的描述（每次调用重新生成）"""
    name: str
    value: Any
    ignored: bool = False
    override_name: Optional[str] = None

    @property
    def wire_name(self) -> str:
        """传输时使用的键名"""
        return self.override_name or self.name


def _is_public(name: str) -> bool:
    return bool(name) and not name.startswith('_')


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _slot_names(klass: type) -> List[str]:
    slots = klass.__dict__.get('__slots__', ())
    if isinstance(slots, str):
        slots = (slots,)
    return list(slots)


def declared_members(cls: type, instance: Any = None) -> List[str]:
    """
    列出类型声明的公开数据成员名

    顺序: dataclass字段 -> 类注解 -> __slots__ -> 属性(property)，基类在前；
    传入实例时再追加实例字典中的其余公开属性。

    Args:
        cls: 目标类型
        instance: 可选的实例

    Returns:
        有序成员名列表
    """
    names: List[str] = []

    if dataclasses.is_dataclass(cls):
        names.extend(f.name for f in dataclasses.fields(cls))

    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        if not dataclasses.is_dataclass(klass):
            for name, annotation in inspect.get_annotations(klass).items():
                if not _is_class_var(annotation):
                    names.append(name)
        names.extend(_slot_names(klass))
        for name, attr in klass.__dict__.items():
            if isinstance(attr, property) and attr.fget is not None:
                names.append(name)

    if instance is not None and hasattr(instance, '__dict__'):
        for name, value in vars(instance).items():
            if not callable(value):
                names.append(name)

    # 去重并保持顺序
    seen = set()
    ordered = []
    for name in names:
        if _is_public(name) and name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


def describe_members(
        value: Any,
        registry: Optional[AnnotationRegistry] = None
) -> List[MemberDescriptor]:
    """
    生成对象的成员描述列表

    Args:
        value: 待检查的对象
        registry: 注解注册表（默认使用全局注册表）

    Returns:
        按声明顺序排列的成员描述
    """
    registry = registry or annotation_registry
    cls = type(value)
    descriptors = []

    for name in declared_members(cls, value):
        try:
            member_value = getattr(value, name)
        except AttributeError:
            # 已声明但未赋值
            continue
        if callable(member_value) and not isinstance(member_value, type):
            continue

        policy = registry.get_policy(cls, name)
        descriptors.append(MemberDescriptor(
            name=name,
            value=member_value,
            ignored=policy.ignore,
            override_name=policy.rename_to
        ))

    logger.debug(f"检查类型 {cls.__name__}: {len(descriptors)}个成员")
    return descriptors


def is_data_type(cls: type) -> bool:
    """类型是否按成员展开（调用方已处理内置标量/容器）"""
    if not isinstance(cls, type) or cls.__module__ == 'builtins':
        return False
    return not issubclass(cls, enum.Enum)
