"""
核心模块包
包含成员检查、成员注解和类型绑定
"""

# 导入注解模块
from .annotations import (
    AnnotationRegistry, MemberPolicy, annotation_registry,
    ignore_member, rename_member, serializable, is_serializable
)

# 导入检查和绑定模块
from .inspector import MemberDescriptor, describe_members, declared_members
from .binding import TypeBinder

__all__ = [
    # 注解模块
    'AnnotationRegistry',
    'MemberPolicy',
    'annotation_registry',
    'ignore_member',
    'rename_member',
    'serializable',
    'is_serializable',

    # 检查和绑定模块
    'MemberDescriptor',
    'describe_members',
    'declared_members',
    'TypeBinder',
]
