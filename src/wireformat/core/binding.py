"""
类型绑定器
根据目标类型的成员声明和类型注解，把解析出的原始值转换为目标类型实例
"""
import base64
import binascii
import dataclasses
import enum
import inspect
import logging
import typing
from collections import abc
from datetime import datetime, date, time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Set, Tuple, Union
from uuid import UUID

from .inspector import declared_members, is_data_type
from ..exceptions import MalformedInputError

logger = logging.getLogger(__name__)

# 可由文本直接转换的标量类型
SCALAR_TYPES = (str, bool, int, float, Decimal, datetime, date, time, UUID, bytes)

_TRUE_TEXT = {"true", "1"}
_FALSE_TEXT = {"false", "0"}

# 原始值转换回调: (原始值, 类型注解) -> 转换后的值
Converter = Callable[[Any, Any], Any]


def _parse_iso(text: str, kind: type):
    # Python 3.10 的 fromisoformat 不识别 'Z' 后缀
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    return kind.fromisoformat(text)


def unwrap_optional(hint: Any) -> Any:
    """Optional[X] -> X，其他注解原样返回"""
    if typing.get_origin(hint) is Union:
        args = [a for a in typing.get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


class TypeBinder:
    """
    类型绑定器

    Args:
        case_sensitive: 成员名匹配是否区分大小写
        wire_format: 格式名称（用于错误信息）
    """

    def __init__(self, case_sensitive: bool = True, wire_format: str = "json"):
        self.case_sensitive = case_sensitive
        self.wire_format = wire_format

    # ========== 类型信息 ==========

    def member_hints(self, cls: type) -> Dict[str, Any]:
        """成员名到类型注解的映射（含属性返回值注解）"""
        try:
            hints = typing.get_type_hints(cls)
        except (NameError, TypeError):
            hints = {}
            for klass in reversed(cls.__mro__[:-1]):
                hints.update(inspect.get_annotations(klass))

        for klass in cls.__mro__:
            for name, attr in klass.__dict__.items():
                if isinstance(attr, property) and attr.fget is not None and name not in hints:
                    try:
                        ret = typing.get_type_hints(attr.fget).get('return')
                    except (NameError, TypeError):
                        ret = None
                    if ret is not None:
                        hints[name] = ret
        return hints

    # ========== 对象构建 ==========

    def _construct(self, cls: type, raw: Dict[str, Any], hints: Dict[str, Any],
                   convert: Converter) -> Tuple[Any, Set[str]]:
        """
        创建实例，返回 (实例, 已由构造函数消费的输入键)

        无参构造失败时按构造函数参数名匹配输入键并调用构造函数，缺失的必填参数传入空值

        Raises:
            MalformedInputError: 构造函数无法调用
        """
        try:
            return cls(), set()
        except TypeError:
            pass

        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError) as e:
            raise MalformedInputError(
                f"无法读取 {cls.__name__} 的构造函数签名: {e}",
                wire_format=self.wire_format,
                target_type=cls.__name__
            ) from e

        try:
            init_hints = typing.get_type_hints(cls.__init__)
        except (NameError, TypeError, AttributeError):
            init_hints = {}

        params = [
            p for p in signature.parameters.values()
            if p.kind in (inspect.Parameter.POSITIONAL_OR_KEYWORD, inspect.Parameter.KEYWORD_ONLY)
        ]
        matched = self._match([p.name for p in params], list(raw.keys()))
        param_keys = {param: key for key, param in matched.items()}

        kwargs = {}
        for p in params:
            if p.name in param_keys:
                hint = init_hints.get(p.name, hints.get(p.name))
                kwargs[p.name] = convert(raw[param_keys[p.name]], hint)
            elif p.default is inspect.Parameter.empty:
                kwargs[p.name] = None

        try:
            instance = cls(**kwargs)
        except (TypeError, ValueError) as e:
            raise MalformedInputError(
                f"无法创建 {cls.__name__} 实例: {e}",
                wire_format=self.wire_format,
                target_type=cls.__name__
            ) from e

        logger.debug(f"通过构造函数创建 {cls.__name__}: {sorted(kwargs)}")
        return instance, set(param_keys.values())

    def _match(self, members: List[str], keys: List[str]) -> Dict[str, str]:
        """输入键 -> 成员名"""
        if self.case_sensitive:
            member_set = set(members)
            return {key: key for key in keys if key in member_set}

        lowered = {name.lower(): name for name in members}
        return {key: lowered[key.lower()] for key in keys if key.lower() in lowered}

    def bind_object(self, raw: Dict[str, Any], cls: type, convert: Converter) -> Any:
        """
        由原始映射构建目标类型实例

        未匹配的输入键被忽略，未出现的成员保留默认值

        Args:
            raw: 输入键到原始值的映射
            cls: 目标类型
            convert: 原始值转换回调

        Returns:
            目标类型实例

        Raises:
            MalformedInputError: 值无法转换或实例无法创建
        """
        hints = self.member_hints(cls)

        if dataclasses.is_dataclass(cls):
            members = declared_members(cls)
            matched = self._match(members, list(raw.keys()))
            values = {member: convert(raw[key], hints.get(member)) for key, member in matched.items()}
            return self._build_dataclass(cls, values)

        instance, consumed = self._construct(cls, raw, hints, convert)
        members = declared_members(cls, instance)
        matched = self._match(members, [key for key in raw if key not in consumed])

        for key, member in matched.items():
            hint = hints.get(member)
            if hint is None:
                current = getattr(instance, member, None)
                if isinstance(current, SCALAR_TYPES):
                    hint = type(current)
            try:
                setattr(instance, member, convert(raw[key], hint))
            except AttributeError:
                logger.debug(f"成员只读，跳过: {cls.__name__}.{member}")

        return instance

    def _build_dataclass(self, cls: type, values: Dict[str, Any]) -> Any:
        kwargs = {}
        for f in dataclasses.fields(cls):
            if not f.init:
                continue
            if f.name in values:
                kwargs[f.name] = values[f.name]
            elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                # 必填字段缺失时使用空值
                kwargs[f.name] = None

        try:
            instance = cls(**kwargs)
        except (TypeError, ValueError) as e:
            raise MalformedInputError(
                f"无法创建 {cls.__name__} 实例: {e}",
                wire_format=self.wire_format,
                target_type=cls.__name__
            ) from e

        for f in dataclasses.fields(cls):
            if not f.init and f.name in values:
                object.__setattr__(instance, f.name, values[f.name])
        return instance

    # ========== 值转换 ==========

    def convert(self, raw: Any, hint: Any) -> Any:
        """
        把JSON风格的原始值（dict/list/标量）转换为注解类型

        Raises:
            MalformedInputError: 值无法转换
        """
        if hint is None or hint is Any or hint is object:
            return raw

        if raw is None:
            return None

        hint = unwrap_optional(hint)
        origin = typing.get_origin(hint)

        if origin is Union:
            for arg in typing.get_args(hint):
                try:
                    return self.convert(raw, arg)
                except MalformedInputError:
                    continue
            return raw

        if origin in (list, tuple, set, frozenset) or hint in (list, tuple, set, frozenset):
            container = origin or hint
            if not isinstance(raw, list):
                raise self._error(raw, hint)
            args = [a for a in typing.get_args(hint) if a is not Ellipsis]
            item_hint = args[0] if len(args) == 1 else None
            items = [self.convert(item, item_hint) for item in raw]
            return container(items)

        if origin in (dict, abc.Mapping) or hint is dict:
            if not isinstance(raw, dict):
                raise self._error(raw, hint)
            args = typing.get_args(hint)
            value_hint = args[1] if len(args) == 2 else None
            return {key: self.convert(value, value_hint) for key, value in raw.items()}

        if isinstance(hint, type) and hint in SCALAR_TYPES:
            return self.convert_scalar(raw, hint)

        if isinstance(hint, type) and issubclass(hint, enum.Enum):
            return self._convert_enum(raw, hint)

        if isinstance(hint, type) and is_data_type(hint):
            if not isinstance(raw, dict):
                raise self._error(raw, hint)
            return self.bind_object(raw, hint, self.convert)

        return raw

    def convert_scalar(self, raw: Any, hint: type) -> Any:
        """把标量或文本转换为标量类型"""
        try:
            if hint is bool:
                if isinstance(raw, bool):
                    return raw
                text = str(raw).strip().lower()
                if text in _TRUE_TEXT:
                    return True
                if text in _FALSE_TEXT:
                    return False
                raise ValueError(text)

            if isinstance(raw, bool) and hint is not str:
                raise ValueError(raw)

            if hint is int:
                if isinstance(raw, float):
                    if not raw.is_integer():
                        raise ValueError(raw)
                    return int(raw)
                return int(raw)

            if hint is float:
                return float(raw)

            if hint is Decimal:
                return Decimal(str(raw))

            if hint is str:
                if isinstance(raw, (dict, list)):
                    raise ValueError(raw)
                if isinstance(raw, bool):
                    return "true" if raw else "false"
                return str(raw)

            if hint in (datetime, date, time):
                if isinstance(raw, hint):
                    return raw
                return _parse_iso(str(raw).strip(), hint)

            if hint is UUID:
                return UUID(str(raw))

            if hint is bytes:
                if isinstance(raw, (bytes, bytearray)):
                    return bytes(raw)
                return base64.b64decode(str(raw), validate=True)

        except (ValueError, TypeError, InvalidOperation, binascii.Error) as e:
            raise self._error(raw, hint) from e

        return raw

    def _convert_enum(self, raw: Any, hint: type) -> enum.Enum:
        try:
            return hint(raw)
        except ValueError:
            pass
        try:
            return hint[str(raw)]
        except KeyError as e:
            raise self._error(raw, hint) from e

    def _error(self, raw: Any, hint: Any) -> MalformedInputError:
        name = getattr(hint, '__name__', str(hint))
        text = repr(raw)
        if len(text) > 60:
            text = text[:57] + '...'
        return MalformedInputError(
            f"值 {text} 无法转换为 {name}",
            wire_format=self.wire_format,
            target_type=name
        )
