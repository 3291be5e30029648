"""
XML序列化器
根元素以值的类型命名，公开成员按声明顺序写成子元素。

输出示例（indent=True）:
    <?xml version="1.0" encoding="utf-8"?>
    <Item xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" xmlns:xsd="http://www.w3.org/2001/XMLSchema">
    	<Name>abc</Name>
    	<Value xsi:nil="true" />
    </Item>

读取时先用指定编码把字符串转换为字节，再交给解析器；解析器以文档声明的编码为准，
两者不一致时得到的是错误解码的字符而不是异常。
"""
import base64
import enum
import logging
import typing
import xml.etree.ElementTree as ET
from collections import abc
from datetime import datetime, date, time
from decimal import Decimal
from typing import Any, List, Optional, Type
from uuid import UUID
from xml.sax.saxutils import escape, quoteattr

from ..config.settings import get_settings
from ..config.validator import ConfigValidator
from ..core.binding import TypeBinder, unwrap_optional
from ..core.inspector import describe_members, is_data_type
from ..exceptions import InvalidArgumentError, MalformedInputError, NotSerializableError
from .base import Serializer, Deserializer, is_blank

logger = logging.getLogger(__name__)

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XSD_NAMESPACE = "http://www.w3.org/2001/XMLSchema"
NIL_ATTRIBUTE = "{%s}nil" % XSI_NAMESPACE

# 内置类型对应的XML Schema名称
TYPE_TAGS = {
    str: "string",
    bool: "boolean",
    int: "int",
    float: "double",
    Decimal: "decimal",
    datetime: "dateTime",
    date: "date",
    time: "time",
    UUID: "guid",
    bytes: "base64Binary",
}

_SEQUENCE_TYPES = (list, tuple, set, frozenset)

# 解析器会把回车规范化为换行，需写成字符引用
_TEXT_ENTITIES = {"\r": "&#13;"}


def type_tag(hint: Any) -> str:
    """类型对应的元素名"""
    hint = unwrap_optional(hint)
    origin = typing.get_origin(hint)
    if origin in _SEQUENCE_TYPES or hint in _SEQUENCE_TYPES:
        args = [a for a in typing.get_args(hint) if a is not Ellipsis]
        item = type_tag(args[0]) if len(args) == 1 else "anyType"
        return "ArrayOf" + item[:1].upper() + item[1:]
    if hint in TYPE_TAGS:
        return TYPE_TAGS[hint]
    return getattr(hint, '__name__', "anyType")


def value_tag(value: Any, _active: frozenset = frozenset()) -> str:
    """值对应的元素名"""
    if isinstance(value, _SEQUENCE_TYPES):
        if id(value) in _active:
            return "ArrayOfAnyType"
        active = _active | {id(value)}
        tags = {value_tag(item, active) for item in value}
        item = tags.pop() if len(tags) == 1 else "anyType"
        return "ArrayOf" + item[:1].upper() + item[1:]
    for kind, tag in TYPE_TAGS.items():
        if type(value) is kind:
            return tag
    return type(value).__name__


class XMLSerializer(Serializer, Deserializer):
    """XML序列化器"""

    format_name = "xml"

    def __init__(self, indent: bool = False, encoding: Optional[str] = None):
        """
        初始化XML序列化器

        Args:
            indent: 是否缩进输出（每级一个制表符，每个元素一行）
            encoding: 文本编码，默认使用配置中的 default_encoding
        """
        settings = get_settings()
        self.validator = ConfigValidator()
        self.indent = indent
        self.encoding = self.validator.resolve_encoding(encoding, default=settings.default_encoding)
        self.indent_text = settings.xml_indent
        self.newline = settings.xml_newline
        self.binder = TypeBinder(case_sensitive=True, wire_format=self.format_name)

    # ========== 序列化 ==========

    def serialize(self, obj: Any) -> Optional[str]:
        """
        序列化为XML字符串

        Raises:
            NotSerializableError: 值中包含XML不支持的类型
        """
        if obj is None:
            return None

        root = self.to_element(value_tag(obj), obj, set())
        root.set("xmlns:xsi", XSI_NAMESPACE)
        root.set("xmlns:xsd", XSD_NAMESPACE)

        lines: List[str] = []
        self._write(root, 0, lines)
        separator = self.newline if self.indent else ""
        declaration = f'<?xml version="1.0" encoding="{self.validator.encoding_label(self.encoding)}"?>'
        text = separator.join([declaration] + lines)

        # 编码中无法表示的字符写成字符引用
        text = text.encode(self.encoding, errors='xmlcharrefreplace').decode(self.encoding)
        logger.debug(f"XML序列化完成: {root.tag}, encoding={self.encoding}, indent={self.indent}")
        return self.validator.preamble(self.encoding) + text

    def to_element(self, tag: str, value: Any, active: set) -> ET.Element:
        """把值转换为元素（空值写成 xsi:nil）"""
        element = ET.Element(tag)

        if value is None:
            element.set("xsi:nil", "true")
        elif isinstance(value, enum.Enum):
            element.text = value.name
        elif isinstance(value, bool):
            element.text = "true" if value else "false"
        elif isinstance(value, (int, float, Decimal, str, UUID)):
            element.text = str(value)
        elif isinstance(value, (datetime, date, time)):
            element.text = value.isoformat()
        elif isinstance(value, (bytes, bytearray)):
            element.text = base64.b64encode(bytes(value)).decode('ascii')
        elif isinstance(value, abc.Mapping):
            raise NotSerializableError(type(value).__name__, reason="XML不支持字典类型")
        else:
            if id(value) in active:
                raise NotSerializableError(type(value).__name__, reason="对象图存在循环引用")
            active.add(id(value))
            try:
                if isinstance(value, _SEQUENCE_TYPES):
                    for item in value:
                        element.append(self.to_element(value_tag(item), item, active))
                elif not callable(value) and is_data_type(type(value)):
                    for descriptor in describe_members(value):
                        element.append(self.to_element(descriptor.name, descriptor.value, active))
                else:
                    raise NotSerializableError(type(value).__name__, reason="XML不支持该类型")
            finally:
                active.discard(id(value))

        return element

    def _write(self, element: ET.Element, level: int, lines: List[str]) -> None:
        pad = self.indent_text * level if self.indent else ""
        attrs = "".join(f" {name}={quoteattr(value)}" for name, value in element.attrib.items())

        if len(element) == 0:
            if element.text:
                lines.append(f"{pad}<{element.tag}{attrs}>{escape(element.text, _TEXT_ENTITIES)}</{element.tag}>")
            else:
                lines.append(f"{pad}<{element.tag}{attrs} />")
            return

        lines.append(f"{pad}<{element.tag}{attrs}>")
        for child in element:
            self._write(child, level + 1, lines)
        lines.append(f"{pad}</{element.tag}>")

    # ========== 反序列化 ==========

    def deserialize(self, data: Optional[str], return_type: Optional[Type] = None) -> Any:
        """
        从XML字符串反序列化

        Args:
            data: XML字符串
            return_type: 目标类型（根元素名必须与之对应）

        Raises:
            InvalidArgumentError: 未指定目标类型
            MalformedInputError: 文档语法错误或结构与目标类型不符
        """
        if is_blank(data):
            return None
        if return_type is None:
            raise InvalidArgumentError("XML反序列化必须指定目标类型", argument="return_type")

        if isinstance(data, (bytes, bytearray)):
            payload = bytes(data)
        else:
            payload = data.lstrip("\ufeff").encode(self.encoding, errors='replace')

        try:
            root = ET.fromstring(payload)
        except ET.ParseError as e:
            logger.warning(f"XML解析失败: {e}")
            raise MalformedInputError(str(e), wire_format=self.format_name) from e

        expected = type_tag(return_type)
        if root.tag != expected:
            raise MalformedInputError(
                f"根元素 <{root.tag}> 与期望的 <{expected}> 不符",
                wire_format=self.format_name,
                target_type=expected
            )

        result = self.from_element(root, return_type)
        logger.debug(f"XML反序列化完成: {expected}")
        return result

    def from_element(self, element: ET.Element, hint: Any) -> Any:
        """按类型注解读取元素"""
        if element.get(NIL_ATTRIBUTE) in ("true", "1"):
            return None

        hint = unwrap_optional(hint)
        origin = typing.get_origin(hint)

        if hint is None or hint is Any or hint is object:
            return element.text

        if origin is typing.Union:
            for arg in typing.get_args(hint):
                try:
                    return self.from_element(element, arg)
                except MalformedInputError:
                    continue
            return element.text

        if origin in _SEQUENCE_TYPES or hint in _SEQUENCE_TYPES:
            args = [a for a in typing.get_args(hint) if a is not Ellipsis]
            item_hint = args[0] if len(args) == 1 else None
            return (origin or hint)(self.from_element(child, item_hint) for child in element)

        if origin in (dict, abc.Mapping) or hint is dict:
            args = typing.get_args(hint)
            value_hint = args[1] if len(args) == 2 else None
            return {child.tag: self.from_element(child, value_hint) for child in element}

        if isinstance(hint, type) and (hint in TYPE_TAGS or issubclass(hint, enum.Enum)):
            return self.binder.convert(element.text or "", hint)

        if isinstance(hint, type) and is_data_type(hint):
            children = {}
            for child in element:
                children.setdefault(child.tag, child)
            return self.binder.bind_object(children, hint, self.from_element)

        return element.text
