"""
测试XML序列化器
"""
import sys
import os
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

import pytest

# 添加src到路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wireformat import Serializer
from wireformat.exceptions import InvalidArgumentError, MalformedInputError, NotSerializableError
from wireformat.serializers.xml_serializer import XMLSerializer, type_tag

ROOT_ATTRIBUTES = (
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
    'xmlns:xsd="http://www.w3.org/2001/XMLSchema"'
)


class Status(Enum):
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class SerializableObject:
    ObjectName: Optional[str] = None
    ObjectValue: int = 0
    ObjectCreationDate: Optional[datetime] = None


@dataclass
class Line:
    Sku: str = ""
    Price: Decimal = Decimal("0")


@dataclass
class Order:
    Number: int = 0
    State: Status = Status.ACTIVE
    Tags: List[str] = field(default_factory=list)
    Lines: List[Line] = field(default_factory=list)
    Owner: Optional[SerializableObject] = None


@dataclass
class WithMapping:
    Values: Dict[str, int] = field(default_factory=dict)


@pytest.fixture
def sample():
    return SerializableObject("Objeto para serialização", 1, datetime(2015, 3, 10, 14, 30))


def test_serialize_single_line(sample):
    """默认输出为单行"""
    xml = Serializer.xml_serialize(sample)

    assert xml == (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<SerializableObject {ROOT_ATTRIBUTES}>'
        '<ObjectName>Objeto para serialização</ObjectName>'
        '<ObjectValue>1</ObjectValue>'
        '<ObjectCreationDate>2015-03-10T14:30:00</ObjectCreationDate>'
        '</SerializableObject>'
    )
    print("✓ 单行输出测试通过")


def test_serialize_indented(sample):
    """缩进输出：每个元素一行，每级一个制表符"""
    xml = Serializer.xml_serialize(sample, indent=True)
    lines = xml.split("\r\n")

    assert len(lines) == 3 + 3
    assert lines[0] == '<?xml version="1.0" encoding="utf-8"?>'
    assert lines[1] == f'<SerializableObject {ROOT_ATTRIBUTES}>'
    assert lines[2] == "\t<ObjectName>Objeto para serialização</ObjectName>"
    assert lines[3] == "\t<ObjectValue>1</ObjectValue>"
    assert lines[4] == "\t<ObjectCreationDate>2015-03-10T14:30:00</ObjectCreationDate>"
    assert lines[5] == "</SerializableObject>"
    print("✓ 缩进输出测试通过")


def test_indent_follows_settings(settings_scope, sample):
    """缩进字符和换行符来自配置"""
    settings_scope(xml_indent_char=" ", xml_indent_size=2, xml_newline="\n")

    lines = Serializer.xml_serialize(sample, indent=True).split("\n")
    assert len(lines) == 6
    assert lines[2].startswith("  <ObjectName>")


def test_null_member_written_as_nil():
    """空值成员写为 xsi:nil，不会省略"""
    xml = Serializer.xml_serialize(SerializableObject(None, 5))

    assert '<ObjectName xsi:nil="true" />' in xml
    assert '<ObjectCreationDate xsi:nil="true" />' in xml

    restored = Serializer.xml_deserialize(xml, SerializableObject)
    assert restored.ObjectName is None
    assert restored.ObjectValue == 5
    assert restored.ObjectCreationDate is None


def test_round_trip(sample):
    """缩进输出可以完整读回"""
    xml = Serializer.xml_serialize(sample, indent=True)
    restored = Serializer.xml_deserialize(xml, SerializableObject)

    assert restored == sample
    print("✓ 往返测试通过")


def test_escaping_round_trip():
    """特殊字符转义"""
    obj = SerializableObject('a < b & "c"', 0)
    xml = Serializer.xml_serialize(obj)

    assert "<ObjectName>a &lt; b &amp; \"c\"</ObjectName>" in xml
    assert Serializer.xml_deserialize(xml, SerializableObject).ObjectName == 'a < b & "c"'


def test_empty_string_is_not_nil():
    """空字符串写为空元素，读回仍为空字符串"""
    xml = Serializer.xml_serialize(SerializableObject("", 0))

    assert "<ObjectName />" in xml
    assert Serializer.xml_deserialize(xml, SerializableObject).ObjectName == ""


def test_nested_objects_and_lists():
    """嵌套对象和列表"""
    order = Order(
        Number=7,
        State=Status.CLOSED,
        Tags=["urgent", "gift"],
        Lines=[Line("A-1", Decimal("9.90")), Line("B-2", Decimal("15"))],
        Owner=SerializableObject("owner", 3)
    )

    xml = Serializer.xml_serialize(order, indent=True)
    assert "\t<State>CLOSED</State>" in xml
    assert "\t\t<string>urgent</string>" in xml
    assert "\t\t<Line>" in xml
    assert "\t\t\t<Sku>A-1</Sku>" in xml

    restored = Serializer.xml_deserialize(xml, Order)
    assert restored == order
    assert restored.State is Status.CLOSED
    print("✓ 嵌套结构测试通过")


def test_root_list():
    """根元素为列表"""
    xml = Serializer.xml_serialize([1, 2, 3])

    assert f"<ArrayOfInt {ROOT_ATTRIBUTES}><int>1</int>" in xml
    assert Serializer.xml_deserialize(xml, List[int]) == [1, 2, 3]


def test_type_tags():
    """类型对应的元素名"""
    assert type_tag(SerializableObject) == "SerializableObject"
    assert type_tag(List[str]) == "ArrayOfString"
    assert type_tag(Optional[List[Line]]) == "ArrayOfLine"
    assert type_tag(float) == "double"
    assert type_tag(list) == "ArrayOfAnyType"


def test_mapping_not_supported():
    """XML不支持字典成员"""
    with pytest.raises(NotSerializableError):
        Serializer.xml_serialize(WithMapping({"a": 1}))


def test_cycle_detected():
    """循环引用"""
    items = []
    items.append(items)

    with pytest.raises(NotSerializableError):
        Serializer.xml_serialize(items)


def test_custom_encoding_mismatch():
    """声明编码与读取编码不一致时得到错误解码的字符"""
    xml = (
        '<?xml version="1.0" encoding="iso-8859-1"?>'
        f'<SerializableObject {ROOT_ATTRIBUTES}>'
        '<ObjectName>Objeto para serialização</ObjectName>'
        '<ObjectValue>1</ObjectValue>'
        '</SerializableObject>'
    )

    restored = Serializer.xml_deserialize(xml, SerializableObject, encoding="utf-8")
    assert restored.ObjectName == "Objeto para serializaÃ§Ã£o"
    assert restored.ObjectValue == 1

    restored = Serializer.xml_deserialize(xml, SerializableObject, encoding="iso-8859-1")
    assert restored.ObjectName == "Objeto para serialização"
    print("✓ 编码不一致测试通过")


def test_encoding_declaration_and_preamble(sample):
    """声明写入请求的编码；带BOM的编码输出前缀"""
    latin = Serializer.xml_serialize(sample, encoding="latin-1")
    assert latin.startswith('<?xml version="1.0" encoding="iso-8859-1"?>')

    utf16 = Serializer.xml_serialize(sample, encoding="utf-16")
    assert utf16.startswith('\ufeff<?xml version="1.0" encoding="utf-16"?>')
    assert Serializer.xml_deserialize(utf16, SerializableObject, encoding="utf-16") == sample


def test_unrepresentable_characters(sample):
    """编码中无法表示的字符写成字符引用"""
    xml = Serializer.xml_serialize(sample, encoding="ascii")

    assert "serializa&#231;&#227;o" in xml
    assert Serializer.xml_deserialize(xml, SerializableObject, encoding="ascii") == sample


def test_blank_input():
    """空输入返回None"""
    assert Serializer.xml_serialize(None) is None
    assert Serializer.xml_deserialize(None, SerializableObject) is None
    assert Serializer.xml_deserialize("", SerializableObject) is None
    assert Serializer.xml_deserialize("   ", SerializableObject) is None


def test_return_type_required(sample):
    """必须指定目标类型"""
    xml = Serializer.xml_serialize(sample)

    with pytest.raises(InvalidArgumentError):
        XMLSerializer().deserialize(xml)


def test_root_mismatch(sample):
    """根元素与目标类型不符"""
    xml = Serializer.xml_serialize(sample)

    with pytest.raises(MalformedInputError) as exc_info:
        Serializer.xml_deserialize(xml, Line)

    assert exc_info.value.details["target_type"] == "Line"


def test_malformed_document():
    """语法错误与无法转换的值"""
    with pytest.raises(MalformedInputError):
        Serializer.xml_deserialize("<SerializableObject><ObjectName>", SerializableObject)

    with pytest.raises(MalformedInputError):
        Serializer.xml_deserialize(
            "<SerializableObject><ObjectValue>abc</ObjectValue></SerializableObject>",
            SerializableObject
        )


def test_unknown_children_ignored():
    """未知子元素被忽略，缺失成员保留默认值"""
    xml = "<SerializableObject><Extra>1</Extra><ObjectValue>9</ObjectValue></SerializableObject>"

    restored = Serializer.xml_deserialize(xml, SerializableObject)
    assert restored.ObjectValue == 9
    assert restored.ObjectName is None


def test_unknown_encoding():
    """未知编码"""
    with pytest.raises(InvalidArgumentError):
        Serializer.xml_serialize(SerializableObject(), encoding="no-such-encoding")


class Reading:
    """构造函数需要参数的普通类"""

    def __init__(self, Sensor, Value: float):
        self.Sensor = Sensor
        self.Value = Value


@dataclass
class Note:
    Text: str = ""


def test_constructor_with_arguments():
    """构造函数参数按元素名匹配"""
    xml = Serializer.xml_serialize(Reading("t-1", 21.5))
    assert "<Sensor>t-1</Sensor><Value>21.5</Value>" in xml

    restored = Serializer.xml_deserialize(xml, Reading)
    assert isinstance(restored, Reading)
    assert restored.Sensor == "t-1"
    assert restored.Value == 21.5


def test_constructor_failure():
    """构造参数无法转换时报错"""
    with pytest.raises(MalformedInputError):
        Serializer.xml_deserialize("<Reading><Value>warm</Value></Reading>", Reading)


def test_carriage_return_preserved():
    """文本中的回车写成字符引用，读回时保持不变"""
    note = Note("line1\r\nline2")
    xml = Serializer.xml_serialize(note, indent=True)

    assert "<Text>line1&#13;\nline2</Text>" in xml
    assert Serializer.xml_deserialize(xml, Note).Text == "line1\r\nline2"
